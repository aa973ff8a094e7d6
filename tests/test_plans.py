"""End-to-end runs of the proxy and media profiles against stub hosts."""

import pytest

from conftest import FakeHost, FakeRunner
from hostprov.config import Profile, ProxyConfigMode
from hostprov.engine import Provisioner
from hostprov.models import ExecResult, FailurePolicy, Outcome, RunStatus
from hostprov.plans import (
    FTP_PASSWORD,
    ISSUE_CERTIFICATE,
    SSH_PASSWORD,
    build_plan,
    plan_params,
    referers_for,
)
from hostprov.templates import PROXY_MARKER

ARGS = ("a.com", "1.2.3.4:80", "x@a.com")


def run_plan(settings, runner, policy=FailurePolicy.CONTINUE, **overrides):
    if overrides:
        settings = settings.model_copy(update=overrides)
    params = plan_params(settings, *ARGS)
    steps = build_plan(settings, params)
    return Provisioner(steps, runner, policy, params=params).run()


def step_index(report, name):
    return [r.step.name for r in report.records].index(name)


@pytest.mark.parametrize("profile", [Profile.PROXY, Profile.MEDIA])
def test_all_steps_succeed_with_succeeding_runner(settings, fake_runner, profile):
    report = run_plan(settings, fake_runner, FailurePolicy.ABORT, profile=profile)
    assert all(o is Outcome.SUCCEEDED for o in report.outcomes)
    assert report.status is RunStatus.SUCCESS
    assert report.exit_code == 0


@pytest.mark.parametrize("profile", [Profile.PROXY, Profile.MEDIA])
def test_ssl_failure_under_continue(settings, profile):
    runner = FakeRunner().fail_when("certbot", stderr=b"rate limited")
    report = run_plan(settings, runner, FailurePolicy.CONTINUE, profile=profile)

    failing = step_index(report, ISSUE_CERTIFICATE)
    assert report.records[failing].outcome is Outcome.FAILED
    assert len(report.failures) == 1
    after = report.records[failing + 1 :]
    assert after
    assert all(r.outcome is Outcome.SUCCEEDED for r in after)
    assert report.status is RunStatus.COMPLETED_WITH_FAILURES
    assert report.status_line() == "Completed with 1 failure"
    assert report.exit_code == 0


def test_ssl_failure_under_abort_stops_the_run(settings):
    runner = FakeRunner().fail_when("certbot", exit_code=1)
    report = run_plan(settings, runner, FailurePolicy.ABORT)

    failing = step_index(report, ISSUE_CERTIFICATE)
    assert len(report) == failing + 1
    assert report.failed
    assert report.exit_code == 1
    assert runner.executed("sh", "-c") == []  # renewal cron never scheduled


def test_proxy_certbot_arguments(settings, fake_runner):
    run_plan(settings, fake_runner)
    (call,) = fake_runner.executed("certbot")
    assert call.argv == [
        "certbot",
        "--nginx",
        "-d",
        "a.com",
        "--non-interactive",
        "--agree-tos",
        "--keep-until-expiring",
        "-m",
        "x@a.com",
    ]


def test_proxy_site_written_from_template(settings):
    host = FakeHost()
    run_plan(settings, host)
    site = host.files["/etc/nginx/sites-available/a.com"]
    assert "server_name a.com;" in site
    assert "proxy_pass http://1.2.3.4:80;" in site
    assert "Certbot verification" not in site
    assert "{{" not in site
    assert "*.radioindialive.com" in site
    assert host.executed("rm", "-f", "/etc/nginx/sites-enabled/default")


def test_renewal_cron_keeps_other_entries(settings, fake_runner):
    run_plan(settings, fake_runner)
    (call,) = fake_runner.executed("sh", "-c")
    script, line = call.argv[2], call.argv[4]
    assert "crontab -l" in script and "grep -vxF" in script
    assert line == "0 3 * * * /usr/bin/certbot renew --quiet"


def test_media_credentials_threaded_into_accounts_and_report(settings, fake_runner):
    report = run_plan(settings, fake_runner, profile=Profile.MEDIA)

    ssh_password = report.credentials[SSH_PASSWORD]
    ftp_password = report.credentials[FTP_PASSWORD]
    assert len(ssh_password) == 16 and len(ftp_password) == 16
    assert ssh_password != ftp_password

    inputs = [c.input for c in fake_runner.executed("chpasswd")]
    assert inputs == [
        f"streams_admin:{ssh_password}\n",
        f"streams_ftp:{ftp_password}\n",
    ]


def test_media_credential_length_from_settings(settings, fake_runner):
    report = run_plan(
        settings, fake_runner, profile=Profile.MEDIA, credential_length=24
    )
    assert len(report.credentials[SSH_PASSWORD]) == 24


def test_media_rerun_is_idempotent(settings):
    host = FakeHost(
        files={
            "/etc/ssh/sshd_config": "original sshd",
            "/etc/vsftpd.conf": "original vsftpd",
        }
    )
    first = run_plan(settings, host, FailurePolicy.ABORT, profile=Profile.MEDIA)
    assert all(o is Outcome.SUCCEEDED for o in first.outcomes)
    assert host.files["/etc/ssh/sshd_config.bak"] == "original sshd"
    assert "streams_admin" in host.users and "streams_ftp" in host.users

    host.calls.clear()
    second = run_plan(settings, host, FailurePolicy.ABORT, profile=Profile.MEDIA)
    assert second.outcomes == first.outcomes
    assert host.executed("cp") == []
    assert host.files["/etc/ssh/sshd_config.bak"] == "original sshd"
    assert host.files["/etc/vsftpd.conf.bak"] == "original vsftpd"
    assert "PermitRootLogin no" in host.files["/etc/ssh/sshd_config"]


@pytest.mark.parametrize("mode", [ProxyConfigMode.TEMPLATE, ProxyConfigMode.PATCH])
def test_proxy_rerun_is_idempotent(settings, mode):
    site = "/etc/nginx/sites-available/a.com"
    host = FakeHost()
    first = run_plan(settings, host, FailurePolicy.ABORT, proxy_config_mode=mode)
    assert first.status is RunStatus.SUCCESS
    backup = host.files[site + ".bak"]
    configured = host.files[site]

    host.calls.clear()
    second = run_plan(settings, host, FailurePolicy.ABORT, proxy_config_mode=mode)
    assert second.outcomes == first.outcomes
    assert host.files[site + ".bak"] == backup
    assert host.files[site] == configured
    assert host.executed("cp") == []


def test_patch_steps_leave_a_patched_site_alone(settings):
    site = "/etc/nginx/sites-available/a.com"
    host = FakeHost()
    settings = settings.model_copy(update={"proxy_config_mode": ProxyConfigMode.PATCH})
    run_plan(settings, host, FailurePolicy.ABORT)
    patched = host.files[site]
    assert patched.count(PROXY_MARKER) == 1

    params = plan_params(settings, *ARGS)
    names = {"Insert reverse proxy block", "Remove challenge location"}
    steps = [s for s in build_plan(settings, params) if s.name in names]
    host.calls.clear()
    report = Provisioner(steps, host, FailurePolicy.ABORT, params=params).run()
    assert report.outcomes == [Outcome.SUCCEEDED, Outcome.SUCCEEDED]
    assert host.executed("tee") == []
    assert host.files[site] == patched


def test_media_backup_of_missing_file_is_tolerated(settings):
    host = FakeHost()
    report = run_plan(settings, host, FailurePolicy.ABORT, profile=Profile.MEDIA)
    assert report.status is RunStatus.SUCCESS
    assert "/etc/ssh/sshd_config.bak" not in host.files


def test_media_ffmpeg_selftest_skipped_without_ffmpeg(settings):
    runner = FakeRunner().fail_when("which", "ffmpeg")
    report = run_plan(settings, runner, profile=Profile.MEDIA)
    record = report.records[step_index(report, "Verify FFmpeg")]
    assert record.outcome is Outcome.SKIPPED
    assert report.status is RunStatus.SUCCESS


def test_media_restarts_sshd_when_ssh_unit_missing(settings):
    runner = FakeRunner().fail_when("systemctl", "list-unit-files", "ssh.service")
    run_plan(settings, runner, profile=Profile.MEDIA)
    assert runner.executed("systemctl", "restart", "sshd")
    assert not runner.executed("systemctl", "restart", "ssh")


def test_media_facts_collected(settings):
    runner = FakeRunner()
    runner.respond(
        "ffmpeg",
        "-version",
        result=ExecResult(0, b"ffmpeg version 6.1.1-3ubuntu5 Copyright (c)\n"),
    )
    runner.respond("node", "-v", result=ExecResult(0, b"v20.11.0\n"))
    runner.respond("npm", "-v", result=ExecResult(127))
    report = run_plan(settings, runner, profile=Profile.MEDIA)
    assert report.facts["ffmpeg"] == "6.1.1-3ubuntu5"
    assert report.facts["node"] == "v20.11.0"
    assert report.facts["npm"] == "Not installed"


def test_patch_mode_edits_certbot_output(settings):
    host = FakeHost()
    report = run_plan(
        settings, host, FailurePolicy.ABORT, proxy_config_mode=ProxyConfigMode.PATCH
    )
    assert report.status is RunStatus.SUCCESS
    names = [r.step.name for r in report.records]
    assert names.index("Insert reverse proxy block") + 1 == names.index(
        "Remove challenge location"
    )
    site = host.files["/etc/nginx/sites-available/a.com"]
    assert PROXY_MARKER in site
    assert "proxy_pass http://1.2.3.4:80;" in site
    assert "Certbot verification" not in site
    assert site.count("{") == site.count("}")


def test_patch_mode_halves_fail_independently(settings):
    host = FakeHost()
    host.respond(
        "cat",
        "/etc/nginx/sites-available/a.com",
        result=ExecResult(0, b"server {\n    listen 80;\n}\n"),
    )
    report = run_plan(
        settings,
        host,
        FailurePolicy.CONTINUE,
        proxy_config_mode=ProxyConfigMode.PATCH,
    )
    insert = report.records[step_index(report, "Insert reverse proxy block")]
    remove = report.records[step_index(report, "Remove challenge location")]
    assert insert.outcome is Outcome.FAILED
    assert b"Anchor line not found" in insert.result.stderr
    assert remove.outcome is Outcome.SUCCEEDED
    assert len(report.failures) == 1


def test_referers_include_served_domain(settings):
    assert referers_for(settings, "a.com") == (
        "none blocked radioindialive.com *.radioindialive.com "
        "vividhbharati.in *.vividhbharati.in a.com *.a.com"
    )
    assert referers_for(settings, "radioindialive.com").count("radioindialive.com") == 2


def test_plan_params(settings):
    params = plan_params(settings, *ARGS)
    assert params["web_root"] == "/var/www/a.com"
    assert params["site_config"] == "/etc/nginx/sites-available/a.com"
    assert params["ssl_dir"] == "/etc/letsencrypt/live/a.com"
    assert params["open_ports"] == "22,80,443,8000-8500"
    media = plan_params(settings.model_copy(update={"profile": Profile.MEDIA}), *ARGS)
    assert media["open_ports"] == "20,21,22,80,443,990,40000-45000,8000-8100"
