# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: cli.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Typer command line entry point.
# -----------------------------------------------------------------------------
"""
hostprov - provision an Ubuntu host as a TLS reverse proxy or media server.

Usage:
    sudo hostprov livestream.example.com 127.0.0.1:81 admin@example.com
    sudo hostprov --profile media --policy continue streams.example.com 127.0.0.1:8080 admin@example.com
    hostprov --dry-run example.com 127.0.0.1:81 admin@example.com
"""

import datetime
import logging
import os
import signal
import socket
import sys
import time
from typing import Any, Dict, List, Optional

import typer
from pydantic import ValidationError

from hostprov import __version__, preflight
from hostprov.config import Profile, ProvisionSettings, ProxyConfigMode
from hostprov.engine import Provisioner
from hostprov.errors import PrerequisiteMissing
from hostprov.logging_config import setup_logging
from hostprov.models import FailurePolicy, Outcome, RunReport, Step, StepRecord
from hostprov.plans import build_plan, plan_params
from hostprov.reporter import SummaryReporter
from hostprov.runner import CommandRunner
from hostprov.ui import (
    NordColors,
    console,
    format_time,
    print_error,
    print_header,
    print_info,
    print_section,
    print_step,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Provision an Ubuntu host: Nginx proxy, TLS, SSH, FTP and media tools.",
    add_completion=False,
)
logger = logging.getLogger("hostprov.cli")


def make_runner(settings: ProvisionSettings) -> CommandRunner:
    env = os.environ.copy()
    env["DEBIAN_FRONTEND"] = "noninteractive"
    return CommandRunner(timeout=settings.step_timeout, env=env)


def load_settings(**overrides) -> ProvisionSettings:
    settings = ProvisionSettings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if "step_timeout" in updates and updates["step_timeout"] <= 0:
        updates["step_timeout"] = None
    return settings.model_copy(update=updates)


def _on_start(index: int, total: int, step: Step) -> None:
    print_step(f"[{index}/{total}] {step.name}...")


def _on_record(record: StepRecord) -> None:
    elapsed = format_time(record.elapsed)
    if record.outcome is Outcome.SUCCEEDED:
        print_success(f"{record.step.name} completed in {elapsed}")
    elif record.outcome is Outcome.SKIPPED:
        print_info(f"⏭ {record.step.name} skipped")
    else:
        print_error(
            f"{record.step.name} failed in {elapsed} "
            f"(exit {record.result.exit_code})"
        )


def _print_summary(report: RunReport, params: Dict[str, Any], start: float) -> None:
    print_section("Setup Summary")
    SummaryReporter(console).render(report, params)
    minutes, seconds = divmod(time.time() - start, 60)
    print_info(f"Elapsed time: {int(minutes)}m {int(seconds)}s")


def _signal_handler(signum, frame) -> None:
    sig_name = signal.Signals(signum).name
    logger.error(f"Provisioning interrupted by {sig_name}.")
    sys.exit(128 + signum)


@app.command()
def provision(
    args: Optional[List[str]] = typer.Argument(
        None,
        metavar="DOMAIN UPSTREAM EMAIL",
        help="Domain, upstream host:port, ACME email.",
    ),
    policy: Optional[FailurePolicy] = typer.Option(
        None,
        "--policy",
        "-p",
        case_sensitive=False,
        help="abort: stop at the first failing step; continue: record and go on.",
    ),
    profile: Optional[Profile] = typer.Option(
        None, "--profile", case_sensitive=False, help="Which host layout to provision."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Per-step command timeout in seconds (0 = none)."
    ),
    proxy_config_mode: Optional[ProxyConfigMode] = typer.Option(
        None,
        "--proxy-config-mode",
        case_sensitive=False,
        help="template: write the whole proxy site; patch: edit the Certbot output.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="List the steps without executing anything."
    ),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug console logs."),
) -> None:
    """Provision this host for DOMAIN, proxying to UPSTREAM, registering EMAIL."""
    try:
        settings = load_settings(
            failure_policy=policy,
            profile=profile,
            step_timeout=timeout,
            proxy_config_mode=proxy_config_mode,
            log_file=log_file,
            log_level="DEBUG" if verbose else None,
        )
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)

    try:
        domain, upstream, email = preflight.validate_arguments(args)
        if not dry_run:
            preflight.check_root()
    except PrerequisiteMissing as e:
        print_error(str(e))
        if str(e) != preflight.USAGE:
            console.print(preflight.USAGE)
        raise typer.Exit(code=1)

    warning = setup_logging(settings.log_file, settings.log_level, console=console)
    if warning:
        print_warning(warning)
        print_step("Continuing without logging to file...")

    print_header("hostprov")
    print_info(f"Version: {__version__}")
    print_info(f"Hostname: {socket.gethostname()}")
    print_info(f"Time: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    release = preflight.check_os_release()
    if release:
        print_info(f"System: {release}")

    print_section(f"Setting up {settings.profile.value} host for {domain}")
    console.print(f"[{NordColors.NORD9}]→ Proxying to: [bold]{upstream}[/]")
    console.print(f"[{NordColors.NORD9}]→ SSL email:   [bold]{email}[/]")
    console.print(
        f"[{NordColors.NORD9}]→ Policy:      [bold]{settings.failure_policy.value}[/]"
    )

    params = plan_params(settings, domain, upstream, email)
    provisioner = Provisioner(
        build_plan(settings, params),
        make_runner(settings),
        policy=settings.failure_policy,
        params=params,
        dry_run=dry_run,
    )

    start = time.time()
    try:
        report = provisioner.run(on_start=_on_start, on_record=_on_record)
    except (KeyboardInterrupt, SystemExit) as e:
        print_warning("Provisioning interrupted; showing the steps run so far.")
        report = provisioner.report
        code = e.code if isinstance(e, SystemExit) else report.exit_code
        _print_summary(report, params, start)
        raise typer.Exit(code=code if isinstance(code, int) else 1)

    _print_summary(report, params, start)
    raise typer.Exit(code=report.exit_code)


def main() -> None:
    for sig in (signal.SIGTERM, signal.SIGHUP):
        signal.signal(sig, _signal_handler)
    app()


if __name__ == "__main__":
    main()
