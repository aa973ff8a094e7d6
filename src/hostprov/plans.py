# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: plans.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Ordered step lists for the proxy and media host profiles.
# -----------------------------------------------------------------------------
"""
Step order matters: the site config must exist before Certbot rewrites
it, and accounts must exist before the web root is handed to them.
"""

from typing import Any, Dict, List

from hostprov import actions, templates
from hostprov.config import Profile, ProvisionSettings, ProxyConfigMode
from hostprov.edits import delete_block, insert_after_anchor
from hostprov.engine import StepContext
from hostprov.models import Step
from hostprov.runner import Command

SSH_PASSWORD = "ssh_password"
FTP_PASSWORD = "ftp_password"
ISSUE_CERTIFICATE = "Issue SSL certificate"


def referers_for(settings: ProvisionSettings, domain: str) -> str:
    """valid_referers value: blank/blocked plus each domain and its subdomains."""
    names = ["none", "blocked"]
    for host in list(settings.hotlink_referers) + [domain]:
        for name in (host, f"*.{host}"):
            if name not in names:
                names.append(name)
    return " ".join(names)


def open_ports(settings: ProvisionSettings) -> str:
    ports = ["22", "80", "443"]
    if settings.profile is Profile.MEDIA:
        ports = ["20", "21"] + ports + ["990"]
        ports.append(f"{settings.pasv_min_port}-{settings.pasv_max_port}")
        ports.append(settings.media_ports.replace(":", "-"))
    else:
        ports.append(settings.proxy_ports.replace(":", "-"))
    return ",".join(ports)


def plan_params(
    settings: ProvisionSettings, domain: str, upstream: str, email: str
) -> Dict[str, Any]:
    return {
        "domain": domain,
        "upstream": upstream,
        "email": email,
        "web_root": settings.web_root(domain),
        "site_config": settings.site_config(domain),
        "ssl_dir": settings.ssl_dir(domain),
        "referers": referers_for(settings, domain),
        "ssh_user": settings.ssh_user,
        "ftp_user": settings.ftp_user,
        "pasv_min_port": settings.pasv_min_port,
        "pasv_max_port": settings.pasv_max_port,
        "profile": settings.profile.value,
        "open_ports": open_ports(settings),
    }


def _rendered(template: str):
    def content(context: StepContext) -> str:
        return templates.render(template, **context.params)

    return content


def _insert_proxy_block(text: str, context: StepContext) -> str:
    block = templates.render(templates.PROXY_PATCH_BLOCK, **context.params)
    anchor = f"server_name {context.params['domain']};"
    return insert_after_anchor(text, anchor, block, marker=templates.PROXY_MARKER)


def _delete_challenge_block(text: str, context: StepContext) -> str:
    updated, _ = delete_block(text, "location / {", contains="Certbot verification")
    return updated


def proxy_plan(settings: ProvisionSettings, params: Dict[str, Any]) -> List[Step]:
    domain = params["domain"]
    site = params["site_config"]
    enabled = settings.nginx_sites_enabled.rstrip("/")
    steps = [
        Step("Refresh package index", actions.apt_update()),
        Step("Install Nginx", actions.apt_install("nginx")),
        Step(
            "Configure firewall",
            actions.ufw_rules(["Nginx Full", "OpenSSH", f"{settings.proxy_ports}/tcp"]),
        ),
        Step(
            "Write temporary challenge site",
            actions.write_file(site, _rendered(templates.ACME_CHALLENGE_SITE)),
        ),
        Step(
            "Enable site",
            actions.commands(
                Command(["ln", "-sf", site, f"{enabled}/"]),
                Command(["rm", "-f", f"{enabled}/default"]),
            ),
        ),
        Step("Reload Nginx", actions.nginx_reload()),
        Step(
            "Install Certbot",
            actions.apt_install("certbot", "python3-certbot-nginx"),
        ),
        Step(ISSUE_CERTIFICATE, actions.certbot_issue([domain], params["email"])),
    ]
    if settings.proxy_config_mode is ProxyConfigMode.PATCH:
        steps += [
            Step(
                "Back up site config",
                actions.commands(actions.backup_file(site)),
            ),
            Step(
                "Insert reverse proxy block",
                actions.patch_file(site, _insert_proxy_block),
            ),
            Step(
                "Remove challenge location",
                actions.patch_file(site, _delete_challenge_block),
            ),
        ]
    else:
        steps.append(
            Step(
                "Write reverse proxy config",
                actions.backup_and_write(site, _rendered(templates.PROXY_SITE)),
            )
        )
    steps += [
        Step("Reload Nginx with proxy config", actions.nginx_reload()),
        Step(
            "Schedule certificate renewal",
            actions.schedule_cron(settings.renew_cron),
        ),
    ]
    return steps


def media_plan(settings: ProvisionSettings, params: Dict[str, Any]) -> List[Step]:
    domain = params["domain"]
    site = params["site_config"]
    web_root = params["web_root"]
    ssh_user = settings.ssh_user
    ftp_user = settings.ftp_user
    secret = {
        "length": settings.credential_length,
        "alphabet": settings.credential_alphabet,
    }
    return [
        Step("Update package index", actions.apt_update()),
        Step("Upgrade packages", actions.apt_upgrade()),
        Step("Install SSH server", actions.apt_install("openssh-server")),
        Step(
            "Harden SSH configuration",
            actions.backup_and_write("/etc/ssh/sshd_config", templates.SSHD_CONFIG),
        ),
        Step("Restart SSH", actions.restart_first_unit("ssh", "sshd")),
        Step(
            "Install FFmpeg",
            actions.commands(
                Command(
                    ["apt-get", "install", "-y", "software-properties-common"],
                    tolerate=True,
                ),
                Command(["add-apt-repository", "-y", "universe"], tolerate=True),
                Command(["apt-get", "update", "-y"], tolerate=True),
                Command(["apt-get", "install", "-y", "ffmpeg"]),
            ),
        ),
        Step(
            "Install Nginx",
            actions.commands(
                Command(["apt-get", "install", "-y", "nginx"]),
                Command(["systemctl", "enable", "nginx"], tolerate=True),
                Command(["systemctl", "start", "nginx"], tolerate=True),
            ),
        ),
        Step(
            "Install Node.js LTS",
            actions.commands(
                Command(
                    "curl -fsSL https://deb.nodesource.com/setup_lts.x | bash -",
                    tolerate=True,
                ),
                Command(["apt-get", "install", "-y", "nodejs"]),
                Command(["npm", "install", "-g", "pm2"], tolerate=True),
            ),
        ),
        Step("Generate SSH password", actions.generate_secret(SSH_PASSWORD, **secret)),
        Step(
            "Create SSH account",
            actions.ensure_user(ssh_user, web_root, SSH_PASSWORD),
        ),
        Step("Prepare web root", actions.prepare_web_root(web_root, ssh_user)),
        Step(
            "Write index page",
            actions.write_file(
                f"{web_root}/index.html", _rendered(templates.INDEX_HTML)
            ),
        ),
        Step(
            "Write Nginx site",
            actions.write_file(site, _rendered(templates.MEDIA_SITE)),
        ),
        Step("Enable site", actions.symlink(site, settings.nginx_sites_enabled)),
        Step("Reload Nginx", actions.nginx_reload()),
        Step(
            "Install Certbot",
            actions.apt_install("certbot", "python3-certbot-nginx"),
        ),
        Step(
            ISSUE_CERTIFICATE,
            actions.certbot_issue([domain, f"www.{domain}"], params["email"]),
        ),
        Step(
            "Schedule certificate renewal",
            actions.schedule_cron(settings.renew_cron),
        ),
        Step(
            "Configure log rotation",
            actions.write_file(
                "/etc/logrotate.d/nginx-custom", templates.LOGROTATE_NGINX
            ),
        ),
        Step("Install vsftpd", actions.apt_install("vsftpd")),
        Step(
            "Configure vsftpd",
            actions.backup_and_write(
                "/etc/vsftpd.conf", _rendered(templates.VSFTPD_CONF)
            ),
        ),
        Step("Generate FTP password", actions.generate_secret(FTP_PASSWORD, **secret)),
        Step(
            "Create FTP account",
            actions.ensure_user(ftp_user, web_root, FTP_PASSWORD),
        ),
        Step("Allow FTP user", actions.append_line("/etc/vsftpd.userlist", ftp_user)),
        Step("Restart vsftpd", actions.systemctl("restart", "vsftpd")),
        Step(
            "Configure firewall",
            actions.ufw_rules(
                [
                    "Nginx Full",
                    "OpenSSH",
                    "21/tcp",
                    "20/tcp",
                    "990/tcp",
                    f"{settings.pasv_min_port}:{settings.pasv_max_port}/tcp",
                    f"{settings.media_ports}/tcp",
                ]
            ),
        ),
        Step(
            "Verify FFmpeg",
            actions.ffmpeg_selftest(),
            when=actions.has_binary("ffmpeg"),
        ),
        Step("Collect host facts", actions.collect_facts()),
    ]


def build_plan(settings: ProvisionSettings, params: Dict[str, Any]) -> List[Step]:
    if settings.profile is Profile.MEDIA:
        return media_plan(settings, params)
    return proxy_plan(settings, params)
