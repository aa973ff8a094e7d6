# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: actions.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Idempotent step actions built on the command runner.
# -----------------------------------------------------------------------------
"""
Each function here returns a step action: a callable taking the run's
StepContext and returning an ExecResult. Every host mutation goes through
``context.runner`` so a run can be observed or stubbed end to end.
"""

import logging
import os
import posixpath
from typing import Callable, Iterable, List, Sequence, Union

from hostprov.credentials import ALPHANUMERIC, DEFAULT_LENGTH, generate_password
from hostprov.engine import StepContext
from hostprov.errors import AnchorNotFound
from hostprov.models import SUCCESS, ExecResult
from hostprov.runner import Command, run_commands

logger = logging.getLogger(__name__)

Action = Callable[[StepContext], ExecResult]
Content = Union[str, Callable[[StepContext], str]]

TMP_SUFFIX = ".hostprov.tmp"
USERADD_EXISTS = 9


def commands(*cmds: Command) -> Action:
    """Run a fixed group of commands."""

    def action(context: StepContext) -> ExecResult:
        return run_commands(context.runner, list(cmds))

    return action


def shell(cmd: Union[str, Sequence[str]], tolerate: bool = False) -> Action:
    return commands(Command(cmd, tolerate=tolerate))


def _resolve(content: Content, context: StepContext) -> str:
    return content(context) if callable(content) else content


# ==============================
# Packages & services
# ==============================
def apt_update() -> Action:
    return commands(Command(["apt-get", "update", "-y"]))


def apt_upgrade() -> Action:
    return commands(Command(["apt-get", "upgrade", "-y"]))


def apt_install(*packages: str) -> Action:
    return commands(Command(["apt-get", "install", "-y", *packages]))


def systemctl(verb: str, *units: str, tolerate: bool = False) -> Action:
    return commands(Command(["systemctl", verb, *units], tolerate=tolerate))


def restart_first_unit(*units: str) -> Action:
    """Restart the first of ``units`` that systemd knows about (ssh vs sshd)."""

    def action(context: StepContext) -> ExecResult:
        for unit in units:
            probe = context.runner.run(
                ["systemctl", "list-unit-files", f"{unit}.service"]
            )
            if probe.ok:
                return context.runner.run(["systemctl", "restart", unit])
        logger.warning(f"None of the units {', '.join(units)} are installed.")
        return ExecResult(
            1, b"", f"no unit file found for: {', '.join(units)}".encode()
        )

    return action


def nginx_reload() -> Action:
    return commands(
        Command(["nginx", "-t"]),
        Command(["systemctl", "reload", "nginx"]),
    )


# ==============================
# Files
# ==============================
def write_file_commands(path: str, content: str, mode: str = "0644") -> List[Command]:
    """Write to a temporary sibling, then rename it over ``path``."""
    tmp = path + TMP_SUFFIX
    return [
        Command(["mkdir", "-p", posixpath.dirname(path) or "/"]),
        Command(["tee", tmp], input=content),
        Command(["chmod", mode, tmp]),
        Command(["mv", "-f", tmp, path]),
    ]


def write_file(path: str, content: Content, mode: str = "0644") -> Action:
    def action(context: StepContext) -> ExecResult:
        text = _resolve(content, context)
        return run_commands(context.runner, write_file_commands(path, text, mode))

    return action


def backup_file(path: str, suffix: str = ".bak") -> Command:
    """Copy ``path`` aside once; an existing backup is never overwritten."""
    backup = path + suffix
    return Command(["cp", "-p", path, backup], tolerate=True, creates=backup)


def backup_and_write(path: str, content: Content, mode: str = "0644") -> Action:
    def action(context: StepContext) -> ExecResult:
        text = _resolve(content, context)
        cmds = [backup_file(path)] + write_file_commands(path, text, mode)
        return run_commands(context.runner, cmds)

    return action


def symlink(target: str, link_dir: str) -> Action:
    return commands(Command(["ln", "-sf", target, link_dir.rstrip("/") + "/"]))


def remove_file(path: str) -> Action:
    return commands(Command(["rm", "-f", path]))


def append_line(path: str, line: str) -> Action:
    """Append ``line`` to ``path`` unless an identical line is present."""
    script = 'touch "$2" && (grep -qxF "$1" "$2" || echo "$1" >> "$2")'
    return commands(Command(["sh", "-c", script, "sh", line, path]))


def patch_file(path: str, edit: Callable[[str, StepContext], str]) -> Action:
    """
    Read ``path``, apply ``edit`` and write the result back.

    An unchanged text is not written. AnchorNotFound from the edit fails
    the step.
    """

    def action(context: StepContext) -> ExecResult:
        current = context.runner.run(["cat", path])
        if not current.ok:
            return current
        text = current.stdout.decode("utf-8", errors="replace")
        try:
            updated = edit(text, context)
        except AnchorNotFound as e:
            logger.error(f"Cannot patch {path}: {e}")
            return ExecResult(1, b"", str(e).encode())
        if updated == text:
            logger.info(f"{path} already patched; nothing to do.")
            return SUCCESS
        return run_commands(context.runner, write_file_commands(path, updated))

    return action


# ==============================
# Accounts & credentials
# ==============================
def generate_secret(
    key: str, length: int = DEFAULT_LENGTH, alphabet: str = ALPHANUMERIC
) -> Action:
    """Generate a credential once per run and keep it in the run context."""

    def action(context: StepContext) -> ExecResult:
        if key not in context.credentials:
            context.credentials[key] = generate_password(length, alphabet)
            logger.info(f"Generated credential '{key}' ({length} characters).")
        return SUCCESS

    return action


def ensure_user(user: str, home: str, password_key: str) -> Action:
    """Create ``user`` (an existing account counts as created) and set its password."""

    def action(context: StepContext) -> ExecResult:
        password = context.credentials.get(password_key)
        if password is None:
            return ExecResult(
                1, b"", f"credential '{password_key}' was not generated".encode()
            )
        return run_commands(
            context.runner,
            [
                Command(
                    ["useradd", "-m", "-d", home, "-s", "/bin/bash", user],
                    ok_codes=(0, USERADD_EXISTS),
                ),
                Command(["chpasswd"], input=f"{user}:{password}\n"),
            ],
        )

    return action


def prepare_web_root(web_root: str, owner: str) -> Action:
    return commands(
        Command(["mkdir", "-p", web_root]),
        Command(["chown", "-R", f"{owner}:{owner}", web_root]),
        Command(["chmod", "-R", "755", web_root]),
    )


# ==============================
# TLS, cron & firewall
# ==============================
def certbot_issue(domains: Iterable[str], email: str) -> Action:
    argv = ["certbot", "--nginx"]
    for domain in domains:
        argv += ["-d", domain]
    argv += [
        "--non-interactive",
        "--agree-tos",
        "--keep-until-expiring",
        "-m",
        email,
    ]
    return commands(Command(argv))


def schedule_cron(line: str) -> Action:
    """Append ``line`` to root's crontab, keeping every other entry."""
    script = '(crontab -l 2>/dev/null | grep -vxF "$1"; echo "$1") | crontab -'
    return commands(Command(["sh", "-c", script, "sh", line]))


def ufw_rules(rules: Iterable[str], enable: bool = True) -> Action:
    cmds = [Command(["ufw", "allow", rule]) for rule in rules]
    if enable:
        cmds.append(Command(["ufw", "--force", "enable"]))
    return commands(*cmds)


# ==============================
# FFmpeg & host facts
# ==============================
def has_binary(name: str) -> Callable[[StepContext], bool]:
    def guard(context: StepContext) -> bool:
        return context.runner.run(["which", name]).ok

    return guard


def ffmpeg_selftest(workdir: str = "/tmp") -> Action:
    sample = os.path.join(workdir, "hostprov-selftest.mp3")
    return commands(
        Command(
            [
                "ffmpeg",
                "-hide_banner",
                "-y",
                "-f",
                "lavfi",
                "-i",
                "sine=frequency=1000:duration=5",
                "-c:a",
                "libmp3lame",
                sample,
            ]
        ),
        Command(["rm", "-f", sample], tolerate=True),
    )


def _first_line(result: ExecResult) -> str:
    lines = result.stdout_text().splitlines()
    return lines[0].strip() if lines else ""


def collect_facts() -> Action:
    """Record tool versions and the public address for the final summary."""

    def action(context: StepContext) -> ExecResult:
        runner = context.runner
        probes = {
            "ffmpeg": ["ffmpeg", "-version"],
            "node": ["node", "-v"],
            "npm": ["npm", "-v"],
            "public_ip": ["curl", "-s", "--max-time", "10", "ifconfig.me"],
        }
        for name, argv in probes.items():
            result = runner.run(argv)
            value = _first_line(result) if result.ok else ""
            if name == "ffmpeg" and value:
                parts = value.split()
                value = parts[2] if len(parts) > 2 else value
            if not value:
                value = "unknown" if name == "public_ip" else "Not installed"
            context.facts[name] = value
        return SUCCESS

    return action
