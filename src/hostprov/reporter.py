# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: reporter.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Final human-readable summary of a provisioning run.
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hostprov.models import Outcome, RunReport, RunStatus
from hostprov.ui import NordColors, format_time

OUTCOME_STYLES = {
    Outcome.SUCCEEDED: ("✓", NordColors.NORD14),
    Outcome.FAILED: ("✗", NordColors.NORD11),
    Outcome.SKIPPED: ("⏭", NordColors.NORD8),
}

STATUS_STYLES = {
    RunStatus.SUCCESS: NordColors.NORD14,
    RunStatus.COMPLETED_WITH_FAILURES: NordColors.NORD13,
    RunStatus.ABORTED: NordColors.NORD11,
    RunStatus.DRY_RUN: NordColors.NORD8,
    RunStatus.INTERRUPTED: NordColors.NORD12,
}

CREDENTIAL_LABELS = {
    "ssh_password": ("SSH/SFTP", "ssh_user"),
    "ftp_password": ("FTP", "ftp_user"),
}

TOOL_LABELS = [("ffmpeg", "FFmpeg Version"), ("node", "Node.js"), ("npm", "NPM")]


class SummaryReporter:
    """
    Prints the run report: every step, every failure, every generated
    credential and the facts an operator needs to finish by hand.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def step_table(self, report: RunReport) -> Table:
        table = Table(
            title="Provisioning Steps",
            title_style=f"bold {NordColors.NORD8}",
            header_style=f"bold {NordColors.NORD9}",
            border_style=NordColors.NORD10,
        )
        table.add_column("#", justify="right", style=NordColors.NORD4)
        table.add_column("Step", style=NordColors.NORD4)
        table.add_column("Outcome")
        table.add_column("Exit", justify="right")
        table.add_column("Time", justify="right", style=NordColors.NORD3)
        for index, record in enumerate(report.records, start=1):
            icon, color = OUTCOME_STYLES[record.outcome]
            exit_code = str(record.result.exit_code)
            if record.outcome is Outcome.SKIPPED:
                exit_code = ""
            table.add_row(
                str(index),
                record.step.name,
                f"[{color}]{icon} {record.outcome.value}[/]",
                exit_code,
                format_time(record.elapsed),
            )
        return table

    def failures_panel(self, report: RunReport) -> Optional[Panel]:
        if not report.failures:
            return None
        lines: List[str] = []
        for record in report.failures:
            lines.append(
                f"[bold {NordColors.NORD11}]• {record.step.name}[/] "
                f"(exit {record.result.exit_code}, policy {record.policy.value})"
            )
            tail = record.result.stderr_tail()
            if tail:
                for line in tail.splitlines():
                    lines.append(f"    [dim]{line}[/dim]")
        return Panel(
            "\n".join(lines),
            title="Failures",
            border_style=f"bold {NordColors.NORD11}",
        )

    def credential_rows(
        self, report: RunReport, params: Dict[str, Any]
    ) -> List[Tuple[str, str, str]]:
        rows = []
        for key, value in report.credentials.items():
            label, user_key = CREDENTIAL_LABELS.get(key, (key, ""))
            rows.append((label, str(params.get(user_key, "")), value))
        return rows

    def credentials_table(
        self, report: RunReport, params: Dict[str, Any]
    ) -> Optional[Table]:
        rows = self.credential_rows(report, params)
        if not rows:
            return None
        table = Table(
            title="Generated Credentials",
            title_style=f"bold {NordColors.NORD15}",
            header_style=f"bold {NordColors.NORD9}",
            border_style=NordColors.NORD15,
        )
        table.add_column("Account")
        table.add_column("User")
        table.add_column("Password", style=f"bold {NordColors.NORD13}")
        for row in rows:
            table.add_row(*row)
        return table

    def fact_lines(self, report: RunReport, params: Dict[str, Any]) -> List[str]:
        facts = report.facts
        lines = [f"Domain: https://{params.get('domain', '')}"]
        if params.get("upstream"):
            lines.append(f"Proxy target: {params['upstream']}")
        if params.get("profile") == "media":
            lines.append(f"Web Root: {params.get('web_root', '')}")
        lines.append(f"SSL path: {params.get('ssl_dir', '')}")
        if params.get("open_ports"):
            lines.append(f"Open Ports: {params['open_ports']}")
        for name, label in TOOL_LABELS:
            if name in facts:
                lines.append(f"{label}: {facts[name]}")
        if "ssh_password" in report.credentials and params.get("ssh_user"):
            address = facts.get("public_ip", "<server-ip>")
            lines.append(f"SSH Access: ssh {params['ssh_user']}@{address}")
        return lines

    def render(
        self, report: RunReport, params: Optional[Dict[str, Any]] = None
    ) -> None:
        params = params or {}
        console = self.console
        console.print()
        console.print(self.step_table(report))

        failures = self.failures_panel(report)
        if failures is not None:
            console.print(failures)

        credentials = self.credentials_table(report, params)
        if credentials is not None:
            console.print(credentials)
            console.print(
                f"[{NordColors.NORD13}]⚠ Credentials are shown in plain text. "
                "Store them in a secret manager and clear your terminal history.[/]"
            )

        console.print(
            Panel(
                "\n".join(self.fact_lines(report, params)),
                title="Summary",
                border_style=NordColors.NORD9,
                expand=False,
            )
        )
        color = STATUS_STYLES[report.status]
        console.print(f"\n[bold {color}]{report.status_line()}[/]")
