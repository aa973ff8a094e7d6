# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: models.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Data model for steps, command results and run reports.
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from hostprov.errors import StepFailed

if TYPE_CHECKING:
    from hostprov.engine import StepContext


class FailurePolicy(str, Enum):
    """What the Provisioner does when a step exits non-zero."""

    ABORT = "abort"
    CONTINUE = "continue"


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    SUCCESS = "success"
    COMPLETED_WITH_FAILURES = "completed_with_failures"
    ABORTED = "aborted"
    INTERRUPTED = "interrupted"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class ExecResult:
    """Exit status and captured output of one command or step."""

    exit_code: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def stderr_tail(self, lines: int = 5) -> str:
        text = self.stderr.decode("utf-8", errors="replace").strip()
        return "\n".join(text.splitlines()[-lines:])

    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace").strip()


SUCCESS = ExecResult(0)
EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class Step:
    """
    One named, idempotent mutation of the target host.

    ``policy`` of ``None`` means the step inherits the run policy.
    ``when`` is an optional guard evaluated against the run context; a
    false guard records the step as skipped.
    """

    name: str
    action: Callable[["StepContext"], ExecResult]
    policy: Optional[FailurePolicy] = None
    when: Optional[Callable[["StepContext"], bool]] = None


@dataclass(frozen=True)
class StepRecord:
    step: Step
    result: ExecResult
    outcome: Outcome
    policy: FailurePolicy
    elapsed: float = 0.0


@dataclass
class RunReport:
    """Ordered outcome record for a provisioning run."""

    policy: FailurePolicy
    records: List[StepRecord] = field(default_factory=list)
    credentials: Dict[str, str] = field(default_factory=dict)
    facts: Dict[str, Any] = field(default_factory=dict)
    aborted_by: Optional[StepFailed] = None
    dry_run: bool = False
    interrupted: bool = False

    def __len__(self) -> int:
        return len(self.records)

    @property
    def outcomes(self) -> List[Outcome]:
        return [record.outcome for record in self.records]

    @property
    def failures(self) -> List[StepRecord]:
        return [r for r in self.records if r.outcome is Outcome.FAILED]

    @property
    def failed(self) -> bool:
        """Overall-failure flag; only an aborting step sets it."""
        return self.aborted_by is not None

    @property
    def status(self) -> RunStatus:
        if self.dry_run:
            return RunStatus.DRY_RUN
        if self.interrupted:
            return RunStatus.INTERRUPTED
        if self.aborted_by is not None:
            return RunStatus.ABORTED
        if self.failures:
            return RunStatus.COMPLETED_WITH_FAILURES
        return RunStatus.SUCCESS

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return EXIT_INTERRUPTED
        if self.aborted_by is not None:
            code = self.aborted_by.exit_code
            return code if 0 < code < 256 else 1
        return 0

    def status_line(self) -> str:
        status = self.status
        if status is RunStatus.DRY_RUN:
            return f"Dry run: {len(self.records)} step(s) planned"
        if status is RunStatus.INTERRUPTED:
            return f"Interrupted after {len(self.records)} step(s)"
        if status is RunStatus.ABORTED:
            return f"Aborted at step '{self.aborted_by.step}'"
        if status is RunStatus.COMPLETED_WITH_FAILURES:
            count = len(self.failures)
            return f"Completed with {count} failure{'s' if count != 1 else ''}"
        return "Setup complete"

    def raise_for_status(self) -> None:
        if self.aborted_by is not None:
            raise self.aborted_by
