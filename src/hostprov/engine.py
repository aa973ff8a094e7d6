# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: engine.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Sequential step executor with per-run failure policy.
# -----------------------------------------------------------------------------
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from hostprov.errors import StepFailed
from hostprov.models import (
    ExecResult,
    FailurePolicy,
    Outcome,
    RunReport,
    Step,
    StepRecord,
)
from hostprov.runner import CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """
    State shared by the steps of one run.

    Generated secrets and collected facts live here so later steps and
    the final report read the same values.
    """

    runner: CommandRunner
    params: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, str] = field(default_factory=dict)
    facts: Dict[str, Any] = field(default_factory=dict)


StepCallback = Callable[[int, int, Step], None]
RecordCallback = Callable[[StepRecord], None]


class Provisioner:
    """Runs an ordered list of steps strictly in sequence."""

    def __init__(
        self,
        steps: List[Step],
        runner: CommandRunner,
        policy: FailurePolicy = FailurePolicy.ABORT,
        params: Optional[Dict[str, Any]] = None,
        dry_run: bool = False,
    ) -> None:
        self.steps = list(steps)
        self.runner = runner
        self.policy = FailurePolicy(policy)
        self.params = dict(params or {})
        self.dry_run = dry_run
        self.report: Optional[RunReport] = None

    def effective_policy(self, step: Step) -> FailurePolicy:
        return step.policy if step.policy is not None else self.policy

    def _execute(self, step: Step, context: StepContext) -> Optional[ExecResult]:
        """Run one step; ``None`` means its guard declined to run it."""
        try:
            if step.when is not None and not step.when(context):
                return None
            result = step.action(context)
        except Exception as e:
            logger.exception(f"Step '{step.name}' raised an error")
            return ExecResult(1, b"", f"{type(e).__name__}: {e}".encode())
        if not isinstance(result, ExecResult):
            raise TypeError(
                f"Step '{step.name}' returned {type(result).__name__}, "
                "expected ExecResult"
            )
        return result

    def run(
        self,
        on_start: Optional[StepCallback] = None,
        on_record: Optional[RecordCallback] = None,
    ) -> RunReport:
        """
        Execute every step in order and return the report.

        The report is also kept on ``self.report`` so a caller interrupted
        mid-run can still show what ran.
        """
        context = StepContext(runner=self.runner, params=self.params)
        report = RunReport(
            policy=self.policy,
            credentials=context.credentials,
            facts=context.facts,
            dry_run=self.dry_run,
        )
        self.report = report
        total = len(self.steps)
        logger.info(
            f"Starting run: {total} step(s), policy={self.policy.value}"
            + (", dry run" if self.dry_run else "")
        )
        try:
            self._run_steps(context, report, on_start, on_record)
        except (KeyboardInterrupt, SystemExit):
            report.interrupted = True
            logger.error(report.status_line())
            raise
        logger.info(report.status_line())
        return report

    def _run_steps(
        self,
        context: StepContext,
        report: RunReport,
        on_start: Optional[StepCallback],
        on_record: Optional[RecordCallback],
    ) -> None:
        total = len(self.steps)
        for index, step in enumerate(self.steps, start=1):
            policy = self.effective_policy(step)
            if on_start:
                on_start(index, total, step)

            start = time.monotonic()
            result = None if self.dry_run else self._execute(step, context)
            elapsed = time.monotonic() - start
            if result is None:
                logger.info(f"[{index}/{total}] {step.name}: skipped")
                record = StepRecord(step, ExecResult(0), Outcome.SKIPPED, policy)
            else:
                logger.info(f"[{index}/{total}] {step.name}")
                outcome = Outcome.SUCCEEDED if result.ok else Outcome.FAILED
                record = StepRecord(step, result, outcome, policy, elapsed)
            report.records.append(record)
            if on_record:
                on_record(record)

            if record.outcome is not Outcome.FAILED:
                continue
            if policy is FailurePolicy.ABORT:
                logger.error(
                    f"Step '{step.name}' failed with exit code {result.exit_code}; "
                    "aborting run."
                )
                report.aborted_by = StepFailed(step.name, result.exit_code)
                return
            logger.warning(
                f"Step '{step.name}' failed with exit code {result.exit_code}; "
                "continuing."
            )
