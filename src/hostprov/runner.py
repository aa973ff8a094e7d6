# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: runner.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Synchronous process launcher and command groups.
# -----------------------------------------------------------------------------
import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from hostprov.models import SUCCESS, ExecResult

logger = logging.getLogger(__name__)

Argv = Union[str, Sequence[str]]

EXIT_TIMEOUT = 124
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def format_argv(cmd: Argv) -> str:
    return cmd if isinstance(cmd, str) else " ".join(cmd)


class CommandRunner:
    """
    Dumb process launcher.

    Runs one command to completion and returns its ExecResult. A command
    that cannot be launched is reported as a non-zero exit code, never as
    an exception. Each command runs in its own session so a timeout
    kills the whole process group, not just the direct child.
    """

    def __init__(
        self, timeout: Optional[float] = None, env: Optional[Dict[str, str]] = None
    ) -> None:
        self.timeout = timeout
        self.env = env

    def run(
        self,
        cmd: Argv,
        input: Optional[Union[str, bytes]] = None,
        timeout: Optional[float] = None,
    ) -> ExecResult:
        timeout = timeout if timeout is not None else self.timeout
        payload = input.encode("utf-8") if isinstance(input, str) else input
        logger.debug(f"Executing command: {format_argv(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE if payload is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=isinstance(cmd, str),
                env=self.env or os.environ.copy(),
                start_new_session=True,
            )
        except FileNotFoundError as e:
            return ExecResult(EXIT_NOT_FOUND, b"", str(e).encode())
        except OSError as e:
            return ExecResult(EXIT_NOT_EXECUTABLE, b"", str(e).encode())

        try:
            stdout, stderr = proc.communicate(payload, timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_group(proc)
            stdout, stderr = proc.communicate()
            logger.error(f"Command timed out after {timeout}s: {format_argv(cmd)}")
            return ExecResult(
                EXIT_TIMEOUT,
                stdout or b"",
                (stderr or b"") + f"timed out after {timeout}s".encode(),
            )
        except BaseException:
            _kill_group(proc)
            proc.wait()
            raise
        if proc.returncode != 0:
            text = stderr.decode("utf-8", errors="replace").strip()
            logger.debug(
                f"Command exited {proc.returncode}: {format_argv(cmd)}; "
                f"stderr: {text[-500:]}"
            )
        return ExecResult(proc.returncode, stdout, stderr)


def _kill_group(proc: subprocess.Popen) -> None:
    """SIGKILL the command and every process it started."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


@dataclass(frozen=True)
class Command:
    """
    One sub-command of a step.

    ``ok_codes`` are success-equivalent exit codes, ``tolerate`` downgrades
    a failure to a logged continuation, and ``creates`` skips the command
    when the path already exists on the host.
    """

    argv: Argv
    input: Optional[Union[str, bytes]] = None
    ok_codes: Tuple[int, ...] = (0,)
    tolerate: bool = False
    creates: Optional[str] = None


def run_commands(runner: CommandRunner, commands: List[Command]) -> ExecResult:
    """
    Run a group of commands in order.

    Returns the first non-tolerated failure, otherwise the result of the
    last command that ran.
    """
    result = SUCCESS
    for command in commands:
        if command.creates:
            probe = runner.run(["test", "-e", command.creates])
            if probe.ok:
                logger.debug(
                    f"{command.creates} exists; skipping {format_argv(command.argv)}"
                )
                continue
        result = runner.run(command.argv, input=command.input)
        if result.exit_code in command.ok_codes:
            if result.exit_code != 0:
                result = ExecResult(0, result.stdout, result.stderr)
            continue
        if command.tolerate:
            logger.warning(
                f"Ignoring failure of {format_argv(command.argv)} "
                f"(exit {result.exit_code})"
            )
            result = ExecResult(0, result.stdout, result.stderr)
            continue
        return result
    return result
