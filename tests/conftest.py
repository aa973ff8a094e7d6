import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import pytest

from hostprov.config import ProvisionSettings
from hostprov.models import ExecResult
from hostprov.runner import CommandRunner


class Call:
    def __init__(self, cmd, input=None):
        self.cmd = cmd
        self.input = input

    @property
    def argv(self) -> List[str]:
        return [self.cmd] if isinstance(self.cmd, str) else list(self.cmd)

    def __repr__(self) -> str:
        return f"Call({self.cmd!r})"


def _matches(cmd: Union[str, Sequence[str]], prefix: Sequence[str]) -> bool:
    if isinstance(cmd, str):
        return cmd.startswith(" ".join(prefix))
    return list(cmd[: len(prefix)]) == list(prefix)


class FakeRunner(CommandRunner):
    """Records every command and returns scripted results."""

    def __init__(self, default: Optional[ExecResult] = None) -> None:
        super().__init__()
        self.default = default or ExecResult(0)
        self.calls: List[Call] = []
        self.rules: List[Tuple[Tuple[str, ...], ExecResult]] = []

    def fail_when(self, *prefix: str, exit_code: int = 1, stderr: bytes = b"boom"):
        self.rules.append((prefix, ExecResult(exit_code, b"", stderr)))
        return self

    def respond(self, *prefix: str, result: ExecResult):
        self.rules.append((prefix, result))
        return self

    def run(self, cmd, input=None, timeout=None) -> ExecResult:
        self.calls.append(Call(cmd, input))
        for prefix, result in self.rules:
            if _matches(cmd, prefix):
                return result
        return self.default

    def executed(self, *prefix: str) -> List[Call]:
        return [c for c in self.calls if _matches(c.cmd, prefix)]


class FakeHost(FakeRunner):
    """Just enough host state to exercise idempotent re-runs."""

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self.files: Dict[str, str] = dict(files or {})
        self.users: Set[str] = set()

    def run(self, cmd, input=None, timeout=None) -> ExecResult:
        self.calls.append(Call(cmd, input))
        for prefix, result in self.rules:
            if _matches(cmd, prefix):
                return result
        if isinstance(cmd, str):
            return ExecResult(0)
        argv = list(cmd)
        name = argv[0]
        if name == "test" and argv[1] == "-e":
            return ExecResult(0 if argv[2] in self.files else 1)
        if name == "cp":
            src, dst = argv[-2], argv[-1]
            if src not in self.files:
                return ExecResult(1, b"", b"No such file or directory")
            self.files[dst] = self.files[src]
            return ExecResult(0)
        if name == "tee":
            text = input.decode() if isinstance(input, bytes) else (input or "")
            self.files[argv[1]] = text
            return ExecResult(0, text.encode())
        if name == "mv":
            src, dst = argv[-2], argv[-1]
            if src not in self.files:
                return ExecResult(1)
            self.files[dst] = self.files.pop(src)
            return ExecResult(0)
        if name == "cat":
            if argv[1] not in self.files:
                return ExecResult(1, b"", b"No such file or directory")
            return ExecResult(0, self.files[argv[1]].encode())
        if name == "useradd":
            user = argv[-1]
            if user in self.users:
                return ExecResult(9, b"", f"user '{user}' already exists".encode())
            self.users.add(user)
            return ExecResult(0)
        return ExecResult(0)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings(monkeypatch, tmp_path) -> ProvisionSettings:
    for key in (
        "HOSTPROV_FAILURE_POLICY",
        "HOSTPROV_PROFILE",
        "HOSTPROV_PROXY_CONFIG_MODE",
        "HOSTPROV_STEP_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOSTPROV_LOG_FILE", str(tmp_path / "hostprov.log"))
    monkeypatch.chdir(tmp_path)
    return ProvisionSettings()


@pytest.fixture(autouse=True)
def reset_hostprov_logger():
    yield
    logger = logging.getLogger("hostprov")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
