# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: errors.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Exception types raised by the provisioning engine and CLI.
# -----------------------------------------------------------------------------


class ProvisionError(Exception):
    """Base class for all provisioning errors."""


class StepFailed(ProvisionError):
    """A step exited non-zero under the Abort policy."""

    def __init__(self, step: str, exit_code: int) -> None:
        super().__init__(f"Step '{step}' failed with exit code {exit_code}")
        self.step = step
        self.exit_code = exit_code


class PrerequisiteMissing(ProvisionError):
    """Checked once before any step runs (root privileges, arguments)."""


class AnchorNotFound(ProvisionError):
    def __init__(self, anchor: str) -> None:
        super().__init__(f"Anchor line not found: {anchor!r}")
        self.anchor = anchor
