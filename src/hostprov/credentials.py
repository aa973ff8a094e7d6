# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: credentials.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Random account credentials from a CSPRNG.
# -----------------------------------------------------------------------------
import secrets
import string

ALPHANUMERIC = string.ascii_letters + string.digits
DEFAULT_LENGTH = 16


def generate_password(
    length: int = DEFAULT_LENGTH, alphabet: str = ALPHANUMERIC
) -> str:
    """
    Return a random string of ``length`` characters drawn from ``alphabet``.

    The value cannot be recovered later, so callers must keep it.
    """
    if length <= 0:
        raise ValueError("Credential length must be positive")
    if not alphabet:
        raise ValueError("Credential alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))
