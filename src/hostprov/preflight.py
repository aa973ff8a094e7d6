# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: preflight.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Checks performed once before any provisioning step runs.
# -----------------------------------------------------------------------------
import ipaddress
import logging
import os
import re
from typing import List, Optional, Sequence, Tuple

from hostprov.errors import PrerequisiteMissing

logger = logging.getLogger(__name__)

USAGE = "Usage: hostprov <domain> <upstream> <email>"

DOMAIN_RE = re.compile(
    r"^(?=.{1,253}$)(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+[A-Za-z]{2,63}$"
)
HOST_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]{0,251}[A-Za-z0-9])?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
SUPPORTED_RELEASES = ["20.04", "22.04", "24.04"]


def check_root() -> None:
    if os.geteuid() != 0:
        raise PrerequisiteMissing("This script must be run as root.")
    logger.info("Root privileges confirmed.")


def validate_upstream(upstream: str) -> bool:
    """Accept host:port, where host may be a bracketed IPv6 address."""
    host, sep, port = upstream.rpartition(":")
    if not sep or not port.isdigit() or not 0 < int(port) < 65536:
        return False
    if host.startswith("[") and host.endswith("]"):
        try:
            ipaddress.IPv6Address(host[1:-1])
        except ValueError:
            return False
        return True
    return bool(HOST_RE.match(host))


def validate_arguments(args: Optional[Sequence[str]]) -> Tuple[str, str, str]:
    """Return (domain, upstream, email) or raise PrerequisiteMissing."""
    args = list(args or [])
    if len(args) != 3:
        raise PrerequisiteMissing(USAGE)
    domain, upstream, email = args
    problems: List[str] = []
    if not DOMAIN_RE.match(domain):
        problems.append(f"invalid domain: {domain}")
    if not validate_upstream(upstream):
        problems.append(f"invalid upstream (expected host:port): {upstream}")
    if not EMAIL_RE.match(email):
        problems.append(f"invalid email: {email}")
    if problems:
        raise PrerequisiteMissing("; ".join(problems))
    return domain, upstream, email


def check_os_release(path: str = "/etc/os-release") -> Optional[str]:
    """Warn when the host is not a supported Ubuntu release."""
    if not os.path.isfile(path):
        logger.warning(f"Cannot determine OS: {path} not found")
        return None
    os_info = {}
    with open(path, "r") as f:
        for line in f:
            if "=" in line:
                key, value = line.strip().split("=", 1)
                os_info[key] = value.strip('"')
    if os_info.get("ID") != "ubuntu":
        logger.warning(f"Detected non-Ubuntu system: {os_info.get('ID', 'unknown')}")
        return None
    version = os_info.get("VERSION_ID", "")
    if version not in SUPPORTED_RELEASES:
        logger.warning(
            f"Ubuntu {version} is not officially supported. "
            f"Supported versions: {', '.join(SUPPORTED_RELEASES)}"
        )
    return os_info.get("PRETTY_NAME", f"Ubuntu {version}")
