# -*- coding: utf-8 -*-
# -----------------------------------------------------------------------------
# filename: config.py
# author: dunamismax
# version: 1.0.0
# date: 10-19-2026
# github: https://github.com/dunamismax
# description: Pydantic-based settings management from environment variables.
# -----------------------------------------------------------------------------
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostprov.credentials import ALPHANUMERIC, DEFAULT_LENGTH
from hostprov.models import FailurePolicy


class Profile(str, Enum):
    PROXY = "proxy"
    MEDIA = "media"


class ProxyConfigMode(str, Enum):
    TEMPLATE = "template"
    PATCH = "patch"


class ProvisionSettings(BaseSettings):
    """
    Provisioning settings loaded from ``HOSTPROV_*`` environment variables.

    Uses pydantic-settings to load configuration from a .env file or the
    environment. Command-line options override these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOSTPROV_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    failure_policy: FailurePolicy = FailurePolicy.ABORT
    profile: Profile = Profile.PROXY
    step_timeout: Optional[float] = Field(
        1800, description="Per-step command timeout in seconds; unset for none."
    )

    credential_length: int = Field(DEFAULT_LENGTH, gt=0)
    credential_alphabet: str = Field(ALPHANUMERIC, min_length=1)
    ssh_user: str = "streams_admin"
    ftp_user: str = "streams_ftp"

    web_root_base: str = "/var/www"
    nginx_sites_available: str = "/etc/nginx/sites-available"
    nginx_sites_enabled: str = "/etc/nginx/sites-enabled"
    letsencrypt_live: str = "/etc/letsencrypt/live"
    renew_cron: str = "0 3 * * * /usr/bin/certbot renew --quiet"

    hotlink_referers: List[str] = Field(
        default_factory=lambda: ["radioindialive.com", "vividhbharati.in"],
        description="Domains allowed to embed the protected stream paths.",
    )
    proxy_ports: str = "8000:8500"
    media_ports: str = "8000:8100"
    pasv_min_port: int = 40000
    pasv_max_port: int = 45000

    proxy_config_mode: ProxyConfigMode = ProxyConfigMode.TEMPLATE

    log_file: str = "/var/log/hostprov.log"
    log_level: str = Field("INFO", description="Logging level for the application.")

    @field_validator("step_timeout")
    @classmethod
    def _non_positive_means_unlimited(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            return None
        return value

    def web_root(self, domain: str) -> str:
        return f"{self.web_root_base.rstrip('/')}/{domain}"

    def site_config(self, domain: str) -> str:
        return f"{self.nginx_sites_available.rstrip('/')}/{domain}"

    def ssl_dir(self, domain: str) -> str:
        return f"{self.letsencrypt_live.rstrip('/')}/{domain}"
