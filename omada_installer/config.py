"""
Installer configuration.

Defaults match the vendor download page and the curl policy the installer
has always used. ``InstallerConfig.from_env`` lets an operator override them
with OMADA_* variables (a .env file is honoured via ``load_env``).
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

from .env import load_env

SITE_ORIGIN = "https://support.omadanetworks.com"
LISTING_URL = f"{SITE_ORIGIN}/us/product/omada-software-controller/?resourceType=download"
TRUSTED_DOMAINS = ("omadanetworks.com", "support.omadanetworks.com")
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/125 Safari/537.36"
PRERELEASE_MARKERS = ("beta", "rc", "alpha", "preview")
CONTROLLER_PORT = 8043


@dataclass(frozen=True)
class InstallerConfig:
    listing_url: str = LISTING_URL
    site_origin: str = SITE_ORIGIN
    trusted_domains: Tuple[str, ...] = TRUSTED_DOMAINS
    user_agent: str = USER_AGENT
    package_extension: str = ".deb"
    prerelease_markers: Tuple[str, ...] = PRERELEASE_MARKERS
    attempts: int = 3
    retry_delay: float = 1.0
    connect_timeout: float = 10.0
    read_timeout: float = 40.0
    download_timeout: float = 600.0
    download_dir: Path = field(default_factory=lambda: Path("/tmp"))
    log_dir: Path = field(default_factory=lambda: Path("logs"))
    log_level: str = "INFO"
    controller_port: int = CONTROLLER_PORT

    @property
    def max_retries(self) -> int:
        return max(self.attempts - 1, 0)

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    @property
    def download_timeouts(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.download_timeout)

    def with_overrides(self, **changes) -> "InstallerConfig":
        """Return a copy with the non-None values in ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, base: Optional["InstallerConfig"] = None) -> "InstallerConfig":
        """Build a config from OMADA_* environment variables.

        Unset variables keep the value from ``base`` (or the defaults).
        Raises ValueError on a variable that cannot be parsed.
        """
        load_env()
        cfg = base or cls()

        markers = os.getenv("OMADA_PRERELEASE_MARKERS")
        domains = os.getenv("OMADA_TRUSTED_DOMAINS")
        download_dir = os.getenv("OMADA_DOWNLOAD_DIR")
        log_dir = os.getenv("OMADA_LOG_DIR")

        return cfg.with_overrides(
            listing_url=os.getenv("OMADA_LISTING_URL"),
            user_agent=os.getenv("OMADA_USER_AGENT"),
            attempts=_env_number("OMADA_HTTP_ATTEMPTS", int),
            connect_timeout=_env_number("OMADA_CONNECT_TIMEOUT", float),
            read_timeout=_env_number("OMADA_READ_TIMEOUT", float),
            download_timeout=_env_number("OMADA_DOWNLOAD_TIMEOUT", float),
            prerelease_markers=_env_list(markers),
            trusted_domains=_env_list(domains),
            download_dir=Path(download_dir) if download_dir else None,
            log_dir=Path(log_dir) if log_dir else None,
            log_level=os.getenv("OMADA_LOG_LEVEL"),
        )


def _env_number(name: str, kind):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_list(raw: Optional[str]) -> Optional[Tuple[str, ...]]:
    if not raw:
        return None
    items = tuple(item.strip().lower() for item in raw.split(",") if item.strip())
    return items or None
