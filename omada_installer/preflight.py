"""
Host checks run before anything is downloaded.

The controller needs root to install, a CPU with AVX for MongoDB 5+, and a
supported Ubuntu release.
"""

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from .errors import PreflightError
from .logger import get_logger
from .system import run_cmd

logger = get_logger()

SUPPORTED_CODENAMES = ("focal", "jammy", "noble", "oracular")


@dataclass(frozen=True)
class OsRelease:
    id: str
    version_id: str
    codename: str


def require_root() -> None:
    if os.geteuid() != 0:
        raise PreflightError("Root privileges are required. Re-run with sudo.")


def cpu_flags(cpuinfo_path: Path = Path("/proc/cpuinfo")) -> set:
    flags = set()
    try:
        text = Path(cpuinfo_path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise PreflightError(f"Cannot read {cpuinfo_path}: {e}") from e
    for line in text.splitlines():
        key, _, value = line.partition(":")
        if key.strip() in ("flags", "Features"):
            flags.update(value.split())
    return flags


def require_avx(cpuinfo_path: Path = Path("/proc/cpuinfo")) -> None:
    if "avx" not in cpu_flags(cpuinfo_path):
        raise PreflightError("CPU lacks AVX. MongoDB 5.0+ requires AVX.")


def parse_os_release(text: str) -> Dict[str, str]:
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, raw = line.split("=", 1)
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip('"\'')]
        values[key.strip()] = parts[0] if parts else ""
    return values


def detect_os_release(path: Path = Path("/etc/os-release")) -> OsRelease:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise PreflightError(f"Cannot read {path}: {e}") from e

    values = parse_os_release(text)
    release = OsRelease(
        id=values.get("ID", ""),
        version_id=values.get("VERSION_ID", ""),
        codename=values.get("VERSION_CODENAME", ""),
    )
    if release.codename not in SUPPORTED_CODENAMES:
        raise PreflightError(
            f"Unsupported OS release {release.codename or 'unknown'!r}; "
            "only Ubuntu 20.04/22.04/24.04/24.10 are supported"
        )
    return release


def detect_arch() -> str:
    """Debian architecture name of the host (amd64, arm64, ...)."""
    return run_cmd(["dpkg", "--print-architecture"]).stdout.strip()
