"""
Thin wrappers over the host's command-line tools.

Each collaborator hands one argv to ``run_cmd``; none of them holds logic of
its own. ``dry_run`` logs the command without executing it.
"""

import ipaddress
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import CommandError, InvalidArgumentError
from .logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Optional[Mapping[str, str]] = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    Raises CommandError on a non-zero exit when ``check`` is set, or when
    the executable is missing.
    """
    argv_list = list(argv)
    logger.info(f"CMD {_fmt_argv(argv_list)}", dry_run=dry_run)

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        raise CommandError(f"Command not found: {argv_list[0]}", returncode=127) from e

    if p.stdout:
        logger.debug(f"STDOUT {p.stdout.strip()}")
    if p.stderr:
        logger.debug(f"STDERR {p.stderr.strip()}")

    if check and p.returncode != 0:
        raise CommandError(
            f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{p.stderr}",
            returncode=p.returncode,
            stderr=p.stderr,
        )

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def install_package(path: Path, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["apt-get", "install", "-y", str(path)], env=APT_ENV, dry_run=dry_run)


def find_service(pattern: str = "omada", *, dry_run: bool = False) -> Optional[str]:
    """Return the first systemd unit file whose name contains ``pattern``."""
    if dry_run:
        return None
    r = run_cmd(["systemctl", "list-unit-files", "--type=service", "--no-legend"], check=False)
    for line in r.stdout.splitlines():
        fields = line.split()
        if fields and pattern in fields[0].lower() and fields[0].endswith(".service"):
            return fields[0]
    return None


def enable_service(name: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["systemctl", "enable", "--now", name], dry_run=dry_run)


def ufw_available() -> bool:
    return shutil.which("ufw") is not None


def allow_port_from(cidr: str, port: int, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(
        ["ufw", "allow", "from", cidr, "to", "any", "port", str(port), "proto", "tcp"],
        dry_run=dry_run,
    )


def primary_ip(*, dry_run: bool = False) -> str:
    if dry_run:
        return "127.0.0.1"
    r = run_cmd(["hostname", "-I"], check=False)
    parts = r.stdout.split()
    return parts[0] if parts else "127.0.0.1"


def validate_cidr(value: str) -> str:
    """Return the normalized network for ``value``; host bits are tolerated."""
    try:
        return str(ipaddress.ip_network(value.strip(), strict=False))
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid CIDR {value!r}: {e}") from e
