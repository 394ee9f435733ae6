"""
Install pipeline for the Omada controller.

preflight -> package URL -> download -> checksum -> install -> firewall.
The first failing step aborts the run; nothing after it is attempted.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from . import system
from .checksum import validate_digest, verify_checksum
from .config import InstallerConfig
from .errors import CommandError, InstallerError, InvalidArgumentError
from .fetch import download_file
from .logger import get_logger
from .preflight import detect_arch, detect_os_release, require_avx, require_root
from .resolver import Arch, resolve

logger = get_logger()


@dataclass(frozen=True)
class InstallOptions:
    arch: Optional[str] = None
    url: Optional[str] = None
    sha256: Optional[str] = None
    ufw_cidr: Optional[str] = None
    dest_dir: Optional[Path] = None
    dry_run: bool = False
    skip_preflight: bool = False


@dataclass(frozen=True)
class FetchedPackage:
    url: str
    path: Path
    sha256: Optional[str]


@dataclass(frozen=True)
class InstallResult:
    package: FetchedPackage
    service: Optional[str]
    firewall_rule: bool
    access_url: str


@contextmanager
def step(name: str):
    """Log and record one pipeline step; errors are tagged and re-raised."""
    logger.record_step_attempt(name)
    logger.info(f"Step: {name}")
    try:
        yield
    except InstallerError as e:
        logger.record_step_failure(name, type(e).__name__)
        logger.error(f"Step failed: {name}", error=str(e))
        raise
    logger.record_step_success(name)


def validate_override_url(url: str) -> str:
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidArgumentError(f"Invalid package URL: {url!r} (expected http:// or https://)")
    return url.strip()


def package_url(options: InstallOptions, config: InstallerConfig) -> str:
    """The override URL when given, else the newest stable package for the arch."""
    if options.url:
        logger.info("Using the package URL given on the command line")
        return validate_override_url(options.url)
    arch = options.arch or detect_arch()
    return resolve(Arch.parse(arch), config)


def fetch_package(options: InstallOptions, config: InstallerConfig) -> FetchedPackage:
    """Resolve, download and verify the package without installing it."""
    expected = validate_digest(options.sha256) if options.sha256 else None

    with step("resolve"):
        url = package_url(options, config)

    with step("download"):
        path = download_file(
            url, options.dest_dir or config.download_dir, config, trusted_only=not options.url
        )

    digest = None
    with step("checksum"):
        if expected:
            digest = verify_checksum(path, expected)
        else:
            logger.warning("No SHA-256 given; continuing without an integrity check (pass --sha256)")

    return FetchedPackage(url=url, path=path, sha256=digest)


def run_preflight(options: InstallOptions) -> None:
    with step("preflight"):
        require_root()
        require_avx()
        release = detect_os_release()
        arch = options.arch or detect_arch()
        Arch.parse(arch)
        logger.info("Host detected", os=release.id, version=release.version_id, codename=release.codename, arch=arch)


def configure_firewall(cidr: str, config: InstallerConfig, dry_run: bool = False) -> bool:
    """Allow the controller port from ``cidr``. Returns True if a rule was added."""
    if not dry_run and not system.ufw_available():
        logger.warning(
            "ufw is not installed; to restrict access run: "
            f"apt-get install ufw && ufw allow from {cidr} to any port {config.controller_port} proto tcp"
        )
        return False
    try:
        system.allow_port_from(cidr, config.controller_port, dry_run=dry_run)
    except CommandError as e:
        logger.warning("Could not add ufw rule", cidr=cidr, error=str(e))
        return False
    logger.info("ufw: allowed controller port", cidr=cidr, port=config.controller_port)
    return True


def run_install(options: InstallOptions, config: Optional[InstallerConfig] = None) -> InstallResult:
    """Run the whole pipeline. Raises the first InstallerError encountered."""
    config = config or InstallerConfig()
    cidr = system.validate_cidr(options.ufw_cidr) if options.ufw_cidr else None

    if not options.skip_preflight:
        run_preflight(options)

    package = fetch_package(options, config)

    with step("install"):
        system.install_package(package.path, dry_run=options.dry_run)
        service = system.find_service("omada", dry_run=options.dry_run)
        if service:
            system.enable_service(service, dry_run=options.dry_run)
        else:
            logger.warning("No omada systemd unit found; start the controller manually")

    rule_added = False
    if cidr:
        with step("firewall"):
            rule_added = configure_firewall(cidr, config, dry_run=options.dry_run)

    access_url = f"https://{system.primary_ip(dry_run=options.dry_run)}:{config.controller_port}"
    logger.info("Omada controller installed", access_url=access_url)
    return InstallResult(package=package, service=service, firewall_rule=rule_added, access_url=access_url)
