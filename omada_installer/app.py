import argparse
from pathlib import Path

from . import __version__
from .config import InstallerConfig
from .errors import InstallerError
from .installer import InstallOptions, fetch_package, run_install
from .logger import get_logger
from .resolver import Arch, resolve

ARCH_CHOICES = [a.value for a in Arch]


def _options(args: argparse.Namespace) -> InstallOptions:
    return InstallOptions(
        arch=getattr(args, "arch", None),
        url=getattr(args, "url", None),
        sha256=getattr(args, "sha256", None),
        ufw_cidr=getattr(args, "ufw_allow_cidr", None),
        dest_dir=Path(args.dest) if getattr(args, "dest", None) else None,
        dry_run=getattr(args, "dry_run", False),
        skip_preflight=getattr(args, "skip_preflight", False),
    )


def cmd_resolve(args: argparse.Namespace, config: InstallerConfig) -> None:
    url = resolve(args.arch, config)
    print(url)


def cmd_fetch(args: argparse.Namespace, config: InstallerConfig) -> None:
    package = fetch_package(_options(args), config)
    print(f"URL: {package.url}")
    print(f"Saved: {package.path}")
    if package.sha256:
        print(f"SHA-256: {package.sha256} (verified)")


def cmd_install(args: argparse.Namespace, config: InstallerConfig) -> None:
    print("\n=== TP-Link Omada Controller installation ===\n")
    result = run_install(_options(args), config)
    print()
    print("[ok] Omada controller installed.")
    print(f"[->] Open: {result.access_url}  (self-signed certificate)")
    print(f"[i]  Restrict port {config.controller_port} to trusted networks.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omada-installer",
        description="Fetch, verify and install the TP-Link Omada Software Controller",
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--log-level", help="Console log level (default: INFO or OMADA_LOG_LEVEL)")
    parser.add_argument("--log-dir", help="Directory for log files (default: logs/ or OMADA_LOG_DIR)")

    subparsers = parser.add_subparsers(dest="command")

    res = subparsers.add_parser("resolve", help="Print the download URL of the newest stable package")
    res.add_argument("--arch", required=True, choices=ARCH_CHOICES, help="Target CPU architecture")
    res.set_defaults(func=cmd_resolve)

    fet = subparsers.add_parser("fetch", help="Download and verify the package without installing it")
    fet.add_argument("--arch", choices=ARCH_CHOICES, help="Target CPU architecture (default: host)")
    fet.add_argument("--url", help="Direct .deb URL; skips the download page")
    fet.add_argument("--sha256", help="Expected SHA-256 of the .deb")
    fet.add_argument("--dest", help="Download directory (default: /tmp or OMADA_DOWNLOAD_DIR)")
    fet.set_defaults(func=cmd_fetch)

    ins = subparsers.add_parser("install", help="Install the Omada controller")
    ins.add_argument("--arch", choices=ARCH_CHOICES, help="Target CPU architecture (default: host)")
    ins.add_argument("--url", help="Direct .deb URL (recommended together with --sha256)")
    ins.add_argument("--sha256", help="Expected SHA-256 of the .deb")
    ins.add_argument("--ufw-allow-cidr", help="Allow port 8043 only from this CIDR, e.g. 192.168.0.0/16")
    ins.add_argument("--dest", help="Download directory (default: /tmp or OMADA_DOWNLOAD_DIR)")
    ins.add_argument("--dry-run", action="store_true", help="Log system commands without running them")
    ins.add_argument("--skip-preflight", action="store_true", help="Skip root, AVX and OS checks")
    ins.set_defaults(func=cmd_install)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        config = InstallerConfig.from_env().with_overrides(
            log_level=args.log_level,
            log_dir=Path(args.log_dir) if args.log_dir else None,
        )
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    logger = get_logger()
    logger.configure(level=config.log_level, log_dir=config.log_dir)

    try:
        args.func(args, config)
    except InstallerError as e:
        logger.critical("Aborted", step=e.step, error_type=type(e).__name__)
        raise SystemExit(f"Error: {e}")
    finally:
        if args.command != "resolve":
            logger.log_metrics_summary()


if __name__ == "__main__":
    main()
