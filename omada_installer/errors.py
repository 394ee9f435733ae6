"""
Error taxonomy for the installer.

Every error is fatal to the run. ``step`` names the step that failed so the
CLI can report it.
"""

from typing import Optional


class InstallerError(Exception):
    """Base class for all installer failures."""

    step = "install"

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        if step is not None:
            self.step = step

    def __str__(self) -> str:
        return f"[{self.step}] {super().__str__()}"


class FetchError(InstallerError):
    """Page or file unreachable after retries, or a non-success status."""
    step = "fetch"


class UnsupportedArchError(InstallerError):
    """Architecture is not one of amd64, arm64."""
    step = "resolve"


class NoCandidateError(InstallerError):
    """No package link survived the filters."""
    step = "resolve"


class UntrustedDomainError(InstallerError):
    """Resolved URL points outside the trusted vendor domains."""
    step = "validate"


class UnreachableError(InstallerError):
    """Resolved URL failed the HEAD liveness probe."""
    step = "probe"


class ChecksumMismatchError(InstallerError):
    """Downloaded file digest disagrees with the expected SHA-256."""
    step = "checksum"


class PreflightError(InstallerError):
    """Host does not meet the requirements (root, AVX, supported OS)."""
    step = "preflight"


class InvalidArgumentError(InstallerError):
    """Malformed operator input such as an override URL or CIDR."""
    step = "arguments"


class CommandError(InstallerError):
    """An external command exited non-zero."""
    step = "command"

    def __init__(self, message: str, returncode: int = 1, stderr: str = "", step: Optional[str] = None):
        super().__init__(message, step=step)
        self.returncode = returncode
        self.stderr = stderr
