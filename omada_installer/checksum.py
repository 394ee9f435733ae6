import hashlib
import re
from pathlib import Path

from .errors import ChecksumMismatchError, InvalidArgumentError
from .logger import get_logger

logger = get_logger()

SHA256_RE = re.compile(r"^[0-9a-f]{64}$")


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Return the lowercase hex SHA-256 of a file."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def validate_digest(expected: str) -> str:
    """Normalize an operator-supplied SHA-256 or raise InvalidArgumentError."""
    wanted = expected.strip().lower()
    if not SHA256_RE.match(wanted):
        raise InvalidArgumentError(f"Expected SHA-256 is not a 64 character hex digest: {expected!r}")
    return wanted


def verify_checksum(path: Path, expected: str) -> str:
    """Compare the file's SHA-256 with ``expected`` and return the digest.

    A mismatch always raises ChecksumMismatchError.
    """
    wanted = validate_digest(expected)
    actual = sha256_file(path)
    if actual != wanted:
        logger.error("SHA-256 mismatch", path=str(path), expected=wanted, actual=actual)
        raise ChecksumMismatchError(
            f"SHA-256 mismatch for {Path(path).name} (expected {wanted}, got {actual})"
        )
    logger.info("SHA-256 verified", path=str(path), sha256=actual)
    return actual
