"""Tests for SHA-256 verification."""

import hashlib

import pytest

from omada_installer.checksum import sha256_file, validate_digest, verify_checksum
from omada_installer.errors import ChecksumMismatchError, InvalidArgumentError


def test_sha256_file(package_file):
    assert sha256_file(package_file) == hashlib.sha256(b"not really a deb\n").hexdigest()


def test_sha256_file_reads_in_chunks(tmp_path):
    path = tmp_path / "big.deb"
    data = b"x" * 10_000
    path.write_bytes(data)
    assert sha256_file(path, chunk_size=1024) == hashlib.sha256(data).hexdigest()


def test_verify_accepts_matching_digest_any_case(package_file):
    expected = hashlib.sha256(b"not really a deb\n").hexdigest()
    assert verify_checksum(package_file, f"  {expected.upper()}\n") == expected


def test_verify_rejects_mismatch(package_file):
    wrong = hashlib.sha256(b"something else").hexdigest()
    with pytest.raises(ChecksumMismatchError) as exc:
        verify_checksum(package_file, wrong)
    assert wrong in str(exc.value)
    assert exc.value.step == "checksum"


@pytest.mark.parametrize("value", ["", "abc", "z" * 64, "a" * 63, "a" * 65])
def test_validate_digest_rejects_malformed(value):
    with pytest.raises(InvalidArgumentError):
        validate_digest(value)
