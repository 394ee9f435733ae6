"""Tests for the error taxonomy."""

import pytest

from omada_installer.errors import (
    ChecksumMismatchError,
    CommandError,
    FetchError,
    InstallerError,
    NoCandidateError,
    PreflightError,
    UnreachableError,
    UnsupportedArchError,
    UntrustedDomainError,
)


@pytest.mark.parametrize("cls,step", [
    (FetchError, "fetch"),
    (UnsupportedArchError, "resolve"),
    (NoCandidateError, "resolve"),
    (UntrustedDomainError, "validate"),
    (UnreachableError, "probe"),
    (ChecksumMismatchError, "checksum"),
    (PreflightError, "preflight"),
])
def test_each_error_names_its_step(cls, step):
    err = cls("boom")
    assert isinstance(err, InstallerError)
    assert err.step == step
    assert str(err) == f"[{step}] boom"


def test_step_can_be_overridden():
    assert FetchError("boom", step="download").step == "download"


def test_command_error_carries_exit_status():
    err = CommandError("failed", returncode=100, stderr="E: broken")
    assert err.returncode == 100
    assert err.stderr == "E: broken"
