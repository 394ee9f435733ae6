"""Tests for host checks."""

from unittest.mock import patch

import pytest

from omada_installer.errors import PreflightError
from omada_installer.preflight import (
    cpu_flags,
    detect_arch,
    detect_os_release,
    parse_os_release,
    require_avx,
    require_root,
)
from omada_installer.system import CmdResult

NOBLE = """\
PRETTY_NAME="Ubuntu 24.04.1 LTS"
NAME="Ubuntu"
VERSION_ID="24.04"
VERSION="24.04.1 LTS (Noble Numbat)"
VERSION_CODENAME=noble
ID=ubuntu
ID_LIKE=debian
"""


class TestRoot:

    def test_root_ok(self):
        with patch("omada_installer.preflight.os.geteuid", return_value=0):
            require_root()

    def test_non_root_fails(self):
        with patch("omada_installer.preflight.os.geteuid", return_value=1000):
            with pytest.raises(PreflightError, match="Root"):
                require_root()


class TestAvx:

    def test_flags_from_x86_cpuinfo(self, tmp_path):
        cpuinfo = tmp_path / "cpuinfo"
        cpuinfo.write_text("processor\t: 0\nflags\t\t: fpu sse2 avx avx2\n\nprocessor\t: 1\nflags\t\t: fpu avx\n")
        assert {"avx", "avx2", "sse2"} <= cpu_flags(cpuinfo)
        require_avx(cpuinfo)

    def test_missing_avx_fails(self, tmp_path):
        cpuinfo = tmp_path / "cpuinfo"
        cpuinfo.write_text("processor\t: 0\nflags\t\t: fpu sse2 avx512f\n")
        with pytest.raises(PreflightError, match="AVX"):
            require_avx(cpuinfo)

    def test_unreadable_cpuinfo(self, tmp_path):
        with pytest.raises(PreflightError):
            require_avx(tmp_path / "missing")


class TestOsRelease:

    def test_parse_quoted_and_bare_values(self):
        values = parse_os_release(NOBLE)
        assert values["PRETTY_NAME"] == "Ubuntu 24.04.1 LTS"
        assert values["VERSION_CODENAME"] == "noble"
        assert values["ID"] == "ubuntu"

    def test_supported_release(self, tmp_path):
        path = tmp_path / "os-release"
        path.write_text(NOBLE)
        release = detect_os_release(path)
        assert (release.id, release.version_id, release.codename) == ("ubuntu", "24.04", "noble")

    def test_unsupported_release(self, tmp_path):
        path = tmp_path / "os-release"
        path.write_text('ID=debian\nVERSION_ID="12"\nVERSION_CODENAME=bookworm\n')
        with pytest.raises(PreflightError, match="bookworm"):
            detect_os_release(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(PreflightError):
            detect_os_release(tmp_path / "nope")


def test_detect_arch_uses_dpkg():
    result = CmdResult(argv=["dpkg", "--print-architecture"], returncode=0, stdout="arm64\n", stderr="")
    with patch("omada_installer.preflight.run_cmd", return_value=result) as run:
        assert detect_arch() == "arm64"
    run.assert_called_once_with(["dpkg", "--print-architecture"])
