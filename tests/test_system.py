"""Tests for the command collaborators."""

from unittest.mock import patch

import pytest

from omada_installer import system
from omada_installer.errors import CommandError, InvalidArgumentError
from omada_installer.system import CmdResult, run_cmd, validate_cidr


class TestRunCmd:

    def test_dry_run_does_not_execute(self):
        with patch("omada_installer.system.subprocess.run") as run:
            result = run_cmd(["apt-get", "install", "-y", "x.deb"], dry_run=True)
        run.assert_not_called()
        assert result.returncode == 0

    def test_captures_output(self):
        result = run_cmd(["sh", "-c", "echo hello; echo oops >&2"])
        assert result.stdout.strip() == "hello"
        assert result.stderr.strip() == "oops"

    def test_non_zero_exit_raises(self):
        with pytest.raises(CommandError) as exc:
            run_cmd(["sh", "-c", "echo broken >&2; exit 3"])
        assert exc.value.returncode == 3
        assert "broken" in exc.value.stderr

    def test_non_zero_exit_allowed_without_check(self):
        assert run_cmd(["sh", "-c", "exit 2"], check=False).returncode == 2

    def test_missing_executable(self):
        with pytest.raises(CommandError, match="not found"):
            run_cmd(["definitely-not-a-real-binary-omada"])

    def test_env_is_merged(self):
        result = run_cmd(["sh", "-c", 'echo "$OMADA_TEST_VALUE"'], env={"OMADA_TEST_VALUE": "42"})
        assert result.stdout.strip() == "42"


class TestCollaborators:

    def test_install_package_argv(self, tmp_path):
        with patch("omada_installer.system.run_cmd") as run:
            system.install_package(tmp_path / "omada.deb")
        argv = run.call_args.args[0]
        assert argv == ["apt-get", "install", "-y", str(tmp_path / "omada.deb")]
        assert run.call_args.kwargs["env"]["DEBIAN_FRONTEND"] == "noninteractive"

    def test_find_service(self):
        listing = "cron.service enabled enabled\ntpeap.service enabled\nomada.service disabled enabled\n"
        result = CmdResult(argv=[], returncode=0, stdout=listing, stderr="")
        with patch("omada_installer.system.run_cmd", return_value=result):
            assert system.find_service("omada") == "omada.service"

    def test_find_service_none(self):
        result = CmdResult(argv=[], returncode=0, stdout="cron.service enabled\n", stderr="")
        with patch("omada_installer.system.run_cmd", return_value=result):
            assert system.find_service("omada") is None

    def test_allow_port_from_argv(self):
        with patch("omada_installer.system.run_cmd") as run:
            system.allow_port_from("10.0.0.0/8", 8043)
        assert run.call_args.args[0] == [
            "ufw", "allow", "from", "10.0.0.0/8", "to", "any", "port", "8043", "proto", "tcp",
        ]

    def test_primary_ip(self):
        result = CmdResult(argv=[], returncode=0, stdout="192.168.1.10 172.17.0.1 \n", stderr="")
        with patch("omada_installer.system.run_cmd", return_value=result):
            assert system.primary_ip() == "192.168.1.10"


class TestCidr:

    @pytest.mark.parametrize("value,expected", [
        ("192.168.0.0/16", "192.168.0.0/16"),
        (" 10.1.2.3/8 ", "10.0.0.0/8"),
        ("2001:db8::/32", "2001:db8::/32"),
        ("192.168.1.5", "192.168.1.5/32"),
    ])
    def test_valid(self, value, expected):
        assert validate_cidr(value) == expected

    @pytest.mark.parametrize("value", ["", "10.0.0.0/33", "not-a-network", "300.1.1.1/8"])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError):
            validate_cidr(value)
