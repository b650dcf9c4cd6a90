"""Tests for the CLI entry point."""

from types import SimpleNamespace

import pytest
from conftest import FakeExecutor, FakeSystemInfo

from autoswap import main as cli
from autoswap.provisioner import SwapProvisioner
from autoswap.types import SwapAction, SwapReport
from autoswap.units import GiB


@pytest.fixture
def patched_provisioner(monkeypatch, host):
    """Make run() build provisioners wired to the fake host."""
    executors = []

    def build(config):
        executor = FakeExecutor(host, fail_on=getattr(host, "fail_on", set()))
        executors.append(executor)
        return SwapProvisioner(
            config, system=FakeSystemInfo(config.swap, host), executor=executor
        )

    monkeypatch.setattr(cli, "SwapProvisioner", build)
    return executors


def test_exit_code_for_abort():
    report = SwapReport(
        action=SwapAction.ABORT, path="/swapfile", memory_bytes=1, previous_bytes=0, swap_bytes=0
    )
    assert cli.exit_code_for(report) == cli.EXIT_ABORTED


def test_run_creates_swap(test_config, host, patched_provisioner):
    assert cli.run(test_config) == cli.EXIT_OK
    assert host.is_active()


def test_run_aborts_on_low_disk(test_config, host, patched_provisioner, capsys):
    host.available_bytes = 10 * GiB

    assert cli.run(test_config) == cli.EXIT_ABORTED
    assert "not enough free disk space" in capsys.readouterr().err


def test_run_reports_degraded_swap(test_config, host, patched_provisioner, capsys):
    host.create_swapfile(2 * GiB)
    host.fail_on = {"swapon"}

    assert cli.run(test_config) == cli.EXIT_DEGRADED
    assert "reduced or no swap" in capsys.readouterr().err


def test_run_warns_when_fstab_not_updated(test_config, host, patched_provisioner, capsys):
    test_config.swap.fstab = host.root / "missing" / "fstab"

    assert cli.run(test_config) == cli.EXIT_OK
    assert "manually" in capsys.readouterr().err


def test_main_exits_with_config_error(test_config, host, patched_provisioner, monkeypatch):
    test_config.swap.mount_point = host.root / "nowhere"
    monkeypatch.setattr(cli, "ProvisionerConfig", SimpleNamespace(from_env=lambda: test_config))
    monkeypatch.setattr(cli, "configure_logging", lambda config: None)

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == cli.EXIT_CONFIG


def test_main_exits_cleanly(test_config, host, patched_provisioner, monkeypatch):
    host.create_swapfile(4 * GiB)
    monkeypatch.setattr(cli, "ProvisionerConfig", SimpleNamespace(from_env=lambda: test_config))
    monkeypatch.setattr(cli, "configure_logging", lambda config: None)

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == cli.EXIT_OK
    assert patched_provisioner[0].commands == []
