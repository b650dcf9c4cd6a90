"""Tests for command execution."""

import sys

import pytest

from autoswap.exceptions import CommandExecutionError
from autoswap.utils.command import CommandExecutor


def test_execute_success():
    result = CommandExecutor().execute([sys.executable, "-c", "print('ok')"])

    assert result.success
    assert result.stdout.strip() == "ok"
    assert result.return_code == 0


def test_execute_failure_raises():
    with pytest.raises(CommandExecutionError, match="boom"):
        CommandExecutor().execute(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )


def test_execute_failure_without_check():
    result = CommandExecutor().execute([sys.executable, "-c", "raise SystemExit(2)"], check=False)

    assert not result.success
    assert result.return_code == 2


def test_missing_program():
    result = CommandExecutor().execute(["autoswap-no-such-program"], check=False)

    assert not result.success
    assert result.return_code == -1


def test_timeout():
    with pytest.raises(CommandExecutionError, match="timed out"):
        CommandExecutor().execute(
            [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
        )


def test_dry_run_does_not_execute(tmp_path):
    target = tmp_path / "created"
    executor = CommandExecutor(dry_run=True)

    result = executor.execute(["touch", str(target)], needs_root=True)

    assert result.success
    assert result.stdout.startswith("[DRY RUN] touch")
    assert not target.exists()


def test_sudo_prefix_only_for_root_commands():
    executor = CommandExecutor(use_sudo=True, dry_run=True)

    assert executor.execute(["swapon", "/swapfile"], needs_root=True).stdout == (
        "[DRY RUN] sudo -n swapon /swapfile"
    )
    assert executor.execute(["cat", "/proc/swaps"]).stdout == "[DRY RUN] cat /proc/swaps"


def test_check_command_available():
    assert CommandExecutor.check_command_available(sys.executable)
    assert not CommandExecutor.check_command_available("autoswap-no-such-program")
