"""Pytest configuration and fixtures."""

import os
from pathlib import Path
from typing import List, Optional, Sequence, Set

import pytest

from autoswap.config import BackupConfig, LoggingConfig, ProvisionerConfig, SwapConfig
from autoswap.exceptions import CommandExecutionError
from autoswap.system_info import SystemInfo
from autoswap.types import CommandResult
from autoswap.units import GiB, KiB
from autoswap.utils.command import CommandExecutor

SWAPS_HEADER = "Filename\t\t\t\tType\t\tSize\t\tUsed\t\tPriority\n"


class FakeHost:
    """Temporary files standing in for /proc and /etc of a server."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.meminfo = root / "meminfo"
        self.swaps = root / "swaps"
        self.fstab = root / "fstab"
        self.swapfile = root / "swapfile"
        self.available_bytes = 100 * GiB
        self.set_memory(4 * GiB)
        self.swaps.write_text(SWAPS_HEADER)
        self.fstab.write_text("UUID=abcd / ext4 defaults 0 1\n")

    def set_memory(self, size_bytes: int) -> None:
        self.meminfo.write_text(
            f"MemTotal:       {size_bytes // KiB} kB\n"
            "MemFree:         1024000 kB\n"
            "MemAvailable:    2048000 kB\n"
        )

    def create_swapfile(self, size_bytes: int, active: bool = True) -> None:
        with open(self.swapfile, "wb") as f:
            f.truncate(size_bytes)
        if active:
            self.activate(str(self.swapfile))

    def activate(self, path: str) -> None:
        with open(self.swaps, "a") as f:
            f.write(f"{path}\tfile\t\t4194300\t\t0\t\t-2\n")

    def deactivate(self, path: str) -> None:
        lines = self.swaps.read_text().splitlines(keepends=True)
        self.swaps.write_text("".join(line for line in lines if not line.startswith(path + "\t")))

    def is_active(self) -> bool:
        return str(self.swapfile) in self.swaps.read_text()

    def state(self):
        """Snapshot of everything the provisioner may mutate."""
        exists = self.swapfile.exists()
        return (
            exists,
            self.swapfile.stat().st_size if exists else 0,
            self.is_active(),
            self.fstab.read_text(),
        )


class FakeExecutor(CommandExecutor):
    """Records commands and applies their effect to a FakeHost."""

    def __init__(self, host: FakeHost, fail_on: Optional[Set[str]] = None) -> None:
        super().__init__(use_sudo=False, dry_run=False)
        self.host = host
        self.fail_on = fail_on or set()
        self.commands: List[List[str]] = []

    @property
    def programs(self) -> List[str]:
        return [cmd[0] for cmd in self.commands]

    def execute(
        self,
        args: Sequence[str],
        needs_root: bool = False,
        check: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        argv = list(args)
        self.commands.append(argv)
        program = argv[0]

        if program in self.fail_on:
            if check:
                raise CommandExecutionError(f"Command failed: {' '.join(argv)}")
            return CommandResult(False, "", "failed", 1)

        if program == "swapon":
            self.host.activate(argv[-1])
        elif program == "swapoff":
            self.host.deactivate(argv[-1])
        elif program == "rm":
            Path(argv[-1]).unlink(missing_ok=True)
        elif program == "fallocate":
            with open(argv[-1], "wb") as f:
                f.truncate(int(argv[2]))
        elif program == "dd":
            options = dict(a.split("=", 1) for a in argv[1:])
            with open(options["of"], "wb") as f:
                f.truncate(int(options["count"]))
        elif program == "chmod":
            os.chmod(argv[-1], int(argv[1], 8))

        return CommandResult(True, "", "", 0)


class FakeSystemInfo(SystemInfo):
    """SystemInfo with free disk space taken from the fake host."""

    def __init__(self, config: SwapConfig, host: FakeHost) -> None:
        super().__init__(config)
        self.host = host
        self.is_root = True
        self.disk_queries = 0

    def available_disk_bytes(self) -> int:
        self.disk_queries += 1
        return self.host.available_bytes

    def check_requirements(self) -> List[str]:
        return []


@pytest.fixture
def host(tmp_path: Path) -> FakeHost:
    """Create a fake host with 4 GiB of RAM and no swap."""
    root = tmp_path / "host"
    root.mkdir()
    return FakeHost(root)


@pytest.fixture
def test_config(host: FakeHost, tmp_path: Path) -> ProvisionerConfig:
    """Create test configuration pointing at the fake host."""
    return ProvisionerConfig(
        swap=SwapConfig(
            path=host.swapfile,
            fstab=host.fstab,
            meminfo=host.meminfo,
            swaps=host.swaps,
            mount_point=host.root,
        ),
        backup=BackupConfig(directory=tmp_path / "backups"),
        logging=LoggingConfig(colors=False),
    )


@pytest.fixture
def executor(host: FakeHost) -> FakeExecutor:
    return FakeExecutor(host)


@pytest.fixture
def system(test_config: ProvisionerConfig, host: FakeHost) -> FakeSystemInfo:
    return FakeSystemInfo(test_config.swap, host)


@pytest.fixture
def path_without_fallocate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """PATH holding every tool autoswap uses except fallocate."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for name in ("dd", "mkswap", "swapon", "swapoff", "sudo"):
        tool = bin_dir / name
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir))
    return bin_dir
