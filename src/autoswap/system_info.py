"""Live memory, swap and disk state for autoswap."""

import os
import re
from pathlib import Path
from typing import Dict, List

from autoswap.config import SwapConfig
from autoswap.exceptions import SystemStateError
from autoswap.types import SwapState
from autoswap.units import KiB
from autoswap.utils.command import CommandExecutor

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")

# fallocate is optional, allocation falls back to dd without it
REQUIRED_COMMANDS = ("dd", "mkswap", "swapon", "swapoff")


class SystemInfo:
    """Read host state that swap decisions depend on."""

    def __init__(self, config: SwapConfig) -> None:
        """Initialize system information detection.

        Args:
            config: Swap settings naming the state sources to read
        """
        self.config = config
        self.is_root = os.geteuid() == 0

    def memory_bytes(self) -> int:
        """Total physical memory in bytes.

        Raises:
            SystemStateError: If the memory info source is unreadable
        """
        try:
            with open(self.config.meminfo, encoding="utf-8") as f:
                for line in f:
                    if line.startswith("MemTotal:"):
                        fields = line.split()
                        # Reported in kB, meaning KiB
                        total = int(fields[1]) * KiB
                        if total <= 0:
                            raise ValueError(f"non-positive MemTotal {fields[1]}")
                        return total
        except (OSError, IndexError, ValueError) as e:
            raise SystemStateError(
                f"Cannot read memory size from {self.config.meminfo}: {e}"
            ) from e

        raise SystemStateError(f"No MemTotal entry in {self.config.meminfo}")

    def swap_file_size(self, path: Path) -> int:
        """Size of the swap file in bytes, 0 if it does not exist."""
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return 0
        except OSError as e:
            raise SystemStateError(f"Cannot stat {path}: {e}") from e

    def active_swaps(self) -> List[str]:
        """Names of the swap areas the kernel currently uses."""
        try:
            with open(self.config.swaps, encoding="utf-8") as f:
                lines = f.read().splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SystemStateError(f"Cannot read {self.config.swaps}: {e}") from e

        # First line is the "Filename Type Size Used Priority" header.
        # The kernel escapes whitespace and backslashes as \ooo octal.
        return [
            _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), line.split()[0])
            for line in lines[1:]
            if line.strip()
        ]

    def is_swap_active(self, path: Path) -> bool:
        """Check whether the swap file is in use by the kernel.

        The kernel lists the canonical path, so symlinks in ``path`` are
        resolved before comparing.
        """
        active = self.active_swaps()
        return str(path) in active or os.path.realpath(path) in active

    def available_disk_bytes(self) -> int:
        """Free bytes on the configured filesystem available to non-root users.

        Raises:
            SystemStateError: If the filesystem cannot be queried
        """
        try:
            stats = os.statvfs(self.config.disk_path)
        except OSError as e:
            raise SystemStateError(
                f"Cannot query free space on {self.config.disk_path}: {e}"
            ) from e
        return stats.f_bavail * stats.f_frsize

    def snapshot(self) -> SwapState:
        """Capture everything needed to decide whether swap must change."""
        memory = self.memory_bytes()
        path = self.config.path
        current = self.swap_file_size(path)
        return SwapState(
            memory_bytes=memory,
            current_bytes=current,
            exists=path.exists(),
            active=self.is_swap_active(path),
            tolerance_bytes=memory * self.config.tolerance_percent // 100,
        )

    def check_requirements(self) -> List[str]:
        """Check if system meets minimum requirements."""
        issues: List[str] = []

        if not self.is_root and not CommandExecutor.check_command_available("sudo"):
            issues.append("No root access available (need root or sudo)")

        for command in REQUIRED_COMMANDS:
            if not CommandExecutor.check_command_available(command):
                issues.append(f"Required command not found: {command}")

        if not self.config.meminfo.exists():
            issues.append(f"Memory info not found at {self.config.meminfo}")

        return issues

    def to_dict(self) -> Dict[str, str]:
        """Convert system info to dictionary."""
        return {
            "swap_path": str(self.config.path),
            "meminfo": str(self.config.meminfo),
            "swaps": str(self.config.swaps),
            "disk_path": str(self.config.disk_path),
            "is_root": str(self.is_root),
        }
