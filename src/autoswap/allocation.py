"""Swap file allocation strategies."""

from pathlib import Path
from typing import List, Optional, Sequence

import structlog

from autoswap.exceptions import AllocationError, CommandExecutionError
from autoswap.units import format_iec
from autoswap.utils.command import CommandExecutor
from autoswap.utils.validation import Validator

logger = structlog.get_logger()


class AllocationStrategy:
    """Create a file of an exact size."""

    name = "base"

    def __init__(self, executor: CommandExecutor) -> None:
        self.executor = executor

    def allocate(self, path: Path, size_bytes: int) -> None:
        """Create ``path`` with exactly ``size_bytes`` bytes.

        Raises:
            CommandExecutionError: If the file could not be created
        """
        raise NotImplementedError


class FallocateStrategy(AllocationStrategy):
    """Reserve blocks without writing data."""

    name = "fallocate"

    def allocate(self, path: Path, size_bytes: int) -> None:
        self.executor.execute(
            ["fallocate", "-l", str(size_bytes), str(path)], needs_root=True
        )


class ZeroFillStrategy(AllocationStrategy):
    """Write zeroes byte by byte. Slow, but works on every filesystem."""

    name = "dd"

    def allocate(self, path: Path, size_bytes: int) -> None:
        self.executor.execute(
            [
                "dd",
                "if=/dev/zero",
                f"of={path}",
                "bs=1M",
                f"count={size_bytes}",
                "iflag=count_bytes",
                "status=none",
            ],
            needs_root=True,
        )


class FileAllocator:
    """Try allocation strategies in order until one succeeds."""

    def __init__(
        self,
        executor: CommandExecutor,
        strategies: Optional[Sequence[AllocationStrategy]] = None,
    ) -> None:
        """Initialize allocator.

        Args:
            executor: Command executor used for cleanup between attempts
            strategies: Strategies to try, fastest first
        """
        self.executor = executor
        if strategies is None:
            strategies = [FallocateStrategy(executor), ZeroFillStrategy(executor)]
        self.strategies: List[AllocationStrategy] = list(strategies)

    def allocate(self, path: Path, size_bytes: int) -> str:
        """Allocate a file of ``size_bytes`` at ``path``.

        Returns:
            Name of the strategy that succeeded

        Raises:
            AllocationError: If every strategy failed
        """
        Validator.validate_size(size_bytes)
        failures: List[str] = []

        for strategy in self.strategies:
            logger.info(
                "Allocating swap file",
                path=str(path),
                size=format_iec(size_bytes),
                method=strategy.name,
            )
            try:
                strategy.allocate(path, size_bytes)
            except CommandExecutionError as e:
                failures.append(f"{strategy.name}: {e}")
                logger.warning(
                    "Allocation failed, trying next method",
                    method=strategy.name,
                    error=str(e),
                )
                self.executor.execute(["rm", "-f", str(path)], needs_root=True, check=False)
                continue

            logger.info("File allocation successful", method=strategy.name)
            return strategy.name

        raise AllocationError(
            f"Could not allocate {format_iec(size_bytes)} at {path}: " + "; ".join(failures)
        )
