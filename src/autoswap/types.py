"""Type definitions for autoswap."""

from enum import Enum
from typing import NamedTuple, Tuple


class SwapAction(str, Enum):
    """Outcome of a swap planning decision."""

    UNCHANGED = "unchanged"
    ACTIVATE = "activate"
    RECREATE = "recreate"
    ABORT = "abort"


class CommandResult(NamedTuple):
    """Result of command execution."""

    success: bool
    stdout: str
    stderr: str
    return_code: int = 0


class RollbackPoint(NamedTuple):
    """Backup information for rollback."""

    original_path: str
    backup_path: str
    timestamp: str


class SwapState(NamedTuple):
    """Snapshot of memory and swap file state at decision time."""

    memory_bytes: int
    current_bytes: int
    exists: bool
    active: bool
    tolerance_bytes: int

    @property
    def size_matches(self) -> bool:
        return abs(self.memory_bytes - self.current_bytes) < self.tolerance_bytes


class SwapPlan(NamedTuple):
    """What the provisioner decided to do and why."""

    action: SwapAction
    target_bytes: int
    available_bytes: int = 0
    projected_free_bytes: int = 0
    min_free_bytes: int = 0


class SwapReport(NamedTuple):
    """Result of a single ensure_swap run."""

    action: SwapAction
    path: str
    memory_bytes: int
    previous_bytes: int
    swap_bytes: int
    persisted: bool = True
    dry_run: bool = False
    projected_free_bytes: int = 0
    min_free_bytes: int = 0
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """True unless the safety gate refused to act."""
        return self.action != SwapAction.ABORT

    @property
    def changed(self) -> bool:
        return self.action in (SwapAction.ACTIVATE, SwapAction.RECREATE)
