"""Swap file provisioning."""

from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

import structlog

from autoswap.allocation import FileAllocator
from autoswap.config import ProvisionerConfig
from autoswap.exceptions import (
    CommandExecutionError,
    PersistenceError,
    SwapDegradedError,
    ValidationError,
)
from autoswap.fstab import FstabManager, swap_entry
from autoswap.system_info import SystemInfo
from autoswap.types import SwapAction, SwapPlan, SwapReport, SwapState
from autoswap.units import format_iec
from autoswap.utils.command import CommandExecutor
from autoswap.utils.file import FileManager
from autoswap.utils.validation import Validator

logger = structlog.get_logger()


def projected_free_bytes(available_bytes: int, current_bytes: int, memory_bytes: int) -> int:
    """Free space left after swapping the old file for one of ``memory_bytes``."""
    return available_bytes + current_bytes - memory_bytes


def plan_recreation(state: SwapState, available_bytes: int, min_free_bytes: int) -> SwapPlan:
    """Decide whether a wrongly sized swap file may be recreated.

    Args:
        state: Memory and swap snapshot
        available_bytes: Free space on the swap filesystem right now
        min_free_bytes: Space that must remain free afterwards

    Returns:
        A RECREATE plan, or ABORT when the floor would be breached
    """
    projected = projected_free_bytes(available_bytes, state.current_bytes, state.memory_bytes)
    action = SwapAction.ABORT if projected < min_free_bytes else SwapAction.RECREATE
    return SwapPlan(
        action=action,
        target_bytes=state.memory_bytes,
        available_bytes=available_bytes,
        projected_free_bytes=projected,
        min_free_bytes=min_free_bytes,
    )


class SwapProvisioner:
    """Keep one swap file, sized like physical memory, active and persistent."""

    def __init__(
        self,
        config: ProvisionerConfig,
        system: Optional[SystemInfo] = None,
        executor: Optional[CommandExecutor] = None,
        allocator: Optional[FileAllocator] = None,
        fstab: Optional[FstabManager] = None,
    ) -> None:
        """Initialize swap provisioner.

        Args:
            config: Configuration object
            system: Source of memory, swap and disk state
            executor: Runs swapon, mkswap and friends
            allocator: Creates the new swap file
            fstab: Registers the swap file for boot
        """
        self.config = config
        self.swap_path: Path = config.swap.path
        self.dry_run = config.swap.dry_run

        self.system = system or SystemInfo(config.swap)
        self.executor = executor or CommandExecutor(
            use_sudo=not self.system.is_root, dry_run=self.dry_run
        )
        self.allocator = allocator or FileAllocator(self.executor)
        self.fstab = fstab or FstabManager(
            config.swap.fstab, FileManager(config.backup.directory), dry_run=self.dry_run
        )

    def preflight_checks(self) -> bool:
        """Check configuration and host requirements.

        Returns:
            True if all checks pass
        """
        logger.info("Starting preflight checks")
        issues: List[str] = []
        issues.extend(self.config.validate_config())
        issues.extend(self.system.check_requirements())

        if issues:
            for issue in issues:
                logger.error("preflight_issue", issue=issue)
            return False

        if not self.dry_run and not Validator.validate_path_writable(self.config.swap.fstab):
            logger.warning(
                "fstab is not writable, swap will not persist",
                file=str(self.config.swap.fstab),
            )

        logger.debug("system_info", **self.system.to_dict())
        logger.info("Preflight checks passed")
        return True

    def ensure_swap(self) -> SwapReport:
        """Make sure a correctly sized swap file is active and persistent.

        Returns:
            Report of what was done. An ABORT report means the disk space
            check refused to act and nothing was changed.

        Raises:
            SystemStateError: If memory, swap or disk state is unreadable
            SwapDegradedError: If recreation failed after the old swap was
                touched
        """
        state = self.system.snapshot()
        logger.info("Detected physical RAM size", size=format_iec(state.memory_bytes))

        if state.size_matches:
            return self._keep(state)

        logger.info("Checking available disk space before recreation")
        available = self.system.available_disk_bytes()
        plan = plan_recreation(state, available, self.config.swap.min_free_bytes)

        if plan.action == SwapAction.ABORT:
            return self._abort(state, plan)

        logger.info(
            "Disk space check passed",
            available=format_iec(available),
            projected=format_iec(plan.projected_free_bytes),
        )
        if state.exists:
            logger.warning(
                "Swap file size does not match RAM",
                path=str(self.swap_path),
                current=format_iec(state.current_bytes),
                expected=format_iec(state.memory_bytes),
            )
        else:
            logger.info("Swap file not found", path=str(self.swap_path))

        try:
            self._recreate(state)
        except KeyboardInterrupt:
            logger.error(
                "Interrupted during swap recreation, swap may be missing",
                path=str(self.swap_path),
            )
            raise

        warnings = self._persist()
        logger.info(
            "Swap configuration completed",
            path=str(self.swap_path),
            size=format_iec(state.memory_bytes),
            persisted=not warnings,
        )
        return SwapReport(
            action=SwapAction.RECREATE,
            path=str(self.swap_path),
            memory_bytes=state.memory_bytes,
            previous_bytes=state.current_bytes,
            swap_bytes=state.memory_bytes,
            persisted=not warnings,
            dry_run=self.dry_run,
            projected_free_bytes=plan.projected_free_bytes,
            min_free_bytes=plan.min_free_bytes,
            warnings=tuple(warnings),
        )

    def _keep(self, state: SwapState) -> SwapReport:
        """Fast path for a swap file that already has the right size."""
        logger.info(
            "Swap file already has the correct size",
            path=str(self.swap_path),
            size=format_iec(state.current_bytes),
        )
        action = SwapAction.UNCHANGED
        if not state.active:
            logger.warning("Swap file is not active, activating", path=str(self.swap_path))
            self.executor.execute(["swapon", str(self.swap_path)], needs_root=True)
            action = SwapAction.ACTIVATE

        warnings: Sequence[str] = []
        if len(self._fstab_entries()) != 1:
            logger.warning("Swap file is not registered for boot", path=str(self.swap_path))
            warnings = self._persist()

        logger.info("Swap is already configured correctly")
        return SwapReport(
            action=action,
            path=str(self.swap_path),
            memory_bytes=state.memory_bytes,
            previous_bytes=state.current_bytes,
            swap_bytes=state.current_bytes,
            persisted=not warnings,
            dry_run=self.dry_run,
            warnings=tuple(warnings),
        )

    def _fstab_entries(self) -> List[str]:
        try:
            return self.fstab.entries_for(self.swap_path)
        except OSError as e:
            logger.warning("Cannot read fstab", file=str(self.config.swap.fstab), error=str(e))
            return []

    def _abort(self, state: SwapState, plan: SwapPlan) -> SwapReport:
        logger.error(
            "Not enough disk space to create new swap file, aborting",
            required_free=format_iec(plan.min_free_bytes),
            swap_size=format_iec(plan.target_bytes),
            would_leave=format_iec(plan.projected_free_bytes),
            available=format_iec(plan.available_bytes),
        )
        return SwapReport(
            action=SwapAction.ABORT,
            path=str(self.swap_path),
            memory_bytes=state.memory_bytes,
            previous_bytes=state.current_bytes,
            swap_bytes=state.current_bytes,
            persisted=False,
            dry_run=self.dry_run,
            projected_free_bytes=plan.projected_free_bytes,
            min_free_bytes=plan.min_free_bytes,
        )

    def _recreate(self, state: SwapState) -> None:
        """Replace the swap file. Every failure here leaves swap degraded."""
        path = str(self.swap_path)
        logger.info("Recreating swap file", path=path)

        if state.active:
            logger.info("Deactivating existing swap", path=path)
            self._run_step("swapoff", ["swapoff", path])

        if state.exists:
            logger.info("Deleting old swap file", path=path)
            self._run_step("delete", ["rm", "-f", path])

        try:
            self.allocator.allocate(self.swap_path, state.memory_bytes)
        except (CommandExecutionError, ValidationError) as e:
            self._degraded("allocate", e)

        logger.info("Setting permissions", mode="600")
        self._run_step("chmod", ["chmod", "600", path])

        logger.info("Formatting as swap", path=path)
        self._run_step("mkswap", ["mkswap", path])

        logger.info("Activating new swap", path=path)
        self._run_step("swapon", ["swapon", path])

    def _persist(self) -> Sequence[str]:
        """Register the swap file for boot. Failure only warns."""
        logger.info("Updating fstab for persistence", file=str(self.config.swap.fstab))
        try:
            self.fstab.register_swap(self.swap_path)
        except PersistenceError as e:
            entry = swap_entry(self.swap_path)
            logger.warning(
                "Swap is active but will not survive a reboot",
                error=str(e),
                manual_entry=entry,
            )
            return [f"{e}. Add '{entry}' to {self.config.swap.fstab} manually."]
        return []

    def _run_step(self, step: str, args: List[str]) -> None:
        try:
            self.executor.execute(args, needs_root=True)
        except CommandExecutionError as e:
            self._degraded(step, e)

    def _degraded(self, step: str, error: Exception) -> NoReturn:
        logger.error(
            "Swap recreation failed, system currently has degraded or no swap",
            step=step,
            path=str(self.swap_path),
            error=str(error),
        )
        raise SwapDegradedError(step, str(error), error) from error
