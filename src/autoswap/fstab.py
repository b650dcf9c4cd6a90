"""Persistent swap registration in the filesystem table."""

from pathlib import Path
from typing import List

import structlog

from autoswap.exceptions import PersistenceError
from autoswap.utils.file import FileManager

logger = structlog.get_logger()


def swap_entry(swap_path: Path) -> str:
    """The fstab line that activates ``swap_path`` at boot."""
    return f"{swap_path} none swap sw 0 0"


def _references(line: str, swap_path: Path) -> bool:
    fields = line.split()
    if not fields or fields[0].startswith("#"):
        return False
    return fields[0] == str(swap_path)


def entries_for(content: str, swap_path: Path) -> List[str]:
    """Lines of ``content`` that mount ``swap_path``."""
    return [line for line in content.splitlines() if _references(line, swap_path)]


def render(content: str, swap_path: Path) -> str:
    """Drop every entry for ``swap_path`` and append exactly one fresh entry."""
    kept = [line for line in content.splitlines() if not _references(line, swap_path)]
    kept.append(swap_entry(swap_path))
    return "\n".join(kept) + "\n"


class FstabManager:
    """Keep a single swap entry in the fstab file."""

    def __init__(self, fstab: Path, file_manager: FileManager, dry_run: bool = False) -> None:
        """Initialize fstab manager.

        Args:
            fstab: Path to the filesystem table
            file_manager: File manager used for backups and writes
            dry_run: If True, only log the change
        """
        self.fstab = fstab
        self.file_manager = file_manager
        self.dry_run = dry_run

    def entries_for(self, swap_path: Path) -> List[str]:
        return entries_for(self.file_manager.read_file(self.fstab), swap_path)

    def register_swap(self, swap_path: Path) -> None:
        """Make ``swap_path`` the only fstab entry for that file.

        Raises:
            PersistenceError: If the table could not be rewritten. The
                previous content is restored when a backup exists.
        """
        try:
            current = self.file_manager.read_file(self.fstab)
        except OSError as e:
            raise PersistenceError(f"Cannot read {self.fstab}: {e}") from e

        stale = entries_for(current, swap_path)
        if stale:
            logger.info("Removing old swap entries", file=str(self.fstab), count=len(stale))

        if self.dry_run:
            logger.info("dry_run_fstab", file=str(self.fstab), entry=swap_entry(swap_path))
            return

        try:
            backup = self.file_manager.backup_file(self.fstab)
        except OSError as e:
            raise PersistenceError(f"Cannot back up {self.fstab}: {e}") from e

        try:
            self.file_manager.write_file(self.fstab, render(current, swap_path))
        except OSError as e:
            if backup is not None:
                try:
                    self.file_manager.restore_file(Path(backup.backup_path), self.fstab)
                except OSError as restore_error:
                    logger.error(
                        "fstab restore failed",
                        backup=backup.backup_path,
                        error=str(restore_error),
                    )
            raise PersistenceError(f"Cannot update {self.fstab}: {e}") from e

        logger.info("fstab updated", file=str(self.fstab), entry=swap_entry(swap_path))
