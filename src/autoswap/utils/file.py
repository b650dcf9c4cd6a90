"""File management utilities."""

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from autoswap.types import RollbackPoint


class FileManager:
    """Manage file operations with backup and restore."""

    def __init__(self, backup_dir: Path) -> None:
        """Initialize file manager.

        Args:
            backup_dir: Directory for storing backups
        """
        self.backup_dir = backup_dir

    def _ensure_backup_dir(self) -> None:
        """Create backup directory if it doesn't exist."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def backup_file(self, filepath: Path) -> Optional[RollbackPoint]:
        """Create timestamped backup of file.

        Args:
            filepath: Path to file to backup

        Returns:
            Rollback point for the backup or None if source doesn't exist
        """
        if not filepath.exists():
            return None

        self._ensure_backup_dir()
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = self.backup_dir / f"{filepath.name}.{timestamp}"

        shutil.copy2(filepath, backup_path)

        point = RollbackPoint(
            original_path=str(filepath),
            backup_path=str(backup_path),
            timestamp=timestamp,
        )
        return point

    def restore_file(self, backup_path: Path, original_path: Path) -> None:
        """Restore file from backup.

        Args:
            backup_path: Path to backup file
            original_path: Path where file should be restored
        """
        if not backup_path.exists():
            raise FileNotFoundError(f"Backup not found: {backup_path}")

        shutil.copy2(backup_path, original_path)

    def read_file(self, filepath: Path) -> str:
        """Read file content, empty if the file does not exist."""
        if not filepath.exists():
            return ""
        with open(filepath, encoding="utf-8") as f:
            return f.read()

    def write_file(self, filepath: Path, content: str) -> None:
        """Replace file content atomically.

        The new content goes to a temporary file in the same directory
        which is then renamed over the target, so readers never see a
        half-written file. Permissions of an existing file are kept.

        Args:
            filepath: Path to file
            content: Content to write
        """
        mode = filepath.stat().st_mode & 0o7777 if filepath.exists() else 0o644

        fd, tmp_name = tempfile.mkstemp(dir=filepath.parent, prefix=f".{filepath.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, filepath)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
