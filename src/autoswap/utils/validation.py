"""Input validation utilities."""

import os
from pathlib import Path
from typing import List

from autoswap.exceptions import ValidationError


class Validator:
    """Validate inputs and system state."""

    @staticmethod
    def validate_size(size_bytes: int) -> None:
        """Validate a swap file size.

        Args:
            size_bytes: Requested size in bytes

        Raises:
            ValidationError: If size is not a positive number of bytes
        """
        if size_bytes <= 0:
            raise ValidationError(f"Invalid swap size: {size_bytes}. Must be positive")

    @staticmethod
    def validate_swap_path(path: Path) -> List[str]:
        """Validate the location of the swap file.

        Args:
            path: Swap file path to validate

        Returns:
            List of validation error messages
        """
        errors: List[str] = []

        if not path.is_absolute():
            errors.append(f"Swap path must be absolute: {path}")
            return errors

        if path == Path("/"):
            errors.append("Swap path cannot be the filesystem root")
            return errors

        if not path.parent.is_dir():
            errors.append(f"Swap directory does not exist: {path.parent}")

        if path.is_dir():
            errors.append(f"Swap path is a directory: {path}")
        elif path.is_symlink():
            errors.append(f"Swap path is a symlink: {path}")

        return errors

    @staticmethod
    def validate_path_writable(path: Path) -> bool:
        """Check if path is writable.

        Args:
            path: Path to check

        Returns:
            True if path is writable
        """
        try:
            if path.exists():
                return path.is_file() and os.access(path, os.W_OK)
            parent = path.parent
            return parent.exists() and os.access(parent, os.W_OK)
        except OSError:
            return False
