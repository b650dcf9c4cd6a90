"""Utility modules for autoswap."""

from autoswap.utils.command import CommandExecutor
from autoswap.utils.file import FileManager
from autoswap.utils.validation import Validator

__all__ = ["CommandExecutor", "FileManager", "Validator"]
