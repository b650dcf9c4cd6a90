"""Custom exceptions for autoswap."""

from typing import Optional


class ProvisionerError(Exception):
    """Base exception for all provisioner errors."""

    pass


class ConfigurationError(ProvisionerError):
    """Raised when configuration is invalid."""

    pass


class ValidationError(ProvisionerError):
    """Raised when validation fails."""

    pass


class SystemStateError(ProvisionerError):
    """Raised when memory, swap or disk state cannot be read."""

    pass


class CommandExecutionError(ProvisionerError):
    """Raised when command execution fails."""

    pass


class AllocationError(CommandExecutionError):
    """Raised when no allocation strategy could create the swap file."""

    pass


class PersistenceError(ProvisionerError):
    """Raised when the swap table could not be updated."""

    pass


class SwapDegradedError(ProvisionerError):
    """Raised when recreation fails after the old swap was removed.

    The host may be running with less swap than before, or none at all.
    """

    def __init__(self, step: str, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Swap recreation failed at '{step}': {message}")
        self.step = step
        self.cause = cause
