"""autoswap - keep a RAM-sized swap file on Linux servers."""

__version__ = "1.0.0"
__license__ = "MIT"

from autoswap.exceptions import (
    ConfigurationError,
    PersistenceError,
    ProvisionerError,
    SwapDegradedError,
    SystemStateError,
    ValidationError,
)
from autoswap.provisioner import SwapProvisioner
from autoswap.system_info import SystemInfo
from autoswap.types import SwapAction, SwapReport

__all__ = [
    "SwapProvisioner",
    "SystemInfo",
    "SwapAction",
    "SwapReport",
    "ProvisionerError",
    "ConfigurationError",
    "PersistenceError",
    "SwapDegradedError",
    "SystemStateError",
    "ValidationError",
]
