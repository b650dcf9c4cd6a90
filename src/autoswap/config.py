"""Configuration management for autoswap."""

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autoswap.units import GiB
from autoswap.utils.validation import Validator

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class SwapConfig(BaseSettings):
    """Swap file settings."""

    path: Path = Field(default=Path("/swapfile"), description="Swap file location")
    fstab: Path = Field(default=Path("/etc/fstab"))
    meminfo: Path = Field(default=Path("/proc/meminfo"))
    swaps: Path = Field(default=Path("/proc/swaps"))
    mount_point: Optional[Path] = Field(
        default=None, description="Filesystem checked for free space, swap directory if unset"
    )
    min_free_bytes: int = Field(
        default=30 * GiB, ge=0, description="Free space that must remain after recreation"
    )
    tolerance_percent: int = Field(default=1, ge=1, le=50)
    dry_run: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="SWAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def disk_path(self) -> Path:
        """Directory whose filesystem must keep the free space floor."""
        return self.mount_point or self.path.parent


class BackupConfig(BaseSettings):
    """Backup configuration."""

    directory: Path = Field(default=Path("/root/swap_backups"))

    model_config = SettingsConfigDict(
        env_prefix="BACKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: object) -> None:
        """Initialize backup configuration."""
        super().__init__(**data)
        # Use user home if not root
        if "directory" not in self.model_fields_set and os.geteuid() != 0:
            self.directory = Path.home() / "swap_backups"


class LoggingConfig(BaseSettings):
    """Console and file presentation of log output."""

    level: str = Field(default="INFO")
    file: Optional[Path] = Field(default=None)
    colors: bool = Field(default=True)
    json_output: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> str:
        """Accept level names in any case."""
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


class ProvisionerConfig(BaseSettings):
    """Main configuration container."""

    swap: SwapConfig = Field(default_factory=SwapConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def from_env(cls) -> "ProvisionerConfig":
        """Create configuration from environment variables."""
        return cls(
            swap=SwapConfig(),
            backup=BackupConfig(),
            logging=LoggingConfig(),
        )

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues: List[str] = []
        issues.extend(Validator.validate_swap_path(self.swap.path))

        disk_path = self.swap.disk_path
        if not disk_path.is_dir():
            issues.append(f"Mount point not found: {disk_path}")
        elif self.swap.path.parent.is_dir() and (
            os.stat(disk_path).st_dev != os.stat(self.swap.path.parent).st_dev
        ):
            issues.append(
                f"Mount point {disk_path} is not on the filesystem holding {self.swap.path}"
            )

        return issues
