"""Command execution utilities."""

import shlex
import shutil
import subprocess
from typing import Optional, Sequence

import structlog

from autoswap.exceptions import CommandExecutionError
from autoswap.types import CommandResult

logger = structlog.get_logger()


class CommandExecutor:
    """Execute system commands with proper error handling."""

    def __init__(self, use_sudo: bool = False, dry_run: bool = False) -> None:
        """Initialize command executor.

        Args:
            use_sudo: Whether to prepend sudo to commands requiring root
            dry_run: If True, only log commands without executing
        """
        self.use_sudo = use_sudo
        self.dry_run = dry_run

    def execute(
        self,
        args: Sequence[str],
        needs_root: bool = False,
        check: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Execute command with optional sudo.

        Args:
            args: Program and arguments, never passed through a shell
            needs_root: Whether command requires root privileges
            check: Whether to raise exception on failure
            timeout: Command timeout in seconds, None waits forever

        Returns:
            CommandResult with execution details

        Raises:
            CommandExecutionError: If command fails and check=True
        """
        argv = list(args)
        if needs_root and self.use_sudo:
            argv = ["sudo", "-n"] + argv
        cmd = shlex.join(argv)

        if self.dry_run:
            logger.info("dry_run_command", command=cmd)
            return CommandResult(True, f"[DRY RUN] {cmd}", "", 0)

        logger.debug("running_command", command=cmd)
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            error_msg = f"Command timed out after {timeout}s: {cmd}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)
        except OSError as e:
            error_msg = f"Command execution failed: {cmd}\nError: {e}"
            if check:
                raise CommandExecutionError(error_msg) from e
            return CommandResult(False, "", error_msg, -1)

        cmd_result = CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout,
            stderr=result.stderr,
            return_code=result.returncode,
        )

        if check and not cmd_result.success:
            raise CommandExecutionError(
                f"Command failed: {cmd}\nError: {result.stderr.strip()}"
            )

        return cmd_result

    @staticmethod
    def check_command_available(command: str) -> bool:
        """Check if command is available on system."""
        return shutil.which(command) is not None
