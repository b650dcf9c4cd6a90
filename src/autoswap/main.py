"""CLI entry point for autoswap.

Settings come from the environment (``SWAP_*``, ``LOG_*``, ``BACKUP_*``)
or a ``.env`` file.
"""

import sys
from typing import NoReturn

import structlog
from pydantic import ValidationError as SettingsValidationError

from autoswap import __version__
from autoswap.config import ProvisionerConfig
from autoswap.exceptions import ConfigurationError, ProvisionerError, SwapDegradedError
from autoswap.logging_setup import configure_logging
from autoswap.provisioner import SwapProvisioner
from autoswap.types import SwapAction, SwapReport

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_ABORTED = 3
EXIT_DEGRADED = 4
EXIT_INTERRUPTED = 130


def exit_code_for(report: SwapReport) -> int:
    """Map a provisioning report to a process exit code."""
    if report.action == SwapAction.ABORT:
        return EXIT_ABORTED
    return EXIT_OK


def run(config: ProvisionerConfig) -> int:
    """Provision swap once and return the exit code."""
    if config.swap.dry_run:
        print("🔍 DRY RUN MODE - No changes will be applied\n")

    provisioner = SwapProvisioner(config)

    if not provisioner.preflight_checks():
        raise ConfigurationError("Preflight checks failed")

    try:
        report = provisioner.ensure_swap()
    except SwapDegradedError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        print("⚠️  This host may now be running with reduced or no swap.", file=sys.stderr)
        return EXIT_DEGRADED

    if report.action == SwapAction.ABORT:
        print("\n⚠️  Swap left unchanged: not enough free disk space.", file=sys.stderr)
    for warning in report.warnings:
        print(f"⚠️  {warning}", file=sys.stderr)

    return exit_code_for(report)


def main() -> NoReturn:
    """Main entry point for CLI.

    Raises:
        SystemExit: Always exits with appropriate code
    """
    if not sys.platform.startswith("linux"):
        print("Error: This tool only supports Linux systems", file=sys.stderr)
        sys.exit(EXIT_ERROR)

    try:
        config = ProvisionerConfig.from_env()
    except SettingsValidationError as e:
        print(f"Error: invalid configuration\n{e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG)

    configure_logging(config.logging)
    logger.info("Starting automatic swap file configuration", version=__version__)

    try:
        sys.exit(run(config))

    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)

    except ConfigurationError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(EXIT_CONFIG)

    except ProvisionerError as e:
        print(f"\n❌ Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
