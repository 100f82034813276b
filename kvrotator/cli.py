"""
kvrotator CLI: entry point for scheduled runs.

Usage:
    kvrotator run                        # Run the operation from the environment
    kvrotator run --operation rotate     # Override the operation
    kvrotator run --resources db,api     # Limit to some configuration ids
    kvrotator validate                   # Check the configuration file
    kvrotator version                    # Show version

Secret values are never accepted as flags. Set KVROTATOR_SECRET_VALUE_1
(or the INPUT_SECRET-VALUE-1 workflow input) instead.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from kvrotator.config import RunSettings, get_settings
from kvrotator.errors import OperationError, RotatorError
from kvrotator.operations import OperationRegistry, OperationReport
from kvrotator.output import (
    render_inspection_table,
    set_output,
    write_csr_artifacts,
    write_summary,
)
from kvrotator.policy import Clock, utc_now
from kvrotator.resources import load_configuration, parse_resource_filter
from kvrotator.rotators import RotatorRegistry
from kvrotator.vault.clients import VaultClientCache

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kvrotator",
        description="kvrotator: rotate and inspect Key Vault secrets and certificates.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # run
    run_parser = subparsers.add_parser("run", help="Run an operation over the configuration")
    run_parser.add_argument(
        "--operation",
        help="nothing, initialize, rotate, request-csr, inspect or manual-secret",
    )
    run_parser.add_argument("--resources", help="Comma-separated configuration ids, or '*'")
    run_parser.add_argument("--config", type=str, help="Configuration file (JSON or YAML)")
    run_parser.add_argument(
        "--force", action="store_true", default=None, help="Ignore the rotation window"
    )
    run_parser.add_argument(
        "--what-if",
        action="store_true",
        default=None,
        help="Evaluate without writing to the vault",
    )
    run_parser.add_argument("--output-dir", type=str, help="Where CSR files are written")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check the configuration file")
    validate_parser.add_argument("--config", type=str, help="Configuration file (JSON or YAML)")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from kvrotator import __version__

        print(f"kvrotator {__version__}")
        return 0

    if args.command == "run":
        return _cmd_run(args)
    elif args.command == "validate":
        return _cmd_validate(args)
    else:
        parser.print_help()
        return 0


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def _settings_from_args(args: argparse.Namespace) -> RunSettings:
    return get_settings().with_overrides(
        operation=getattr(args, "operation", None),
        resources=getattr(args, "resources", None),
        configuration=Path(args.config) if args.config else None,
        output_dir=Path(args.output_dir) if getattr(args, "output_dir", None) else None,
        force=getattr(args, "force", None),
        what_if=getattr(args, "what_if", None),
        log_level="DEBUG" if getattr(args, "verbose", False) else None,
    )


def _default_backends() -> VaultClientCache:
    from azure.identity import DefaultAzureCredential

    from kvrotator.vault.key_vault import KeyVaultBackend

    credential = DefaultAzureCredential()
    return VaultClientCache(lambda name: KeyVaultBackend(name, credential))


def execute(
    settings: RunSettings,
    backends: VaultClientCache,
    clock: Clock = utc_now,
) -> OperationReport:
    """Load the configuration and run the selected operation.

    Raises:
        ConfigurationError: The configuration file is missing or malformed
        OperationError: Unknown operation, or a fatal operation precondition
    """
    rotation = settings.rotation
    rotators = RotatorRegistry.default(rotation, backends, clock)
    operations = OperationRegistry.default(rotation, rotators)

    operation = operations.resolve(settings.operation)
    if operation is None:
        raise OperationError(
            f"Unknown operation '{settings.operation}' "
            f"(expected one of: {', '.join(operations.names())})"
        )

    configuration = load_configuration(settings.configuration)
    targets = parse_resource_filter(settings.resources)
    logger.info(
        "Running '%s' on %s%s",
        operation.name,
        ",".join(targets) or "*",
        " (what-if)" if settings.what_if else "",
    )
    return operation.run(configuration, targets)


def publish(report: OperationReport, settings: RunSettings) -> None:
    """Hand the report to the output sink."""
    set_output("rotated-resources", ",".join(report.rotated))

    if report.operation == "inspect":
        write_summary(render_inspection_table(report.inspection_rows()))

    write_csr_artifacts(settings.output_dir, report.artifacts)

    if report.skipped:
        logger.warning("Skipped unsupported resource(s): %s", ", ".join(report.skipped))
    if report.errors:
        logger.error("Resource(s) with errors: %s", ", ".join(report.errors))


def _cmd_run(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    _configure_logging(settings.log_level)

    try:
        backends = _default_backends()
        report = execute(settings, backends)
        publish(report, settings)
    except RotatorError as e:
        logger.error("%s", e)
        return 1
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    _configure_logging(settings.log_level)

    try:
        configuration = load_configuration(settings.configuration)
    except RotatorError as e:
        logger.error("%s", e)
        return 1

    supported = RotatorRegistry.default(settings.rotation, VaultClientCache(_no_backend))
    print(f"{settings.configuration}: {len(configuration.resources)} resource(s)")
    for configuration_id, resource in configuration.resources.items():
        resource_type = resource.type or ""
        status = "ok" if resource_type in supported else "unsupported type"
        print(f"  {configuration_id:<30} {resource_type:<32} {status}")
    return 0


def _no_backend(vault_name: str) -> NoReturn:
    raise OperationError(f"validate does not connect to vaults ('{vault_name}')")


if __name__ == "__main__":
    sys.exit(main())
