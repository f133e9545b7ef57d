#!/usr/bin/env python3
"""
DNS Updater - Command Line Interface

Main entry point for the DNS Updater CLI.
"""

import argparse
import logging
import sys
from typing import Dict

from rich.console import Console
from rich.table import Table

from ..core.models import CycleReport
from ..core.record_store import RecordStore
from ..core.updater import UpdateOrchestrator
from ..exceptions import ConfigurationError
from ..plugins.registry import PluginRegistry

console = Console()
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dns-updater",
        description="DNS Updater - Keep DNS records in sync with the public IP address",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once", "-o", action="store_true", help="Update the configured DNS once"
    )
    mode.add_argument(
        "--service",
        "-s",
        action="store_true",
        help="Run as a service, updating at the 'service_timeout' interval",
    )

    parser.add_argument(
        "--config",
        "-c",
        default="config.yaml",
        help="Configuration file path (default: config.yaml)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.once or args.service):
        parser.print_help()
        sys.exit(0)

    config_logger({}, verbose=args.verbose)

    try:
        store = RecordStore.from_file(args.config)
        config_logger(store.config, verbose=args.verbose)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        registry = PluginRegistry.from_config(
            store.provider_names(),
            store.get_resolver_priority_list(),
            store.config.get("plugins"),
        )
        orchestrator = UpdateOrchestrator(store, registry, single=args.once)

        if args.once:
            report = orchestrator.run_once()
            display_report(report)
            sys.exit(0 if report.success else 1)

        run_service(orchestrator)
        sys.exit(0)

    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


def run_service(orchestrator: UpdateOrchestrator):
    """Run recurring cycles until interrupted."""
    console.print(
        f"[green]DNS updater running, checking every {orchestrator.timeout:g} seconds[/green]"
    )
    try:
        report = orchestrator.start()
        if report is not None:
            display_report(report)
        orchestrator.wait()
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted, stopping DNS updater[/yellow]")
    finally:
        orchestrator.stop()


def display_report(report: CycleReport):
    """Display a summary of one update cycle."""
    resolved = report.resolved.to_dict()
    if resolved:
        for key, address in resolved.items():
            console.print(f"[blue]Public {key}: {address}[/blue]")
    else:
        console.print("[yellow]No public address resolved[/yellow]")

    if not report.results:
        console.print("[green]No changes required - DNS records are up to date[/green]")
        return

    table = Table(title="DNS Update Summary")
    table.add_column("Record", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Provider", style="white")
    table.add_column("Address", style="white")
    table.add_column("Status", style="white")

    for result in report.results:
        status = (
            "[green]updated[/green]"
            if result.ok
            else f"[red]{result.status.value}: {result.error}[/red]"
        )
        table.add_row(
            result.record.record,
            result.record.record_type,
            result.record.provider,
            result.address or "-",
            status,
        )

    console.print(table)
    console.print(
        f"[blue]Successfully updated {len(report.updated)}/{len(report.results)} records[/blue]"
    )


def config_logger(config: Dict, verbose: bool = False):
    """
    Configure logging, replacing any earlier configuration.

    Raises:
        ConfigurationError: If the logging section, its level or its file is invalid
    """
    logging_config = config.get("logging", None)
    handlers = [logging.StreamHandler(sys.stdout)]
    log_level = "INFO"

    if logging_config:
        if not isinstance(logging_config, dict):
            raise ConfigurationError("The logging section must be a mapping")

        log_level = str(logging_config.get("level", "INFO")).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"Invalid logging level: {log_level}")

        log_file = logging_config.get("file")
        if log_file:
            try:
                handlers.append(logging.FileHandler(log_file))
            except OSError as e:
                raise ConfigurationError(f"Unable to open log file {log_file}: {e}")

    logging.basicConfig(
        level=logging.DEBUG if verbose else log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


if __name__ == "__main__":
    main()
