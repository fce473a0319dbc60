#!/usr/bin/env python3
"""Entry point for modemppp."""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

# Ensure src/ is on sys.path for local imports when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from modemppp.core.config import load_local_config, load_network_configuration, resolve_layout  # noqa: E402
from modemppp.core.credentials import load_credentials  # noqa: E402
from modemppp.core.logging import setup_logging  # noqa: E402
from modemppp.core.models import ModemInterfaceSnapshot  # noqa: E402
from modemppp.ppp.driver import ReconfigurationDriver  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""

    parser = argparse.ArgumentParser(
        description=(
            "Provision pppd peer files, chat scripts and secrets for USB cellular modems "
            "from a declarative interface inventory."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=ROOT_DIR / "config" / "interfaces.yml",
        help="Path to the interface inventory file (YAML)",
    )
    parser.add_argument(
        "--credentials",
        type=Path,
        default=ROOT_DIR / "config" / "credentials.yml",
        help="Path to the carrier credentials file (YAML)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Install the /etc/ppp tree below this directory. Overrides config/local.yml.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging for troubleshooting. Overrides config/local.yml logging.level.",
    )

    subcommands = parser.add_subparsers(dest="command", title="commands")

    apply_parser = subcommands.add_parser(
        "apply",
        help="Write ppp configuration for every modem interface in the inventory",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which interfaces would be configured without touching the filesystem",
    )
    apply_parser.add_argument(
        "--summary-dir",
        type=Path,
        default=None,
        help="Directory where a JSON summary of the run is written",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logging(cli_level=logging.DEBUG if args.debug else None)
    logger.info("modemppp run started.")

    if args.command is None:
        parser.print_help()
        logger.info("modemppp run finished.")
        return 0

    if args.command == "apply":
        exit_code = _run_apply(args, logger)
        logger.info("modemppp run finished.")
        return exit_code

    parser.error(f"Unknown command: {args.command}")
    return 2


def _run_apply(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Execute the provisioning workflow for the configured interfaces."""

    config_path = Path(args.config)
    logger.debug("loading interfaces from %s", config_path)
    try:
        credentials = load_credentials(Path(args.credentials), logger)
        configuration = load_network_configuration(config_path, credentials, logger)
    except Exception:
        logger.exception("Failed to load interface configuration.")
        return 1

    kinds = Counter(
        "modem" if isinstance(snapshot, ModemInterfaceSnapshot) else "other"
        for snapshot in configuration.modified_interfaces
    )
    for kind, count in sorted(kinds.items()):
        logger.debug("%s interfaces selected=%d", kind, count)

    if args.dry_run:
        logger.info(
            "Dry run requested. Interfaces to process: %s",
            [snapshot.interface_name for snapshot in configuration.modified_interfaces],
        )
        return 0

    local_config = load_local_config(ROOT_DIR / "config" / "local.yml", logger)
    layout = resolve_layout(args.root, local_config, logger)
    driver = ReconfigurationDriver(layout=layout, logger=logger)
    result = driver.apply(configuration)

    for interface_result in result.results:
        logger.info(
            "outcome=%s", interface_result.outcome.value, extra={"interface": interface_result.interface_name}
        )

    if args.summary_dir:
        run_id = _timestamp()
        result.save(Path(args.summary_dir), run_id, run_id, logger)

    return 0 if result.ok else 1


def _timestamp() -> str:
    from datetime import datetime, timezone

    return datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")


if __name__ == "__main__":
    raise SystemExit(main())
