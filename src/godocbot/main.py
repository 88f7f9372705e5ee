#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import sys
import threading
from dataclasses import replace
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from godocbot.app import run_controller
from godocbot.config import (
    ConfigurationError,
    ControllerConfig,
    configure_logging,
    get_controller_config,
    resolve_log_level,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


_stop = threading.Event()


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve godoc previews of GitHub pull requests tracked in Kubernetes"
    )
    parser.add_argument(
        "--enable-pr-sync",
        action="store_true",
        default=None,
        help="Periodically refresh the head commit of every tracked pull request",
    )
    parser.add_argument(
        "--sync-interval",
        type=float,
        help="Seconds between pull request refreshes (default: 30)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Worker threads per controller (default: 2)",
    )
    parser.add_argument(
        "--namespace",
        type=str,
        help="Only watch this namespace (default: all namespaces)",
    )
    parser.add_argument(
        "--install-crds",
        action="store_true",
        default=None,
        help="Create the PullRequest CustomResourceDefinition if it is missing",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level, e.g. DEBUG or INFO (default: $GODOCBOT_LOG_LEVEL or INFO)",
    )
    return parser.parse_args(list(argv))


def _build_config(args: argparse.Namespace) -> ControllerConfig:
    config = get_controller_config()
    overrides = {
        "enable_pr_sync": args.enable_pr_sync,
        "sync_interval_seconds": args.sync_interval,
        "workers": args.workers,
        "namespace": args.namespace,
        "install_crds": args.install_crds,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})
    if config.sync_interval_seconds <= 0:
        raise ValueError("Sync interval must be positive")
    if config.workers < 1:
        raise ValueError("Workers must be at least 1")
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
        configure_logging(level=resolve_log_level(parsed_args.log_level))
        config = _build_config(parsed_args)
    except (ValueError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        run_controller(_stop, config=config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def stop_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Stop every loop on SIGINT (Ctrl+C) or SIGTERM."""
    print("\nStopping godocbot")
    _stop.set()


def cli() -> None:
    load_dotenv()
    signal(SIGINT, stop_handler)
    signal(SIGTERM, stop_handler)
    main()


if __name__ == "__main__":
    cli()
