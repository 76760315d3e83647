#!/usr/bin/env python3
"""
Periodic system health monitor.

Resolves the runtime profile from MONITOR_ENV (or ENVIRONMENT), then samples
CPU, memory and disk usage on a fixed cadence until interrupted.

Usage:
    MONITOR_ENV=development python monitor.py
    python monitor.py --collector system
    python monitor.py            # defaults to production
"""
import sys
import argparse
import logging

from health_metrics.collectors import COLLECTORS
from health_metrics.config import resolve, profile_source_from_env
from health_metrics.errors import FatalStartupError
from cli.display import run_health_monitor

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Periodic System Health Monitor")

    # Profile selection
    parser.add_argument(
        "-p", "--profile",
        default=None,
        help="Runtime profile: production or development "
             "(default: $MONITOR_ENV, then $ENVIRONMENT, then production)"
    )

    # Metric source
    parser.add_argument(
        "-c", "--collector",
        choices=sorted(COLLECTORS),
        default="simulated",
        help="Where metrics come from (default: simulated)"
    )

    # Level of detail
    parser.add_argument(
        "-s", "--simple",
        action="store_true",
        help="Use the concise one-line record even for verbose profiles"
    )

    parser.add_argument(
        "--no-color",
        dest="use_color",
        action="store_false",
        help="Disable ANSI colors"
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for the CLI application."""
    args = parse_args(argv)

    profile_source = args.profile if args.profile is not None else profile_source_from_env()
    config = resolve(profile_source)

    logging.basicConfig(
        level=logging.DEBUG if config.debug_mode else logging.INFO,
        format=LOG_FORMAT
    )

    try:
        return run_health_monitor(
            config,
            collector_name=args.collector,
            detailed_view=False if args.simple else None,
            use_color=args.use_color
        )
    except FatalStartupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
