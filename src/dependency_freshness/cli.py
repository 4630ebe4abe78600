"""Command-line argument parsing for the dependency freshness analyzer."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a freshness report.

    Returns:
        Parsed CLI arguments containing repository, channel id, worker count,
        optional SLA configuration path and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="dependency-freshness",
        description=(
            "Report how far behind their branch tips the direct dependencies "
            "of a repository's latest build are, classified against SLAs."
        ),
    )

    parser.add_argument(
        "--repo",
        required=True,
        help="Consuming repository as a GitHub URL or 'owner/repo'.",
    )
    parser.add_argument(
        "--channel-id",
        type=_positive_int,
        required=True,
        help="Maestro channel id to take the latest build from.",
    )
    parser.add_argument(
        "--max-workers",
        type=_positive_int,
        default=4,
        help="Maximum number of concurrent GitHub comparisons (default: 4).",
    )
    parser.add_argument(
        "--sla-config",
        type=Path,
        default=None,
        help="JSON file with per-repository SLA thresholds.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
