"""Formatting helpers for dependency freshness reporting.

This module provides utilities for:
- Formatting commit ages as elapsed days.
- Building a human-readable report with one line per dependency and its
  SLA classification.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from .models import DependencyFreshnessEntry, FreshnessReport, RateLimit
from .sla import SlaEvaluator, elapsed_days

UNKNOWN = "unknown"


def format_age(age: Optional[datetime], now: datetime) -> str:
    """Format the time elapsed since ``age`` as days with one decimal.

    Returns ``"unknown"`` when ``age`` is ``None``.
    """
    if age is None:
        return UNKNOWN

    return f"{elapsed_days(age, now):.1f} days"


def format_distance(distance: Optional[int]) -> str:
    if distance is None:
        return UNKNOWN
    return f"{distance} commits"


def format_rate_limit(rate_limit: Optional[RateLimit]) -> str:
    if rate_limit is None:
        return f"GitHub rate limit: {UNKNOWN}"
    reset = rate_limit.resetTime.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    return (
        f"GitHub rate limit: {rate_limit.remaining}/{rate_limit.limit} remaining, "
        f"resets at {reset}"
    )


def _entry_lines(
    entry: DependencyFreshnessEntry,
    evaluator: SlaEvaluator,
    now: datetime,
) -> List[str]:
    status = evaluator.classify(entry.short_name, entry.commit_age, now=now)
    name = entry.short_name or entry.build.azureDevOpsRepository or f"build {entry.build.id}"

    lines = [
        f"{name} [{status.value.upper()}]",
        f"   Build: {entry.build.id} ({entry.build.azureDevOpsBuildNumber or UNKNOWN})",
        f"   Commit: {entry.build.commit}",
        f"   Behind by: {format_distance(entry.commit_distance)}",
        f"   Unconsumed for: {format_age(entry.commit_age, now)}",
        f"   Resolution: {entry.state.value}",
    ]
    if entry.error:
        lines.append(f"   Error: {entry.error}")
    lines.append(f"   Commit URL: {entry.commit_url or UNKNOWN}")
    lines.append(f"   Build URL: {entry.build_url or UNKNOWN}")
    return lines


def generate_report(
    report: FreshnessReport,
    evaluator: SlaEvaluator,
    now: Optional[datetime] = None,
) -> str:
    """Generate a human-readable freshness report.

    Args:
        report: Analyzer output for one repository and channel.
        evaluator: SLA evaluator used to classify each entry.
        now: Evaluation time; defaults to the current UTC time.

    Returns:
        Formatted multi-line text report.
    """
    now = now or datetime.now(timezone.utc)
    root = report.root

    lines = [
        f"Repository: {root.gitHubRepository or root.azureDevOpsRepository or UNKNOWN}",
        f"Latest build: {root.id} (commit {root.commit})",
        "Incoming Dependency Freshness",
        "",
    ]

    if not report.entries:
        lines.append("No tracked dependencies.")
    for entry in report.entries:
        lines.extend(_entry_lines(entry, evaluator, now))
        lines.append("")

    lines.append(format_rate_limit(report.rate_limit))
    return "\n".join(lines)
