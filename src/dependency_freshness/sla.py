"""Service-level thresholds for unconsumed commit age and their evaluation."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError
from .models import Sla, SlaStatus

DEFAULT_KEY = "[Default]"
DEFAULT_ORG = "dotnet"
DEFAULT_SLA = Sla(warning_unconsumed_commit_age=5, fail_unconsumed_commit_age=7)

_SECONDS_PER_DAY = 24 * 60 * 60


def elapsed_days(age: datetime, now: datetime) -> float:
    """Return the fractional number of days between ``age`` and ``now``."""
    return (now - age).total_seconds() / _SECONDS_PER_DAY


class SlaOptions:
    """Per-repository SLA table with a mandatory ``[Default]`` entry.

    Keys are ``"{org}/{repo}"``; lookups by repository short name prepend the
    configured organization.
    """

    def __init__(
        self,
        repositories: Optional[Mapping[str, Sla]] = None,
        org: str = DEFAULT_ORG,
    ) -> None:
        self.org = org
        self.repositories: Dict[str, Sla] = {DEFAULT_KEY: DEFAULT_SLA}
        if repositories:
            self.repositories.update(repositories)

    def get_for_repo(self, repo_short_name: Optional[str]) -> Sla:
        if repo_short_name:
            sla = self.repositories.get(f"{self.org}/{repo_short_name}")
            if sla is not None:
                return sla
        return self.repositories[DEFAULT_KEY]


def _parse_sla(key: str, value: Any) -> Sla:
    if not isinstance(value, dict):
        raise ConfigurationError(f"SLA entry '{key}' must be an object.")

    try:
        warning = int(value["warningUnconsumedCommitAge"])
        fail = int(value["failUnconsumedCommitAge"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"SLA entry '{key}' requires integer 'warningUnconsumedCommitAge' and "
            "'failUnconsumedCommitAge' values."
        ) from exc

    if warning < 0 or fail < 0:
        raise ConfigurationError(f"SLA entry '{key}' must not contain negative day counts.")

    return Sla(warning_unconsumed_commit_age=warning, fail_unconsumed_commit_age=fail)


def load_sla_options(path: Optional[Path]) -> SlaOptions:
    """Load SLA options from a JSON file, or return the defaults when ``path`` is ``None``.

    Expected shape::

        {
            "org": "dotnet",
            "repositories": {
                "[Default]": {"warningUnconsumedCommitAge": 5, "failUnconsumedCommitAge": 7},
                "dotnet/runtime": {"warningUnconsumedCommitAge": 3, "failUnconsumedCommitAge": 5}
            }
        }

    Raises:
        ConfigurationError: If the file cannot be read or is malformed.
    """
    if path is None:
        return SlaOptions()

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Unable to read SLA configuration '{path}': {exc}") from exc
    except ValueError as exc:
        raise ConfigurationError(f"SLA configuration '{path}' is not valid JSON.") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"SLA configuration '{path}' must contain a JSON object.")

    org = raw.get("org", DEFAULT_ORG)
    if not isinstance(org, str) or not org.strip():
        raise ConfigurationError(f"SLA configuration '{path}' has an invalid 'org' value.")

    entries = raw.get("repositories", {})
    if not isinstance(entries, dict):
        raise ConfigurationError(f"SLA configuration '{path}' has an invalid 'repositories' value.")

    repositories = {key: _parse_sla(key, value) for key, value in entries.items()}
    return SlaOptions(repositories=repositories, org=org.strip())


class SlaEvaluator:
    """Classifies commit age against the SLA of the owning repository."""

    def __init__(self, options: Optional[SlaOptions] = None) -> None:
        self._options = options or SlaOptions()

    def classify(
        self,
        repo_short_name: Optional[str],
        age: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> SlaStatus:
        """Return the SLA status of a dependency whose commit became stale at ``age``.

        Elapsed time is measured in fractional days. ``Fail`` wins over
        ``Warning`` when both thresholds are met.
        """
        if age is None:
            return SlaStatus.UNKNOWN

        now = now or datetime.now(timezone.utc)
        days = elapsed_days(age, now)
        sla = self._options.get_for_repo(repo_short_name)

        if days >= sla.fail_unconsumed_commit_age:
            return SlaStatus.FAIL
        if days >= sla.warning_unconsumed_commit_age:
            return SlaStatus.WARNING
        return SlaStatus.OK
