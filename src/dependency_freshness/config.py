"""Configuration parsing and validation for the dependency freshness analyzer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .errors import AuthenticationError, ConfigurationError
from .repo_reference import DEFAULT_EXCLUDED_REPOSITORIES, normalize_repository_argument
from .sla import SlaOptions, load_sla_options

DEFAULT_MAESTRO_BASE_URL = "https://maestro.dot.net"
DEFAULT_GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the analyzer."""

    repository: str
    channel_id: int
    maestro_token: str
    maestro_base_url: str = DEFAULT_MAESTRO_BASE_URL
    github_api_url: str = DEFAULT_GITHUB_API_URL
    github_token: Optional[str] = None
    max_workers: int = 4
    timeout_seconds: int = 30
    excluded_repositories: Tuple[str, ...] = DEFAULT_EXCLUDED_REPOSITORIES
    sla_options: SlaOptions = field(default_factory=SlaOptions, compare=False)


def _excluded_repositories_from_env() -> Tuple[str, ...]:
    extra = [
        name.strip()
        for name in os.getenv("FRESHNESS_EXCLUDED_REPOS", "").split(",")
        if name.strip()
    ]
    for name in extra:
        if name.count("/") != 1:
            raise ConfigurationError(
                f"Invalid entry '{name}' in FRESHNESS_EXCLUDED_REPOS: expected 'owner/repo'."
            )
    return DEFAULT_EXCLUDED_REPOSITORIES + tuple(extra)


def load_config(
    repository: str,
    channel_id: int,
    max_workers: int = 4,
    sla_path: Optional[Path] = None,
) -> Config:
    """Build and validate application configuration.

    Args:
        repository: GitHub URL or ``owner/repo`` of the consuming repository.
        channel_id: Maestro channel the latest build is looked up on.
        max_workers: Upper bound on concurrent GitHub comparisons.
        sla_path: Optional JSON file with per-repository SLA overrides.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If any argument or environment value is invalid.
        AuthenticationError: If ``MAESTRO_TOKEN`` is not configured.
    """
    if not repository or not repository.strip():
        raise ConfigurationError("Invalid value for 'repository': expected a non-empty value.")

    if channel_id <= 0:
        raise ConfigurationError("Invalid value for 'channel_id': expected an integer greater than 0.")

    if max_workers <= 0:
        raise ConfigurationError("Invalid value for 'max_workers': expected an integer greater than 0.")

    maestro_token: str = os.getenv("MAESTRO_TOKEN", "").strip()
    if not maestro_token:
        raise AuthenticationError(
            "Missing required Maestro API token. "
            "Set the 'MAESTRO_TOKEN' environment variable before running the analyzer."
        )

    # GitHub works anonymously, with a much smaller quota.
    github_token = os.getenv("GITHUB_TOKEN", "").strip() or None

    return Config(
        repository=normalize_repository_argument(repository),
        channel_id=channel_id,
        maestro_token=maestro_token,
        maestro_base_url=os.getenv("MAESTRO_BASE_URL", "").strip() or DEFAULT_MAESTRO_BASE_URL,
        github_api_url=os.getenv("GITHUB_API_URL", "").strip() or DEFAULT_GITHUB_API_URL,
        github_token=github_token,
        max_workers=max_workers,
        excluded_repositories=_excluded_repositories_from_env(),
        sla_options=load_sla_options(sla_path),
    )
