"""Tests for configuration loading."""

import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dependency_freshness.config import DEFAULT_GITHUB_API_URL, DEFAULT_MAESTRO_BASE_URL, load_config
from dependency_freshness.errors import AuthenticationError, ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "MAESTRO_TOKEN",
        "MAESTRO_BASE_URL",
        "GITHUB_TOKEN",
        "GITHUB_API_URL",
        "FRESHNESS_EXCLUDED_REPOS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_config_with_defaults(monkeypatch):
    """Verify defaults are applied and the short repository form is expanded."""
    monkeypatch.setenv("MAESTRO_TOKEN", " secret ")

    config = load_config(repository="dotnet/sdk", channel_id=548)

    assert config.repository == "https://github.com/dotnet/sdk"
    assert config.maestro_token == "secret"
    assert config.maestro_base_url == DEFAULT_MAESTRO_BASE_URL
    assert config.github_api_url == DEFAULT_GITHUB_API_URL
    assert config.github_token is None
    assert config.max_workers == 4
    assert config.excluded_repositories == ("dotnet/blazor",)
    assert config.sla_options.get_for_repo("sdk").fail_unconsumed_commit_age == 7


def test_load_config_reads_environment_overrides(monkeypatch):
    """Verify endpoint, token and exclusion overrides come from the environment."""
    monkeypatch.setenv("MAESTRO_TOKEN", "secret")
    monkeypatch.setenv("MAESTRO_BASE_URL", "https://maestro.internal")
    monkeypatch.setenv("GITHUB_TOKEN", "gh")
    monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example/api/v3")
    monkeypatch.setenv("FRESHNESS_EXCLUDED_REPOS", "dotnet/arcade, dotnet/extensions")

    config = load_config(repository="https://github.com/dotnet/sdk", channel_id=1, max_workers=8)

    assert config.maestro_base_url == "https://maestro.internal"
    assert config.github_token == "gh"
    assert config.github_api_url == "https://ghe.example/api/v3"
    assert config.max_workers == 8
    assert config.excluded_repositories == ("dotnet/blazor", "dotnet/arcade", "dotnet/extensions")


def test_load_config_missing_token_raises_authentication_error():
    """Verify the Maestro token is required."""
    with pytest.raises(AuthenticationError):
        load_config(repository="dotnet/sdk", channel_id=1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"repository": " ", "channel_id": 1},
        {"repository": "dotnet/sdk", "channel_id": 0},
        {"repository": "dotnet/sdk", "channel_id": 1, "max_workers": 0},
    ],
)
def test_load_config_rejects_invalid_arguments(monkeypatch, kwargs):
    """Verify invalid arguments raise ConfigurationError."""
    monkeypatch.setenv("MAESTRO_TOKEN", "secret")

    with pytest.raises(ConfigurationError):
        load_config(**kwargs)


def test_load_config_rejects_malformed_exclusions(monkeypatch):
    """Verify exclusion entries must be 'owner/repo'."""
    monkeypatch.setenv("MAESTRO_TOKEN", "secret")
    monkeypatch.setenv("FRESHNESS_EXCLUDED_REPOS", "blazor")

    with pytest.raises(ConfigurationError):
        load_config(repository="dotnet/sdk", channel_id=1)
