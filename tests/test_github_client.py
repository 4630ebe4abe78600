"""Tests for the GitHub compare client with mocked HTTP."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dependency_freshness.errors import ApiError, DataValidationError, NotFoundError, RateLimitError
from dependency_freshness.github_client import GitHubClient
from dependency_freshness.models import RateLimit

RESET_EPOCH = 1767225600  # 2026-01-01T00:00:00Z


def _rate_headers(remaining: int = 4999, limit: int = 5000) -> dict:
    return {
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(RESET_EPOCH),
    }


def _response(status_code: int, payload=None, text: str = "", headers: dict | None = None):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.headers = headers if headers is not None else _rate_headers()
    response.json.return_value = payload if payload is not None else {}
    return response


def _compare_payload() -> dict:
    return {
        "ahead_by": 2,
        "behind_by": 0,
        "commits": [
            {
                "sha": "c1",
                "parents": [{"sha": "base"}],
                "commit": {"committer": {"date": "2026-01-02T03:04:05Z"}},
            },
            {
                "sha": "c2",
                "parents": [{"sha": "c1"}, {"sha": "side"}],
                "commit": {"committer": {"date": "2026-01-03T00:00:00Z"}},
            },
        ],
    }


def test_compare_requests_base_dot_dot_dot_head():
    """Verify the compare path uses base...head with branch slashes preserved."""
    client = GitHubClient(token="gh-token")
    client._session.get = Mock(return_value=_response(200, payload=_compare_payload()))

    client.compare("dotnet", "runtime", "base", "release/9.0")

    url = client._session.get.call_args.args[0]
    assert url == "https://api.github.com/repos/dotnet/runtime/compare/base...release/9.0"
    assert client._session.headers["Authorization"] == "token gh-token"


def test_compare_parses_commits_in_provider_order():
    """Verify ahead_by, parents and committer dates are parsed."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(200, payload=_compare_payload()))

    comparison = client.compare("dotnet", "runtime", "base", "main")

    assert comparison.aheadBy == 2
    assert [commit.sha for commit in comparison.commits] == ["c1", "c2"]
    assert comparison.commits[1].parentShas == ("c1", "side")
    assert comparison.commits[1].first_parent == "c1"
    assert comparison.commits[0].committerDate == datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_compare_records_rate_limit_snapshot():
    """Verify every response updates the last API info."""
    client = GitHubClient()
    assert client.get_last_api_info() is None

    client._session.get = Mock(return_value=_response(200, payload=_compare_payload(), headers=_rate_headers(remaining=42)))
    client.compare("dotnet", "runtime", "base", "main")

    info = client.get_last_api_info()
    assert info.rateLimit == RateLimit(
        limit=5000,
        remaining=42,
        resetTime=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


def test_compare_404_raises_not_found():
    """Verify an unknown repository or commit raises NotFoundError."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(404, text="Not Found"))

    with pytest.raises(NotFoundError):
        client.compare("dotnet", "gone", "base", "main")


def test_compare_422_is_reported_as_not_found():
    """Verify GitHub's 'No common ancestor / unknown ref' 422 maps to NotFoundError."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(422, text="No commit found for SHA"))

    with pytest.raises(NotFoundError) as exc_info:
        client.compare("dotnet", "runtime", "unknown", "main")

    assert exc_info.value.status_code == 422


def test_compare_exhausted_quota_raises_rate_limit_without_retry():
    """Verify an exhausted quota fails fast with the reset time."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(403, text="rate limited", headers=_rate_headers(remaining=0)))

    with patch("dependency_freshness.rest.time.sleep") as sleep_mock:
        with pytest.raises(RateLimitError) as exc_info:
            client.compare("dotnet", "runtime", "base", "main")

    assert exc_info.value.reset_time == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert client._session.get.call_count == 1
    sleep_mock.assert_not_called()
    assert client.get_last_api_info().rateLimit.remaining == 0


def test_compare_forbidden_with_quota_left_is_api_error():
    """Verify a 403 that is not quota exhaustion is a plain ApiError."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(403, text="forbidden"))

    with pytest.raises(ApiError) as exc_info:
        client.compare("dotnet", "runtime", "base", "main")

    assert not isinstance(exc_info.value, (RateLimitError, NotFoundError))


def test_compare_rejects_payload_without_ahead_by():
    """Verify malformed compare payloads raise DataValidationError."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(200, payload={"commits": []}))

    with pytest.raises(DataValidationError):
        client.compare("dotnet", "runtime", "base", "main")


def _malformed_date_payload() -> dict:
    payload = _compare_payload()
    payload["commits"][1]["commit"]["committer"]["date"] = "not-a-date"
    return payload


def _non_object_commit_payload() -> dict:
    payload = _compare_payload()
    payload["commits"][0] = "c1"
    return payload


def _non_object_parent_payload() -> dict:
    payload = _compare_payload()
    payload["commits"][0]["parents"] = ["base"]
    return payload


def _non_object_committer_payload() -> dict:
    payload = _compare_payload()
    payload["commits"][0]["commit"] = "c1"
    return payload


@pytest.mark.parametrize(
    "payload_factory",
    [
        _malformed_date_payload,
        _non_object_commit_payload,
        _non_object_parent_payload,
        _non_object_committer_payload,
    ],
)
def test_compare_rejects_malformed_commits(payload_factory):
    """Verify unparseable dates and non-object commits raise DataValidationError."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(200, payload=payload_factory()))

    with pytest.raises(DataValidationError):
        client.compare("dotnet", "runtime", "base", "main")


def test_missing_rate_limit_headers_leave_snapshot_empty():
    """Verify responses without quota headers record no rate limit."""
    client = GitHubClient()
    client._session.get = Mock(return_value=_response(200, payload=_compare_payload(), headers={}))

    client.compare("dotnet", "runtime", "base", "main")

    assert client.get_last_api_info().rateLimit is None
