"""Tests for SLA options and classification."""

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dependency_freshness.errors import ConfigurationError
from dependency_freshness.models import Sla, SlaStatus
from dependency_freshness.sla import DEFAULT_SLA, SlaEvaluator, SlaOptions, load_sla_options

NOW = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)


def _days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


@pytest.mark.parametrize(
    "days,expected",
    [
        (10, SlaStatus.FAIL),
        (7, SlaStatus.FAIL),
        (6, SlaStatus.WARNING),
        (5, SlaStatus.WARNING),
        (4.9, SlaStatus.OK),
        (1, SlaStatus.OK),
    ],
)
def test_classify_with_default_thresholds(days, expected):
    """Verify default Warning=5/Fail=7 classification boundaries."""
    evaluator = SlaEvaluator()

    assert evaluator.classify("runtime", _days_ago(days), now=NOW) == expected


def test_classify_without_age_is_unknown():
    """Verify a missing age always classifies as unknown."""
    assert SlaEvaluator().classify("runtime", None, now=NOW) == SlaStatus.UNKNOWN


def test_repository_specific_threshold_uses_org_prefix():
    """Verify lookups use '{org}/{short name}' and fall back to the default entry."""
    options = SlaOptions(repositories={"dotnet/runtime": Sla(1, 2)})
    evaluator = SlaEvaluator(options)

    assert evaluator.classify("runtime", _days_ago(3), now=NOW) == SlaStatus.FAIL
    assert evaluator.classify("aspnetcore", _days_ago(3), now=NOW) == SlaStatus.OK
    assert evaluator.classify(None, _days_ago(6), now=NOW) == SlaStatus.WARNING


def test_options_always_contain_default_entry():
    """Verify the default entry exists even when overrides are supplied."""
    options = SlaOptions(repositories={"dotnet/runtime": Sla(1, 2)})

    assert options.get_for_repo("unknown-repo") == DEFAULT_SLA
    assert DEFAULT_SLA == Sla(warning_unconsumed_commit_age=5, fail_unconsumed_commit_age=7)


def test_load_sla_options_without_path_returns_defaults():
    """Verify omitting the SLA file yields the built-in defaults."""
    options = load_sla_options(None)

    assert options.org == "dotnet"
    assert options.get_for_repo("runtime") == DEFAULT_SLA


def test_load_sla_options_from_file(tmp_path):
    """Verify file entries override the default and add repository entries."""
    path = tmp_path / "sla.json"
    path.write_text(
        json.dumps(
            {
                "org": "contoso",
                "repositories": {
                    "[Default]": {"warningUnconsumedCommitAge": 10, "failUnconsumedCommitAge": 20},
                    "contoso/widgets": {"warningUnconsumedCommitAge": 2, "failUnconsumedCommitAge": 3},
                },
            }
        ),
        encoding="utf-8",
    )

    options = load_sla_options(path)

    assert options.org == "contoso"
    assert options.get_for_repo("widgets") == Sla(2, 3)
    assert options.get_for_repo("gadgets") == Sla(10, 20)


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        json.dumps({"repositories": []}),
        json.dumps({"repositories": {"dotnet/runtime": {"warningUnconsumedCommitAge": 1}}}),
        json.dumps({"repositories": {"dotnet/runtime": {"warningUnconsumedCommitAge": -1, "failUnconsumedCommitAge": 2}}}),
        json.dumps({"org": ""}),
    ],
)
def test_load_sla_options_rejects_malformed_files(tmp_path, content):
    """Verify malformed SLA files raise ConfigurationError."""
    path = tmp_path / "sla.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_sla_options(path)


def test_load_sla_options_missing_file_raises(tmp_path):
    """Verify an unreadable SLA file raises ConfigurationError."""
    with pytest.raises(ConfigurationError):
        load_sla_options(tmp_path / "missing.json")
