"""Entry point for the dependency freshness analyzer."""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .analyzer import IncomingAnalyzer
from .cancellation import CancellationToken
from .cli import parse_args
from .comparison import CommitComparisonClient
from .config import load_config
from .errors import (
    AnalysisCancelled,
    ApiError,
    AuthenticationError,
    ConfigurationError,
    DataIntegrityError,
    FreshnessError,
)
from .github_client import GitHubClient
from .maestro_client import MaestroClient
from .report import generate_report
from .repo_reference import RepoExclusionPolicy
from .sla import SlaEvaluator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_DATA_INTEGRITY = 5
EXIT_CANCELLED = 130


def orchestrate_freshness_report(argv: Optional[Sequence[str]] = None) -> int:
    """Run one analysis end to end and print the report.

    Returns:
        Process exit code.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    token = CancellationToken()
    try:
        config = load_config(
            repository=args.repo,
            channel_id=args.channel_id,
            max_workers=args.max_workers,
            sla_path=args.sla_config,
        )

        maestro_client = MaestroClient(
            base_url=config.maestro_base_url,
            token=config.maestro_token,
            timeout_seconds=config.timeout_seconds,
        )
        github_client = GitHubClient(
            base_url=config.github_api_url,
            token=config.github_token,
            timeout_seconds=config.timeout_seconds,
        )
        analyzer = IncomingAnalyzer(
            maestro_client=maestro_client,
            comparison_client=CommitComparisonClient(github_client),
            exclusion_policy=RepoExclusionPolicy(config.excluded_repositories),
            quota_source=github_client,
            max_workers=config.max_workers,
        )

        print(
            f"Analyzing incoming dependencies of '{config.repository}' "
            f"on channel {config.channel_id}..."
        )
        report = analyzer.analyze(config.repository, config.channel_id, cancel_token=token)
        print(generate_report(report, SlaEvaluator(config.sla_options)))
        return EXIT_OK
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except AuthenticationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_API
    except DataIntegrityError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_DATA_INTEGRITY
    except AnalysisCancelled as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        token.cancel()
        print("ERROR: Interrupted; no report produced.", file=sys.stderr)
        return EXIT_CANCELLED
    except FreshnessError as exc:
        logger.exception("Dependency freshness analysis failed")
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR


def main() -> int:
    return orchestrate_freshness_report()


if __name__ == "__main__":
    raise SystemExit(main())
