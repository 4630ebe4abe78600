"""Maestro (build asset registry) REST API client for build graph retrieval."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .cancellation import CancellationToken
from .errors import DataValidationError
from .models import Build, BuildDependency, BuildGraph, BuildId, BuildSummary
from .rest import RestClient, parse_datetime


class MaestroClient(RestClient):
    """Typed client for the Maestro build and build-graph endpoints."""

    _SERVICE_NAME = "Maestro"
    _API_VERSION = "2019-01-16"

    def __init__(self, base_url: str, token: Optional[str], timeout_seconds: int = 30) -> None:
        """Initialize an authenticated Maestro API client.

        Args:
            base_url: Maestro service root, e.g. ``https://maestro.dot.net``.
            token: Bearer token for the Maestro API.
            timeout_seconds: Per-request timeout in seconds.
        """
        super().__init__(base_url, timeout_seconds=timeout_seconds)
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def get_latest(
        self,
        repository: str,
        channel_id: int,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BuildSummary:
        """Return the latest build of ``repository`` published to ``channel_id``."""
        payload = self._get_json(
            "api/builds/latest",
            params={
                "repository": repository,
                "channelId": channel_id,
                "api-version": self._API_VERSION,
            },
            cancel_token=cancel_token,
        )

        build_id = payload.get("id")
        if build_id is None:
            raise DataValidationError(
                f"Maestro latest build payload is missing an id: repository={repository}, "
                f"channel_id={channel_id}"
            )

        return BuildSummary(
            id=BuildId(self._parse_int(build_id, "build id")),
            commit=str(payload.get("commit") or ""),
        )

    def get_build_graph(
        self,
        build_id: BuildId,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BuildGraph:
        """Return the dependency graph rooted at ``build_id``."""
        payload = self._get_json(
            f"api/builds/{build_id}/graph",
            params={"api-version": self._API_VERSION},
            cancel_token=cancel_token,
        )

        raw_builds = payload.get("builds")
        if not isinstance(raw_builds, dict):
            raise DataValidationError(
                f"Maestro build graph payload is missing 'builds': build_id={build_id}"
            )

        builds: Dict[BuildId, Build] = {}
        for key, item in raw_builds.items():
            build = self._parse_build(item)
            if build.id != self._parse_int(key, "build graph key"):
                raise DataValidationError(
                    f"Maestro build graph key {key} does not match build id {build.id}"
                )
            builds[build.id] = build

        return BuildGraph(builds=builds, root_id=build_id)

    def _parse_build(self, item: Any) -> Build:
        """Convert one Maestro build payload into a ``Build``."""
        if not isinstance(item, dict):
            raise DataValidationError(f"Maestro build payload has unexpected shape: {item!r}")

        build_id = item.get("id")
        commit = item.get("commit")
        try:
            date_produced = parse_datetime(item.get("dateProduced"))
        except ValueError as exc:
            raise DataValidationError(
                f"Maestro build {build_id} has an invalid dateProduced: {item.get('dateProduced')!r}"
            ) from exc

        if build_id is None or not commit or date_produced is None:
            raise DataValidationError(
                f"Maestro build payload is missing required fields: payload={item}"
            )

        dependencies: List[BuildDependency] = []
        raw_dependencies = item.get("dependencies") or []
        if not isinstance(raw_dependencies, list):
            raise DataValidationError(
                f"Maestro build {build_id} has invalid dependencies: {raw_dependencies!r}"
            )

        for dep in raw_dependencies:
            dep_id = dep.get("buildId") if isinstance(dep, dict) else None
            if dep_id is None:
                raise DataValidationError(
                    f"Maestro build {build_id} has a dependency without buildId: {dep}"
                )
            dependencies.append(
                BuildDependency(
                    buildId=BuildId(self._parse_int(dep_id, "dependency buildId")),
                    isProduct=bool(dep.get("isProduct", True)),
                )
            )

        azdo_build_id = item.get("azureDevOpsBuildId")
        if azdo_build_id is not None:
            azdo_build_id = self._parse_int(azdo_build_id, "azureDevOpsBuildId")

        return Build(
            id=BuildId(self._parse_int(build_id, "build id")),
            commit=str(commit),
            dateProduced=date_produced,
            gitHubRepository=item.get("gitHubRepository") or None,
            gitHubBranch=item.get("gitHubBranch") or None,
            azureDevOpsRepository=item.get("azureDevOpsRepository") or None,
            azureDevOpsBranch=item.get("azureDevOpsBranch") or None,
            azureDevOpsAccount=item.get("azureDevOpsAccount") or None,
            azureDevOpsProject=item.get("azureDevOpsProject") or None,
            azureDevOpsBuildId=azdo_build_id,
            azureDevOpsBuildNumber=item.get("azureDevOpsBuildNumber") or None,
            dependencies=tuple(dependencies),
        )

    def _parse_int(self, value: Any, field_name: str) -> int:
        """Convert a numeric payload value, rejecting anything that is not an integer."""
        if isinstance(value, bool):
            raise DataValidationError(f"Maestro {field_name} is not an integer: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(f"Maestro {field_name} is not an integer: {value!r}") from exc
