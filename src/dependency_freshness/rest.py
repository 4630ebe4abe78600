"""Shared JSON-over-HTTP transport for the provider API clients."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

from .cancellation import CancellationToken
from .errors import ApiError, AuthenticationError, NotFoundError

logger = logging.getLogger(__name__)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO8601 timestamps into timezone-aware UTC datetimes.

    Raises:
        ValueError: If ``value`` is not an ISO8601 string.
    """
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO8601 string, got {value!r}")

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class RestClient:
    """Small ``requests`` wrapper with retry, backoff and cancellation support.

    Subclasses set ``_SERVICE_NAME`` for error messages and may override
    ``_check_response`` to translate provider-specific status codes before the
    generic handling runs.
    """

    _SERVICE_NAME = "API"
    _MAX_RETRIES = 5
    _MAX_BACKOFF_SECONDS = 30
    _USER_AGENT = "dependency-freshness"

    def __init__(self, base_url: str, timeout_seconds: int = 30) -> None:
        """Initialize a session rooted at ``base_url``.

        Args:
            base_url: Scheme and host (plus optional path prefix) of the API.
            timeout_seconds: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update(
            {"Accept": "application/json", "User-Agent": self._USER_AGENT}
        )

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _extract_backoff_seconds(self, response: requests.Response, attempt: int) -> int:
        """Compute exponential backoff seconds, honoring Retry-After when available."""
        retry_after_header = response.headers.get("Retry-After")
        if retry_after_header:
            try:
                retry_after_seconds = int(retry_after_header)
                return min(self._MAX_BACKOFF_SECONDS, max(1, retry_after_seconds))
            except ValueError:
                pass

        return min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1))

    def _sleep(self, seconds: float, cancel_token: Optional[CancellationToken]) -> None:
        if cancel_token is None:
            time.sleep(seconds)
        else:
            cancel_token.wait(seconds)

    def _on_response(self, response: requests.Response) -> None:
        """Hook invoked for every HTTP response before status handling."""

    def _check_response(self, response: requests.Response, url: str) -> None:
        """Hook for provider-specific status handling; raise to stop processing."""

    def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Dict[str, Any]:
        """Execute a GET request with retry logic for 429/5xx responses.

        Raises:
            NotFoundError: If the API returns HTTP 404.
            AuthenticationError: If the API returns HTTP 401.
            ApiError: If the request repeatedly fails, returns another HTTP
                status >= 400, or does not return a JSON object.
            AnalysisCancelled: If ``cancel_token`` is cancelled meanwhile.
        """
        url = self._build_url(path)
        last_error: Optional[Exception] = None

        for attempt in range(1, self._MAX_RETRIES + 1):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            try:
                response = self._session.get(url, params=params, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                last_error = exc
                logger.debug(
                    "Request failed, will retry",
                    extra={"url": url, "attempt": attempt, "error": str(exc)},
                )
                if attempt == self._MAX_RETRIES:
                    raise ApiError(
                        f"{self._SERVICE_NAME} request failed after retries: GET {url}"
                    ) from exc
                self._sleep(min(self._MAX_BACKOFF_SECONDS, 2 ** (attempt - 1)), cancel_token)
                continue

            self._on_response(response)
            self._check_response(response, url)

            status_code = response.status_code
            is_retryable = status_code == 429 or 500 <= status_code <= 599

            if is_retryable and attempt < self._MAX_RETRIES:
                self._sleep(self._extract_backoff_seconds(response, attempt), cancel_token)
                continue

            if status_code == 404:
                raise NotFoundError(
                    f"{self._SERVICE_NAME} resource not found: GET {url}", status_code=status_code
                )

            if status_code == 401:
                raise AuthenticationError(
                    f"{self._SERVICE_NAME} rejected the configured credentials: GET {url}"
                )

            if status_code >= 400:
                raise ApiError(
                    f"{self._SERVICE_NAME} request failed: "
                    f"GET {url} returned {status_code} - {response.text}",
                    status_code=status_code,
                )

            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(f"{self._SERVICE_NAME} returned invalid JSON: GET {url}") from exc

            if not isinstance(payload, dict):
                raise ApiError(f"{self._SERVICE_NAME} returned unexpected payload shape: GET {url}")

            return payload

        raise ApiError(
            f"{self._SERVICE_NAME} request failed after retries: GET {url}"
        ) from last_error
