"""Custom exception types for the dependency freshness analyzer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class FreshnessError(Exception):
    """Base exception for all dependency freshness errors."""


class ConfigurationError(FreshnessError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(FreshnessError):
    """Raised when API credentials are unavailable or rejected."""


class ApiError(FreshnessError):
    """Raised when a provider API request fails or returns an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ApiError):
    """Raised when a requested resource (repository, commit, branch) does not exist."""


class RateLimitError(ApiError):
    """Raised when the provider's request quota is exhausted."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reset_time: Optional[datetime] = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.reset_time = reset_time


class DataValidationError(FreshnessError):
    """Raised when API payloads do not meet expected constraints."""


class DataIntegrityError(FreshnessError):
    """Raised when a build graph references a build it does not contain."""


class AnalysisCancelled(FreshnessError):
    """Raised when an analysis run is cancelled before it completes."""
