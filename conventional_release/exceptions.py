"""Exceptions raised by conventional-release.

Everything derives from ReleaseError so the CLI can turn any failure into a
single error message and a non-zero exit code.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all conventional-release errors."""


class InvalidVersionFormat(ReleaseError):
    """A tag or configured version is not MAJOR.MINOR.PATCH."""


class MissingConfiguration(ReleaseError):
    """Repository identity or access token missing from the environment."""


class ConfigError(ReleaseError):
    """A configuration value failed validation."""


class StateError(ReleaseError):
    """The state handed over by the compute phase is missing or invalid."""


class GitHubError(ReleaseError):
    """A GitHub API request failed.

    Attributes:
        status_code: HTTP status of the failed response, or None when the
                     request never got a response (connection error, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
