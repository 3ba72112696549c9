"""GitHub API, App JWT and installation errors."""

from __future__ import annotations

from octogate.errors import OctogateError


class GitHubAPIError(OctogateError):
    """Raised when GitHub returns an error response or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, method: str, path: str) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(
            f"GitHub API {method} {path} returned HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def transport_error(cls, method: str, path: str, reason: str) -> GitHubAPIError:
        """Return an error for requests that never produced a response."""
        return cls(f"GitHub API {method} {path} failed: {reason}")

    @classmethod
    def malformed_response(cls, path: str, reason: str) -> GitHubAPIError:
        """Return an error for response bodies of an unexpected shape."""
        return cls(f"GitHub API response for {path} is malformed: {reason}")


class GitHubConfigError(OctogateError, ValueError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def invalid_timeout(cls, raw: str) -> GitHubConfigError:
        """Return an error for a timeout that is not a positive number."""
        return cls(f"OCTOGATE_GITHUB_TIMEOUT_S must be a positive number, got {raw!r}")

    @classmethod
    def empty_base_url(cls) -> GitHubConfigError:
        """Return an error for a blank API base URL."""
        return cls("OCTOGATE_GITHUB_API_URL must be non-empty")


class JsonWebTokenError(OctogateError):
    """Raised when an App JWT cannot be encoded."""

    @classmethod
    def encoding_failed(cls, reason: str) -> JsonWebTokenError:
        """Return an error for a JWT signing failure."""
        return cls(f"Failed to encode App JWT: {reason}")


class InstallationError(OctogateError):
    """Raised when an installation-scoped client cannot be produced.

    Attributes
    ----------
    installation_id
        The installation that was requested (``0`` when none was known).

    """

    def __init__(self, message: str, *, installation_id: int = 0) -> None:
        """Record the requested installation id."""
        self.installation_id = installation_id
        super().__init__(message)

    @classmethod
    def no_installation(cls) -> InstallationError:
        """Return an error for events that carried no installation id."""
        return cls("No installation id available for this event")

    @classmethod
    def exchange_failed(cls, installation_id: int, reason: str) -> InstallationError:
        """Return an error for a failed installation token exchange."""
        return cls(
            f"Installation token exchange failed for {installation_id}: {reason}",
            installation_id=installation_id,
        )


__all__ = [
    "GitHubAPIError",
    "GitHubConfigError",
    "InstallationError",
    "JsonWebTokenError",
]
