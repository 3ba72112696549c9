"""GitHub App authentication and installation-scoped REST clients."""

from __future__ import annotations

from .auth import encode_app_jwt
from .client import GitHubAPIConfig, GitHubClient
from .errors import (
    GitHubAPIError,
    GitHubConfigError,
    InstallationError,
    JsonWebTokenError,
)
from .installations import InstallationResolver
from .models import Installation, InstallationAccount, InstallationToken

__all__ = [
    "GitHubAPIConfig",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubConfigError",
    "Installation",
    "InstallationAccount",
    "InstallationError",
    "InstallationResolver",
    "InstallationToken",
    "JsonWebTokenError",
    "encode_app_jwt",
]
