"""Typed GitHub REST responses used by the installation resolver."""

from __future__ import annotations

import datetime as dt

import msgspec


class InstallationToken(msgspec.Struct, kw_only=True):
    """An installation access token.

    Tokens are short lived; callers own the value and octogate never caches
    it.
    """

    token: str
    expires_at: dt.datetime
    permissions: dict[str, str] = msgspec.field(default_factory=dict)
    repository_selection: str | None = None

    def __repr__(self) -> str:
        """Return a representation that hides the token."""
        return f"InstallationToken(expires_at={self.expires_at.isoformat()!r})"

    def is_expired(self, *, now: dt.datetime | None = None) -> bool:
        """Return whether the token has passed its expiry time."""
        current = now or dt.datetime.now(dt.UTC)
        return current >= self.expires_at


class InstallationAccount(msgspec.Struct, kw_only=True):
    """The user or organization an App is installed on."""

    login: str
    id: int
    type: str | None = None


class Installation(msgspec.Struct, kw_only=True):
    """An App installation as listed by ``GET /app/installations``."""

    id: int
    account: InstallationAccount | None = None
    app_id: int | None = None
    target_type: str | None = None
    repository_selection: str | None = None
    html_url: str | None = None
    suspended_at: str | None = None

    @property
    def account_login(self) -> str | None:
        """Return the account login, if the listing included one."""
        return None if self.account is None else self.account.login


__all__ = ["Installation", "InstallationAccount", "InstallationToken"]
