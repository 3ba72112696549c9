"""Exchange App credentials for installation-scoped GitHub clients.

The flow is the standard GitHub App one: sign a short-lived JWT with the
App's private key, exchange it for an installation access token, then call
the API with that token. Nothing is cached and nothing is retried; every
call performs a fresh exchange and timeouts come from httpx.
"""

from __future__ import annotations

import typing as typ

from octogate.logging import get_logger, log_error, log_info

from .auth import encode_app_jwt
from .client import GitHubAPIConfig, GitHubClient, decode_response, next_page_url
from .errors import GitHubAPIError, InstallationError
from .models import Installation, InstallationToken

if typ.TYPE_CHECKING:
    import httpx

    from octogate.credentials import AppCredential

logger = get_logger(__name__)

INSTALLATIONS_PAGE_SIZE = 100


class InstallationResolver:
    """Produce App-level and installation-level GitHub clients.

    Parameters
    ----------
    credential
        App credential; must hold a signing key for any API call.
    config
        REST API configuration. Defaults to public GitHub.
    transport
        Optional httpx transport shared by every client created here.
        Tests inject :class:`httpx.MockTransport`.

    """

    def __init__(
        self,
        credential: AppCredential,
        config: GitHubAPIConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Store the credential and client settings."""
        self._credential = credential
        self._config = config or GitHubAPIConfig()
        self._transport = transport

    @property
    def credential(self) -> AppCredential:
        """Return the App credential in use."""
        return self._credential

    def client_for_app(self) -> GitHubClient:
        """Return a client authenticated as the App itself.

        Raises
        ------
        MissingFieldError
            If the credential has no signing key.
        JsonWebTokenError
            If the App JWT cannot be signed.

        """
        token = encode_app_jwt(self._credential)
        return GitHubClient(token, self._config, transport=self._transport)

    async def create_installation_token(
        self, installation_id: int
    ) -> InstallationToken:
        """Exchange the App JWT for an installation access token.

        Raises
        ------
        InstallationError
            If ``installation_id`` is ``0`` or the exchange fails.

        """
        if installation_id <= 0:
            raise InstallationError.no_installation()

        path = f"/app/installations/{installation_id}/access_tokens"
        async with self.client_for_app() as app_client:
            try:
                token = await app_client.post_json(
                    path, response_type=InstallationToken
                )
            except GitHubAPIError as exc:
                log_error(
                    logger,
                    "Installation token exchange failed for %d: %s",
                    installation_id,
                    exc,
                )
                raise InstallationError.exchange_failed(
                    installation_id, str(exc)
                ) from exc

        log_info(
            logger,
            "Issued installation token for %d (expires %s)",
            installation_id,
            token.expires_at.isoformat(),
        )
        return token

    async def client_for_installation(self, installation_id: int) -> GitHubClient:
        """Return a client scoped to ``installation_id``.

        Raises
        ------
        InstallationError
            If ``installation_id`` is ``0`` or the token exchange fails.

        """
        token = await self.create_installation_token(installation_id)
        return GitHubClient(
            token.token,
            self._config,
            installation_id=installation_id,
            transport=self._transport,
        )

    async def discover_installations(self) -> list[Installation]:
        """List every installation of the App, following pagination.

        Raises
        ------
        GitHubAPIError
            If any page request fails or returns an unexpected body.

        """
        installations: list[Installation] = []
        url: str | None = "/app/installations"
        params: dict[str, typ.Any] | None = {"per_page": INSTALLATIONS_PAGE_SIZE}

        async with self.client_for_app() as app_client:
            while url is not None:
                response = await app_client.request("GET", url, params=params)
                installations.extend(
                    decode_response(response, url, list[Installation])
                )
                url = next_page_url(response)
                # The next link already carries the query string.
                params = None

        return installations


__all__ = ["INSTALLATIONS_PAGE_SIZE", "InstallationResolver"]
