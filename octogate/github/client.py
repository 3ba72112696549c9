"""Thin authenticated GitHub REST client.

octogate does not model the GitHub API. :class:`GitHubClient` is a handoff
object: it carries the right bearer token, headers and base URL, and leaves
endpoint semantics to the caller.
"""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx
import msgspec

from octogate.logging import get_logger, log_debug

from .errors import GitHubAPIError, GitHubConfigError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import types

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400

T = typ.TypeVar("T")


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubAPIConfig:
    """Configuration for the GitHub REST API client."""

    base_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "octogate/0.1"
    api_version: str = "2022-11-28"

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> GitHubAPIConfig:
        """Build configuration from ``OCTOGATE_GITHUB_*`` variables.

        Raises
        ------
        GitHubConfigError
            If the base URL is blank or the timeout is not a positive number.

        """
        source = os.environ if environ is None else environ
        values: dict[str, typ.Any] = {}

        raw_url = source.get("OCTOGATE_GITHUB_API_URL")
        if raw_url is not None:
            if not raw_url.strip():
                raise GitHubConfigError.empty_base_url()
            values["base_url"] = raw_url.strip().rstrip("/")

        raw_timeout = source.get("OCTOGATE_GITHUB_TIMEOUT_S")
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise GitHubConfigError.invalid_timeout(raw_timeout) from exc
            if timeout <= 0:
                raise GitHubConfigError.invalid_timeout(raw_timeout)
            values["timeout_s"] = timeout

        return cls(**values)


class GitHubClient:
    """Authenticated async GitHub REST client.

    Instances are scoped either to the App itself (``installation_id`` is
    ``None``) or to a single installation.
    """

    def __init__(
        self,
        token: str,
        config: GitHubAPIConfig | None = None,
        *,
        installation_id: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with a bearer token and API configuration."""
        self._config = config or GitHubAPIConfig()
        self.installation_id = installation_id
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_s,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "User-Agent": self._config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": self._config.api_version,
            },
        )

    def __repr__(self) -> str:
        """Return a representation that omits the bearer token."""
        return (
            f"GitHubClient(base_url={self._config.base_url!r}, "
            f"installation_id={self.installation_id!r})"
        )

    @property
    def config(self) -> GitHubAPIConfig:
        """Return the API configuration in use."""
        return self._config

    async def __aenter__(self) -> GitHubClient:
        """Return the client for use in ``async with`` blocks."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Close owned HTTP resources."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, typ.Any] | None = None,
        json: object | None = None,
    ) -> httpx.Response:
        """Send a request and return the raw response.

        Raises
        ------
        GitHubAPIError
            If the request fails in transport or GitHub answers with an
            HTTP status of 400 or above.

        """
        log_debug(logger, "GitHub API %s %s", method, path)
        try:
            response = await self._client.request(
                method, path, params=params, json=json
            )
        except httpx.HTTPError as exc:
            raise GitHubAPIError.transport_error(method, path, str(exc)) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, method, path)
        return response

    async def get_json(
        self,
        path: str,
        *,
        params: dict[str, typ.Any] | None = None,
        response_type: type[T] | None = None,
    ) -> typ.Any:  # noqa: ANN401
        """GET ``path`` and decode the JSON body."""
        response = await self.request("GET", path, params=params)
        return decode_response(response, path, response_type)

    async def post_json(
        self,
        path: str,
        json: object | None = None,
        *,
        response_type: type[T] | None = None,
    ) -> typ.Any:  # noqa: ANN401
        """POST ``json`` to ``path`` and decode the JSON body."""
        response = await self.request("POST", path, json=json)
        return decode_response(response, path, response_type)


def decode_response(
    response: httpx.Response, path: str, type_: type[T] | None = None
) -> typ.Any:  # noqa: ANN401
    """Decode a JSON response body, optionally validating it as ``type_``.

    Raises
    ------
    GitHubAPIError
        If the body is not valid JSON or does not fit ``type_``.

    """
    try:
        if type_ is None:
            return msgspec.json.decode(response.content)
        return msgspec.json.decode(response.content, type=type_)
    except msgspec.DecodeError as exc:
        raise GitHubAPIError.malformed_response(path, str(exc)) from exc


def next_page_url(response: httpx.Response) -> str | None:
    """Return the ``rel="next"`` URL from a ``Link`` header, if any."""
    link = response.links.get("next")
    if not link:
        return None
    return link.get("url")


__all__ = [
    "GitHubAPIConfig",
    "GitHubClient",
    "decode_response",
    "next_page_url",
]
