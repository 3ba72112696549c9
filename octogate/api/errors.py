"""Falcon error handlers for octogate errors raised outside the pipeline.

The webhook pipeline turns every per-request failure into a response
itself. These handlers cover resources that call octogate directly (for
example an application route that resolves an installation client) so that
library errors become JSON problem bodies instead of bare 500s.

Usage
-----
Register the handlers on the Falcon app::

    from octogate.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from octogate.errors import CredentialError, OctogateError
from octogate.github.errors import GitHubAPIError, InstallationError
from octogate.logging import get_logger, log_error

if typ.TYPE_CHECKING:
    import falcon.asgi
    from falcon.asgi import Request, Response

__all__ = [
    "handle_credential_error",
    "handle_installation_error",
    "handle_octogate_error",
    "register_error_handlers",
]

logger = get_logger(__name__)


async def handle_installation_error(
    _req: Request,
    resp: Response,
    ex: InstallationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InstallationError`` to an HTTP 502 JSON response.

    A missing installation id is the caller's problem rather than GitHub's
    and maps to 400 instead.
    """
    if ex.installation_id == 0:
        resp.status = falcon.HTTP_400
        title = "No installation"
    else:
        resp.status = falcon.HTTP_502
        title = "Installation unavailable"
    resp.media = {"title": title, "description": str(ex)}


async def handle_credential_error(
    _req: Request,
    resp: Response,
    ex: CredentialError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``CredentialError`` to an HTTP 500 JSON response."""
    log_error(logger, "App credential misconfigured: %s", ex)
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "App misconfigured",
        "description": "The GitHub App credential is incomplete or invalid.",
    }


async def handle_octogate_error(
    _req: Request,
    resp: Response,
    ex: OctogateError,
    _params: dict[str, typ.Any],
) -> None:
    """Map any other ``OctogateError`` to an HTTP 500 or 502 JSON response.

    GitHub API failures surface as 502; everything else as 500.
    """
    if isinstance(ex, GitHubAPIError):
        resp.status = falcon.HTTP_502
        title = "GitHub API error"
    else:
        resp.status = falcon.HTTP_500
        title = "Internal error"
    resp.media = {"title": title, "description": str(ex)}


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Install the octogate error handlers on ``app``.

    Falcon picks the most specific handler, so registration order does not
    matter.
    """
    app.add_error_handler(OctogateError, handle_octogate_error)
    app.add_error_handler(CredentialError, handle_credential_error)
    app.add_error_handler(InstallationError, handle_installation_error)
