"""Liveness and readiness checks for the webhook service.

The checks are stateless: they never touch GitHub or the credential, so a
misconfigured App can still be observed as running.

Usage
-----
Register health endpoints on the Falcon app::

    from octogate.api.health.resources import HealthResource, ReadyResource

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HEALTH_BODY", "READY_BODY", "HealthResource", "ReadyResource"]

HEALTH_BODY: dict[str, str] = {"status": "ok"}
READY_BODY: dict[str, str] = {"status": "ready"}


class HealthResource:
    """Liveness resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = HEALTH_BODY
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness resource returning ``{"status": "ready"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = READY_BODY
        resp.status = HTTPStatus.OK
