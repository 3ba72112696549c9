"""Falcon resource that feeds webhook deliveries into the pipeline.

The resource is mounted as a Falcon sink on the exact webhook path, so every
HTTP method reaches the pipeline and anything other than ``POST`` is
answered with 404, exactly as the raw ASGI adapter does.

Usage
-----
Register the resource on the Falcon app::

    app.add_sink(WebhookResource(pipeline), prefix=webhook_route(pipeline.path))

"""

from __future__ import annotations

import re
import typing as typ

import falcon

from octogate.errors import LimitExceededError
from octogate.logging import get_logger, log_warning
from octogate.webhook.pipeline import BodyError, WebhookRequest, read_limited

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from octogate.webhook.pipeline import WebhookPipeline, WebhookResponse

__all__ = ["WebhookResource", "webhook_route"]

logger = get_logger(__name__)


def webhook_route(path: str) -> re.Pattern[str]:
    """Return a sink pattern matching exactly ``path``."""
    return re.compile(rf"^{re.escape(path)}\Z")


class WebhookResource:
    """Falcon ASGI resource delegating to a :class:`WebhookPipeline`."""

    def __init__(self, pipeline: WebhookPipeline) -> None:
        """Bind the resource to ``pipeline``."""
        self._pipeline = pipeline

    async def __call__(self, req: Request, resp: Response, **_params: str) -> None:
        """Run a request of any method through the pipeline."""
        request = await self._build_request(req)
        result = await self._pipeline.process(request)
        _render(result, resp)

    async def _build_request(self, req: Request) -> WebhookRequest:
        body: bytes | None = b""
        body_error: BodyError | None = None
        if self._pipeline.matches_route(req.method, req.path):
            body, body_error = await self._read_body(req)

        return WebhookRequest(
            method=req.method,
            path=req.path,
            headers=req.headers,
            body=body,
            body_error=body_error,
            content_length=req.content_length,
        )

    async def _read_body(self, req: Request) -> tuple[bytes | None, BodyError | None]:
        limit = self._pipeline.max_body_bytes
        if req.content_length is not None and req.content_length > limit:
            return None, BodyError.TOO_LARGE
        try:
            return await read_limited(req.stream, limit), None
        except LimitExceededError:
            return None, BodyError.TOO_LARGE
        except OSError as exc:
            log_warning(logger, "Failed to read webhook body: %s", exc)
            return None, BodyError.READ_FAILED


def _render(result: WebhookResponse, resp: Response) -> None:
    resp.status = result.status
    resp.content_type = falcon.MEDIA_TEXT
    resp.text = result.body
