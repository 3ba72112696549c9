"""Framework-free ASGI adapter for the webhook pipeline.

Use this adapter when Falcon is not wanted. It speaks the ASGI ``http`` and
``lifespan`` protocols directly and serves the same routes as the Falcon
adapter: the webhook path plus ``/health`` and ``/ready``.

Usage
-----
Serve with any ASGI server::

    app = WebhookASGIApp(WebhookPipeline(credential, handler, path="/github"))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import msgspec

from octogate.api.health.resources import HEALTH_BODY, READY_BODY
from octogate.errors import LimitExceededError
from octogate.logging import get_logger, log_debug, log_warning
from octogate.webhook.pipeline import BodyError, WebhookRequest, read_limited

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from octogate.webhook.pipeline import WebhookPipeline

__all__ = ["ClientDisconnectedError", "WebhookASGIApp"]

logger = get_logger(__name__)

Scope = dict[str, typ.Any]
Message = dict[str, typ.Any]
Receive = typ.Callable[[], typ.Awaitable[Message]]
Send = typ.Callable[[Message], typ.Awaitable[None]]

_HEALTH_BODIES: dict[str, dict[str, str]] = {
    "/health": HEALTH_BODY,
    "/ready": READY_BODY,
}


class ClientDisconnectedError(Exception):
    """Raised when the client disconnects before the body is complete."""


async def _receive_body_chunks(receive: Receive) -> cabc.AsyncIterator[bytes]:
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            raise ClientDisconnectedError
        if message["type"] != "http.request":
            continue
        yield message.get("body", b"")
        if not message.get("more_body", False):
            return


def _decode_headers(
    raw_headers: cabc.Iterable[tuple[bytes, bytes]],
) -> dict[str, bytes]:
    headers: dict[str, bytes] = {}
    for raw_name, value in raw_headers:
        name = raw_name.decode("latin-1").lower()
        headers.setdefault(name, value)
    return headers


def _content_length(headers: cabc.Mapping[str, bytes]) -> int | None:
    raw = headers.get("content-length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class WebhookASGIApp:
    """ASGI application serving one :class:`WebhookPipeline`."""

    def __init__(self, pipeline: WebhookPipeline) -> None:
        """Bind the application to ``pipeline``."""
        self._pipeline = pipeline

    @property
    def pipeline(self) -> WebhookPipeline:
        """Return the pipeline behind this application."""
        return self._pipeline

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Dispatch one ASGI connection."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            log_debug(logger, "Ignoring unsupported ASGI scope %s", scope["type"])
            return

        method = scope["method"]
        path = scope["path"]

        health_body = _HEALTH_BODIES.get(path)
        if health_body is not None and method == "GET":
            await _send_response(
                send,
                HTTPStatus.OK,
                msgspec.json.encode(health_body),
                b"application/json",
            )
            return

        request = await self._build_request(scope, receive)
        result = await self._pipeline.process(request)
        await _send_response(
            send,
            result.status,
            result.body.encode("utf-8"),
            b"text/plain; charset=utf-8",
        )

    async def _build_request(self, scope: Scope, receive: Receive) -> WebhookRequest:
        headers = _decode_headers(scope.get("headers", []))
        content_length = _content_length(headers)
        body: bytes | None = b""
        body_error: BodyError | None = None

        if self._pipeline.matches_route(scope["method"], scope["path"]):
            body, body_error = await self._read_body(receive, content_length)

        return WebhookRequest(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            body=body,
            body_error=body_error,
            content_length=content_length,
        )

    async def _read_body(
        self, receive: Receive, content_length: int | None
    ) -> tuple[bytes | None, BodyError | None]:
        limit = self._pipeline.max_body_bytes
        if content_length is not None and content_length > limit:
            return None, BodyError.TOO_LARGE
        try:
            return await read_limited(_receive_body_chunks(receive), limit), None
        except LimitExceededError:
            return None, BodyError.TOO_LARGE
        except ClientDisconnectedError:
            log_warning(logger, "Client disconnected while sending webhook body")
            return None, BodyError.READ_FAILED

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


async def _send_response(
    send: Send, status: int, body: bytes, content_type: bytes
) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": int(status),
            "headers": [
                (b"content-type", content_type),
                (b"content-length", str(len(body)).encode("ascii")),
            ],
        }
    )
    await send({"type": "http.response.body", "body": body})
