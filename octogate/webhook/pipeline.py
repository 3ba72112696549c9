"""Framework-neutral webhook request pipeline.

Each adapter turns its framework's request into a :class:`WebhookRequest`
and renders the returned :class:`WebhookResponse`. The pipeline walks one
request through the checks in a fixed order and stops at the first failure:

``RECEIVED`` -> route check -> signature header check -> body read ->
signature verification -> payload parse -> handler dispatch.

Response bodies are short and generic. Failure detail is logged, never
returned to the caller.

Usage
-----
Run a request through a pipeline::

    pipeline = WebhookPipeline(credential, handler, path="/github")
    response = await pipeline.process(request)

"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from http import HTTPStatus

from octogate.errors import LimitExceededError, PayloadDecodeError
from octogate.events.envelope import EventEnvelope, parse_webhook
from octogate.events.taxonomy import Event
from octogate.logging import (
    get_logger,
    log_debug,
    log_exception,
    log_info,
    log_warning,
)
from octogate.signature import SIGNATURE_HEADER

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from octogate.credentials import AppCredential
    from octogate.events.payloads import WebhookPayload

__all__ = [
    "DEFAULT_MAX_BODY_BYTES",
    "DELIVERY_HEADER",
    "EVENT_HEADER",
    "BodyError",
    "WebhookHandler",
    "WebhookOutcome",
    "WebhookPipeline",
    "WebhookRequest",
    "WebhookResponse",
    "read_limited",
]

logger = get_logger(__name__)

DEFAULT_MAX_BODY_BYTES = 1024 * 1024
EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"

WebhookHandler = typ.Callable[[EventEnvelope[typ.Any]], typ.Awaitable[str | None]]


class WebhookOutcome(enum.StrEnum):
    """Terminal states of the webhook pipeline."""

    ACCEPTED_OK = "accepted_ok"
    REJECTED_NOT_FOUND = "rejected_not_found"
    REJECTED_UNAUTHORIZED = "rejected_unauthorized"
    REJECTED_PAYLOAD_TOO_LARGE = "rejected_payload_too_large"
    REJECTED_BAD_REQUEST = "rejected_bad_request"
    REJECTED_INTERNAL_ERROR = "rejected_internal_error"

    @property
    def status(self) -> HTTPStatus:
        """Return the HTTP status for this outcome."""
        return _OUTCOME_STATUS[self]


_OUTCOME_STATUS: dict[WebhookOutcome, HTTPStatus] = {
    WebhookOutcome.ACCEPTED_OK: HTTPStatus.OK,
    WebhookOutcome.REJECTED_NOT_FOUND: HTTPStatus.NOT_FOUND,
    WebhookOutcome.REJECTED_UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE: HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
    WebhookOutcome.REJECTED_BAD_REQUEST: HTTPStatus.BAD_REQUEST,
    WebhookOutcome.REJECTED_INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}

_REJECTION_BODY: dict[WebhookOutcome, str] = {
    WebhookOutcome.REJECTED_NOT_FOUND: "Not Found",
    WebhookOutcome.REJECTED_UNAUTHORIZED: "Unauthorized",
    WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE: "Payload Too Large",
    WebhookOutcome.REJECTED_BAD_REQUEST: "Bad Request",
    WebhookOutcome.REJECTED_INTERNAL_ERROR: "Internal Server Error",
}


class BodyError(enum.StrEnum):
    """Body read failures detected by an adapter before the pipeline runs."""

    TOO_LARGE = "too_large"
    READ_FAILED = "read_failed"


@dc.dataclass(frozen=True, slots=True)
class WebhookRequest:
    """A transport-neutral inbound webhook request.

    Attributes
    ----------
    method
        HTTP method.
    path
        Request path without query string.
    headers
        Request headers; names are matched case-insensitively. Values may be
        raw bytes when the adapter has not decoded them.
    body
        Raw body, or ``None`` when the adapter could not read it.
    body_error
        Why ``body`` is missing, when it is.
    content_length
        Declared ``Content-Length``, if any.

    """

    method: str
    path: str
    headers: cabc.Mapping[str, str | bytes] = dc.field(default_factory=dict)
    body: bytes | None = b""
    body_error: BodyError | None = None
    content_length: int | None = None

    def header(self, name: str) -> str | bytes | None:
        """Return the first header matching ``name`` case-insensitively."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def text_header(self, name: str) -> str | None:
        """Return a header as text, or ``None`` if absent or undecodable."""
        value = self.header(name)
        if isinstance(value, bytes):
            try:
                return value.decode("ascii")
            except UnicodeDecodeError:
                return None
        return value


@dc.dataclass(frozen=True, slots=True)
class WebhookResponse:
    """The pipeline's verdict for one request."""

    outcome: WebhookOutcome
    body: str

    @property
    def status(self) -> HTTPStatus:
        """Return the HTTP status for the outcome."""
        return self.outcome.status

    @property
    def status_code(self) -> int:
        """Return the numeric HTTP status code."""
        return int(self.outcome.status)

    @property
    def accepted(self) -> bool:
        """Return whether the webhook was accepted."""
        return self.outcome is WebhookOutcome.ACCEPTED_OK

    @classmethod
    def reject(cls, outcome: WebhookOutcome) -> WebhookResponse:
        """Return a rejection with the generic body for ``outcome``."""
        return cls(outcome=outcome, body=_REJECTION_BODY[outcome])

    @classmethod
    def ok(cls, body: str | None = None) -> WebhookResponse:
        """Return an accepted response, defaulting the body to ``OK``."""
        text = "OK" if body is None else body
        return cls(outcome=WebhookOutcome.ACCEPTED_OK, body=text)


async def read_limited(chunks: cabc.AsyncIterable[bytes], limit: int) -> bytes:
    """Concatenate ``chunks`` into one body, refusing to exceed ``limit``.

    Reading stops as soon as the limit is passed; the remaining chunks are
    never consumed.

    Raises
    ------
    LimitExceededError
        If the stream is longer than ``limit`` bytes.

    """
    buffer = bytearray()
    async for chunk in chunks:
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise LimitExceededError(limit)
    return bytes(buffer)


class WebhookPipeline:
    """Authenticate, parse and dispatch GitHub webhook deliveries.

    Parameters
    ----------
    credential
        App credential holding the webhook secret. Without a secret every
        delivery is rejected as unauthorized.
    handler
        Optional async callable receiving the parsed envelope. It may return
        a response body or ``None`` for ``OK``. Exceptions become HTTP 500.
    path
        The only path accepted for deliveries.
    max_body_bytes
        Largest accepted request body.
    payload_type
        Payload class or union to decode deliveries into.

    """

    def __init__(
        self,
        credential: AppCredential,
        handler: WebhookHandler | None = None,
        *,
        path: str = "/",
        max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
        payload_type: object = Event,
    ) -> None:
        """Store the pipeline configuration."""
        if max_body_bytes <= 0:
            msg = f"max_body_bytes must be positive, got {max_body_bytes}"
            raise ValueError(msg)
        self._credential = credential
        self._handler = handler
        self.path = path
        self.max_body_bytes = max_body_bytes
        self._payload_type = payload_type

    def matches_route(self, method: str, path: str) -> bool:
        """Return whether ``method`` and ``path`` address the webhook."""
        return method.upper() == "POST" and path == self.path

    async def process(self, request: WebhookRequest) -> WebhookResponse:
        """Run ``request`` through every check and return the verdict."""
        if not self.matches_route(request.method, request.path):
            log_debug(
                logger, "No webhook route for %s %s", request.method, request.path
            )
            return WebhookResponse.reject(WebhookOutcome.REJECTED_NOT_FOUND)

        raw_signature = request.header(SIGNATURE_HEADER)
        if raw_signature is None:
            log_warning(logger, "Webhook rejected: missing %s header", SIGNATURE_HEADER)
            return WebhookResponse.reject(WebhookOutcome.REJECTED_UNAUTHORIZED)
        signature = request.text_header(SIGNATURE_HEADER)
        if signature is None:
            log_warning(
                logger, "Webhook rejected: undecodable %s header", SIGNATURE_HEADER
            )
            return WebhookResponse.reject(WebhookOutcome.REJECTED_BAD_REQUEST)

        body_or_rejection = self._read_body(request)
        if isinstance(body_or_rejection, WebhookResponse):
            return body_or_rejection
        body, text = body_or_rejection

        if not self._credential.verify_signature(body, signature):
            log_warning(logger, "Webhook rejected: signature verification failed")
            return WebhookResponse.reject(WebhookOutcome.REJECTED_UNAUTHORIZED)

        try:
            envelope = parse_webhook(
                text,
                self._payload_type,
                event_name=request.text_header(EVENT_HEADER),
                delivery_id=request.text_header(DELIVERY_HEADER),
            )
        except PayloadDecodeError as exc:
            log_warning(logger, "Webhook rejected: %s", exc)
            return WebhookResponse.reject(WebhookOutcome.REJECTED_BAD_REQUEST)

        return await self._dispatch(envelope)

    def _read_body(
        self, request: WebhookRequest
    ) -> tuple[bytes, str] | WebhookResponse:
        if (
            request.content_length is not None
            and request.content_length > self.max_body_bytes
        ) or request.body_error is BodyError.TOO_LARGE:
            log_warning(
                logger,
                "Webhook rejected: body exceeds %d bytes",
                self.max_body_bytes,
            )
            return WebhookResponse.reject(WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE)

        body = request.body
        if body is None or request.body_error is BodyError.READ_FAILED:
            log_warning(logger, "Webhook rejected: body could not be read")
            return WebhookResponse.reject(WebhookOutcome.REJECTED_BAD_REQUEST)
        if len(body) > self.max_body_bytes:
            log_warning(
                logger,
                "Webhook rejected: body exceeds %d bytes",
                self.max_body_bytes,
            )
            return WebhookResponse.reject(WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE)

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            log_warning(logger, "Webhook rejected: body is not valid UTF-8")
            return WebhookResponse.reject(WebhookOutcome.REJECTED_BAD_REQUEST)
        return body, text

    async def _dispatch(
        self, envelope: EventEnvelope[WebhookPayload]
    ) -> WebhookResponse:
        log_info(
            logger,
            "Webhook accepted: event=%s installation=%d delivery=%s",
            envelope.event_name,
            envelope.installation_id,
            envelope.delivery_id or "-",
        )
        if self._handler is None:
            return WebhookResponse.ok()

        try:
            result = await self._handler(envelope)
        except Exception as exc:  # noqa: BLE001 - handler failures map to HTTP 500
            log_exception(logger, "Webhook handler failed", exc)
            return WebhookResponse.reject(WebhookOutcome.REJECTED_INTERNAL_ERROR)
        return WebhookResponse.ok(result)
