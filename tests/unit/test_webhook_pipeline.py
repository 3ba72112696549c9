"""Unit tests for the framework-neutral webhook pipeline."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import pytest

from octogate.credentials import AppCredential
from octogate.errors import LimitExceededError
from octogate.events.payloads import IssuesEvent, PingEvent, PushEvent
from octogate.webhook.pipeline import (
    BodyError,
    WebhookOutcome,
    WebhookPipeline,
    WebhookRequest,
    WebhookResponse,
    read_limited,
)
from tests.helpers import webhook_payloads as wp
from tests.helpers.femtologging_capture import capture_femto_logs

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from octogate.events.envelope import EventEnvelope

_PATH = "/github"


def _request(
    payload: bytes,
    secret: str | None,
    /,
    *,
    method: str = "POST",
    path: str = _PATH,
    event: str | None = None,
    **overrides: typ.Any,
) -> WebhookRequest:
    headers: dict[str, str | bytes] = (
        wp.signed_headers(payload, secret, event=event, delivery="d-1")
        if secret is not None
        else {}
    )
    values: dict[str, typ.Any] = {
        "method": method,
        "path": path,
        "headers": headers,
        "body": payload,
        "content_length": len(payload),
    }
    values.update(overrides)
    return WebhookRequest(**values)


async def _chunks(*parts: bytes) -> cabc.AsyncIterator[bytes]:
    for part in parts:
        yield part


class _Recorder:
    """Async webhook handler that records envelopes."""

    def __init__(self, reply: str | None = None) -> None:
        self.reply = reply
        self.envelopes: list[EventEnvelope[typ.Any]] = []

    async def __call__(self, envelope: EventEnvelope[typ.Any]) -> str | None:
        self.envelopes.append(envelope)
        return self.reply


@pytest.fixture
def recorder() -> _Recorder:
    """Return a handler that records what it receives."""
    return _Recorder()


@pytest.fixture
def pipeline(credential: AppCredential, recorder: _Recorder) -> WebhookPipeline:
    """Return a pipeline on /github with a small body limit."""
    return WebhookPipeline(credential, recorder, path=_PATH, max_body_bytes=4096)


class TestWebhookOutcome:
    """Tests for outcome to status mapping."""

    @pytest.mark.parametrize(
        ("outcome", "status", "body"),
        [
            (WebhookOutcome.REJECTED_NOT_FOUND, HTTPStatus.NOT_FOUND, "Not Found"),
            (
                WebhookOutcome.REJECTED_UNAUTHORIZED,
                HTTPStatus.UNAUTHORIZED,
                "Unauthorized",
            ),
            (
                WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE,
                HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
                "Payload Too Large",
            ),
            (
                WebhookOutcome.REJECTED_BAD_REQUEST,
                HTTPStatus.BAD_REQUEST,
                "Bad Request",
            ),
            (
                WebhookOutcome.REJECTED_INTERNAL_ERROR,
                HTTPStatus.INTERNAL_SERVER_ERROR,
                "Internal Server Error",
            ),
        ],
    )
    def test_rejections(
        self, outcome: WebhookOutcome, status: HTTPStatus, body: str
    ) -> None:
        """Each rejection has a fixed status and generic body."""
        response = WebhookResponse.reject(outcome)
        assert response.status is status
        assert response.status_code == int(status)
        assert response.body == body
        assert not response.accepted

    def test_ok_defaults_body(self) -> None:
        """Accepted responses default to OK."""
        assert WebhookResponse.ok().body == "OK"
        assert WebhookResponse.ok("queued").body == "queued"
        assert WebhookResponse.ok().status_code == 200


class TestWebhookRequest:
    """Tests for header lookups."""

    def test_header_is_case_insensitive(self) -> None:
        """Header names match regardless of case."""
        request = WebhookRequest(
            "POST", "/", headers={"x-hub-signature-256": "sha256=ab"}
        )
        assert request.header("X-Hub-Signature-256") == "sha256=ab"
        assert request.header("X-GitHub-Event") is None

    def test_text_header_decodes_ascii_bytes(self) -> None:
        """Byte values are decoded as ASCII; undecodable ones yield None."""
        request = WebhookRequest(
            "POST",
            "/",
            headers={"x-github-event": b"push", "x-hub-signature-256": b"\xff"},
        )
        assert request.text_header("X-GitHub-Event") == "push"
        assert request.text_header("X-Hub-Signature-256") is None


class TestReadLimited:
    """Tests for read_limited."""

    @pytest.mark.asyncio
    async def test_concatenates_chunks(self) -> None:
        """Chunks within the limit are joined."""
        assert await read_limited(_chunks(b"ab", b"cd"), 4) == b"abcd"

    @pytest.mark.asyncio
    async def test_raises_past_limit(self) -> None:
        """Exceeding the limit raises without consuming the rest."""
        consumed: list[bytes] = []

        async def _tracked() -> cabc.AsyncIterator[bytes]:
            for part in (b"abc", b"def", b"ghi"):
                consumed.append(part)
                yield part

        with pytest.raises(LimitExceededError) as excinfo:
            await read_limited(_tracked(), 4)

        assert excinfo.value.limit == 4
        assert consumed == [b"abc", b"def"], "reading should stop at the limit"


class TestPipelineConstruction:
    """Tests for WebhookPipeline configuration."""

    @pytest.mark.parametrize("limit", [0, -1])
    def test_rejects_non_positive_limit(
        self, credential: AppCredential, limit: int
    ) -> None:
        """The body limit must be positive."""
        with pytest.raises(ValueError, match="max_body_bytes"):
            WebhookPipeline(credential, max_body_bytes=limit)

    def test_matches_route(self, pipeline: WebhookPipeline) -> None:
        """Only POST on the exact path is the webhook route."""
        assert pipeline.matches_route("POST", _PATH)
        assert pipeline.matches_route("post", _PATH)
        assert not pipeline.matches_route("GET", _PATH)
        assert not pipeline.matches_route("POST", "/github/")


class TestProcess:
    """Tests for WebhookPipeline.process outcomes."""

    @pytest.mark.asyncio
    async def test_accepts_signed_delivery(
        self, pipeline: WebhookPipeline, recorder: _Recorder, webhook_secret: str
    ) -> None:
        """A signed, parseable delivery reaches the handler."""
        body = wp.encode(wp.push_payload(installation_id=77))

        response = await pipeline.process(_request(body, webhook_secret, event="push"))

        assert response.outcome is WebhookOutcome.ACCEPTED_OK
        assert response.body == "OK"
        (envelope,) = recorder.envelopes
        assert isinstance(envelope.payload, PushEvent)
        assert envelope.installation_id == 77
        assert envelope.delivery_id == "d-1"

    @pytest.mark.asyncio
    async def test_handler_reply_becomes_body(
        self, credential: AppCredential, webhook_secret: str
    ) -> None:
        """A handler's string reply is returned as the body."""
        pipeline = WebhookPipeline(credential, _Recorder("queued"), path=_PATH)
        body = wp.encode(wp.ping_payload())
        response = await pipeline.process(_request(body, webhook_secret))
        assert response.accepted
        assert response.body == "queued"

    @pytest.mark.asyncio
    async def test_without_handler_accepts(
        self, credential: AppCredential, webhook_secret: str
    ) -> None:
        """A pipeline with no handler still authenticates and parses."""
        pipeline = WebhookPipeline(credential, path=_PATH)
        body = wp.encode(wp.ping_payload())
        response = await pipeline.process(_request(body, webhook_secret))
        assert response.outcome is WebhookOutcome.ACCEPTED_OK

    @pytest.mark.asyncio
    async def test_logs_acceptance(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """Accepted deliveries are logged with event and installation."""
        body = wp.encode(wp.issues_payload(installation_id=5))
        with capture_femto_logs("octogate.webhook.pipeline") as capture:
            await pipeline.process(_request(body, webhook_secret))
            record = capture.wait_for_message("Webhook accepted")
        assert "event=issues" in record.message
        assert "installation=5" in record.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [("POST", "/elsewhere"), ("GET", _PATH), ("PUT", _PATH)],
    )
    async def test_wrong_route_is_not_found(
        self,
        pipeline: WebhookPipeline,
        recorder: _Recorder,
        webhook_secret: str,
        method: str,
        path: str,
    ) -> None:
        """Anything but POST on the webhook path is 404."""
        body = wp.encode(wp.ping_payload())
        response = await pipeline.process(
            _request(body, webhook_secret, method=method, path=path)
        )
        assert response.outcome is WebhookOutcome.REJECTED_NOT_FOUND
        assert recorder.envelopes == []

    @pytest.mark.asyncio
    async def test_missing_signature_is_unauthorized(
        self, pipeline: WebhookPipeline
    ) -> None:
        """Deliveries without a signature header are 401."""
        response = await pipeline.process(_request(wp.encode(wp.ping_payload()), None))
        assert response.outcome is WebhookOutcome.REJECTED_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_undecodable_signature_is_bad_request(
        self, pipeline: WebhookPipeline
    ) -> None:
        """A signature header that is not ASCII is 400."""
        body = wp.encode(wp.ping_payload())
        request = _request(body, None, headers={"X-Hub-Signature-256": b"sha256=\xff"})
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_tampered_body_is_unauthorized(
        self, pipeline: WebhookPipeline, recorder: _Recorder, webhook_secret: str
    ) -> None:
        """A body changed after signing is 401 and never reaches the handler."""
        body = wp.encode(wp.ping_payload())
        request = _request(body, webhook_secret)
        tampered = _request(
            body.replace(b"awesome", b"AWESOME"),
            None,
            headers=dict(request.headers),
        )
        response = await pipeline.process(tampered)
        assert response.outcome is WebhookOutcome.REJECTED_UNAUTHORIZED
        assert recorder.envelopes == []

    @pytest.mark.asyncio
    async def test_no_secret_rejects_everything(
        self, credential_without_secret: AppCredential, webhook_secret: str
    ) -> None:
        """Without a configured secret every delivery is 401."""
        pipeline = WebhookPipeline(credential_without_secret, path=_PATH)
        body = wp.encode(wp.ping_payload())
        response = await pipeline.process(_request(body, webhook_secret))
        assert response.outcome is WebhookOutcome.REJECTED_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_declared_length_over_limit(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """A Content-Length over the limit is 413 before any body check."""
        body = wp.encode(wp.ping_payload())
        request = _request(body, webhook_secret, content_length=10 * 1024 * 1024)
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE

    @pytest.mark.asyncio
    async def test_body_over_limit(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """A body longer than the limit is 413 even without Content-Length."""
        body = b" " * 5000 + wp.encode(wp.ping_payload())
        request = _request(body, webhook_secret, content_length=None)
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE

    @pytest.mark.asyncio
    async def test_adapter_reported_too_large(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """An adapter's streaming limit failure is 413."""
        request = _request(
            b"", webhook_secret, body=None, body_error=BodyError.TOO_LARGE
        )
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_PAYLOAD_TOO_LARGE

    @pytest.mark.asyncio
    async def test_unreadable_body_is_bad_request(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """A body the adapter could not read is 400."""
        request = _request(
            b"", webhook_secret, body=None, body_error=BodyError.READ_FAILED
        )
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_read_failure_wins_over_partial_body(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """A read failure is 400 even when some bytes arrived."""
        body = wp.encode(wp.ping_payload())
        request = _request(body, webhook_secret, body_error=BodyError.READ_FAILED)
        response = await pipeline.process(request)
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_non_utf8_body_is_bad_request(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """Bodies that are not UTF-8 are 400, even when correctly signed."""
        body = b'{"zen": "\xff", "hook_id": 1}'
        response = await pipeline.process(_request(body, webhook_secret))
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_malformed_json_is_bad_request(
        self, pipeline: WebhookPipeline, webhook_secret: str
    ) -> None:
        """A signed body that is not JSON is 400."""
        response = await pipeline.process(_request(b"{not json", webhook_secret))
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_unknown_shape_is_bad_request(
        self, pipeline: WebhookPipeline, recorder: _Recorder, webhook_secret: str
    ) -> None:
        """A signed body that matches no event is 400."""
        response = await pipeline.process(_request(b'{"mystery": 1}', webhook_secret))
        assert response.outcome is WebhookOutcome.REJECTED_BAD_REQUEST
        assert recorder.envelopes == []

    @pytest.mark.asyncio
    async def test_event_header_selects_shape(
        self, pipeline: WebhookPipeline, recorder: _Recorder, webhook_secret: str
    ) -> None:
        """The X-GitHub-Event header decides the payload shape."""
        body = wp.encode(wp.issue_comment_payload())
        await pipeline.process(_request(body, webhook_secret, event="issues"))
        assert type(recorder.envelopes[0].payload) is IssuesEvent

    @pytest.mark.asyncio
    async def test_restricted_payload_type(
        self, credential: AppCredential, webhook_secret: str
    ) -> None:
        """Pipelines limited to some events reject the rest as 400."""
        pipeline = WebhookPipeline(credential, path=_PATH, payload_type=PingEvent)
        push = await pipeline.process(
            _request(wp.encode(wp.push_payload()), webhook_secret)
        )
        ping = await pipeline.process(
            _request(wp.encode(wp.ping_payload()), webhook_secret)
        )
        assert push.outcome is WebhookOutcome.REJECTED_BAD_REQUEST
        assert ping.outcome is WebhookOutcome.ACCEPTED_OK

    @pytest.mark.asyncio
    async def test_handler_failure_is_internal_error(
        self, credential: AppCredential, webhook_secret: str
    ) -> None:
        """Handler exceptions become 500 and are logged with the exception."""
        failure = RuntimeError("downstream unavailable")

        async def _failing(_envelope: EventEnvelope[typ.Any]) -> str | None:
            raise failure

        pipeline = WebhookPipeline(credential, _failing, path=_PATH)
        body = wp.encode(wp.ping_payload())

        with capture_femto_logs("octogate.webhook.pipeline") as capture:
            response = await pipeline.process(_request(body, webhook_secret))
            record = capture.wait_for_message("Webhook handler failed")

        assert response.outcome is WebhookOutcome.REJECTED_INTERNAL_ERROR
        assert response.body == "Internal Server Error"
        assert "downstream" not in response.body
        assert record.level == "ERROR"
