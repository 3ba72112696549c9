"""Unit tests for two-pass webhook parsing."""

from __future__ import annotations

import msgspec
import pytest

from octogate.errors import PayloadDecodeError, UnknownEventError
from octogate.events.envelope import (
    EventEnvelope,
    decode_payload,
    extract_installation_id,
    parse_webhook,
)
from octogate.events.payloads import (
    IssueCommentEvent,
    IssuesEvent,
    PingEvent,
    PullRequestEvent,
    PushEvent,
    RepositoryEvent,
    StarEvent,
)
from tests.helpers import webhook_payloads as wp


class _RecordingResolver:
    """Stands in for InstallationResolver and records requested ids."""

    def __init__(self) -> None:
        self.requested: list[int] = []

    async def client_for_installation(self, installation_id: int) -> str:
        self.requested.append(installation_id)
        return f"client-{installation_id}"


class TestExtractInstallationId:
    """Tests for extract_installation_id."""

    def test_reads_installation_id(self) -> None:
        """installation.id is returned when present."""
        raw = wp.encode(wp.push_payload(installation_id=2311213))
        assert extract_installation_id(raw) == 2311213

    def test_accepts_text(self) -> None:
        """Text bodies are accepted as well as bytes."""
        assert extract_installation_id('{"installation": {"id": 9}}') == 9

    @pytest.mark.parametrize(
        "raw",
        [
            b"{}",
            b'{"installation": null}',
            b'{"installation": {}}',
            b'{"installation": {"id": "12"}}',
            b'{"installation": "12"}',
            b'{"installation": {"id": -5}}',
            b"[1, 2, 3]",
            b"not json",
            b"",
        ],
        ids=[
            "absent",
            "null",
            "no-id",
            "string-id",
            "string-installation",
            "negative",
            "array",
            "malformed",
            "empty",
        ],
    )
    def test_defaults_to_zero(self, raw: bytes) -> None:
        """Anything but a non-negative integer id yields 0 without raising."""
        assert extract_installation_id(raw) == 0


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_malformed_json(self) -> None:
        """Invalid JSON raises PayloadDecodeError, not UnknownEventError."""
        with pytest.raises(PayloadDecodeError) as excinfo:
            decode_payload(b'{"zen": ')
        assert not isinstance(excinfo.value, UnknownEventError)

    def test_no_matching_shape(self) -> None:
        """A document fitting no shape raises UnknownEventError."""
        with pytest.raises(UnknownEventError, match="any known webhook event"):
            decode_payload(b'{"unexpected": true}')

    def test_non_object_document(self) -> None:
        """A JSON array fits no shape."""
        with pytest.raises(UnknownEventError):
            decode_payload(b"[]")

    def test_single_payload_type(self) -> None:
        """A single payload class is decoded directly."""
        decoded = decode_payload(wp.encode(wp.push_payload()), PushEvent)
        assert isinstance(decoded, PushEvent)
        assert decoded.ref == "refs/heads/main"
        assert decoded.commits[0].modified == ["README.md"]

    def test_single_payload_type_mismatch(self) -> None:
        """A body that does not fit the requested class names that event."""
        with pytest.raises(UnknownEventError, match="'push'"):
            decode_payload(wp.encode(wp.ping_payload()), PushEvent)

    def test_event_hint_selects_shape(self) -> None:
        """The X-GitHub-Event name bypasses shape detection."""
        body = wp.encode(wp.issue_comment_payload())
        decoded = decode_payload(body, event_name="issues")
        assert type(decoded) is IssuesEvent, "hint should win over detection"

    def test_event_hint_mismatch_raises(self) -> None:
        """A hinted shape that does not fit is an error, not a fallback."""
        with pytest.raises(UnknownEventError, match="'star'"):
            decode_payload(wp.encode(wp.watch_payload()), event_name="star")

    def test_unknown_hint_falls_back_to_detection(self) -> None:
        """Unrecognised event names are ignored."""
        decoded = decode_payload(wp.encode(wp.ping_payload()), event_name="brand_new")
        assert isinstance(decoded, PingEvent)

    def test_hint_outside_candidates_is_ignored(self) -> None:
        """A hint for a shape the caller excluded does not widen the target."""
        target = IssuesEvent | IssueCommentEvent
        decoded = decode_payload(
            wp.encode(wp.issue_comment_payload()), target, event_name="push"
        )
        assert type(decoded) is IssueCommentEvent

    def test_sub_union(self) -> None:
        """Only the given shapes are tried."""
        with pytest.raises(UnknownEventError):
            decode_payload(wp.encode(wp.ping_payload()), IssuesEvent | PushEvent)

    def test_literal_action_separates_overlapping_shapes(self) -> None:
        """star and repository share fields; the action literal decides."""
        star = decode_payload(wp.encode(wp.star_payload()))
        renamed = decode_payload(wp.encode(wp.repository_payload()))
        assert isinstance(star, StarEvent)
        assert isinstance(renamed, RepositoryEvent)

    def test_unknown_fields_are_ignored(self) -> None:
        """Fields GitHub adds later do not break decoding."""
        payload = wp.ping_payload()
        payload["brand_new_field"] = {"nested": [1, 2, 3]}
        assert isinstance(decode_payload(wp.encode(payload)), PingEvent)


class TestParseWebhook:
    """Tests for parse_webhook and EventEnvelope."""

    def test_envelope_carries_installation_and_payload(self) -> None:
        """The envelope pairs the payload with its installation id."""
        body = wp.encode(wp.pull_request_payload(installation_id=42))
        delivery = "72d3162e-cc78-11e3-81ab-4c9367dc0958"
        envelope = parse_webhook(body, delivery_id=delivery)

        assert envelope.installation_id == 42
        assert envelope.has_installation
        assert envelope.event_name == "pull_request"
        assert envelope.delivery_id == "72d3162e-cc78-11e3-81ab-4c9367dc0958"
        assert isinstance(envelope.payload, PullRequestEvent)
        assert envelope.payload.pull_request.head.sha == wp.HEAD_SHA

    def test_missing_installation_is_zero(self) -> None:
        """Deliveries without an installation still parse."""
        envelope = parse_webhook(wp.encode(wp.ping_payload()))
        assert envelope.installation_id == 0
        assert not envelope.has_installation

    def test_malformed_installation_id_does_not_fail_parse(self) -> None:
        """A bad installation id degrades to 0; the payload still decodes."""
        payload = wp.push_payload()
        payload["installation"] = {"id": "not-a-number"}
        envelope = parse_webhook(wp.encode(payload), PushEvent)
        assert envelope.installation_id == 0
        assert isinstance(envelope.payload, PushEvent)

    @pytest.mark.parametrize(
        "installation",
        [{}, {"node_id": "MDIzOkluc3RhbGxhdGlvbjE="}, {"id": "12"}, {"id": None}],
        ids=["empty", "no-id", "string-id", "null-id"],
    )
    def test_loose_installation_still_detects_event(
        self, installation: dict[str, object]
    ) -> None:
        """Shape detection ignores whatever the installation object holds."""
        for document, expected in (
            (wp.ping_payload(), PingEvent),
            (wp.push_payload(), PushEvent),
        ):
            document["installation"] = installation
            envelope = parse_webhook(wp.encode(document))
            assert isinstance(envelope.payload, expected), envelope.event_name
            assert envelope.installation_id == 0
            assert not envelope.has_installation

    def test_into_inner(self) -> None:
        """into_inner returns the payload."""
        envelope = parse_webhook(wp.encode(wp.ping_payload()), PingEvent)
        payload = envelope.into_inner()
        assert isinstance(payload, PingEvent)
        assert payload.zen == wp.ZEN

    def test_to_json_round_trips_the_payload(self) -> None:
        """to_json re-encodes the decoded payload."""
        envelope = parse_webhook(wp.encode(wp.ping_payload(hook_id=7)), PingEvent)
        document = msgspec.json.decode(envelope.to_json())
        assert document["zen"] == wp.ZEN
        assert document["hook_id"] == 7

    def test_envelope_is_frozen(self) -> None:
        """Envelopes are immutable."""
        envelope = EventEnvelope(payload=PingEvent(zen="z", hook_id=1))
        with pytest.raises(AttributeError):
            envelope.installation_id = 5  # type: ignore[misc]

    def test_errors_propagate(self) -> None:
        """Payload failures surface even when the id was found."""
        with pytest.raises(UnknownEventError):
            parse_webhook(b'{"installation": {"id": 3}}')

    @pytest.mark.asyncio
    async def test_installation_client_uses_resolver(self) -> None:
        """installation_client asks the resolver for this installation."""
        resolver = _RecordingResolver()
        envelope = parse_webhook(wp.encode(wp.push_payload(installation_id=99)))

        client = await envelope.installation_client(resolver)  # type: ignore[arg-type]

        assert client == "client-99"
        assert resolver.requested == [99]


class TestPayloadHelpers:
    """Tests for convenience properties on decoded payloads."""

    def test_repository_owner_login(self) -> None:
        """The owner is taken from the repository's full name."""
        payload = decode_payload(wp.encode(wp.star_payload("created")), StarEvent)
        assert payload.repository.owner_login == "octocat"

    def test_issue_backed_by_pull_request(self) -> None:
        """Issues carrying a pull_request link report it."""
        document = wp.issue_comment_payload()
        document["issue"]["pull_request"] = {"url": "https://example.invalid/pr/1"}
        payload = decode_payload(wp.encode(document), IssueCommentEvent)
        assert payload.issue.is_pull_request

    def test_plain_issue(self) -> None:
        """Issues without a pull_request link are plain issues."""
        payload = decode_payload(wp.encode(wp.issues_payload()), IssuesEvent)
        assert not payload.issue.is_pull_request
