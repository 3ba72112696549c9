"""Typed GitHub webhook events and the envelope parser."""

from __future__ import annotations

from .envelope import (
    EventEnvelope,
    decode_payload,
    extract_installation_id,
    parse_webhook,
)
from .payloads import (
    InstallationEvent,
    IssueCommentEvent,
    IssuesEvent,
    PingEvent,
    PullRequestEvent,
    PushEvent,
    WebhookPayload,
)
from .taxonomy import (
    EVENT_TYPES,
    Event,
    event_name_for,
    event_names,
    payload_type_for,
)

__all__ = [
    "EVENT_TYPES",
    "Event",
    "EventEnvelope",
    "InstallationEvent",
    "IssueCommentEvent",
    "IssuesEvent",
    "PingEvent",
    "PullRequestEvent",
    "PushEvent",
    "WebhookPayload",
    "decode_payload",
    "event_name_for",
    "event_names",
    "payload_type_for",
    "parse_webhook",
]
