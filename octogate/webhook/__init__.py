"""Webhook authentication pipeline shared by the HTTP adapters."""

from __future__ import annotations

from .pipeline import (
    DEFAULT_MAX_BODY_BYTES,
    BodyError,
    WebhookHandler,
    WebhookOutcome,
    WebhookPipeline,
    WebhookRequest,
    WebhookResponse,
    read_limited,
)

__all__ = [
    "DEFAULT_MAX_BODY_BYTES",
    "BodyError",
    "WebhookHandler",
    "WebhookOutcome",
    "WebhookPipeline",
    "WebhookRequest",
    "WebhookResponse",
    "read_limited",
]
