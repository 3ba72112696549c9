"""octogate: GitHub App credentials, webhook verification and typed events.

Usage
-----
Verify and parse a delivery by hand::

    from octogate import build_credential, parse_webhook

    credential = build_credential()
    if credential.verify_signature(body, signature):
        envelope = parse_webhook(body)

Serve deliveries with the Falcon adapter::

    from octogate.api import AppDependencies, create_app
    from octogate.webhook import WebhookPipeline

    app = create_app(AppDependencies(pipeline=WebhookPipeline(credential, handler)))

"""

from __future__ import annotations

from octogate.credentials import AppCredential, CredentialSettings, build_credential
from octogate.errors import (
    CredentialError,
    LimitExceededError,
    MissingFieldError,
    OctogateError,
    PayloadDecodeError,
    SignatureError,
    UnknownEventError,
    WebhookSecretError,
)
from octogate.events import Event, EventEnvelope, parse_webhook
from octogate.github import InstallationError, InstallationResolver
from octogate.signature import compute_signature, verify_signature

__all__ = [
    "AppCredential",
    "CredentialError",
    "CredentialSettings",
    "Event",
    "EventEnvelope",
    "InstallationError",
    "InstallationResolver",
    "LimitExceededError",
    "MissingFieldError",
    "OctogateError",
    "PayloadDecodeError",
    "SignatureError",
    "UnknownEventError",
    "WebhookSecretError",
    "build_credential",
    "compute_signature",
    "parse_webhook",
    "verify_signature",
]
