"""Error taxonomy shared by the credential store, verifier and parser.

Every failure raised by octogate derives from :class:`OctogateError` so
callers can catch the whole family at one point. Configuration failures
derive from :class:`CredentialError`; payload failures derive from
:class:`PayloadDecodeError`. Messages never contain secret material.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

MIN_SECRET_LENGTH = 8


class OctogateError(Exception):
    """Base exception for all octogate errors."""


class CredentialError(OctogateError):
    """Raised when App credentials cannot be built from configuration."""


class MissingFieldError(CredentialError):
    """Raised when a required configuration field is absent.

    Attributes
    ----------
    field
        Name of the missing field.

    """

    def __init__(self, field: str) -> None:
        """Record the missing field name."""
        self.field = field
        super().__init__(f"Missing required field: {field}")

    @classmethod
    def app_id(cls) -> MissingFieldError:
        """Return an error for a missing App identifier."""
        return cls("app_id")

    @classmethod
    def signing_key(cls) -> MissingFieldError:
        """Return an error for a missing RSA signing key."""
        return cls("signing_key")

    @classmethod
    def webhook_secret(cls) -> MissingFieldError:
        """Return an error for a missing webhook shared secret."""
        return cls("webhook_secret")


class InvalidFieldError(CredentialError, ValueError):
    """Raised when a configuration field has an unusable value."""

    def __init__(self, field: str, reason: str) -> None:
        """Record the field name and the validation failure."""
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid value for {field}: {reason}")

    @classmethod
    def app_id(cls, raw: object) -> InvalidFieldError:
        """Return an error for an App id that is not a positive integer."""
        return cls("app_id", f"expected a positive integer, got {raw!r}")


class WebhookSecretError(CredentialError):
    """Raised when the webhook shared secret is too short.

    Attributes
    ----------
    length
        Length of the rejected secret.

    """

    def __init__(self, length: int) -> None:
        """Record the rejected secret length (never the secret)."""
        self.length = length
        super().__init__(
            f"Webhook secret is less than {MIN_SECRET_LENGTH} characters: {length}"
        )


class KeyFileError(CredentialError):
    """Raised when the private key file cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        """Record the key path and the underlying I/O failure."""
        self.path = path
        super().__init__(f"Cannot read private key file {path}: {reason}")


class InvalidPrivateKeyError(CredentialError):
    """Raised when key material is not a PEM-encoded RSA private key."""

    @classmethod
    def not_rsa(cls) -> InvalidPrivateKeyError:
        """Return an error for a PEM key that is not RSA."""
        return cls("Private key must be an RSA key")

    @classmethod
    def unparseable(cls) -> InvalidPrivateKeyError:
        """Return an error for key material that cannot be parsed."""
        return cls("Private key is not a valid PEM-encoded RSA key")


class SignatureError(OctogateError):
    """Raised when a webhook signature is missing, malformed or invalid."""

    @classmethod
    def missing_header(cls) -> SignatureError:
        """Return an error for requests without a signature header."""
        return cls("Missing X-Hub-Signature-256 header")

    @classmethod
    def malformed_header(cls) -> SignatureError:
        """Return an error for a signature header that cannot be decoded."""
        return cls("Malformed X-Hub-Signature-256 header")

    @classmethod
    def mismatch(cls) -> SignatureError:
        """Return an error for a signature that does not verify."""
        return cls("Failed to validate the request signature")


class LimitExceededError(OctogateError):
    """Raised when a request body exceeds the configured size limit."""

    def __init__(self, limit: int) -> None:
        """Record the limit that was exceeded."""
        self.limit = limit
        super().__init__(f"Data limit exceeded ({limit} bytes)")


class PayloadDecodeError(OctogateError):
    """Raised when a webhook body is not valid JSON."""


class UnknownEventError(PayloadDecodeError):
    """Raised when a webhook body matches none of the known event shapes."""

    @classmethod
    def no_match(cls) -> UnknownEventError:
        """Return an error for payloads matching no known event."""
        return cls("Payload does not match any known webhook event")

    @classmethod
    def for_event(cls, event_name: str, detail: str) -> UnknownEventError:
        """Return an error for a payload that does not fit its named event."""
        return cls(f"Payload does not match the {event_name!r} event: {detail}")


__all__ = [
    "MIN_SECRET_LENGTH",
    "CredentialError",
    "InvalidFieldError",
    "InvalidPrivateKeyError",
    "KeyFileError",
    "LimitExceededError",
    "MissingFieldError",
    "OctogateError",
    "PayloadDecodeError",
    "SignatureError",
    "UnknownEventError",
    "WebhookSecretError",
]
