"""HMAC-SHA256 webhook signatures.

GitHub signs each delivery with the webhook shared secret and sends the
result in ``X-Hub-Signature-256`` as ``sha256=<hex digest>``.

Example:
>>> signature = compute_signature(b"{}", "a-long-shared-secret")
>>> verify_signature(b"{}", signature, "a-long-shared-secret")
True

"""

from __future__ import annotations

import hashlib
import hmac

from octogate.errors import SignatureError

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Return the ``sha256=``-prefixed HMAC signature for ``body``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> bool:
    """Return whether ``signature`` authenticates ``body`` under ``secret``.

    Never raises: a missing secret, a missing signature or one without the
    ``sha256=`` prefix all verify as ``False``. The digest comparison is
    constant time.

    Parameters
    ----------
    body
        Raw request body exactly as received.
    signature
        Value of the ``X-Hub-Signature-256`` header.
    secret
        Webhook shared secret, or ``None`` when none is configured.

    Returns
    -------
    bool
        ``True`` only when the presented digest matches.

    """
    if not secret or signature is None:
        return False
    if not signature.startswith(SIGNATURE_PREFIX):
        return False

    presented = signature.removeprefix(SIGNATURE_PREFIX).lower()
    expected = compute_signature(body, secret).removeprefix(SIGNATURE_PREFIX)
    return hmac.compare_digest(expected.encode("ascii"), presented.encode("utf-8"))


def require_signature(body: bytes, signature: str | None, secret: str) -> None:
    """Raise unless ``signature`` authenticates ``body`` under ``secret``.

    The raising counterpart of :func:`verify_signature`, for callers that
    want to report why a signature was refused.

    Raises
    ------
    SignatureError
        If the signature is missing, lacks the ``sha256=`` prefix, or does
        not match.

    """
    if signature is None:
        raise SignatureError.missing_header()
    if not signature.startswith(SIGNATURE_PREFIX):
        raise SignatureError.malformed_header()
    if not verify_signature(body, signature, secret):
        raise SignatureError.mismatch()


__all__ = [
    "SIGNATURE_HEADER",
    "SIGNATURE_PREFIX",
    "compute_signature",
    "require_signature",
    "verify_signature",
]
