"""Unit tests for webhook HMAC signatures."""

from __future__ import annotations

import hashlib
import hmac

import pytest

from octogate.errors import SignatureError
from octogate.signature import (
    SIGNATURE_PREFIX,
    compute_signature,
    require_signature,
    verify_signature,
)

SECRET = "It's a Secret to Everybody"
BODY = b"Hello, World!"
# Published example from the GitHub webhook validation documentation.
GITHUB_EXAMPLE = (
    "sha256=757107ea0eb2509fc211221cce984b8a37570b6d7586c22c46f4379c8b043e17"
)


class TestComputeSignature:
    """Tests for compute_signature."""

    def test_matches_github_documented_example(self) -> None:
        """The digest matches GitHub's published example."""
        assert compute_signature(BODY, SECRET) == GITHUB_EXAMPLE, "wrong digest"

    def test_is_prefixed_hex_sha256(self) -> None:
        """The value is sha256= followed by the hex HMAC."""
        expected = hmac.new(b"secret-value", b"{}", hashlib.sha256).hexdigest()
        assert compute_signature(b"{}", "secret-value") == f"sha256={expected}"


class TestVerifySignature:
    """Tests for verify_signature."""

    def test_accepts_valid_signature(self) -> None:
        """A matching signature verifies."""
        assert verify_signature(BODY, GITHUB_EXAMPLE, SECRET) is True

    def test_accepts_uppercase_hex(self) -> None:
        """Hex digits are compared case-insensitively."""
        digest = GITHUB_EXAMPLE.removeprefix(SIGNATURE_PREFIX).upper()
        assert verify_signature(BODY, f"{SIGNATURE_PREFIX}{digest}", SECRET) is True

    @pytest.mark.parametrize(
        ("body", "signature", "secret"),
        [
            (b"Hello, World?", GITHUB_EXAMPLE, SECRET),
            (BODY, GITHUB_EXAMPLE, "a different secret"),
            (BODY, GITHUB_EXAMPLE.removeprefix(SIGNATURE_PREFIX), SECRET),
            (BODY, GITHUB_EXAMPLE.replace("sha256=", "sha1="), SECRET),
            (BODY, "sha256=not-hex", SECRET),
            (BODY, "sha256=", SECRET),
            (BODY, None, SECRET),
            (BODY, GITHUB_EXAMPLE, None),
            (BODY, GITHUB_EXAMPLE, ""),
        ],
        ids=[
            "tampered-body",
            "wrong-secret",
            "missing-prefix",
            "wrong-algorithm",
            "non-hex-digest",
            "empty-digest",
            "no-signature",
            "no-secret",
            "empty-secret",
        ],
    )
    def test_rejects(
        self, body: bytes, signature: str | None, secret: str | None
    ) -> None:
        """Anything but an exact match verifies as False without raising."""
        assert verify_signature(body, signature, secret) is False

    def test_rejects_non_ascii_signature(self) -> None:
        """A signature with non-ASCII characters is refused, not an error."""
        assert verify_signature(BODY, "sha256=éé", SECRET) is False


class TestRequireSignature:
    """Tests for require_signature."""

    def test_passes_for_valid_signature(self) -> None:
        """A valid signature returns None."""
        assert require_signature(BODY, GITHUB_EXAMPLE, SECRET) is None

    @pytest.mark.parametrize(
        ("signature", "fragment"),
        [
            (None, "Missing"),
            ("md5=abc", "Malformed"),
            ("sha256=" + "0" * 64, "Failed to validate"),
        ],
    )
    def test_raises_with_reason(self, signature: str | None, fragment: str) -> None:
        """Each refusal names its reason."""
        with pytest.raises(SignatureError, match=fragment):
            require_signature(BODY, signature, SECRET)
