"""GitHub App credential store.

Credentials are assembled in two steps. :class:`CredentialSettings` collects
raw, optional values from the environment and from explicit overrides; its
:meth:`~CredentialSettings.build` step validates them and returns an
immutable :class:`AppCredential`. Nothing partially valid is ever returned.

Usage
-----
Load from the environment, overriding the secret explicitly::

    settings = CredentialSettings.from_env().override(
        webhook_secret="a-long-shared-secret",
    )
    credential = settings.build()

Or in one call::

    credential = build_credential(app_id=12345)

Environment variables
---------------------
``APP_NAME``, ``APP_ID``, ``CLIENT_ID``, ``CLIENT_SECRET``, ``CLIENT_KEY``
(inline PEM), ``PRIVATE_KEY_PATH`` and ``WEBHOOK_SECRET``. When both an
inline key and a key path are present the inline key wins and the file is
never read.

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from octogate.errors import (
    MIN_SECRET_LENGTH,
    InvalidFieldError,
    InvalidPrivateKeyError,
    KeyFileError,
    MissingFieldError,
    WebhookSecretError,
)
from octogate.logging import get_logger, log_debug, log_warning
from octogate.signature import (
    compute_signature,
    require_signature,
    verify_signature,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = [
    "AppCredential",
    "CredentialSettings",
    "build_credential",
]

logger = get_logger(__name__)

_RECOMMENDED_SECRET_LENGTH = 16

_ENV_FIELDS: dict[str, str] = {
    "app_name": "APP_NAME",
    "app_id": "APP_ID",
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "private_key": "CLIENT_KEY",
    "private_key_path": "PRIVATE_KEY_PATH",
    "webhook_secret": "WEBHOOK_SECRET",
}


@dc.dataclass(frozen=True, slots=True)
class AppCredential:
    """Validated, immutable GitHub App identity.

    Attributes
    ----------
    app_id
        Numeric GitHub App identifier.
    app_name
        Optional display name.
    client_id
        Optional OAuth client id.
    client_secret
        Optional OAuth client secret. Hidden from ``repr()``.
    signing_key
        Optional RSA private key used to sign App JWTs. Hidden from ``repr()``.
    webhook_secret
        Optional webhook shared secret. Hidden from ``repr()``.

    """

    app_id: int
    app_name: str | None = None
    client_id: str | None = None
    client_secret: str | None = dc.field(default=None, repr=False)
    signing_key: rsa.RSAPrivateKey | None = dc.field(default=None, repr=False)
    webhook_secret: str | None = dc.field(default=None, repr=False)

    def __str__(self) -> str:
        """Return a display form that omits every secret field."""
        return f"AppCredential {{ app_name: {self.app_name!r}, app_id: {self.app_id} }}"

    @property
    def has_signing_key(self) -> bool:
        """Return whether App JWTs can be signed with this credential."""
        return self.signing_key is not None

    @property
    def has_webhook_secret(self) -> bool:
        """Return whether webhook signatures can be verified."""
        return self.webhook_secret is not None

    def require_signing_key(self) -> rsa.RSAPrivateKey:
        """Return the signing key or raise when none is configured.

        Raises
        ------
        MissingFieldError
            If the credential was built without a private key.

        """
        if self.signing_key is None:
            raise MissingFieldError.signing_key()
        return self.signing_key

    def verify_signature(self, body: bytes, signature: str | None) -> bool:
        """Verify a webhook signature against the configured secret.

        Returns ``False`` rather than raising when no secret is configured or
        the signature is malformed.
        """
        return verify_signature(body, signature, self.webhook_secret)

    def check_signature(self, body: bytes, signature: str | None) -> None:
        """Raise unless ``signature`` authenticates ``body``.

        Raises
        ------
        MissingFieldError
            If no webhook secret is configured.
        SignatureError
            If the signature is missing, malformed or does not match.

        """
        if self.webhook_secret is None:
            raise MissingFieldError.webhook_secret()
        require_signature(body, signature, self.webhook_secret)

    def sign_payload(self, body: bytes) -> str:
        """Return the ``X-Hub-Signature-256`` value GitHub would send for ``body``.

        Raises
        ------
        MissingFieldError
            If no webhook secret is configured.

        """
        if self.webhook_secret is None:
            raise MissingFieldError.webhook_secret()
        return compute_signature(body, self.webhook_secret)


def _parse_app_id(raw: int | str | None) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MissingFieldError.app_id()
    if isinstance(raw, bool):
        raise InvalidFieldError.app_id(raw)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidFieldError.app_id(raw) from exc
    if value <= 0:
        raise InvalidFieldError.app_id(raw)
    return value


def _validate_webhook_secret(secret: str | None) -> str | None:
    if secret is None:
        return None
    length = len(secret)
    if length < MIN_SECRET_LENGTH:
        raise WebhookSecretError(length)
    if length < _RECOMMENDED_SECRET_LENGTH:
        log_warning(
            logger,
            "Webhook secret is less than %d characters",
            _RECOMMENDED_SECRET_LENGTH,
        )
    return secret


def _load_rsa_key(pem: bytes) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidPrivateKeyError.unparseable() from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidPrivateKeyError.not_rsa()
    return key


def _read_key_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise KeyFileError(path, exc.strerror or type(exc).__name__) from exc


def _resolve_signing_key(
    private_key: str | None, private_key_path: Path | None
) -> rsa.RSAPrivateKey | None:
    """Parse the signing key, preferring inline material over a key file."""
    if private_key is not None and private_key.strip():
        # Env files commonly carry PEM blocks with escaped newlines.
        pem = private_key.replace("\\n", "\n")
        return _load_rsa_key(pem.encode("utf-8"))
    if private_key_path is not None:
        return _load_rsa_key(_read_key_file(private_key_path))
    return None


@dc.dataclass(frozen=True, slots=True)
class CredentialSettings:
    """Raw, unvalidated credential inputs.

    Every field is optional here; :meth:`build` enforces the invariants.
    """

    app_id: int | str | None = None
    app_name: str | None = None
    client_id: str | None = None
    client_secret: str | None = dc.field(default=None, repr=False)
    private_key: str | None = dc.field(default=None, repr=False)
    private_key_path: Path | None = None
    webhook_secret: str | None = dc.field(default=None, repr=False)

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> CredentialSettings:
        """Collect credential inputs from environment variables.

        Parameters
        ----------
        environ
            Mapping to read from. Defaults to ``os.environ``.

        Returns
        -------
        CredentialSettings
            Settings holding whichever variables were present.

        """
        source = os.environ if environ is None else environ
        values: dict[str, typ.Any] = {}
        for field_name, env_var in _ENV_FIELDS.items():
            raw = source.get(env_var)
            if raw is not None:
                values[field_name] = raw
        if "private_key_path" in values:
            values["private_key_path"] = Path(values["private_key_path"])
        return cls(**values)

    def override(self, **changes: typ.Any) -> CredentialSettings:  # noqa: ANN401
        """Return a copy with explicit values replacing loaded ones.

        ``None`` values are ignored so that an unset option never erases a
        value read from the environment.
        """
        explicit = {key: value for key, value in changes.items() if value is not None}
        if "private_key_path" in explicit:
            explicit["private_key_path"] = Path(explicit["private_key_path"])
        return dc.replace(self, **explicit)

    def build(self) -> AppCredential:
        """Validate the inputs and return an immutable credential.

        Raises
        ------
        MissingFieldError
            If no App id was supplied.
        InvalidFieldError
            If the App id is not a positive integer.
        WebhookSecretError
            If the webhook secret is shorter than eight characters.
        KeyFileError
            If the private key file cannot be read.
        InvalidPrivateKeyError
            If the key material is not a PEM-encoded RSA private key.

        """
        log_debug(logger, "Building AppCredential from CredentialSettings")
        app_id = _parse_app_id(self.app_id)
        webhook_secret = _validate_webhook_secret(self.webhook_secret)
        signing_key = _resolve_signing_key(self.private_key, self.private_key_path)
        return AppCredential(
            app_id=app_id,
            app_name=self.app_name,
            client_id=self.client_id,
            client_secret=self.client_secret,
            signing_key=signing_key,
            webhook_secret=webhook_secret,
        )


def build_credential(
    environ: cabc.Mapping[str, str] | None = None,
    **overrides: typ.Any,  # noqa: ANN401
) -> AppCredential:
    """Build a credential from the environment plus explicit overrides."""
    return CredentialSettings.from_env(environ).override(**overrides).build()
