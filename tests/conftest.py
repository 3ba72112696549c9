"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from octogate.credentials import AppCredential

WEBHOOK_SECRET = "a-sufficiently-long-secret"
APP_ID = 12345


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Generate one RSA key per session; key generation is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> str:
    """Return the session RSA key as an unencrypted PKCS#8 PEM string."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def webhook_secret() -> str:
    """Return the webhook secret shared by the test credential."""
    return WEBHOOK_SECRET


@pytest.fixture
def credential(rsa_private_key: rsa.RSAPrivateKey) -> AppCredential:
    """Return a fully populated App credential."""
    return AppCredential(
        app_id=APP_ID,
        app_name="octogate-test",
        client_id="Iv1.0123456789abcdef",
        client_secret="client-secret-value",
        signing_key=rsa_private_key,
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
def credential_without_secret(rsa_private_key: rsa.RSAPrivateKey) -> AppCredential:
    """Return a credential that cannot verify webhook signatures."""
    return AppCredential(app_id=APP_ID, signing_key=rsa_private_key)
