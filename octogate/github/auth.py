"""GitHub App JWT signing.

GitHub accepts App JWTs valid for at most ten minutes. Tokens are backdated
by sixty seconds to tolerate clock drift and expire nine minutes after
issue.
"""

from __future__ import annotations

import datetime as dt
import typing as typ

import jwt

from .errors import JsonWebTokenError

if typ.TYPE_CHECKING:
    from octogate.credentials import AppCredential

JWT_ALGORITHM = "RS256"
JWT_BACKDATE = dt.timedelta(seconds=60)
JWT_LIFETIME = dt.timedelta(minutes=9)


def encode_app_jwt(credential: AppCredential, *, now: dt.datetime | None = None) -> str:
    """Return an RS256 JWT authenticating as the GitHub App.

    Parameters
    ----------
    credential
        Credential holding the App id and RSA signing key.
    now
        Issue time; defaults to the current UTC time.

    Returns
    -------
    str
        Encoded JWT with ``iat``, ``exp`` and ``iss`` claims.

    Raises
    ------
    MissingFieldError
        If the credential has no signing key.
    JsonWebTokenError
        If PyJWT cannot sign the claims.

    """
    key = credential.require_signing_key()
    issued = now or dt.datetime.now(dt.UTC)
    claims = {
        "iat": int((issued - JWT_BACKDATE).timestamp()),
        "exp": int((issued + JWT_LIFETIME).timestamp()),
        "iss": str(credential.app_id),
    }
    try:
        return jwt.encode(claims, key, algorithm=JWT_ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise JsonWebTokenError.encoding_failed(str(exc)) from exc


__all__ = ["JWT_ALGORITHM", "encode_app_jwt"]
