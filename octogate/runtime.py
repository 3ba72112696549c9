"""octogate runtime entrypoint.

This module provides the ASGI application factory used by Granian and a
``main()`` that starts the server. The App credential is read from the
standard credential variables (see :mod:`octogate.credentials`); the server
itself is configured with:

- ``OCTOGATE_HOST``: Bind address (default ``0.0.0.0``)
- ``OCTOGATE_PORT``: Listen port (default ``8080``)
- ``OCTOGATE_LOG_LEVEL``: Log level (default ``INFO``)
- ``OCTOGATE_WEBHOOK_PATH``: Webhook route (default ``/github``)
- ``OCTOGATE_MAX_BODY_BYTES``: Largest accepted body (default 1 MiB)
- ``OCTOGATE_ADAPTER``: ``falcon`` (default) or ``asgi``
- ``OCTOGATE_HANDLER``: Optional ``package.module:callable`` invoked with
  each accepted envelope

Run the service directly with ``python -m octogate.runtime``.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import importlib
import os
import typing as typ

from octogate.credentials import build_credential
from octogate.errors import OctogateError
from octogate.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from octogate.webhook.pipeline import DEFAULT_MAX_BODY_BYTES, WebhookPipeline

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from octogate.webhook.pipeline import WebhookHandler

__all__ = [
    "Adapter",
    "RuntimeConfigError",
    "WebhookServerConfig",
    "build_pipeline",
    "create_app",
    "load_handler",
    "main",
]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


class Adapter(enum.StrEnum):
    """HTTP adapters the runtime can serve."""

    FALCON = "falcon"
    ASGI = "asgi"


class RuntimeConfigError(OctogateError, ValueError):
    """Raised when a runtime environment variable has an unusable value."""

    def __init__(self, variable: str, raw: str, reason: str) -> None:
        """Record the offending variable."""
        self.variable = variable
        super().__init__(f"Invalid {variable} value {raw!r}: {reason}")


def _parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError as exc:
        raise RuntimeConfigError("OCTOGATE_PORT", raw, "not an integer") from exc
    if not (_MIN_PORT <= port <= _MAX_PORT):
        reason = f"outside valid range {_MIN_PORT}-{_MAX_PORT}"
        raise RuntimeConfigError("OCTOGATE_PORT", raw, reason)
    return port


def _parse_max_body(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeConfigError(
            "OCTOGATE_MAX_BODY_BYTES", raw, "not an integer"
        ) from exc
    if value <= 0:
        raise RuntimeConfigError("OCTOGATE_MAX_BODY_BYTES", raw, "must be positive")
    return value


def _parse_path(raw: str) -> str:
    path = raw.strip()
    if not path.startswith("/"):
        raise RuntimeConfigError("OCTOGATE_WEBHOOK_PATH", raw, "must start with '/'")
    return path


def _parse_adapter(raw: str) -> Adapter:
    try:
        return Adapter(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(adapter.value for adapter in Adapter)
        raise RuntimeConfigError(
            "OCTOGATE_ADAPTER", raw, f"expected one of {choices}"
        ) from exc


@dc.dataclass(frozen=True, slots=True)
class WebhookServerConfig:
    """Runtime settings for the webhook server."""

    host: str = "0.0.0.0"  # noqa: S104 - bind all interfaces for container
    port: int = 8080
    log_level: str = "INFO"
    webhook_path: str = "/github"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    adapter: Adapter = Adapter.FALCON
    handler: str | None = None

    @classmethod
    def from_env(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> WebhookServerConfig:
        """Build configuration from ``OCTOGATE_*`` variables.

        Raises
        ------
        RuntimeConfigError
            If any variable has an unusable value.

        """
        source = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=source.get("OCTOGATE_HOST", defaults.host),
            port=_parse_port(source.get("OCTOGATE_PORT", str(defaults.port))),
            log_level=source.get("OCTOGATE_LOG_LEVEL", defaults.log_level),
            webhook_path=_parse_path(
                source.get("OCTOGATE_WEBHOOK_PATH", defaults.webhook_path)
            ),
            max_body_bytes=_parse_max_body(
                source.get("OCTOGATE_MAX_BODY_BYTES", str(defaults.max_body_bytes))
            ),
            adapter=_parse_adapter(source.get("OCTOGATE_ADAPTER", defaults.adapter)),
            handler=source.get("OCTOGATE_HANDLER") or None,
        )


def load_handler(target: str) -> WebhookHandler:
    """Import a webhook handler from a ``package.module:callable`` path.

    Raises
    ------
    RuntimeConfigError
        If the path is malformed or does not name a callable.

    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise RuntimeConfigError(
            "OCTOGATE_HANDLER", target, "expected 'package.module:callable'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise RuntimeConfigError("OCTOGATE_HANDLER", target, str(exc)) from exc
    handler = getattr(module, attribute, None)
    if not callable(handler):
        raise RuntimeConfigError("OCTOGATE_HANDLER", target, "not a callable")
    return typ.cast("WebhookHandler", handler)


def build_pipeline(
    config: WebhookServerConfig,
    environ: cabc.Mapping[str, str] | None = None,
) -> WebhookPipeline:
    """Build the webhook pipeline described by ``config``.

    Raises
    ------
    CredentialError
        If the App credential cannot be built from the environment.
    RuntimeConfigError
        If the configured handler cannot be loaded.

    """
    credential = build_credential(environ)
    if not credential.has_webhook_secret:
        log_warning(
            logger,
            "WEBHOOK_SECRET is not set; every delivery will be rejected",
        )
    handler = load_handler(config.handler) if config.handler else None
    return WebhookPipeline(
        credential,
        handler,
        path=config.webhook_path,
        max_body_bytes=config.max_body_bytes,
    )


def create_app() -> typ.Any:  # noqa: ANN401 - Falcon app or raw ASGI callable
    """Create the ASGI application selected by ``OCTOGATE_ADAPTER``.

    Returns
    -------
    falcon.asgi.App | WebhookASGIApp
        Configured ASGI application serving the webhook and health routes.

    """
    config = WebhookServerConfig.from_env()
    pipeline = build_pipeline(config)

    if config.adapter is Adapter.ASGI:
        from octogate.asgi import WebhookASGIApp

        return WebhookASGIApp(pipeline)

    from octogate.api.app import AppDependencies
    from octogate.api.app import create_app as _create_api_app

    return _create_api_app(AppDependencies(pipeline=pipeline))


def main() -> None:
    """Start the octogate webhook server using Granian.

    Reads the ``OCTOGATE_*`` variables, validates them, and starts the ASGI
    server. Invalid configuration, including an invalid App credential,
    exits with status 1.
    """
    from granian import Granian
    from granian.constants import Interfaces

    try:
        config = WebhookServerConfig.from_env()
        # Fail fast on credential problems before workers are spawned.
        build_pipeline(config)
    except OctogateError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(logger, "%s", exc)
        raise SystemExit(1) from exc

    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid OCTOGATE_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    log_info(
        logger,
        "Starting octogate on %s:%d (adapter=%s, path=%s, log_level=%s)",
        config.host,
        config.port,
        config.adapter,
        config.webhook_path,
        normalized_level,
    )

    server = Granian(
        "octogate.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
