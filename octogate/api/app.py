"""Application factory for the octogate Falcon ASGI adapter.

``create_app()`` builds a Falcon ASGI application with health endpoints
and, when a webhook pipeline is supplied, the webhook route.

Usage
-----
Create a health-only app::

    app = create_app()

Create an app that accepts deliveries on ``/github``::

    from octogate.api.app import AppDependencies, create_app
    from octogate.webhook import WebhookPipeline

    deps = AppDependencies(
        pipeline=WebhookPipeline(credential, handler, path="/github"),
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from octogate.api.errors import register_error_handlers
from octogate.api.health.resources import HealthResource, ReadyResource
from octogate.api.resources import WebhookResource, webhook_route

if typ.TYPE_CHECKING:
    from octogate.webhook.pipeline import WebhookPipeline

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    pipeline
        Webhook pipeline. When ``None`` only health endpoints are served.

    """

    pipeline: WebhookPipeline | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. When ``None``, only ``/health``
        and ``/ready`` are available.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

    if dependencies is not None and dependencies.pipeline is not None:
        pipeline = dependencies.pipeline
        app.add_sink(WebhookResource(pipeline), prefix=webhook_route(pipeline.path))

    register_error_handlers(app)

    return app
