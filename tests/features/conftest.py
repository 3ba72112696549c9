"""Shared fixtures for BDD feature tests."""

from __future__ import annotations

import typing as typ

import falcon.testing
import pytest

from octogate.api.app import AppDependencies, create_app
from octogate.webhook.pipeline import WebhookPipeline

if typ.TYPE_CHECKING:
    from octogate.credentials import AppCredential


@pytest.fixture
def make_webhook_client(
    credential: AppCredential,
) -> typ.Callable[..., falcon.testing.TestClient]:
    """Return a factory building a Falcon test client around a pipeline."""

    def _make(**pipeline_options: typ.Any) -> falcon.testing.TestClient:
        pipeline = WebhookPipeline(credential, **pipeline_options)
        return falcon.testing.TestClient(create_app(AppDependencies(pipeline=pipeline)))

    return _make
