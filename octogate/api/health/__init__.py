"""Health resources for liveness and readiness checks."""

from octogate.api.health.resources import HealthResource, ReadyResource

__all__ = ["HealthResource", "ReadyResource"]
