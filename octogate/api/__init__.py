"""octogate Falcon adapter.

Usage
-----
Create and run the application::

    from octogate.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # with the webhook route

"""

from octogate.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
