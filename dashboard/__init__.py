"""
Dashboard Package.

Read API consumed by the browser dashboard.

Modules:
- api: application factory
- routers/: endpoints
- services: queries and display rendering
"""

from .api import create_app

__all__ = ["create_app"]
