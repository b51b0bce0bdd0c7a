"""REST API presentation layer for Lemon.

Structure:
    api/
    ├── app.py                # FastAPI application factory
    ├── dependencies.py       # Dependency injection, replaceable defaults
    ├── exception_handlers.py # Error normalizer
    ├── responses.py          # JSON vulnerability prefix
    ├── security.py           # Auth failure handler and auth cookies
    ├── routers/              # API route handlers
    └── schemas/              # Pydantic request/response schemas
"""

from lemon.presentation.api.app import create_app

__all__ = ["create_app"]
