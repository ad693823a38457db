"""FastAPI application package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .main import app as fastapi_app


def get_app():
    """Return the FastAPI application without importing it eagerly.

    Alembic and the export script import ``app.database`` and ``app.models``
    without needing the web layer.
    """

    from .main import app as fastapi_app

    return fastapi_app


__all__ = ["get_app"]
