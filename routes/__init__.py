# routes/__init__.py
# Routers for the local study camp API plus the shared store dependency.

from __future__ import annotations

from fastapi import Request

from store import AppStore

__all__ = ["assignments", "attachments", "camps", "session", "state", "submissions", "get_store"]


def get_store(request: Request) -> AppStore:
    """Provide the application's single store instance."""
    return request.app.state.store
