# main.py
# FastAPI entry point for the local, single-user study camp API.

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, get_settings
from db import get_engine
from middleware.error_handler import catch_exceptions_middleware, register_exception_handlers
from persistence import PersistenceAdapter
from routes import assignments, attachments, camps, session, state, submissions
from security import TrustedIdentityProvider
from storage import InMemoryStorage, SQLStorage
from store import AppStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> AppStore:
    """Wire storage, persistence and identity into a fresh store."""
    if settings.storage_backend == "memory":
        storage = InMemoryStorage()
    else:
        storage = SQLStorage(get_engine())

    return AppStore(
        PersistenceAdapter(storage),
        auth_provider=TrustedIdentityProvider(settings.login_delay_seconds),
        strict=settings.strict_mode,
    )


def create_app(store: AppStore | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load persisted data and resume the last session before serving."""
        logger.info(
            "Hydrating store (storage=%s, strict=%s)",
            settings.storage_backend,
            app.state.store.strict,
        )
        app.state.store.hydrate()
        yield

    app = FastAPI(
        title="Study Camp API",
        description="Camps, assignments, submissions, reviews and messages",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store or build_store(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(catch_exceptions_middleware)
    register_exception_handlers(app)

    app.include_router(session.router)
    app.include_router(camps.router)
    app.include_router(assignments.router)
    app.include_router(submissions.router)
    app.include_router(attachments.router)
    app.include_router(state.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "store": app.state.store.status.value}

    return app


app = create_app()
