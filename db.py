# db.py
# Centralized SQL engine setup for the durable slot storage.

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlmodel import create_engine

from config import get_settings


def build_engine(database_url: str) -> Engine:
    """Create an engine for the given URL, with SQLite tweaks when needed."""
    engine_config: dict[str, object] = {
        "echo": False,
        "pool_pre_ping": True,
    }

    if database_url.startswith("sqlite"):
        engine_config["connect_args"] = {"check_same_thread": False}

    return create_engine(
        database_url,
        **engine_config,
    )


_CACHED_ENGINE: Engine | None = None


def get_engine() -> Engine:
    global _CACHED_ENGINE
    if _CACHED_ENGINE is None:
        _CACHED_ENGINE = build_engine(get_settings().database_url)
    return _CACHED_ENGINE
