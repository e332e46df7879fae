"""
Durable key-value storage for the study camp store.

A minimal string-keyed, string-valued interface (get/set/remove) with an
in-memory backend for tests and a SQL-table backend for durable local use.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import Column, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Base error for storage failures."""


class StorageReadError(StorageError):
    """Raised when a slot cannot be read."""


class StorageWriteError(StorageError):
    """Raised when a slot cannot be written or removed."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


# ---------------------------------------------------------------- memory
class InMemoryStorage:
    """Dictionary-backed storage; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)


# ------------------------------------------------------------------- sql
class StorageSlot(SQLModel, table=True):
    """One named slot holding an encoded text value."""

    __tablename__ = "storage_slot"

    key: str = Field(primary_key=True)
    value: str = Field(sa_column=Column(Text, nullable=False))


class SQLStorage:
    """
    Slot storage kept in a single SQL table.

    Each call opens its own short session, so slots are written
    independently (no transaction spans several keys).
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._table_verified = False

    def ensure_table(self) -> None:
        if self._table_verified:
            return
        logger.info("Ensuring storage_slot table exists.")
        try:
            SQLModel.metadata.create_all(self.engine, tables=[StorageSlot.__table__])
        except SQLAlchemyError as exc:
            raise StorageError("Could not create the storage_slot table.") from exc
        self._table_verified = True

    def get_item(self, key: str) -> str | None:
        self.ensure_table()
        try:
            with Session(self.engine) as session:
                slot = session.get(StorageSlot, key)
                return slot.value if slot else None
        except SQLAlchemyError as exc:
            raise StorageReadError(f"Failed to read slot '{key}'.") from exc

    def set_item(self, key: str, value: str) -> None:
        self.ensure_table()
        try:
            with Session(self.engine) as session:
                slot = session.get(StorageSlot, key)
                if slot is None:
                    slot = StorageSlot(key=key, value=value)
                else:
                    slot.value = value
                session.add(slot)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageWriteError(f"Failed to write slot '{key}'.") from exc

    def remove_item(self, key: str) -> None:
        self.ensure_table()
        try:
            with Session(self.engine) as session:
                slot = session.get(StorageSlot, key)
                if slot is None:
                    return
                session.delete(slot)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageWriteError(f"Failed to remove slot '{key}'.") from exc
