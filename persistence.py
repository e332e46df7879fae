"""
Persistence adapter: mirrors the store's domain sequences into named slots.

Every slot is an independent JSON document. Reads fall back to an empty
value per slot when a slot is missing, unreadable, or fails validation;
writes are full overwrites and never raise into the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import TypeAdapter

from models import DOMAIN_FIELDS, ENTITY_TYPES, AppState, DomainModel, SessionRecord
from schemas import StatePatch
from seed import build_seed_data
from storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

STORAGE_KEYS: dict[str, str] = {
    "camps": "study_camp_camps",
    "users": "study_camp_users",
    "assignments": "study_camp_assignments",
    "submissions": "study_camp_submissions",
    "reviews": "study_camp_reviews",
    "messages": "study_camp_messages",
}
SESSION_KEY = "study_camp_session"

_SEQUENCE_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    field: TypeAdapter(tuple[entity, ...]) for field, entity in ENTITY_TYPES.items()
}


@dataclass(slots=True)
class LoadedState:
    data: StatePatch
    session: SessionRecord | None = None
    seeded: bool = False


def encode_sequence(items: tuple[DomainModel, ...]) -> str:
    return json.dumps(
        [item.to_wire() for item in items],
        ensure_ascii=False,
        separators=(",", ":"),
    )


class PersistenceAdapter:
    """Reads and writes the six domain slots plus the session slot."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        seed_factory: Callable[[], StatePatch] = build_seed_data,
    ) -> None:
        self.storage = storage
        self.seed_factory = seed_factory

    # ------------------------------------------------------------------ load
    def load(self) -> LoadedState:
        sequences = {field: self._read_sequence(field) for field in DOMAIN_FIELDS}
        session = self._read_session()

        if not sequences["camps"]:
            logger.info("No camps found in storage; installing seed data.")
            seed = self.seed_factory()
            self._write_sequences(seed)
            return LoadedState(data=seed, session=session, seeded=True)

        logger.info(
            "Loaded %s camps, %s users, %s assignments from storage.",
            len(sequences["camps"]),
            len(sequences["users"]),
            len(sequences["assignments"]),
        )
        return LoadedState(data=StatePatch(**sequences), session=session)

    def _read_sequence(self, field: str) -> tuple:
        key = STORAGE_KEYS[field]
        try:
            raw = self.storage.get_item(key)
            if raw is None:
                return ()
            decoded = json.loads(raw)
            if not isinstance(decoded, list):
                raise ValueError(f"expected a JSON array, got {type(decoded).__name__}")
            return _SEQUENCE_ADAPTERS[field].validate_python(decoded)
        except (StorageError, ValueError) as exc:
            logger.warning("Discarding unreadable slot %s: %s", key, exc)
            return ()

    def _read_session(self) -> SessionRecord | None:
        try:
            raw = self.storage.get_item(SESSION_KEY)
            if raw is None:
                return None
            decoded = json.loads(raw)
            if decoded is None:
                return None
            return SessionRecord.model_validate(decoded)
        except (StorageError, ValueError) as exc:
            logger.warning("Discarding unreadable slot %s: %s", SESSION_KEY, exc)
            return None

    # ------------------------------------------------------------------ save
    def save(self, state: AppState) -> None:
        """Overwrite every slot from `state`; failures are logged only."""
        self._write_sequences(state)

        if state.current_user is not None:
            session = SessionRecord(wx_id=state.current_user.wx_id)
            self._write(SESSION_KEY, json.dumps(session.to_wire(), ensure_ascii=False))
        else:
            self._remove(SESSION_KEY)

    def _write_sequences(self, source: AppState | StatePatch) -> None:
        for field in DOMAIN_FIELDS:
            items = getattr(source, field)
            self._write(STORAGE_KEYS[field], encode_sequence(items))

    def _write(self, key: str, value: str) -> None:
        try:
            self.storage.set_item(key, value)
        except StorageError:
            logger.exception("Failed to persist slot %s; keeping in-memory state.", key)

    def _remove(self, key: str) -> None:
        try:
            self.storage.remove_item(key)
        except StorageError:
            logger.exception("Failed to clear slot %s; keeping in-memory state.", key)
