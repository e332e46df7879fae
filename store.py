"""
The application store: one AppState value, one dispatch entry point.

`AppStore` owns the state, the subscriber list, the hydration lifecycle
(UNINITIALIZED -> LOADING -> READY) and the persistence side effect that
runs after each dispatch once the store is READY.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import ValidationError

from models import AppState
from persistence import PersistenceAdapter
from reducer import reduce
from schemas import ACTION_ADAPTER, LoadDataAction, LoginAction
from security import AuthProvider, TrustedIdentityProvider

logger = logging.getLogger(__name__)

Listener = Callable[[AppState], None]


class HydrationStatus(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class AppStore:
    """
    Holds the current AppState and applies actions through the reducer.

    `dispatch` never raises: unknown or malformed actions and reducer faults
    are logged and leave the state as it was.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        *,
        auth_provider: AuthProvider | None = None,
        strict: bool = False,
        initial_state: AppState | None = None,
    ) -> None:
        self.adapter = adapter
        self.auth_provider = auth_provider or TrustedIdentityProvider()
        self.strict = strict
        self._state = initial_state or AppState()
        self._status = HydrationStatus.UNINITIALIZED
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def status(self) -> HydrationStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is HydrationStatus.READY

    # ------------------------------------------------------------ dispatch
    def dispatch(self, action: Any) -> None:
        parsed = self._coerce_action(action)
        if parsed is None:
            return

        try:
            next_state = reduce(self._state, parsed, strict=self.strict)
        except Exception:  # noqa: BLE001
            logger.exception("Reducer failed on %s; state left unchanged.", parsed.type)
            return

        if next_state is self._state:
            return

        self._state = next_state
        self._notify()
        self._persist()

    def _coerce_action(self, action: Any) -> Any | None:
        if isinstance(action, Mapping):
            try:
                return ACTION_ADAPTER.validate_python(dict(action))
            except ValidationError as exc:
                logger.warning(
                    "Ignoring unknown or malformed action %r: %s",
                    action.get("type"),
                    exc.error_count(),
                )
                return None
        if getattr(action, "type", None) is None:
            logger.warning("Ignoring dispatch of non-action value %r", action)
            return None
        return action

    # --------------------------------------------------------- subscribers
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:  # noqa: BLE001
                logger.exception("Store listener %r failed.", listener)

    def _persist(self) -> None:
        if not self.is_ready:
            return
        try:
            self.adapter.save(self._state)
        except Exception:  # noqa: BLE001
            logger.exception("Persisting state failed; continuing in memory only.")

    # ----------------------------------------------------------- hydration
    def hydrate(self) -> None:
        """Load persisted data once and resume the stored session, if any."""
        if self._status is not HydrationStatus.UNINITIALIZED:
            return

        self._status = HydrationStatus.LOADING
        try:
            loaded = self.adapter.load()
            self.dispatch(LoadDataAction(data=loaded.data))
            if loaded.session is not None:
                logger.info("Resuming session for %s", loaded.session.wx_id)
                self.dispatch(LoginAction(wx_id=loaded.session.wx_id))
        except Exception:  # noqa: BLE001
            logger.exception("Hydration failed; starting from the in-memory state.")
        finally:
            self._status = HydrationStatus.READY
