# routes/state.py
# Raw access to the store: full state snapshot and action dispatch.

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from models import AppState
from routes import get_store
from store import AppStore

router = APIRouter(prefix="/state", tags=["state"])


@router.get("/", response_model=AppState)
def get_state(store: AppStore = Depends(get_store)):
    return store.state


@router.post("/dispatch", response_model=AppState)
def dispatch_action(
    action: dict[str, Any] = Body(..., examples=[{"type": "LOGIN", "wxId": "teacher001"}]),
    store: AppStore = Depends(get_store),
):
    """Apply one action; unknown or malformed actions leave the state unchanged."""
    store.dispatch(action)
    return store.state
