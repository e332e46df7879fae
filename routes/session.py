# routes/session.py
# ==========================================================
# Login, role selection, nickname and current-camp selection.
# Identity is trusted as typed; see security.TrustedIdentityProvider.
# ==========================================================

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

import commands
from models import Camp
from queries import camps_for_member
from routes import get_store
from schemas import CampSelection, LoginRequest, NicknameRequest, RoleRequest, SessionOut
from store import AppStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


def _session_snapshot(store: AppStore) -> SessionOut:
    state = store.state
    return SessionOut(
        current_user=state.current_user,
        current_role=state.current_role,
        current_camp=state.current_camp,
        needs_role_selection=state.current_user is not None and state.current_role is None,
    )


@router.get("/", response_model=SessionOut)
def get_session(store: AppStore = Depends(get_store)):
    """Return who is logged in and what they have selected."""
    return _session_snapshot(store)


@router.post("/login", response_model=SessionOut)
async def login(payload: LoginRequest, store: AppStore = Depends(get_store)):
    """Log in with any non-empty wxId; new users must then pick a role."""
    await commands.login(store, payload.wx_id)
    return _session_snapshot(store)


@router.post("/logout", response_model=SessionOut)
def logout(store: AppStore = Depends(get_store)):
    commands.logout(store)
    return _session_snapshot(store)


@router.put("/role", response_model=SessionOut)
def select_role(payload: RoleRequest, store: AppStore = Depends(get_store)):
    commands.select_role(store, payload.role)
    return _session_snapshot(store)


@router.put("/nickname", response_model=SessionOut)
def set_nickname(payload: NicknameRequest, store: AppStore = Depends(get_store)):
    commands.set_nickname(store, payload.nickname)
    return _session_snapshot(store)


@router.put("/camp", response_model=SessionOut)
def select_camp(payload: CampSelection, store: AppStore = Depends(get_store)):
    """Enter a camp (or leave it by sending a null campId)."""
    commands.select_camp(store, payload.camp_id)
    return _session_snapshot(store)


@router.get("/camps", response_model=list[Camp])
def my_camps(store: AppStore = Depends(get_store)):
    """Camps visible to the current user: all for admins, own rosters otherwise."""
    state = store.state
    if state.current_user is None:
        return []
    if state.current_role == "admin":
        return list(state.camps)
    return camps_for_member(state, state.current_user.wx_id, state.current_role)
