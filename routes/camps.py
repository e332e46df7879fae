# routes/camps.py
# ==========================================================
# Camp administration: create, rename, delete, manage rosters.
# ==========================================================

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

import commands
from models import Assignment, Camp, User, UserRole
from queries import assignments_for_camp, camps_for_member, find_camp, find_user
from routes import get_store
from schemas import CampCreate, MemberCreate
from store import AppStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/camps", tags=["camps"])


@router.get("/", response_model=list[Camp])
def list_camps(
    member: Optional[str] = Query(
        default=None,
        description="Only camps listing this wxId as a teacher or student.",
    ),
    role: Optional[UserRole] = Query(default=None),
    store: AppStore = Depends(get_store),
):
    if member:
        return camps_for_member(store.state, member, role)
    return list(store.state.camps)


@router.post("/", response_model=Camp, status_code=201)
def create_camp(payload: CampCreate, store: AppStore = Depends(get_store)):
    camp = commands.create_camp(store, payload.name, payload.description)
    logger.info("Created camp %s (%s)", camp.id, camp.name)
    return camp


@router.get("/{camp_id}", response_model=Camp)
def get_camp(camp_id: str, store: AppStore = Depends(get_store)):
    camp = find_camp(store.state, camp_id)
    if camp is None:
        raise HTTPException(status_code=404, detail="Camp not found")
    return camp


@router.put("/{camp_id}", response_model=Camp)
def update_camp(camp_id: str, payload: CampCreate, store: AppStore = Depends(get_store)):
    return commands.update_camp(store, camp_id, payload.name, payload.description)


@router.delete("/{camp_id}", status_code=204)
def delete_camp(camp_id: str, store: AppStore = Depends(get_store)):
    """Delete a camp and its assignments."""
    commands.delete_camp(store, camp_id)
    logger.info("Deleted camp %s", camp_id)
    return Response(status_code=204)


@router.get("/{camp_id}/members", response_model=dict[str, list[User]])
def list_members(camp_id: str, store: AppStore = Depends(get_store)):
    """Rosters resolved to user records; unknown ids get a bare record."""
    camp = get_camp(camp_id, store)

    def resolve(wx_id: str, role: UserRole) -> User:
        return find_user(store.state, wx_id) or User(wx_id=wx_id, role=role)

    return {
        "teachers": [resolve(wx_id, "teacher") for wx_id in camp.teachers],
        "students": [resolve(wx_id, "student") for wx_id in camp.students],
    }


@router.post("/{camp_id}/members", response_model=Camp, status_code=201)
def add_member(camp_id: str, payload: MemberCreate, store: AppStore = Depends(get_store)):
    return commands.add_member(store, camp_id, payload.wx_id, payload.role)


@router.delete("/{camp_id}/members/{wx_id}", response_model=Camp)
def remove_member(camp_id: str, wx_id: str, store: AppStore = Depends(get_store)):
    return commands.remove_member(store, camp_id, wx_id)


@router.get("/{camp_id}/assignments", response_model=list[Assignment])
def list_camp_assignments(camp_id: str, store: AppStore = Depends(get_store)):
    return assignments_for_camp(store.state, camp_id)
