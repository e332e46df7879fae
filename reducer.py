"""
The reducer: a pure, total function from (state, action) to the next state.

Handlers never mutate their inputs. Branches an action does not touch are
carried over by reference; touched branches are rebuilt. An action tag with
no handler returns the input state unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from models import AppState, Camp, User
from schemas import (
    AddStudentAction,
    AddTeacherAction,
    CreateAssignmentAction,
    CreateCampAction,
    CreateMessageAction,
    CreateReviewAction,
    CreateSubmissionAction,
    DeleteAssignmentAction,
    DeleteCampAction,
    LoadDataAction,
    LoginAction,
    RemoveMemberAction,
    SetCampAction,
    SetNicknameAction,
    SetRoleAction,
    UpdateCampAction,
    UpsertUserAction,
)

logger = logging.getLogger(__name__)

Handler = Callable[[AppState, Any, bool], AppState]


# ----------------------------------------------------------
# Session
# ----------------------------------------------------------
def _login(state: AppState, action: LoginAction, strict: bool) -> AppState:
    existing = next((u for u in state.users if u.wx_id == action.wx_id), None)
    if existing is not None:
        return state.model_copy(
            update={"current_user": existing, "current_role": existing.role}
        )

    # Placeholder until role selection; not written to `users`.
    placeholder = User(wx_id=action.wx_id, role="student")
    return state.model_copy(update={"current_user": placeholder, "current_role": None})


def _logout(state: AppState, action: Any, strict: bool) -> AppState:
    return state.model_copy(
        update={"current_user": None, "current_role": None, "current_camp": None}
    )


def _replace_user(users: tuple[User, ...], user: User) -> tuple[User, ...]:
    return tuple(user if u.wx_id == user.wx_id else u for u in users)


def _upsert_user(users: tuple[User, ...], user: User) -> tuple[User, ...]:
    if any(u.wx_id == user.wx_id for u in users):
        return _replace_user(users, user)
    return (*users, user)


def _set_role(state: AppState, action: SetRoleAction, strict: bool) -> AppState:
    if state.current_user is None:
        return state
    updated = state.current_user.model_copy(update={"role": action.role})
    return state.model_copy(
        update={
            "current_user": updated,
            "current_role": action.role,
            "users": _upsert_user(state.users, updated),
        }
    )


def _set_camp(state: AppState, action: SetCampAction, strict: bool) -> AppState:
    return state.model_copy(update={"current_camp": action.camp})


def _set_nickname(state: AppState, action: SetNicknameAction, strict: bool) -> AppState:
    if state.current_user is None:
        return state
    updated = state.current_user.model_copy(update={"nickname": action.nickname})
    return state.model_copy(
        update={"current_user": updated, "users": _replace_user(state.users, updated)}
    )


def _upsert_user_action(state: AppState, action: UpsertUserAction, strict: bool) -> AppState:
    return state.model_copy(update={"users": _upsert_user(state.users, action.user)})


# ----------------------------------------------------------
# Camps and membership
# ----------------------------------------------------------
def _create_camp(state: AppState, action: CreateCampAction, strict: bool) -> AppState:
    return state.model_copy(update={"camps": (*state.camps, action.camp)})


def _update_camp(state: AppState, action: UpdateCampAction, strict: bool) -> AppState:
    camps = tuple(action.camp if c.id == action.camp.id else c for c in state.camps)
    return state.model_copy(update={"camps": camps})


def _delete_camp(state: AppState, action: DeleteCampAction, strict: bool) -> AppState:
    # One level only: submissions/reviews/messages of the removed
    # assignments stay in place.
    return state.model_copy(
        update={
            "camps": tuple(c for c in state.camps if c.id != action.id),
            "assignments": tuple(a for a in state.assignments if a.camp_id != action.id),
        }
    )


def _map_camp(state: AppState, camp_id: str, change: Callable[[Camp], Camp]) -> AppState:
    camps = tuple(change(c) if c.id == camp_id else c for c in state.camps)
    return state.model_copy(update={"camps": camps})


def _add_teacher(state: AppState, action: AddTeacherAction, strict: bool) -> AppState:
    return _map_camp(
        state,
        action.camp_id,
        lambda camp: camp.model_copy(update={"teachers": (*camp.teachers, action.wx_id)}),
    )


def _add_student(state: AppState, action: AddStudentAction, strict: bool) -> AppState:
    return _map_camp(
        state,
        action.camp_id,
        lambda camp: camp.model_copy(update={"students": (*camp.students, action.wx_id)}),
    )


def _remove_member(state: AppState, action: RemoveMemberAction, strict: bool) -> AppState:
    return _map_camp(
        state,
        action.camp_id,
        lambda camp: camp.model_copy(
            update={
                "teachers": tuple(t for t in camp.teachers if t != action.wx_id),
                "students": tuple(s for s in camp.students if s != action.wx_id),
            }
        ),
    )


# ----------------------------------------------------------
# Coursework
# ----------------------------------------------------------
def _create_assignment(state: AppState, action: CreateAssignmentAction, strict: bool) -> AppState:
    return state.model_copy(update={"assignments": (*state.assignments, action.assignment)})


def _delete_assignment(state: AppState, action: DeleteAssignmentAction, strict: bool) -> AppState:
    return state.model_copy(
        update={
            "assignments": tuple(a for a in state.assignments if a.id != action.id),
            "submissions": tuple(
                s for s in state.submissions if s.assignment_id != action.id
            ),
        }
    )


def _create_submission(state: AppState, action: CreateSubmissionAction, strict: bool) -> AppState:
    submission = action.submission
    if strict and any(
        s.assignment_id == submission.assignment_id and s.student_id == submission.student_id
        for s in state.submissions
    ):
        logger.warning(
            "Duplicate submission rejected for assignment %s by %s",
            submission.assignment_id,
            submission.student_id,
        )
        return state
    return state.model_copy(update={"submissions": (*state.submissions, submission)})


def _create_review(state: AppState, action: CreateReviewAction, strict: bool) -> AppState:
    review = action.review
    if strict and any(r.submission_id == review.submission_id for r in state.reviews):
        logger.warning("Duplicate review rejected for submission %s", review.submission_id)
        return state
    return state.model_copy(update={"reviews": (*state.reviews, review)})


def _create_message(state: AppState, action: CreateMessageAction, strict: bool) -> AppState:
    return state.model_copy(update={"messages": (*state.messages, action.message)})


# ----------------------------------------------------------
# Bulk load
# ----------------------------------------------------------
def _load_data(state: AppState, action: LoadDataAction, strict: bool) -> AppState:
    patch = action.data
    update = {name: getattr(patch, name) for name in patch.model_fields_set}
    if not update:
        return state
    return state.model_copy(update=update)


_HANDLERS: dict[str, Handler] = {
    "LOGIN": _login,
    "LOGOUT": _logout,
    "SET_ROLE": _set_role,
    "SET_CAMP": _set_camp,
    "SET_NICKNAME": _set_nickname,
    "UPSERT_USER": _upsert_user_action,
    "CREATE_CAMP": _create_camp,
    "UPDATE_CAMP": _update_camp,
    "DELETE_CAMP": _delete_camp,
    "ADD_TEACHER": _add_teacher,
    "ADD_STUDENT": _add_student,
    "REMOVE_MEMBER": _remove_member,
    "CREATE_ASSIGNMENT": _create_assignment,
    "DELETE_ASSIGNMENT": _delete_assignment,
    "CREATE_SUBMISSION": _create_submission,
    "CREATE_REVIEW": _create_review,
    "CREATE_MESSAGE": _create_message,
    "LOAD_DATA": _load_data,
}

ACTION_TYPES: frozenset[str] = frozenset(_HANDLERS)


def reduce(state: AppState, action: Any, *, strict: bool = False) -> AppState:
    """Return the state that follows `state` once `action` is applied."""
    handler = _HANDLERS.get(getattr(action, "type", None))
    if handler is None:
        return state
    return handler(state, action, strict)
