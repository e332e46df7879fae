# queries.py
# Read-side projections over AppState. Nothing here dispatches.

from __future__ import annotations

from typing import Optional

from models import (
    AppState,
    Assignment,
    Camp,
    Message,
    Review,
    Submission,
    User,
    UserRole,
    now_ms,
)

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS


def find_user(state: AppState, wx_id: str) -> Optional[User]:
    return next((u for u in state.users if u.wx_id == wx_id), None)


def find_camp(state: AppState, camp_id: str) -> Optional[Camp]:
    return next((c for c in state.camps if c.id == camp_id), None)


def find_assignment(state: AppState, assignment_id: str) -> Optional[Assignment]:
    return next((a for a in state.assignments if a.id == assignment_id), None)


def find_submission_by_id(state: AppState, submission_id: str) -> Optional[Submission]:
    return next((s for s in state.submissions if s.id == submission_id), None)


def camps_for_member(
    state: AppState,
    wx_id: str,
    role: Optional[UserRole] = None,
) -> list[Camp]:
    """Camps listing `wx_id` as a teacher or student (or only `role`'s list)."""
    if role == "teacher":
        return [c for c in state.camps if wx_id in c.teachers]
    if role == "student":
        return [c for c in state.camps if wx_id in c.students]
    return [c for c in state.camps if wx_id in c.teachers or wx_id in c.students]


def assignments_for_camp(state: AppState, camp_id: str) -> list[Assignment]:
    return [a for a in state.assignments if a.camp_id == camp_id]


def submissions_for_assignment(state: AppState, assignment_id: str) -> list[Submission]:
    return [s for s in state.submissions if s.assignment_id == assignment_id]


def find_submission(
    state: AppState,
    assignment_id: str,
    student_id: str,
) -> Optional[Submission]:
    """First submission by `student_id` for `assignment_id`, if any."""
    return next(
        (
            s
            for s in state.submissions
            if s.assignment_id == assignment_id and s.student_id == student_id
        ),
        None,
    )


def find_review(state: AppState, submission_id: str) -> Optional[Review]:
    return next((r for r in state.reviews if r.submission_id == submission_id), None)


def messages_for_submission(state: AppState, submission_id: str) -> list[Message]:
    """Messages on a submission in insertion (chronological) order."""
    return [m for m in state.messages if m.submission_id == submission_id]


def display_name(state: AppState, wx_id: str) -> str:
    user = find_user(state, wx_id)
    if user is not None and user.nickname:
        return user.nickname
    return wx_id


def is_overdue(deadline: int, now: Optional[int] = None) -> bool:
    current = now_ms() if now is None else now
    return current > deadline


def remaining_time_text(deadline: int, now: Optional[int] = None) -> str:
    """Human-readable time left before `deadline`."""
    current = now_ms() if now is None else now
    diff = deadline - current
    if diff <= 0:
        return "已逾期"

    days = diff // DAY_MS
    hours = (diff % DAY_MS) // HOUR_MS
    if days > 0:
        return f"还剩 {days} 天"
    if hours > 0:
        return f"还剩 {hours} 小时"
    return "即将截止"
