# models.py
# ==========================================================
# Domain models for the study camp store
# Camp ↔ Assignment ↔ Submission ↔ Review / Message
# Immutable pydantic models with camelCase wire names
# ==========================================================

from __future__ import annotations

import random
import string
import time
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

UserRole = Literal["admin", "teacher", "student"]

# A login identity: never empty or whitespace-only.
LoginId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


def generate_id() -> str:
    """Return a short opaque identifier (best-effort unique)."""
    return "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class DomainModel(BaseModel):
    """Base for every stored shape: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------- User Model ----------------------
class User(DomainModel):
    """
    A participant identified by the wxId they typed at first login.
    The role is stamped once by role selection (or by an admin adding them).
    """

    wx_id: str
    role: UserRole
    nickname: Optional[str] = None
    camp_id: Optional[str] = None


# ---------------------- Camp Model ----------------------
class Camp(DomainModel):
    """A cohort owning a teacher roster and a student roster."""

    id: str
    name: str
    description: str = ""
    created_at: int
    teachers: tuple[str, ...] = ()
    students: tuple[str, ...] = ()


# ---------------------- Attachment Model ----------------------
class Attachment(DomainModel):
    """A file embedded inline as a data URL."""

    id: str
    name: str
    type: str
    url: str
    size: int


# ---------------------- Assignment Model ----------------------
class Assignment(DomainModel):
    """A task posted by a teacher into exactly one camp."""

    id: str
    camp_id: str
    teacher_id: str
    teacher_name: Optional[str] = None
    title: str
    content: str = ""
    attachments: tuple[Attachment, ...] = ()
    deadline: int  # epoch ms
    created_at: int


# ---------------------- Submission Model ----------------------
class Submission(DomainModel):
    """A student's response to one assignment."""

    id: str
    assignment_id: str
    student_id: str
    student_name: Optional[str] = None
    content: str
    attachments: tuple[Attachment, ...] = ()
    submitted_at: int


# ---------------------- Review Model ----------------------
class Review(DomainModel):
    """A teacher's rating (1-5) and comment on one submission."""

    id: str
    submission_id: str
    teacher_id: str
    teacher_name: Optional[str] = None
    rating: int
    comment: str
    is_public: bool = True
    created_at: int


# ---------------------- Message Model ----------------------
class Message(DomainModel):
    id: str
    submission_id: str
    sender_id: str
    sender_name: Optional[str] = None
    sender_role: UserRole
    content: str
    created_at: int


# ---------------------- Session Record ----------------------
class SessionRecord(DomainModel):
    """The minimal persisted record used to resume a logged-in identity."""

    wx_id: LoginId


# ---------------------- Application State ----------------------
class AppState(DomainModel):
    """
    The single authoritative state value held by the store.

    `current_user` / `current_role` / `current_camp` are session selection;
    the remaining fields are the persisted domain sequences.
    """

    current_user: Optional[User] = None
    current_role: Optional[UserRole] = None
    current_camp: Optional[Camp] = None
    camps: tuple[Camp, ...] = ()
    users: tuple[User, ...] = ()
    assignments: tuple[Assignment, ...] = ()
    submissions: tuple[Submission, ...] = ()
    reviews: tuple[Review, ...] = ()
    messages: tuple[Message, ...] = ()


DOMAIN_FIELDS: tuple[str, ...] = (
    "camps",
    "users",
    "assignments",
    "submissions",
    "reviews",
    "messages",
)

ENTITY_TYPES: dict[str, type[DomainModel]] = {
    "camps": Camp,
    "users": User,
    "assignments": Assignment,
    "submissions": Submission,
    "reviews": Review,
    "messages": Message,
}
