# schemas.py
# ==========================================================
# Pydantic schemas for the study camp store
# Action vocabulary (the only mutation path) + HTTP request bodies
# ==========================================================

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from models import (
    Assignment,
    Attachment,
    Camp,
    DomainModel,
    LoginId,
    Message,
    Review,
    Submission,
    User,
    UserRole,
)


# ---------------------- Session Actions ----------------------
class LoginAction(DomainModel):
    type: Literal["LOGIN"] = "LOGIN"
    wx_id: LoginId


class LogoutAction(DomainModel):
    type: Literal["LOGOUT"] = "LOGOUT"


class SetRoleAction(DomainModel):
    type: Literal["SET_ROLE"] = "SET_ROLE"
    role: UserRole


class SetCampAction(DomainModel):
    type: Literal["SET_CAMP"] = "SET_CAMP"
    camp: Optional[Camp] = None


class SetNicknameAction(DomainModel):
    type: Literal["SET_NICKNAME"] = "SET_NICKNAME"
    nickname: str


class UpsertUserAction(DomainModel):
    type: Literal["UPSERT_USER"] = "UPSERT_USER"
    user: User


# ---------------------- Camp Actions ----------------------
class CreateCampAction(DomainModel):
    type: Literal["CREATE_CAMP"] = "CREATE_CAMP"
    camp: Camp


class UpdateCampAction(DomainModel):
    type: Literal["UPDATE_CAMP"] = "UPDATE_CAMP"
    camp: Camp


class DeleteCampAction(DomainModel):
    type: Literal["DELETE_CAMP"] = "DELETE_CAMP"
    id: str


class AddTeacherAction(DomainModel):
    type: Literal["ADD_TEACHER"] = "ADD_TEACHER"
    camp_id: str
    wx_id: str


class AddStudentAction(DomainModel):
    type: Literal["ADD_STUDENT"] = "ADD_STUDENT"
    camp_id: str
    wx_id: str


class RemoveMemberAction(DomainModel):
    type: Literal["REMOVE_MEMBER"] = "REMOVE_MEMBER"
    camp_id: str
    wx_id: str


# ---------------------- Coursework Actions ----------------------
class CreateAssignmentAction(DomainModel):
    type: Literal["CREATE_ASSIGNMENT"] = "CREATE_ASSIGNMENT"
    assignment: Assignment


class DeleteAssignmentAction(DomainModel):
    type: Literal["DELETE_ASSIGNMENT"] = "DELETE_ASSIGNMENT"
    id: str


class CreateSubmissionAction(DomainModel):
    type: Literal["CREATE_SUBMISSION"] = "CREATE_SUBMISSION"
    submission: Submission


class CreateReviewAction(DomainModel):
    type: Literal["CREATE_REVIEW"] = "CREATE_REVIEW"
    review: Review


class CreateMessageAction(DomainModel):
    type: Literal["CREATE_MESSAGE"] = "CREATE_MESSAGE"
    message: Message


# ---------------------- Bulk Load ----------------------
class StatePatch(DomainModel):
    """
    Partial AppState for LOAD_DATA. Only fields explicitly set on the patch
    are merged; omitted fields leave the current value alone.
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


class LoadDataAction(DomainModel):
    type: Literal["LOAD_DATA"] = "LOAD_DATA"
    data: StatePatch


Action = Annotated[
    Union[
        LoginAction,
        LogoutAction,
        SetRoleAction,
        SetCampAction,
        SetNicknameAction,
        UpsertUserAction,
        CreateCampAction,
        UpdateCampAction,
        DeleteCampAction,
        AddTeacherAction,
        AddStudentAction,
        RemoveMemberAction,
        CreateAssignmentAction,
        DeleteAssignmentAction,
        CreateSubmissionAction,
        CreateReviewAction,
        CreateMessageAction,
        LoadDataAction,
    ],
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Action)


# ---------------------- HTTP Request Bodies ----------------------
class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(RequestModel):
    wx_id: str


class RoleRequest(RequestModel):
    role: UserRole


class NicknameRequest(RequestModel):
    nickname: str


class CampSelection(RequestModel):
    camp_id: Optional[str] = None


class CampCreate(RequestModel):
    name: str
    description: str = ""


class MemberCreate(RequestModel):
    wx_id: str
    role: Literal["teacher", "student"] = "student"


class AssignmentCreate(RequestModel):
    title: str
    content: str = ""
    deadline: Optional[int] = None  # epoch ms; defaults to one week out
    attachments: List[Attachment] = Field(default_factory=list)


class SubmissionCreate(RequestModel):
    content: str
    attachments: List[Attachment] = Field(default_factory=list)


class ReviewCreate(RequestModel):
    rating: int = Field(default=5, ge=1, le=5)
    comment: str
    is_public: bool = True


class MessageCreate(RequestModel):
    content: str


class SessionOut(RequestModel):
    current_user: Optional[User] = None
    current_role: Optional[UserRole] = None
    current_camp: Optional[Camp] = None
    needs_role_selection: bool = False


class AssignmentOut(RequestModel):
    assignment: Assignment
    overdue: bool
    remaining: str
    submission_count: int = 0


class UploadResult(RequestModel):
    attachments: List[Attachment] = Field(default_factory=list)
    rejected: List[str] = Field(default_factory=list)
