"""
User-facing commands: validate input, then dispatch.

Each command checks required fields, attachment limits and deadlines, and
raises `CommandValidationError` with the notice to show the user.
Nothing is dispatched when validation fails. `CommandFailedError` means the
store did not apply an action that passed validation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from attachments import check_attachment_count
from models import (
    Assignment,
    Attachment,
    Camp,
    Message,
    Review,
    Submission,
    User,
    UserRole,
    generate_id,
    now_ms,
)
from queries import (
    find_assignment,
    find_camp,
    find_review,
    find_submission,
    find_submission_by_id,
    find_user,
    is_overdue,
)
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
    LoginAction,
    LogoutAction,
    RemoveMemberAction,
    SetCampAction,
    SetNicknameAction,
    SetRoleAction,
    UpdateCampAction,
    UpsertUserAction,
)
from store import AppStore

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_MS = 7 * 24 * 60 * 60 * 1000


class CommandValidationError(ValueError):
    """A user input problem; the message is the notice shown to the user."""


class RecordNotFoundError(LookupError):
    """A command referenced a camp, assignment or submission that is gone."""


class CommandFailedError(RuntimeError):
    """The store did not apply a validated command's action."""


def _confirm(applied: bool, action_type: str) -> None:
    if not applied:
        logger.error("%s was not applied to the store.", action_type)
        raise CommandFailedError("操作未能完成，请稍后重试")


def _required(value: Optional[str], notice: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise CommandValidationError(notice)
    return cleaned


def _require_user(store: AppStore) -> User:
    user = store.state.current_user
    if user is None:
        raise CommandValidationError("请先登录")
    return user


def _require_camp(store: AppStore, camp_id: str) -> Camp:
    camp = find_camp(store.state, camp_id)
    if camp is None:
        raise RecordNotFoundError(f"Camp {camp_id} not found")
    return camp


def _require_submission(store: AppStore, submission_id: str) -> Submission:
    submission = find_submission_by_id(store.state, submission_id)
    if submission is None:
        raise RecordNotFoundError(f"Submission {submission_id} not found")
    return submission


# ----------------------------------------------------------
# Session
# ----------------------------------------------------------
async def login(store: AppStore, identifier: Optional[str]) -> User:
    """Resolve the identity, wait out the login delay, then dispatch LOGIN."""
    provider = store.auth_provider
    wx_id = provider.resolve(identifier)
    await asyncio.sleep(provider.login_delay_seconds)
    store.dispatch(LoginAction(wx_id=wx_id))
    user = store.state.current_user
    _confirm(user is not None and user.wx_id == wx_id, "LOGIN")
    logger.info("Logged in as %s (role=%s)", wx_id, store.state.current_role)
    return store.state.current_user


def logout(store: AppStore) -> None:
    store.dispatch(LogoutAction())


def select_role(store: AppStore, role: UserRole) -> User:
    _require_user(store)
    store.dispatch(SetRoleAction(role=role))
    _confirm(store.state.current_role == role, "SET_ROLE")
    return store.state.current_user


def set_nickname(store: AppStore, nickname: Optional[str]) -> User:
    _require_user(store)
    store.dispatch(SetNicknameAction(nickname=_required(nickname, "请输入昵称")))
    return store.state.current_user


def select_camp(store: AppStore, camp_id: Optional[str]) -> Optional[Camp]:
    camp = _require_camp(store, camp_id) if camp_id else None
    store.dispatch(SetCampAction(camp=camp))
    return camp


# ----------------------------------------------------------
# Camps (admin)
# ----------------------------------------------------------
def create_camp(store: AppStore, name: Optional[str], description: str = "") -> Camp:
    camp = Camp(
        id=generate_id(),
        name=_required(name, "请输入学习营名称"),
        description=description or "",
        created_at=now_ms(),
    )
    store.dispatch(CreateCampAction(camp=camp))
    _confirm(find_camp(store.state, camp.id) is not None, "CREATE_CAMP")
    return camp


def update_camp(
    store: AppStore,
    camp_id: str,
    name: Optional[str],
    description: str = "",
) -> Camp:
    cleaned = _required(name, "请输入学习营名称")
    camp = _require_camp(store, camp_id).model_copy(
        update={"name": cleaned, "description": description or ""}
    )
    store.dispatch(UpdateCampAction(camp=camp))
    _confirm(find_camp(store.state, camp_id) == camp, "UPDATE_CAMP")
    return camp


def delete_camp(store: AppStore, camp_id: str) -> None:
    _require_camp(store, camp_id)
    store.dispatch(DeleteCampAction(id=camp_id))
    _confirm(find_camp(store.state, camp_id) is None, "DELETE_CAMP")


def _roster(camp: Camp, role: UserRole) -> tuple[str, ...]:
    return camp.teachers if role == "teacher" else camp.students


def add_member(store: AppStore, camp_id: str, wx_id: Optional[str], role: UserRole) -> Camp:
    """Add a teacher or student, creating their user record when unseen."""
    if role not in ("teacher", "student"):
        raise CommandValidationError("成员角色只能是老师或学员")
    member = _required(wx_id, "请输入微信号")
    before = _roster(_require_camp(store, camp_id), role).count(member)

    if role == "teacher":
        store.dispatch(AddTeacherAction(camp_id=camp_id, wx_id=member))
    else:
        store.dispatch(AddStudentAction(camp_id=camp_id, wx_id=member))

    after = _roster(find_camp(store.state, camp_id), role).count(member)
    _confirm(after > before, "ADD_TEACHER" if role == "teacher" else "ADD_STUDENT")

    if find_user(store.state, member) is None:
        store.dispatch(UpsertUserAction(user=User(wx_id=member, role=role, camp_id=camp_id)))

    return find_camp(store.state, camp_id)


def remove_member(store: AppStore, camp_id: str, wx_id: str) -> Camp:
    _require_camp(store, camp_id)
    store.dispatch(RemoveMemberAction(camp_id=camp_id, wx_id=wx_id))
    return find_camp(store.state, camp_id)


# ----------------------------------------------------------
# Assignments (teacher)
# ----------------------------------------------------------
def create_assignment(
    store: AppStore,
    title: Optional[str],
    content: str = "",
    deadline: Optional[int] = None,
    attachments: Iterable[Attachment] = (),
) -> Assignment:
    user = _require_user(store)
    camp = store.state.current_camp
    if camp is None:
        raise CommandValidationError("请先选择学习营")
    cleaned_title = _required(title, "请输入作业标题")
    files = tuple(attachments)
    check_attachment_count(0, len(files))

    created_at = now_ms()
    assignment = Assignment(
        id=generate_id(),
        camp_id=camp.id,
        teacher_id=user.wx_id,
        teacher_name=user.nickname,
        title=cleaned_title,
        content=content or "",
        attachments=files,
        deadline=deadline if deadline is not None else created_at + DEFAULT_DEADLINE_MS,
        created_at=created_at,
    )
    store.dispatch(CreateAssignmentAction(assignment=assignment))
    _confirm(find_assignment(store.state, assignment.id) is not None, "CREATE_ASSIGNMENT")
    return assignment


def delete_assignment(store: AppStore, assignment_id: str) -> None:
    if find_assignment(store.state, assignment_id) is None:
        raise RecordNotFoundError(f"Assignment {assignment_id} not found")
    store.dispatch(DeleteAssignmentAction(id=assignment_id))
    _confirm(find_assignment(store.state, assignment_id) is None, "DELETE_ASSIGNMENT")


# ----------------------------------------------------------
# Submissions (student)
# ----------------------------------------------------------
def submit_assignment(
    store: AppStore,
    assignment_id: str,
    content: Optional[str],
    attachments: Iterable[Attachment] = (),
    now: Optional[int] = None,
) -> Submission:
    user = _require_user(store)
    cleaned = _required(content, "请输入作业内容")
    assignment = find_assignment(store.state, assignment_id)
    if assignment is None:
        raise RecordNotFoundError(f"Assignment {assignment_id} not found")

    submitted_at = now_ms() if now is None else now
    if is_overdue(assignment.deadline, submitted_at):
        raise CommandValidationError("作业已截止，无法提交")

    files = tuple(attachments)
    check_attachment_count(0, len(files))

    if store.strict and find_submission(store.state, assignment_id, user.wx_id) is not None:
        raise CommandValidationError("你已经提交过这份作业")

    submission = Submission(
        id=generate_id(),
        assignment_id=assignment_id,
        student_id=user.wx_id,
        student_name=user.nickname,
        content=cleaned,
        attachments=files,
        submitted_at=submitted_at,
    )
    store.dispatch(CreateSubmissionAction(submission=submission))
    _confirm(find_submission_by_id(store.state, submission.id) is not None, "CREATE_SUBMISSION")
    return submission


# ----------------------------------------------------------
# Reviews and messages
# ----------------------------------------------------------
def create_review(
    store: AppStore,
    submission_id: str,
    rating: int,
    comment: Optional[str],
    is_public: bool = True,
) -> Review:
    user = _require_user(store)
    if not 1 <= rating <= 5:
        raise CommandValidationError("评分必须在 1 到 5 之间")
    cleaned = _required(comment, "请输入评语")
    _require_submission(store, submission_id)

    if store.strict and find_review(store.state, submission_id) is not None:
        raise CommandValidationError("这份作业已经评价过了")

    review = Review(
        id=generate_id(),
        submission_id=submission_id,
        teacher_id=user.wx_id,
        teacher_name=user.nickname,
        rating=rating,
        comment=cleaned,
        is_public=is_public,
        created_at=now_ms(),
    )
    store.dispatch(CreateReviewAction(review=review))
    _confirm(any(r.id == review.id for r in store.state.reviews), "CREATE_REVIEW")
    return review


def send_message(store: AppStore, submission_id: str, content: Optional[str]) -> Message:
    user = _require_user(store)
    cleaned = _required(content, "请输入留言内容")
    _require_submission(store, submission_id)

    message = Message(
        id=generate_id(),
        submission_id=submission_id,
        sender_id=user.wx_id,
        sender_name=user.nickname,
        sender_role=store.state.current_role or user.role,
        content=cleaned,
        created_at=now_ms(),
    )
    store.dispatch(CreateMessageAction(message=message))
    _confirm(any(m.id == message.id for m in store.state.messages), "CREATE_MESSAGE")
    return message
