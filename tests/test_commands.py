import asyncio

import pytest

import commands
import store as store_module
from attachments import AttachmentLimitError, encode_attachment
from commands import CommandFailedError, CommandValidationError, RecordNotFoundError
from models import now_ms
from persistence import PersistenceAdapter
from queries import find_submission, find_user, messages_for_submission
from security import AuthenticationError, TrustedIdentityProvider
from store import AppStore

from conftest import fixed_seed


def _login(store, wx_id):
    return asyncio.run(commands.login(store, wx_id))


def _enter_first_camp(store):
    return commands.select_camp(store, store.state.camps[0].id)


def test_login_trims_identifier_and_restores_role(store):
    user = _login(store, "  teacher001  ")

    assert user.wx_id == "teacher001"
    assert store.state.current_role == "teacher"


@pytest.mark.parametrize("identifier", ["", "   ", None])
def test_login_rejects_empty_identifier(store, identifier):
    with pytest.raises(AuthenticationError):
        _login(store, identifier)

    assert store.state.current_user is None


def test_new_user_selects_role_and_is_remembered(store):
    _login(store, "new_user_01")
    assert store.state.current_role is None

    commands.select_role(store, "student")
    commands.logout(store)
    _login(store, "new_user_01")

    assert store.state.current_role == "student"
    assert find_user(store.state, "new_user_01").role == "student"


def test_select_role_requires_login(store):
    with pytest.raises(CommandValidationError):
        commands.select_role(store, "teacher")


def test_select_unknown_camp_raises(store):
    with pytest.raises(RecordNotFoundError):
        commands.select_camp(store, "missing")


def test_create_camp_requires_name(store):
    before = store.state

    with pytest.raises(CommandValidationError, match="学习营名称"):
        commands.create_camp(store, "   ")

    assert store.state is before


def test_update_camp_keeps_rosters(store):
    camp = store.state.camps[0]

    updated = commands.update_camp(store, camp.id, "New Name", "New description")

    assert updated.teachers == camp.teachers
    assert store.state.camps[0].name == "New Name"


def test_add_member_creates_user_record_once(store):
    camp_id = store.state.camps[0].id

    commands.add_member(store, camp_id, " student009 ", "student")
    commands.add_member(store, camp_id, "student009", "student")

    camp = store.state.camps[0]
    assert camp.students.count("student009") == 2
    users = [u for u in store.state.users if u.wx_id == "student009"]
    assert len(users) == 1
    assert users[0].role == "student"
    assert users[0].camp_id == camp_id


def test_add_member_leaves_known_user_alone(store):
    camp_id = store.state.camps[0].id
    users_before = store.state.users

    commands.add_member(store, camp_id, "teacher002", "student")

    assert store.state.users is users_before


def test_add_member_rejects_admin_role(store):
    with pytest.raises(CommandValidationError):
        commands.add_member(store, store.state.camps[0].id, "x", "admin")


def test_remove_member_drops_from_both_lists(store):
    camp_id = store.state.camps[0].id
    commands.add_member(store, camp_id, "teacher001", "student")

    camp = commands.remove_member(store, camp_id, "teacher001")

    assert "teacher001" not in camp.teachers
    assert "teacher001" not in camp.students


def test_delete_camp_removes_its_assignments(store):
    camp_id = store.state.camps[0].id

    commands.delete_camp(store, camp_id)

    assert store.state.camps == ()
    assert store.state.assignments == ()


def test_create_assignment_needs_selected_camp(store):
    _login(store, "teacher001")

    with pytest.raises(CommandValidationError, match="学习营"):
        commands.create_assignment(store, "Homework")


def test_create_assignment_defaults_deadline_to_one_week(store):
    _login(store, "teacher001")
    _enter_first_camp(store)

    assignment = commands.create_assignment(store, "Flexbox", "Build a grid")

    assert assignment.teacher_name == "张老师"
    assert assignment.deadline - assignment.created_at == commands.DEFAULT_DEADLINE_MS
    assert store.state.assignments[-1] == assignment


def test_create_assignment_rejects_too_many_attachments(store):
    _login(store, "teacher001")
    _enter_first_camp(store)
    files = [encode_attachment(f"f{i}.txt", "text/plain", b"x") for i in range(6)]
    before = store.state

    with pytest.raises(AttachmentLimitError):
        commands.create_assignment(store, "Too many", attachments=files)

    assert store.state is before


def test_submission_flow_with_review_and_messages(store):
    assignment = store.state.assignments[0]
    _login(store, "student001")
    submission = commands.submit_assignment(store, assignment.id, "My page")

    assert submission.student_name == "小明"
    assert find_submission(store.state, assignment.id, "student001") == submission

    commands.send_message(store, submission.id, "请老师看看")
    commands.logout(store)
    _login(store, "teacher001")
    review = commands.create_review(store, submission.id, 4, "不错", is_public=False)
    commands.send_message(store, submission.id, "继续加油")

    thread = messages_for_submission(store.state, submission.id)
    assert [m.sender_role for m in thread] == ["student", "teacher"]
    assert review.teacher_id == "teacher001"
    assert review.is_public is False


def test_overdue_assignment_rejects_submission(store):
    _login(store, "teacher001")
    _enter_first_camp(store)
    assignment = commands.create_assignment(store, "Late", deadline=now_ms() - 1)
    _login(store, "student001")
    before = store.state

    with pytest.raises(CommandValidationError, match="截止"):
        commands.submit_assignment(store, assignment.id, "too late")

    assert store.state is before


def test_submission_requires_content(store):
    _login(store, "student001")

    with pytest.raises(CommandValidationError):
        commands.submit_assignment(store, store.state.assignments[0].id, "  ")


def test_submission_for_unknown_assignment(store):
    _login(store, "student001")

    with pytest.raises(RecordNotFoundError):
        commands.submit_assignment(store, "nope", "content")


def test_duplicate_submission_allowed_by_default(store):
    _login(store, "student001")
    assignment_id = store.state.assignments[0].id

    commands.submit_assignment(store, assignment_id, "one")
    commands.submit_assignment(store, assignment_id, "two")

    assert len(store.state.submissions) == 2
    assert find_submission(store.state, assignment_id, "student001").content == "one"


def test_strict_mode_rejects_duplicate_submission(storage):
    store = AppStore(
        PersistenceAdapter(storage, seed_factory=fixed_seed),
        auth_provider=TrustedIdentityProvider(0),
        strict=True,
    )
    store.hydrate()
    _login(store, "student001")
    assignment_id = store.state.assignments[0].id
    commands.submit_assignment(store, assignment_id, "one")

    with pytest.raises(CommandValidationError):
        commands.submit_assignment(store, assignment_id, "two")


@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_must_be_in_range(store, rating):
    _login(store, "student001")
    submission = commands.submit_assignment(store, store.state.assignments[0].id, "work")
    _login(store, "teacher001")

    with pytest.raises(CommandValidationError):
        commands.create_review(store, submission.id, rating, "comment")


def test_message_requires_existing_submission(store):
    _login(store, "teacher001")

    with pytest.raises(RecordNotFoundError):
        commands.send_message(store, "ghost", "hello")


def test_set_nickname_rejects_blank(store):
    _login(store, "teacher001")

    with pytest.raises(CommandValidationError):
        commands.set_nickname(store, "")


@pytest.fixture
def broken_reducer(monkeypatch):
    def explode(state, action, strict=False):
        raise KeyError("boom")

    monkeypatch.setattr(store_module, "reduce", explode)


def test_create_camp_reports_failure_when_store_rejects(store, broken_reducer):
    before = store.state

    with pytest.raises(CommandFailedError):
        commands.create_camp(store, "Never stored")

    assert store.state is before


def test_submission_reports_failure_when_store_rejects(store, monkeypatch):
    _login(store, "student001")
    assignment_id = store.state.assignments[0].id
    monkeypatch.setattr(store_module, "reduce", lambda state, action, strict=False: state)

    with pytest.raises(CommandFailedError):
        commands.submit_assignment(store, assignment_id, "lost work")

    assert store.state.submissions == ()


def test_add_member_reports_failure_when_store_rejects(store, broken_reducer):
    with pytest.raises(CommandFailedError):
        commands.add_member(store, store.state.camps[0].id, "student001", "student")


def test_login_reports_failure_when_store_rejects(store, broken_reducer):
    with pytest.raises(CommandFailedError):
        _login(store, "teacher001")
