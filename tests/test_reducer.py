from models import AppState, Camp, Message, Review, Submission, User
from reducer import reduce
from schemas import (
    AddStudentAction,
    AddTeacherAction,
    CreateCampAction,
    CreateMessageAction,
    CreateReviewAction,
    CreateSubmissionAction,
    DeleteAssignmentAction,
    DeleteCampAction,
    LoadDataAction,
    LoginAction,
    LogoutAction,
    RemoveMemberAction,
    SetCampAction,
    SetNicknameAction,
    SetRoleAction,
    StatePatch,
    UpdateCampAction,
    UpsertUserAction,
)

from conftest import FIXED_NOW


def _message(message_id: str = "msg1") -> Message:
    return Message(
        id=message_id,
        submission_id="sub1",
        sender_id="student001",
        sender_role="student",
        content="Is this right?",
        created_at=FIXED_NOW,
    )


def test_login_unknown_user_gets_placeholder_without_persisting():
    state = AppState(users=(User(wx_id="teacher001", role="teacher"),))

    result = reduce(state, LoginAction(wx_id="new_user_01"))

    assert result.current_user == User(wx_id="new_user_01", role="student")
    assert result.current_role is None
    assert [u.wx_id for u in result.users] == ["teacher001"]


def test_login_known_user_restores_stored_role():
    teacher = User(wx_id="teacher001", role="teacher", nickname="张老师")
    state = AppState(users=(teacher,))

    result = reduce(state, LoginAction(wx_id="teacher001"))

    assert result.current_user is teacher
    assert result.current_role == "teacher"


def test_logout_clears_session_but_keeps_domain_data(camp_state):
    logged_in = reduce(camp_state, LoginAction(wx_id="teacher001"))
    logged_in = reduce(logged_in, SetCampAction(camp=camp_state.camps[0]))

    result = reduce(logged_in, LogoutAction())

    assert result.current_user is None
    assert result.current_role is None
    assert result.current_camp is None
    assert result.camps is logged_in.camps
    assert result.users is logged_in.users


def test_set_role_without_user_is_noop(camp_state):
    assert reduce(camp_state, SetRoleAction(role="admin")) is camp_state


def test_set_role_adds_new_user_to_users():
    state = reduce(AppState(), LoginAction(wx_id="new_user_01"))

    result = reduce(state, SetRoleAction(role="teacher"))

    assert result.current_role == "teacher"
    assert result.current_user.role == "teacher"
    assert result.users == (User(wx_id="new_user_01", role="teacher"),)


def test_set_role_replaces_existing_entry(camp_state):
    state = reduce(camp_state, LoginAction(wx_id="student001"))

    result = reduce(state, SetRoleAction(role="teacher"))

    assert len(result.users) == len(camp_state.users)
    stored = next(u for u in result.users if u.wx_id == "student001")
    assert stored.role == "teacher"
    assert stored.nickname == "小明"


def test_set_nickname_updates_current_and_stored_user(camp_state):
    state = reduce(camp_state, LoginAction(wx_id="teacher001"))

    result = reduce(state, SetNicknameAction(nickname="王老师"))

    assert result.current_user.nickname == "王老师"
    assert next(u for u in result.users if u.wx_id == "teacher001").nickname == "王老师"


def test_set_nickname_does_not_insert_unknown_user():
    state = reduce(AppState(), LoginAction(wx_id="ghost"))

    result = reduce(state, SetNicknameAction(nickname="Ghost"))

    assert result.current_user.nickname == "Ghost"
    assert result.users == ()


def test_add_then_remove_student_leaves_teachers_alone(camp_state):
    added = reduce(camp_state, AddStudentAction(camp_id="camp1", wx_id="student002"))
    assert "student002" in added.camps[0].students

    result = reduce(added, RemoveMemberAction(camp_id="camp1", wx_id="student002"))

    assert "student002" not in result.camps[0].students
    assert result.camps[0].teachers == camp_state.camps[0].teachers


def test_add_teacher_does_not_deduplicate(camp_state):
    result = reduce(camp_state, AddTeacherAction(camp_id="camp1", wx_id="teacher001"))

    assert result.camps[0].teachers == ("teacher001", "teacher001")


def test_remove_member_is_noop_for_absent_id(camp_state):
    result = reduce(camp_state, RemoveMemberAction(camp_id="camp1", wx_id="nobody"))

    assert result.camps[0].teachers == camp_state.camps[0].teachers
    assert result.camps[0].students == camp_state.camps[0].students


def test_delete_camp_cascades_to_assignments_only(camp_state):
    result = reduce(camp_state, DeleteCampAction(id="camp1"))

    assert result.camps == ()
    assert result.assignments == ()
    # Submissions of the removed assignment stay behind.
    assert result.submissions == camp_state.submissions


def test_delete_assignment_cascades_to_submissions(camp_state):
    review = Review(
        id="rev1",
        submission_id="sub1",
        teacher_id="teacher001",
        rating=4,
        comment="Nice",
        created_at=FIXED_NOW,
    )
    state = reduce(camp_state, CreateReviewAction(review=review))

    result = reduce(state, DeleteAssignmentAction(id="asg1"))

    assert result.assignments == ()
    assert result.submissions == ()
    assert result.reviews == (review,)


def test_update_camp_replaces_by_id(camp_state):
    renamed = camp_state.camps[0].model_copy(update={"name": "Python Advanced"})

    result = reduce(camp_state, UpdateCampAction(camp=renamed))

    assert result.camps == (renamed,)


def test_create_actions_append_in_order(camp_state):
    state = reduce(camp_state, CreateMessageAction(message=_message("msg1")))
    state = reduce(state, CreateMessageAction(message=_message("msg2")))

    assert [m.id for m in state.messages] == ["msg1", "msg2"]


def test_duplicate_submission_allowed_unless_strict(camp_state):
    duplicate = Submission(
        id="sub2",
        assignment_id="asg1",
        student_id="student001",
        content="second try",
        submitted_at=FIXED_NOW + 2000,
    )
    action = CreateSubmissionAction(submission=duplicate)

    assert len(reduce(camp_state, action).submissions) == 2
    assert reduce(camp_state, action, strict=True) is camp_state


def test_duplicate_review_rejected_in_strict_mode(camp_state):
    first = Review(
        id="rev1",
        submission_id="sub1",
        teacher_id="teacher001",
        rating=5,
        comment="Great",
        created_at=FIXED_NOW,
    )
    second = first.model_copy(update={"id": "rev2", "rating": 3})
    state = reduce(camp_state, CreateReviewAction(review=first), strict=True)

    assert reduce(state, CreateReviewAction(review=second), strict=True) is state
    assert len(reduce(state, CreateReviewAction(review=second)).reviews) == 2


def test_load_data_merges_only_given_fields(camp_state):
    users = (User(wx_id="admin001", role="admin"),)

    result = reduce(camp_state, LoadDataAction(data=StatePatch(users=users)))

    assert result.users == users
    assert result.camps is camp_state.camps
    assert result.assignments is camp_state.assignments


def test_upsert_user_inserts_then_replaces(camp_state):
    added = reduce(
        camp_state,
        UpsertUserAction(user=User(wx_id="student002", role="student", camp_id="camp1")),
    )
    assert added.users[-1].wx_id == "student002"

    replaced = reduce(added, UpsertUserAction(user=User(wx_id="student002", role="teacher")))
    assert len(replaced.users) == len(added.users)
    assert replaced.users[-1].role == "teacher"


def test_unknown_action_returns_input_state(camp_state):
    class Bogus:
        type = "TELEPORT"

    assert reduce(camp_state, Bogus()) is camp_state
    assert reduce(camp_state, object()) is camp_state


def test_reduce_reuses_untouched_branches(camp_state):
    snapshot = camp_state.model_dump()

    result = reduce(camp_state, AddStudentAction(camp_id="camp1", wx_id="student002"))

    assert camp_state.model_dump() == snapshot
    assert result is not camp_state
    assert result.camps is not camp_state.camps
    assert result.assignments is camp_state.assignments
    assert result.submissions is camp_state.submissions
    assert result.users is camp_state.users


def test_create_camp_leaves_existing_camps_untouched(camp_state):
    new_camp = Camp(id="camp2", name="Go", created_at=FIXED_NOW)

    result = reduce(camp_state, CreateCampAction(camp=new_camp))

    assert result.camps[0] is camp_state.camps[0]
    assert result.camps[1] is new_camp
    assert len(camp_state.camps) == 1
