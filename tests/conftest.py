import itertools

import pytest

from models import AppState, Assignment, Camp, Submission, User, now_ms
from persistence import PersistenceAdapter
from security import TrustedIdentityProvider
from seed import build_seed_data
from storage import InMemoryStorage
from store import AppStore

FIXED_NOW = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


def fixed_seed():
    counter = itertools.count(1)
    return build_seed_data(now=now_ms(), id_factory=lambda: f"seed{next(counter):05d}")


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def adapter(storage):
    return PersistenceAdapter(storage, seed_factory=fixed_seed)


@pytest.fixture
def store(adapter):
    store = AppStore(adapter, auth_provider=TrustedIdentityProvider(0))
    store.hydrate()
    return store


@pytest.fixture
def camp_state():
    """A small state: one camp, one assignment, one submission."""
    camp = Camp(
        id="camp1",
        name="Python Basics",
        description="Intro cohort",
        created_at=FIXED_NOW,
        teachers=("teacher001",),
        students=("student001",),
    )
    assignment = Assignment(
        id="asg1",
        camp_id="camp1",
        teacher_id="teacher001",
        title="Loops",
        content="Write a for loop.",
        deadline=FIXED_NOW + DAY_MS,
        created_at=FIXED_NOW,
    )
    submission = Submission(
        id="sub1",
        assignment_id="asg1",
        student_id="student001",
        content="for i in range(3): print(i)",
        submitted_at=FIXED_NOW + 1000,
    )
    return AppState(
        camps=(camp,),
        users=(
            User(wx_id="teacher001", role="teacher", nickname="张老师"),
            User(wx_id="student001", role="student", nickname="小明"),
        ),
        assignments=(assignment,),
        submissions=(submission,),
    )
