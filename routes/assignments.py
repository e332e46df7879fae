# routes/assignments.py
# ==========================================================
# Routes for posting assignments and submitting work to them.
# Teachers post into their currently selected camp.
# ==========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

import commands
from models import Assignment, Submission
from queries import (
    find_assignment,
    find_submission,
    is_overdue,
    remaining_time_text,
    submissions_for_assignment,
)
from routes import get_store
from schemas import AssignmentCreate, AssignmentOut, SubmissionCreate
from store import AppStore

# ----------------------------------------------------------
# Router setup
# ----------------------------------------------------------
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])


def _get_assignment_or_404(store: AppStore, assignment_id: str) -> Assignment:
    assignment = find_assignment(store.state, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


# ----------------------------------------------------------
# POST /assignments/
# Teacher posts a new assignment into the current camp
# ----------------------------------------------------------
@router.post("/", response_model=Assignment, status_code=201)
def create_assignment(payload: AssignmentCreate, store: AppStore = Depends(get_store)):
    assignment = commands.create_assignment(
        store,
        payload.title,
        payload.content,
        payload.deadline,
        payload.attachments,
    )
    logger.info(
        "Assignment %s posted to camp %s by %s",
        assignment.id,
        assignment.camp_id,
        assignment.teacher_id,
    )
    return assignment


# ----------------------------------------------------------
# GET /assignments/{id}
# Assignment plus its deadline status
# ----------------------------------------------------------
@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(assignment_id: str, store: AppStore = Depends(get_store)):
    assignment = _get_assignment_or_404(store, assignment_id)
    return AssignmentOut(
        assignment=assignment,
        overdue=is_overdue(assignment.deadline),
        remaining=remaining_time_text(assignment.deadline),
        submission_count=len(submissions_for_assignment(store.state, assignment_id)),
    )


@router.delete("/{assignment_id}", status_code=204)
def delete_assignment(assignment_id: str, store: AppStore = Depends(get_store)):
    """Delete an assignment together with its submissions."""
    commands.delete_assignment(store, assignment_id)
    logger.info("Deleted assignment %s", assignment_id)
    return Response(status_code=204)


# ----------------------------------------------------------
# Submissions for an assignment
# ----------------------------------------------------------
@router.get("/{assignment_id}/submissions", response_model=list[Submission])
def list_submissions(assignment_id: str, store: AppStore = Depends(get_store)):
    _get_assignment_or_404(store, assignment_id)
    return submissions_for_assignment(store.state, assignment_id)


@router.post("/{assignment_id}/submissions", response_model=Submission, status_code=201)
def submit_assignment(
    assignment_id: str,
    payload: SubmissionCreate,
    store: AppStore = Depends(get_store),
):
    """Submit work for an assignment that is still open."""
    submission = commands.submit_assignment(
        store,
        assignment_id,
        payload.content,
        payload.attachments,
    )
    logger.info(
        "Submission stored for assignment %s (%s)",
        assignment_id,
        submission.student_id,
    )
    return submission


@router.get("/{assignment_id}/submissions/mine", response_model=Submission)
def get_my_submission(assignment_id: str, store: AppStore = Depends(get_store)):
    user = store.state.current_user
    if user is None:
        raise HTTPException(status_code=400, detail="请先登录")
    submission = find_submission(store.state, assignment_id, user.wx_id)
    if submission is None:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission
