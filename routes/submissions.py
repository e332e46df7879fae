# routes/submissions.py

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

import commands
from models import Message, Review, Submission
from queries import find_review, find_submission_by_id, messages_for_submission
from routes import get_store
from schemas import MessageCreate, ReviewCreate
from store import AppStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/submissions", tags=["submissions"])


def _get_submission_or_404(store: AppStore, submission_id: str) -> Submission:
    submission = find_submission_by_id(store.state, submission_id)
    if submission is None:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission


@router.get("/{submission_id}", response_model=Submission)
def get_submission(submission_id: str, store: AppStore = Depends(get_store)):
    return _get_submission_or_404(store, submission_id)


@router.get("/{submission_id}/review", response_model=Review)
def get_review(submission_id: str, store: AppStore = Depends(get_store)):
    """Return the (first) review for a submission."""
    _get_submission_or_404(store, submission_id)
    review = find_review(store.state, submission_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.post("/{submission_id}/review", response_model=Review, status_code=201)
def create_review(
    submission_id: str,
    payload: ReviewCreate,
    store: AppStore = Depends(get_store),
):
    """Rate and comment on a submission."""
    review = commands.create_review(
        store,
        submission_id,
        payload.rating,
        payload.comment,
        payload.is_public,
    )
    logger.info("Review %s stored for submission %s", review.id, submission_id)
    return review


@router.get("/{submission_id}/messages", response_model=list[Message])
def list_messages(submission_id: str, store: AppStore = Depends(get_store)):
    """Messages on a submission, oldest first."""
    _get_submission_or_404(store, submission_id)
    return messages_for_submission(store.state, submission_id)


@router.post("/{submission_id}/messages", response_model=Message, status_code=201)
def send_message(
    submission_id: str,
    payload: MessageCreate,
    store: AppStore = Depends(get_store),
):
    return commands.send_message(store, submission_id, payload.content)
