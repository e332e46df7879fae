# routes/attachments.py

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, UploadFile

from attachments import encode_uploads
from schemas import UploadResult

router = APIRouter(prefix="/attachments", tags=["attachments"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=UploadResult)
async def upload_attachments(
    files: list[UploadFile] = File(...),
    existing_count: int = Form(default=0, alias="existingCount"),
):
    """
    Encode uploaded files as inline attachments for a later create call.

    `existingCount` is how many attachments the form already holds; the
    whole batch is refused when the total would pass the limit.
    """
    logger.info("Encoding %s uploaded files (existing=%s)", len(files), existing_count)
    batch = await encode_uploads(existing_count, files)
    return UploadResult(attachments=batch.attachments, rejected=batch.rejected)
