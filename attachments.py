from __future__ import annotations

"""
Attachment encoding: turns uploaded files into inline data-URL attachments.

Enforces the caller-side limits (5 MiB per file, 5 attachments per owning
record) before anything reaches the store.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from models import Attachment, generate_id

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024
MAX_ATTACHMENTS = 5
DEFAULT_MIME_TYPE = "application/octet-stream"


class AttachmentError(ValueError):
    """Base error for attachment validation failures."""


class AttachmentLimitError(AttachmentError):
    """Raised when a batch would push a record past MAX_ATTACHMENTS."""


class UploadLike(Protocol):
    filename: str | None
    content_type: str | None

    async def read(self) -> bytes: ...


@dataclass(slots=True)
class EncodedBatch:
    attachments: list[Attachment] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)


def check_attachment_count(existing: int, incoming: int) -> None:
    if existing + incoming > MAX_ATTACHMENTS:
        raise AttachmentLimitError(f"最多只能上传 {MAX_ATTACHMENTS} 个文件")


def to_data_url(data: bytes, content_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def encode_attachment(name: str, content_type: str | None, data: bytes) -> Attachment:
    """Embed `data` as a fresh attachment record."""
    mime_type = content_type or DEFAULT_MIME_TYPE
    return Attachment(
        id=generate_id(),
        name=name,
        type=mime_type,
        url=to_data_url(data, mime_type),
        size=len(data),
    )


async def encode_uploads(existing_count: int, files: Iterable[UploadLike]) -> EncodedBatch:
    """
    Encode `files` one after another.

    The whole batch is refused when it would exceed MAX_ATTACHMENTS.
    Oversized files are skipped and listed in `rejected`; a file that
    cannot be read is logged and skipped without aborting the batch.
    """
    uploads = list(files)
    check_attachment_count(existing_count, len(uploads))

    batch = EncodedBatch()
    for upload in uploads:
        name = upload.filename or "file"
        try:
            data = await upload.read()
        except Exception:  # noqa: BLE001
            logger.exception("File conversion failed for %s", name)
            continue

        if len(data) > MAX_FILE_SIZE:
            logger.info("Skipping %s: %s exceeds the size limit.", name, format_file_size(len(data)))
            batch.rejected.append(name)
            continue

        batch.attachments.append(encode_attachment(name, upload.content_type, data))

    return batch


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(units) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[exponent]}"


def file_type_name(content_type: str) -> str:
    if content_type.startswith("image/"):
        return "图片"
    if content_type == "application/pdf":
        return "PDF"
    if "word" in content_type or "document" in content_type:
        return "Word"
    if "excel" in content_type or "sheet" in content_type:
        return "Excel"
    if "powerpoint" in content_type or "presentation" in content_type:
        return "PPT"
    return "文件"
