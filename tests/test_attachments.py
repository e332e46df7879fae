import asyncio
import base64

import pytest

from attachments import (
    MAX_FILE_SIZE,
    AttachmentLimitError,
    encode_attachment,
    encode_uploads,
    file_type_name,
    format_file_size,
)


class FakeUpload:
    def __init__(self, filename, data=b"", content_type="text/plain", error=None):
        self.filename = filename
        self.content_type = content_type
        self._data = data
        self._error = error

    async def read(self):
        if self._error is not None:
            raise self._error
        return self._data


def test_encode_attachment_builds_data_url():
    attachment = encode_attachment("photo.png", "image/png", b"\x89PNG")

    assert attachment.name == "photo.png"
    assert attachment.type == "image/png"
    assert attachment.size == 4
    assert attachment.url == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    assert len(attachment.id) == 9


def test_encode_attachment_defaults_mime_type():
    assert encode_attachment("blob", None, b"1").type == "application/octet-stream"


def test_batch_over_limit_is_rejected_whole():
    files = [FakeUpload(f"f{i}.txt", b"x") for i in range(3)]

    with pytest.raises(AttachmentLimitError):
        asyncio.run(encode_uploads(3, files))


def test_batch_skips_oversized_and_unreadable_files():
    files = [
        FakeUpload("ok.txt", b"hello"),
        FakeUpload("huge.bin", b"0" * (MAX_FILE_SIZE + 1)),
        FakeUpload("broken.txt", error=OSError("read failed")),
        FakeUpload("also-ok.pdf", b"%PDF", "application/pdf"),
    ]

    batch = asyncio.run(encode_uploads(0, files))

    assert [a.name for a in batch.attachments] == ["ok.txt", "also-ok.pdf"]
    assert batch.rejected == ["huge.bin"]


def test_file_at_exact_limit_is_accepted():
    batch = asyncio.run(encode_uploads(4, [FakeUpload("edge.bin", b"0" * MAX_FILE_SIZE)]))

    assert batch.attachments[0].size == MAX_FILE_SIZE


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (512, "512 B"), (1024, "1 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("image/jpeg", "图片"),
        ("application/pdf", "PDF"),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "Word"),
        ("application/vnd.ms-excel", "Excel"),
        ("application/vnd.ms-powerpoint", "PPT"),
        ("application/zip", "文件"),
    ],
)
def test_file_type_name(content_type, expected):
    assert file_type_name(content_type) == expected
