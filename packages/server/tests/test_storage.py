"""
Local bucketed storage: object naming, path rules and upload reading.
"""

import io
import re

import pytest
from fastapi import HTTPException, UploadFile

from app.core.storage import (
    AVATARS_BUCKET,
    TASK_ATTACHMENTS_BUCKET,
    LocalStorage,
    file_extension,
    generate_object_name,
    read_upload,
)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path, "/storage/")


class TestNaming:
    @pytest.mark.parametrize(
        "filename, expected",
        [("report.PDF", "pdf"), ("archive.tar.gz", "gz"), ("README", ""), (None, ""), ("", "")],
    )
    def test_file_extension(self, filename, expected):
        assert file_extension(filename) == expected

    def test_generated_names(self):
        assert re.fullmatch(r"\d+_[0-9a-f]{8}\.png", generate_object_name("photo.PNG"))
        assert re.fullmatch(r"\d+_[0-9a-f]{8}", generate_object_name("noext"))
        assert generate_object_name("a.txt") != generate_object_name("a.txt")


class TestLocalStorage:
    @pytest.mark.asyncio
    async def test_upload_exists_delete(self, storage, tmp_path):
        url = await storage.upload(AVATARS_BUCKET, "user-1/pic.png", b"png-bytes")
        assert url == "/storage/avatars/user-1/pic.png"
        assert (tmp_path / "avatars" / "user-1" / "pic.png").read_bytes() == b"png-bytes"
        assert storage.exists(AVATARS_BUCKET, "user-1/pic.png")

        assert await storage.delete(AVATARS_BUCKET, "user-1/pic.png") is True
        assert not storage.exists(AVATARS_BUCKET, "user-1/pic.png")
        assert await storage.delete(AVATARS_BUCKET, "user-1/pic.png") is False

    def test_public_url(self, storage):
        assert storage.public_url(TASK_ATTACHMENTS_BUCKET, "a.pdf") == "/storage/task-attachments/a.pdf"

    @pytest.mark.asyncio
    async def test_unknown_bucket(self, storage):
        with pytest.raises(ValueError):
            await storage.upload("secrets", "a.txt", b"x")

    @pytest.mark.parametrize("name", ["../escape.txt", "/etc/passwd", "a/../../b", ""])
    def test_rejects_unsafe_names(self, storage, name):
        with pytest.raises(ValueError):
            storage.public_url(AVATARS_BUCKET, name)


class TestReadUpload:
    @pytest.mark.asyncio
    async def test_reads_whole_file(self):
        data = b"x" * 200_000
        upload = UploadFile(file=io.BytesIO(data), filename="big.bin")
        assert await read_upload(upload, max_bytes=1_000_000) == data

    @pytest.mark.asyncio
    async def test_too_large(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 11), filename="a.txt")
        with pytest.raises(HTTPException) as exc_info:
            await read_upload(upload, max_bytes=10)
        assert exc_info.value.status_code == 413

    @pytest.mark.asyncio
    async def test_empty(self):
        upload = UploadFile(file=io.BytesIO(b""), filename="a.txt")
        with pytest.raises(HTTPException) as exc_info:
            await read_upload(upload, max_bytes=10)
        assert exc_info.value.status_code == 422
