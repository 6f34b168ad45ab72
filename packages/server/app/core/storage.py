"""
Local-filesystem object storage.

Files live under ``<storage_root>/<bucket>/<name>`` and are served by the
static mount at ``storage_url_prefix``. Only the known buckets exist.
"""

from __future__ import annotations

import secrets
import time
from pathlib import Path, PurePosixPath

import structlog
from fastapi import HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from app.core.config import get_settings

log = structlog.get_logger()

AVATARS_BUCKET = "avatars"
TASK_ATTACHMENTS_BUCKET = "task-attachments"
BUCKETS = (AVATARS_BUCKET, TASK_ATTACHMENTS_BUCKET)

CHUNK_SIZE = 64 * 1024


def file_extension(filename: str | None) -> str:
    """Extension after the last dot, lower-cased; "" when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def generate_object_name(filename: str | None) -> str:
    """``<epoch ms>_<random>.<ext>``; the extension is dropped when unknown."""
    stem = f"{int(time.time() * 1000)}_{secrets.token_hex(4)}"
    ext = file_extension(filename)
    return f"{stem}.{ext}" if ext else stem


class LocalStorage:
    """Bucketed file store rooted at a directory."""

    def __init__(self, root: str | Path, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, bucket: str, name: str) -> Path:
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket: {bucket}")
        pure = PurePosixPath(name)
        if pure.is_absolute() or ".." in pure.parts or not pure.parts:
            raise ValueError(f"Invalid object name: {name!r}")
        return self.root / bucket / pure

    def public_url(self, bucket: str, name: str) -> str:
        self._path(bucket, name)
        return f"{self.url_prefix}/{bucket}/{name}"

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def upload(self, bucket: str, name: str, data: bytes) -> str:
        """Store ``data`` and return its public URL."""
        path = self._path(bucket, name)
        await run_in_threadpool(self._write, path, data)
        log.info("storage.uploaded", bucket=bucket, name=name, size=len(data))
        return self.public_url(bucket, name)

    async def delete(self, bucket: str, name: str) -> bool:
        path = self._path(bucket, name)
        if not path.exists():
            return False
        await run_in_threadpool(path.unlink)
        log.info("storage.deleted", bucket=bucket, name=name)
        return True

    def exists(self, bucket: str, name: str) -> bool:
        return self._path(bucket, name).exists()


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an UploadFile fully, rejecting bodies over ``max_bytes`` (413)."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise HTTPException(status_code=413, detail="File is too large")
        chunks.append(chunk)
    if total == 0:
        raise HTTPException(status_code=422, detail="Uploaded file is empty")
    return b"".join(chunks)


_storage: LocalStorage | None = None


def get_storage() -> LocalStorage:
    """FastAPI dependency returning the configured storage."""
    global _storage
    if _storage is None:
        settings = get_settings()
        _storage = LocalStorage(settings.storage_root, settings.storage_url_prefix)
    return _storage
