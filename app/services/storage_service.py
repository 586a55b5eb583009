"""
Temporary storage for uploaded documents.

Each upload is written under the configured upload directory with a
generated, unique file name so concurrent requests never share a path.
A stored upload is a scoped resource: it is released (deleted from disk)
exactly once, after the extraction stage has read it. Further release
calls are no-ops.
"""

import logging
import os
import shutil
from typing import Optional
from uuid import uuid4

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class StoredUpload:
    """An uploaded document persisted to disk for the lifetime of one request."""

    def __init__(self, path: str, filename: Optional[str] = None) -> None:
        self.path = path
        self.filename = filename or os.path.basename(path)
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()

    def release(self) -> bool:
        """
        Delete the file from disk.

        Returns True when this call removed the file, False when the upload
        had already been released.
        """
        if self._released:
            return False
        self._released = True
        try:
            os.remove(self.path)
        except FileNotFoundError:
            logger.warning("Temporary upload %s was already gone", self.path)
            return False
        logger.debug("Removed temporary upload %s", self.path)
        return True


def ensure_upload_dir(upload_dir: str) -> str:
    """Create the upload directory if it does not exist yet."""
    os.makedirs(upload_dir, exist_ok=True)
    return upload_dir


def _copy_to_disk(upload_file: UploadFile, path: str) -> int:
    upload_file.file.seek(0)
    with open(path, "wb") as out:
        shutil.copyfileobj(upload_file.file, out)
        return out.tell()


async def save_upload(upload_file: UploadFile, upload_dir: str) -> StoredUpload:
    """
    Persist an incoming multipart upload to a uniquely named file.

    A partially written file is removed before the error propagates.
    """
    path = os.path.join(upload_dir, uuid4().hex)
    try:
        size = await run_in_threadpool(_copy_to_disk, upload_file, path)
    except Exception:
        if os.path.exists(path):
            os.remove(path)
        raise
    logger.info("Stored upload %r (%d bytes) at %s", upload_file.filename, size, path)
    return StoredUpload(path, filename=upload_file.filename)
