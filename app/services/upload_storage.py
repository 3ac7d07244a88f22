"""
app/services/upload_storage.py

Spools uploaded files to the upload directory so readers can stream them from disk.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import BinaryIO

from app.domain.errors import UploadTooLargeError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def store_upload(
    stream: BinaryIO,
    *,
    filename: str | None,
    upload_dir: Path,
    max_bytes: int,
) -> Path:
    """
    Copy ``stream`` into ``upload_dir`` under a unique name keeping the extension.

    Raises UploadTooLargeError, after removing the partial copy, when the
    stream is longer than ``max_bytes``.
    """

    upload_dir.mkdir(parents=True, exist_ok=True)
    suffix = Path(filename or "").suffix.lower()
    target = upload_dir / f"{uuid.uuid4().hex}{suffix}"

    stream.seek(0)
    written = 0
    try:
        with target.open("wb") as handle:
            while chunk := stream.read(_CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(
                        f"Uploaded file exceeds the {max_bytes} byte limit."
                    )
                handle.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise

    logger.debug("Stored upload name=%s bytes=%d path=%s", filename, written, target)
    return target

