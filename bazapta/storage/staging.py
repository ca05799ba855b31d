"""
Staging of uploaded package files.

An upload is written to the staging directory under its own base name
before the repository tool is pointed at it. There is no collision
handling: two concurrent uploads of the same file name overwrite each
other.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Any, Optional

import aiofiles
from starlette.datastructures import UploadFile

from bazapta.domain.errors import StagingError

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "file"
CHUNK_SIZE = 64 * 1024


def staged_path(staging_dir: Path, filename: Optional[str]) -> Path:
    """
    Scratch path for an uploaded file name. Directory parts sent by the
    client are dropped.
    """
    name = PureWindowsPath(PurePosixPath(filename or "").name).name.strip()
    if not name or name in (".", ".."):
        raise StagingError(f"invalid upload filename: {filename!r}")
    return Path(staging_dir) / name


async def stage_upload(upload: Any, staging_dir: Path) -> Path:
    """
    Write the multipart field `file` byte-for-byte to the staging directory.

    Args:
        upload: The form value of the `file` field (None when missing).
        staging_dir: Directory receiving the scratch copy.

    Returns:
        The path of the staged file.

    Raises:
        StagingError: The field is missing or the file could not be written.
    """
    if not isinstance(upload, UploadFile):
        raise StagingError(f"missing multipart field '{UPLOAD_FIELD}'")

    target = staged_path(staging_dir, upload.filename)
    logger.debug(f"saving received file to {target}")

    try:
        async with aiofiles.open(target, "wb") as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                await f.write(chunk)
    except OSError as e:
        raise StagingError(f"could not stage {upload.filename}: {e}", status_code=500) from e
    finally:
        await upload.close()

    return target


def discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"could not remove staged file {path}: {e}")
