"""Persistence of multipart uploads into the upload directory."""

from __future__ import annotations

import re
import secrets
import string
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

_UPLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MiB
_UNSAFE_CHARACTERS = re.compile(r"[^\w.\-]+", re.ASCII)
_FALLBACK_ALPHABET = string.ascii_lowercase + string.digits


class UploadError(Exception):
    """Base exception for upload persistence failures."""


class UploadTooLargeError(UploadError):
    """Raised when an upload exceeds the configured size limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Uploaded file exceeds the maximum size of {limit} bytes.")
        self.limit = limit


@dataclass(slots=True)
class SavedUpload:
    """Description of a file written to the upload directory."""

    filename: str
    saved_path: Path
    size_bytes: int
    mime_type: str


def sanitize_filename(name: str) -> str:
    """Strip directory components and replace unsafe characters with ``_``."""

    base = Path(name.replace("\\", "/")).name
    return _UNSAFE_CHARACTERS.sub("_", base)


def fallback_filename() -> str:
    suffix = "".join(secrets.choice(_FALLBACK_ALPHABET) for _ in range(6))
    return f"upload_{int(time.time() * 1000)}_{suffix}.bin"


def find_available_path(directory: Path, filename: str) -> Path:
    """Return a path in *directory* that does not collide with an existing file."""

    candidate = directory / filename
    stem, suffix = Path(filename).stem, Path(filename).suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{counter}{suffix}"
        counter += 1
    return candidate


async def save_upload(upload: UploadFile, directory: Path, *, max_bytes: int) -> SavedUpload:
    """Stream *upload* into *directory* and describe the written file."""

    directory.mkdir(parents=True, exist_ok=True)
    provided = sanitize_filename(upload.filename) if upload.filename else ""
    if provided in {"", ".", ".."}:
        provided = fallback_filename()
    destination = find_available_path(directory, provided)

    bytes_written = 0
    try:
        with destination.open("wb") as buffer:
            while True:
                chunk = await upload.read(_UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                bytes_written += len(chunk)
                if bytes_written > max_bytes:
                    raise UploadTooLargeError(max_bytes)
                buffer.write(chunk)
    except Exception:
        destination.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    return SavedUpload(
        filename=destination.name,
        saved_path=destination,
        size_bytes=bytes_written,
        mime_type=upload.content_type or "application/octet-stream",
    )


__all__ = (
    "SavedUpload",
    "UploadError",
    "UploadTooLargeError",
    "fallback_filename",
    "find_available_path",
    "sanitize_filename",
    "save_upload",
)
