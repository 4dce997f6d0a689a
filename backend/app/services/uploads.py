"""
Upload validation and storage.

Files are checked against a per-purpose allow-list and the configured size
limit, then written under the uploads root as ``fieldname-<ms>-<random>.ext``.
Only the resulting relative path is kept on the owning record.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.errors import UploadRejected

logger = logging.getLogger("uploads")

DOCUMENT_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}

IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

# kind -> (allowed MIME types, allowed extensions, rejection message)
ALLOW_LISTS = {
    "resume": (
        set(DOCUMENT_TYPES),
        {".pdf", ".doc", ".docx"},
        "Only PDF and Word documents are allowed",
    ),
    "evidence": (
        set(DOCUMENT_TYPES) | set(IMAGE_TYPES),
        {".pdf", ".doc", ".docx", ".jpg", ".jpeg", ".png", ".gif", ".webp"},
        "Only images, PDF and Word documents are allowed",
    ),
}

GENERIC_TYPES = {"", "application/octet-stream"}


def validate_upload(filename: str, content_type: Optional[str], size: int, kind: str = "resume") -> str:
    """
    Check an upload against the size limit and the allow-list for ``kind``.

    The declared MIME type decides; the file extension is only consulted when
    the client sent no specific type.

    Returns:
        The lowercase extension to store the file under

    Raises:
        UploadRejected: too large, empty, or not an allowed type
    """
    types, extensions, type_message = ALLOW_LISTS[kind]
    limit = settings.MAX_UPLOAD_BYTES

    if size > limit:
        raise UploadRejected(f"File size should be less than {limit // (1024 * 1024)}MB")
    if size <= 0:
        raise UploadRejected("Uploaded file is empty")

    ext = os.path.splitext(filename or "")[1].lower()
    mime = (content_type or "").split(";")[0].strip().lower()

    if mime in GENERIC_TYPES:
        if ext not in extensions:
            raise UploadRejected(type_message)
    elif mime not in types:
        raise UploadRejected(type_message)

    if ext not in extensions:
        ext = DOCUMENT_TYPES.get(mime) or IMAGE_TYPES.get(mime, "")
    return ext


def build_stored_name(fieldname: str, ext: str) -> str:
    return f"{fieldname}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def upload_root() -> Path:
    root = Path(settings.UPLOAD_DIR)
    root.mkdir(parents=True, exist_ok=True)
    return root


def save_bytes(fieldname: str, ext: str, data: bytes) -> str:
    """Write validated bytes under the uploads root and return the stored relative path."""
    name = build_stored_name(fieldname, ext)
    (upload_root() / name).write_bytes(data)
    logger.info("Stored upload %s (%d bytes)", name, len(data))
    return f"uploads/{name}"


async def store_upload(upload: UploadFile, fieldname: str, kind: str = "resume") -> str:
    """Validate and persist a multipart upload. Nothing is written when validation fails."""
    data = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    ext = validate_upload(upload.filename or "", upload.content_type, len(data), kind)
    return save_bytes(fieldname, ext, data)


def remove_upload(relative_path: Optional[str]) -> None:
    """Delete a previously stored upload; missing files are ignored."""
    if not relative_path:
        return
    path = Path(settings.UPLOAD_DIR) / Path(relative_path).name
    try:
        path.unlink()
    except FileNotFoundError:
        pass
