from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path

from fastapi import HTTPException

from jobboard.core.config import settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}

CONTENT_TYPE_BY_EXTENSION = {ext: ct for ct, ext in ALLOWED_CONTENT_TYPES.items()}

RESUME_URL_PREFIX = "/uploads/resumes"


@dataclass(frozen=True)
class StoredResume:
    filename: str
    original_name: str
    url: str
    size: int


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def require_allowed_content_type(content_type: str | None) -> str:
    ct = (content_type or "").split(";")[0].strip().lower()
    if ct not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only PDF and Word documents are allowed")
    return ct


def enforce_max_upload_bytes(size_bytes: int) -> None:
    if size_bytes > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max allowed size is {max_mb:.1f} MB.",
        )


def require_safe_filename(raw: str | None) -> str:
    filename = (raw or "").strip()
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")
    return filename


def save_resume(data: bytes, original_name: str | None, content_type: str | None) -> StoredResume:
    ct = require_allowed_content_type(content_type)
    if not data:
        raise HTTPException(status_code=400, detail="No file provided")
    enforce_max_upload_bytes(len(data))

    filename = f"resume-{secrets.token_hex(16)}{ALLOWED_CONTENT_TYPES[ct]}"
    path = upload_dir() / filename
    path.write_bytes(data)

    logger.info("Resume stored: filename=%s size=%s", filename, len(data))
    return StoredResume(
        filename=filename,
        original_name=os.path.basename(original_name or filename),
        url=f"{RESUME_URL_PREFIX}/{filename}",
        size=len(data),
    )


def resolve_resume_path(filename: str) -> Path:
    safe = require_safe_filename(filename)
    path = upload_dir() / safe
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return path


def content_type_for(filename: str) -> str:
    return CONTENT_TYPE_BY_EXTENSION.get(Path(filename).suffix.lower(), "application/octet-stream")
