"""
Validation for uploaded study material.

Checks:
- File present and not empty
- File size limit (configurable, default 20MB)
- MIME type is application/pdf (sniffed from content, not the client header)
- Filename sanitization for the storage path
- Content hash for duplicate detection
"""

import hashlib
import re
from pathlib import Path
from typing import Tuple

import magic
from fastapi import HTTPException, UploadFile

DEFAULT_MAX_FILE_SIZE = 20 * 1024 * 1024  # 20MB in bytes
ALLOWED_MIME_TYPE = "application/pdf"
MAX_FILENAME_LENGTH = 200


async def validate_pdf(
    file: UploadFile, max_size: int = DEFAULT_MAX_FILE_SIZE
) -> Tuple[bytes, str, str]:
    """
    Validate an uploaded PDF and return content, hash, and sanitized filename.

    Args:
        file: FastAPI UploadFile instance from multipart/form-data
        max_size: Maximum accepted size in bytes

    Returns:
        Tuple of (file_content, sha256_hash, sanitized_filename)

    Raises:
        HTTPException: 400 for validation errors, 413 for file too large
    """
    content = await file.read()

    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > max_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
        )

    mime_type = magic.from_buffer(content, mime=True)
    if mime_type != ALLOWED_MIME_TYPE:
        raise HTTPException(
            status_code=400,
            detail=f"Only PDF files are allowed (got {mime_type})"
        )

    sanitized_filename = sanitize_filename(file.filename or "upload.pdf")
    file_hash = hashlib.sha256(content).hexdigest()

    return content, file_hash, sanitized_filename


def sanitize_filename(filename: str) -> str:
    """
    Make a client-supplied filename safe to embed in a storage path.

    - Drops directory components and '..'
    - Removes null bytes
    - Replaces anything outside [a-zA-Z0-9._-] with '_'
    - Ensures a .pdf extension and a bounded length
    """
    filename = Path(filename.replace("\\", "/")).name
    filename = filename.replace("..", "").replace("\0", "")
    filename = re.sub(r'[^a-zA-Z0-9._-]', '_', filename)

    if not filename or filename.lower() == ".pdf":
        filename = "upload.pdf"

    if not filename.lower().endswith('.pdf'):
        filename = filename + '.pdf'

    if len(filename) > MAX_FILENAME_LENGTH:
        filename = filename[:-4][:MAX_FILENAME_LENGTH - 4] + '.pdf'

    return filename

