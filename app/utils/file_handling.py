"""
File handling utilities for document uploads
"""
import hashlib
import mimetypes
from pathlib import Path
from typing import Iterable, Optional, Set, Tuple
from fastapi import UploadFile, HTTPException

BYTES_PER_MB = 1024 * 1024


def calculate_sha256(file_content: bytes) -> str:
    """
    Calculate SHA256 hash of file content.

    Args:
        file_content: Raw bytes of the file

    Returns:
        Hexadecimal SHA256 hash string (64 characters)
    """
    return hashlib.sha256(file_content).hexdigest()


def normalize_extensions(file_types: Iterable[str]) -> Set[str]:
    """Turn ``["pdf", ".DOCX"]`` into ``{".pdf", ".docx"}``."""
    return {"." + ext.strip().lower().lstrip(".") for ext in file_types if ext and ext.strip()}


def upload_limits(
    allowed_file_types: Optional[Iterable[str]],
    max_file_size_mb: Optional[float],
    default_extensions: Set[str],
    default_max_bytes: int,
) -> Tuple[Set[str], int]:
    """
    Resolve the limits for an upload against a requirement.

    A requirement's own allowed types and size (in MB) win; anything it
    leaves unset falls back to the global upload settings.
    """
    extensions = normalize_extensions(allowed_file_types or []) or normalize_extensions(default_extensions)
    max_bytes = int(max_file_size_mb * BYTES_PER_MB) if max_file_size_mb is not None else default_max_bytes
    return extensions, max_bytes


def validate_file_type(filename: str, allowed_extensions: Set[str]) -> str:
    """
    Validate file extension and determine MIME type.

    Args:
        filename: Name of the uploaded file
        allowed_extensions: Set of allowed file extensions (e.g., {'.pdf', '.docx'})

    Returns:
        MIME type string

    Raises:
        HTTPException 400: If file extension is not allowed
    """
    file_ext = Path(filename or "").suffix.lower()

    if file_ext not in allowed_extensions:
        raise HTTPException(
            status_code=400,
            detail=f"File type {file_ext or '(none)'} not allowed. Allowed types: {', '.join(sorted(allowed_extensions))}"
        )

    mime_type = mimetypes.guess_type(filename)[0]
    if not mime_type:
        mime_type_map = {
            '.pdf': 'application/pdf',
            '.doc': 'application/msword',
            '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
            '.png': 'image/png',
            '.jpg': 'image/jpeg',
            '.jpeg': 'image/jpeg',
            '.txt': 'text/plain',
        }
        mime_type = mime_type_map.get(file_ext, 'application/octet-stream')

    return mime_type


def validate_file_size(file_size: int, max_size: int) -> None:
    """
    Validate file size is within allowed limit.

    Args:
        file_size: Size of file in bytes
        max_size: Maximum allowed size in bytes

    Raises:
        HTTPException 413: If file size exceeds maximum
    """
    if file_size > max_size:
        max_mb = max_size / BYTES_PER_MB
        actual_mb = file_size / BYTES_PER_MB
        raise HTTPException(
            status_code=413,
            detail=f"File size {actual_mb:.2f}MB exceeds maximum allowed size of {max_mb:.2f}MB"
        )


async def read_upload(
    file: UploadFile,
    allowed_extensions: Set[str],
    max_file_size: int
) -> Tuple[bytes, str, str]:
    """
    Read and validate an upload without storing it.

    Returns:
        Tuple of (file_content, sha256, mime_type)

    Raises:
        HTTPException 400: If file type not allowed
        HTTPException 413: If file size exceeds limit
    """
    file_content = await file.read()

    validate_file_size(len(file_content), max_file_size)
    mime_type = validate_file_type(file.filename, allowed_extensions)

    return file_content, calculate_sha256(file_content), mime_type


def store_file(file_content: bytes, sha256_hash: str, filename: str, bucket_dir: Path) -> str:
    """
    Write file content under the bucket, sharded by the first two hash characters.

    Returns:
        Stored path as a string
    """
    shard = bucket_dir / sha256_hash[:2]
    shard.mkdir(parents=True, exist_ok=True)

    stored_path = shard / f"{sha256_hash}{Path(filename).suffix.lower()}"
    with open(stored_path, 'wb') as f:
        f.write(file_content)

    return str(stored_path)
