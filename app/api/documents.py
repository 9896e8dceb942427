"""Document library API endpoints."""

from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from app.core.config import settings
from app.core.database import get_db
from app.models.document import Document
from app.models.enums import DocumentType
from app.schemas.document import DocumentResponse
from app.utils.file_handling import normalize_extensions, read_upload, store_file

router = APIRouter()


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    document_type: DocumentType = Form(DocumentType.OTHER, alias="documentType"),
    db: AsyncSession = Depends(get_db)
):
    """
    Upload a document to the library.

    Features:
    - SHA256 hash calculation for duplicate detection
    - File type and size validation against the global upload settings
    - File storage under the bucket directory, named by hash

    Args:
        file: Uploaded file (multipart/form-data)
        title: Display title, defaults to the filename
        document_type: Kind of document
        db: Database session

    Returns:
        DocumentResponse with document metadata

    Raises:
        HTTPException 400: If file type not allowed
        HTTPException 409: If the same file (same SHA256) is already in the library
        HTTPException 413: If file size exceeds limit
    """
    file_content, sha256_hash, mime_type = await read_upload(
        file,
        normalize_extensions(settings.ALLOWED_EXTENSIONS),
        settings.MAX_FILE_SIZE
    )

    result = await db.execute(
        select(Document).where(Document.sha256 == sha256_hash)
    )
    existing_doc = result.scalar_one_or_none()

    if existing_doc:
        raise HTTPException(
            status_code=409,
            detail=f"Document with hash {sha256_hash} already exists (filename: {existing_doc.filename})"
        )

    stored_path = store_file(file_content, sha256_hash, file.filename, settings.BUCKET_DIR)
    new_document = Document(
        title=title or file.filename,
        filename=file.filename,
        sha256=sha256_hash,
        mime_type=mime_type,
        size_bytes=len(file_content),
        stored_path=stored_path,
        document_type=document_type
    )

    db.add(new_document)

    try:
        await db.flush()
        await db.refresh(new_document)
    except IntegrityError as e:
        raise HTTPException(
            status_code=409,
            detail=f"Duplicate document detected: {str(e)}"
        )

    return new_document


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Get library document metadata.

    Raises:
        HTTPException 404: If document not found
    """
    document = await db.get(Document, document_id)

    if not document:
        raise HTTPException(
            status_code=404,
            detail=f"Document with id {document_id} not found"
        )

    return document
