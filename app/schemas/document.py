"""
Document Pydantic schemas
"""
from datetime import datetime
from pydantic import Field
from app.models.enums import DocumentType
from app.schemas.base import CamelModel


class DocumentSummary(CamelModel):
    """Linked document as embedded in requirement responses"""
    id: str
    title: str
    filename: str
    document_type: DocumentType


class DocumentResponse(CamelModel):
    """Schema for a library document"""
    id: str = Field(..., description="Document UUID")
    title: str
    filename: str
    sha256: str = Field(..., description="SHA256 hash of file content")
    mime_type: str
    size_bytes: int
    document_type: DocumentType
    uploaded_at: datetime
    file_extension: str = Field(..., description="File extension (e.g., pdf)")
