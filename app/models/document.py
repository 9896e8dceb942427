"""
Library document database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Enum, DateTime
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import DocumentType


class Document(Base):
    """
    Document model representing a file in the user's document library.

    Features:
    - SHA256 hash for duplicate detection (unique across the library)
    - Can be linked to any number of application requirements
    """
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    title = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    sha256 = Column(String(64), nullable=False, unique=True, index=True)
    mime_type = Column(String, nullable=False)
    size_bytes = Column(Integer, nullable=False)
    stored_path = Column(String, nullable=False)
    document_type = Column(Enum(DocumentType), default=DocumentType.OTHER, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    requirements = relationship("ApplicationRequirement", back_populates="linked_document")

    def __repr__(self):
        return f"<Document(id={self.id}, filename={self.filename}, document_type={self.document_type.value})>"

    @property
    def file_extension(self) -> str:
        """Get file extension from filename"""
        return self.filename.split('.')[-1].lower() if '.' in self.filename else ''
