"""
ApplicationRequirement database model
"""
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Boolean, Column, DateTime, Enum, Float, ForeignKey, Index, Integer, JSON, String, Text, event,
)
from sqlalchemy.orm import relationship, validates
from app.core.database import Base
from app.core.exceptions import GuardError, ValidationError
from app.models.enums import (
    DONE_STATUSES,
    DocumentType,
    InterviewType,
    RequirementCategory,
    RequirementNecessity,
    RequirementStatus,
    RequirementType,
    TestType,
)


# Allowed status moves. Done states can only be re-opened, not swapped for each other.
STATUS_TRANSITIONS = {
    RequirementStatus.PENDING: {
        RequirementStatus.IN_PROGRESS,
        RequirementStatus.COMPLETED,
        RequirementStatus.WAIVED,
        RequirementStatus.NOT_APPLICABLE,
    },
    RequirementStatus.IN_PROGRESS: {
        RequirementStatus.PENDING,
        RequirementStatus.COMPLETED,
        RequirementStatus.WAIVED,
        RequirementStatus.NOT_APPLICABLE,
    },
    RequirementStatus.COMPLETED: {RequirementStatus.PENDING, RequirementStatus.IN_PROGRESS},
    RequirementStatus.WAIVED: {RequirementStatus.PENDING, RequirementStatus.IN_PROGRESS},
    RequirementStatus.NOT_APPLICABLE: {RequirementStatus.PENDING, RequirementStatus.IN_PROGRESS},
}

# Field that must be set for each requirement type, with its error message
TYPE_KEY_FIELDS = {
    RequirementType.DOCUMENT: ("document_type", "documentType", "Document type is required for document requirements"),
    RequirementType.TEST_SCORE: ("test_type", "testType", "Test type is required for test score requirements"),
    RequirementType.FEE: ("application_fee_amount", "applicationFeeAmount", "Fee amount is required for fee requirements"),
    RequirementType.INTERVIEW: ("interview_type", "interviewType", "Interview type is required for interview requirements"),
}


class ApplicationRequirement(Base):
    """
    One checklist item an applicant must satisfy for an application.

    Type-specific columns are only meaningful for their requirement_type:
    - document: document_type, max_file_size (MB), allowed_file_types, word_limit, character_limit
    - test_score: test_type, min_score, max_score, score_format
    - fee: application_fee_amount, application_fee_currency, application_fee_description,
      application_fee_paid, application_fee_paid_at
    - interview: interview_type, interview_duration (minutes), interview_notes

    Status transitions: see STATUS_TRANSITIONS.
    """
    __tablename__ = "application_requirements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    application_id = Column(String(36), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False)
    requirement_type = Column(Enum(RequirementType), nullable=False)
    category = Column(Enum(RequirementCategory), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_required = Column(Boolean, default=True, nullable=False)
    is_optional = Column(Boolean, default=False, nullable=False)

    # Document-specific
    document_type = Column(Enum(DocumentType), nullable=True)
    max_file_size = Column(Float, nullable=True)
    allowed_file_types = Column(JSON, nullable=True)
    word_limit = Column(Integer, nullable=True)
    character_limit = Column(Integer, nullable=True)

    # Test score-specific
    test_type = Column(Enum(TestType), nullable=True)
    min_score = Column(Float, nullable=True)
    max_score = Column(Float, nullable=True)
    score_format = Column(String, nullable=True)

    # Fee-specific
    application_fee_amount = Column(Float, nullable=True)
    application_fee_currency = Column(String(3), nullable=True)
    application_fee_description = Column(String, nullable=True)
    application_fee_paid = Column(Boolean, default=False, nullable=False)
    application_fee_paid_at = Column(DateTime, nullable=True)

    # Interview-specific
    interview_type = Column(Enum(InterviewType), nullable=True)
    interview_duration = Column(Integer, nullable=True)
    interview_notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(Enum(RequirementStatus), default=RequirementStatus.PENDING, nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    # Linkage
    linked_document_id = Column(String(36), ForeignKey("documents.id", ondelete="SET NULL"), nullable=True, index=True)
    external_url = Column(String, nullable=True)
    task_id = Column(String(36), ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)

    order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="requirements")
    linked_document = relationship("Document", back_populates="requirements")
    task = relationship("Task")

    __table_args__ = (
        Index("idx_requirement_application_order", "application_id", "order"),
        Index("idx_requirement_application_status", "application_id", "status"),
    )

    def __repr__(self):
        return f"<ApplicationRequirement(id={self.id}, name={self.name}, status={self.status.value})>"

    @validates("name")
    def _strip_name(self, key, value):
        return value.strip() if isinstance(value, str) else value

    @validates("application_fee_currency")
    def _upper_currency(self, key, value):
        return value.strip().upper() if isinstance(value, str) else value

    @property
    def is_complete(self) -> bool:
        """Completed, waived and not-applicable all count as done"""
        return self.status in DONE_STATUSES

    @property
    def is_required_field(self) -> bool:
        return bool(self.is_required) and not self.is_optional

    @property
    def necessity(self) -> RequirementNecessity:
        if self.is_required_field:
            return RequirementNecessity.REQUIRED
        if self.is_optional:
            return RequirementNecessity.OPTIONAL
        return RequirementNecessity.CONDITIONAL

    @property
    def details(self) -> dict:
        """Type-specific payload tagged with ``kind``"""
        kind = self.requirement_type
        if kind == RequirementType.DOCUMENT:
            return {
                "kind": kind.value,
                "document_type": self.document_type,
                "max_file_size": self.max_file_size,
                "allowed_file_types": self.allowed_file_types or [],
                "word_limit": self.word_limit,
                "character_limit": self.character_limit,
            }
        if kind == RequirementType.TEST_SCORE:
            return {
                "kind": kind.value,
                "test_type": self.test_type,
                "min_score": self.min_score,
                "max_score": self.max_score,
                "score_format": self.score_format,
            }
        if kind == RequirementType.FEE:
            return {
                "kind": kind.value,
                "amount": self.application_fee_amount,
                "currency": self.application_fee_currency,
                "description": self.application_fee_description,
                "paid": bool(self.application_fee_paid),
                "paid_at": self.application_fee_paid_at,
            }
        if kind == RequirementType.INTERVIEW:
            return {
                "kind": kind.value,
                "interview_type": self.interview_type,
                "duration": self.interview_duration,
                "notes": self.interview_notes,
            }
        return {"kind": RequirementType.OTHER.value}

    def can_transition_to(self, new_status: RequirementStatus) -> bool:
        current = self.status or RequirementStatus.PENDING
        return new_status == current or new_status in STATUS_TRANSITIONS[current]

    def update_status(self, new_status: RequirementStatus, notes: Optional[str] = None) -> None:
        """Move to new_status, stamping or clearing submission timestamps.

        Raises:
            GuardError: If the transition is not allowed
        """
        new_status = RequirementStatus(new_status)
        if not self.can_transition_to(new_status):
            raise GuardError(
                f"Cannot change requirement status from {self.status.value} to {new_status.value}",
                {"requirement_id": self.id, "from": self.status.value, "to": new_status.value},
            )

        if new_status == RequirementStatus.COMPLETED and not self.submitted_at:
            self.submitted_at = datetime.utcnow()
        elif new_status != self.status and new_status in (RequirementStatus.PENDING, RequirementStatus.IN_PROGRESS):
            # Re-opened: the earlier submission no longer stands
            self.submitted_at = None
            self.verified_at = None

        self.status = new_status
        if notes:
            self.notes = notes

    def mark_fee_paid(self) -> None:
        self.application_fee_paid = True
        self.application_fee_paid_at = datetime.utcnow()


@event.listens_for(ApplicationRequirement, "before_insert")
def _check_type_specific_fields(mapper, connection, target):
    """Insert-time check that the type's key field is present."""
    key = TYPE_KEY_FIELDS.get(target.requirement_type)
    if key is None:
        return
    attr, field, message = key
    if getattr(target, attr) is None:
        raise ValidationError(message, errors=[{"field": field, "message": message}])
