"""
Requirement Pydantic schemas
"""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import Field, field_validator
from app.models.enums import (
    ApplicationStatus,
    DocumentType,
    InterviewType,
    RequirementCategory,
    RequirementNecessity,
    RequirementStatus,
    RequirementType,
    TestType,
)
from app.schemas.base import CamelModel
from app.schemas.document import DocumentSummary


class RequirementFields(CamelModel):
    """Classification and type-specific fields shared by requirements and template blueprints.

    Fields are deliberately lenient so that validate_requirement_data can report
    every problem at once instead of failing on the first missing value.
    """
    requirement_type: Optional[RequirementType] = None
    category: Optional[RequirementCategory] = None
    name: str = ""
    description: Optional[str] = None
    is_required: bool = True
    is_optional: bool = False

    # Document-specific
    document_type: Optional[DocumentType] = None
    max_file_size: Optional[float] = Field(None, description="Maximum upload size in MB")
    allowed_file_types: Optional[List[str]] = None
    word_limit: Optional[int] = None
    character_limit: Optional[int] = None

    # Test score-specific
    test_type: Optional[TestType] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    score_format: Optional[str] = None

    # Fee-specific
    application_fee_amount: Optional[float] = None
    application_fee_currency: Optional[str] = None
    application_fee_description: Optional[str] = None

    # Interview-specific
    interview_type: Optional[InterviewType] = None
    interview_duration: Optional[int] = Field(None, description="Duration in minutes")
    interview_notes: Optional[str] = None

    order: int = 0


class RequirementCreate(RequirementFields):
    """Schema for creating a requirement on an application"""
    application_id: str = Field(..., description="Owning application UUID")


class RequirementUpdate(CamelModel):
    """Partial update; only fields that are set are merged"""
    name: Optional[str] = None
    description: Optional[str] = None
    is_required: Optional[bool] = None
    is_optional: Optional[bool] = None
    status: Optional[RequirementStatus] = None
    notes: Optional[str] = None
    linked_document_id: Optional[str] = None
    external_url: Optional[str] = None
    task_id: Optional[str] = None
    order: Optional[int] = None
    submitted_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None

    max_file_size: Optional[float] = Field(None, ge=0)
    allowed_file_types: Optional[List[str]] = None
    word_limit: Optional[int] = Field(None, ge=0)
    character_limit: Optional[int] = Field(None, ge=0)
    min_score: Optional[float] = Field(None, ge=0)
    max_score: Optional[float] = Field(None, ge=0)
    score_format: Optional[str] = None
    application_fee_amount: Optional[float] = Field(None, ge=0)
    application_fee_currency: Optional[str] = None
    application_fee_paid: Optional[bool] = None
    interview_duration: Optional[int] = Field(None, ge=0)
    interview_notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        if v is None or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("is_required", "is_optional", "order", "status", "application_fee_paid")
    @classmethod
    def _not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class RequirementStatusUpdate(CamelModel):
    status: RequirementStatus
    notes: Optional[str] = None


class LinkDocumentRequest(CamelModel):
    document_id: str
    notes: Optional[str] = None


class BulkUpdateRequest(CamelModel):
    requirement_ids: List[str] = Field(..., min_length=1)
    patch: RequirementUpdate


class BulkUpdateResponse(CamelModel):
    updated: int
    application_ids: List[str]


class RequirementFilters(CamelModel):
    status: List[RequirementStatus] = []
    category: List[RequirementCategory] = []
    requirement_type: List[RequirementType] = []
    is_required: Optional[bool] = None
    is_optional: Optional[bool] = None


class RequirementsQueryOptions(CamelModel):
    filters: RequirementFilters = RequirementFilters()
    sort_by: str = "order"
    sort_order: Literal["asc", "desc"] = "asc"
    limit: Optional[int] = Field(100, ge=1)
    offset: int = Field(0, ge=0)


# ============================================================================
# TYPE-SPECIFIC DETAILS (tagged by ``kind``)
# ============================================================================

class DocumentDetails(CamelModel):
    kind: Literal["document"] = "document"
    document_type: Optional[DocumentType] = None
    max_file_size: Optional[float] = None
    allowed_file_types: List[str] = []
    word_limit: Optional[int] = None
    character_limit: Optional[int] = None


class TestScoreDetails(CamelModel):
    kind: Literal["test_score"] = "test_score"
    test_type: Optional[TestType] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    score_format: Optional[str] = None


class FeeDetails(CamelModel):
    kind: Literal["fee"] = "fee"
    amount: Optional[float] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    paid: bool = False
    paid_at: Optional[datetime] = None


class InterviewDetails(CamelModel):
    kind: Literal["interview"] = "interview"
    interview_type: Optional[InterviewType] = None
    duration: Optional[int] = None
    notes: Optional[str] = None


class OtherDetails(CamelModel):
    kind: Literal["other"] = "other"


RequirementDetails = Annotated[
    Union[DocumentDetails, TestScoreDetails, FeeDetails, InterviewDetails, OtherDetails],
    Field(discriminator="kind"),
]


# ============================================================================
# RESPONSES
# ============================================================================

class TaskSummary(CamelModel):
    id: str
    title: str
    status: str
    due_date: Optional[datetime] = None


class ApplicationBrief(CamelModel):
    id: str
    name: str
    status: ApplicationStatus
    progress: int


class RequirementResponse(RequirementFields):
    """Schema for a requirement with linked document and task resolved"""
    id: str = Field(..., description="Requirement UUID")
    application_id: str
    requirement_type: RequirementType
    category: RequirementCategory
    necessity: RequirementNecessity
    details: RequirementDetails
    application_fee_paid: bool = False
    application_fee_paid_at: Optional[datetime] = None
    status: RequirementStatus
    is_complete: bool = Field(..., description="True if completed, waived or not applicable")
    submitted_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    notes: Optional[str] = None
    linked_document_id: Optional[str] = None
    external_url: Optional[str] = None
    task_id: Optional[str] = None
    linked_document: Optional[DocumentSummary] = None
    task: Optional[TaskSummary] = None
    created_at: datetime
    updated_at: datetime


class RequirementDetailResponse(RequirementResponse):
    """Single requirement, additionally resolving its application"""
    application: Optional[ApplicationBrief] = None


class RequirementsProgress(CamelModel):
    """Progress snapshot cached on the application"""
    total: int = 0
    completed: int = 0
    required: int = 0
    required_completed: int = 0
    optional: int = 0
    optional_completed: int = 0
    percentage: int = Field(0, ge=0, le=100)


class RequirementValidationError(CamelModel):
    field: str
    message: str


class RequirementValidationResult(CamelModel):
    is_valid: bool
    errors: List[RequirementValidationError] = []


class RequirementGroup(CamelModel):
    total: int = 0
    completed: int = 0
    requirements: List[RequirementResponse] = []


class ApplicationRequirementsSummary(CamelModel):
    application_id: str
    application_name: str
    total_requirements: int
    completed_requirements: int
    required_requirements: int
    completed_required_requirements: int
    optional_requirements: int
    completed_optional_requirements: int
    progress_percentage: int
    required_percentage: int
    requirements_by_category: Dict[str, RequirementGroup]
    requirements_by_type: Dict[str, RequirementGroup]
    by_status: Dict[str, int]
