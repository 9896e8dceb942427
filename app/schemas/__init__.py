"""
Pydantic schemas for request/response validation
"""
from app.schemas.application import ApplicationCreate, ApplicationResponse, ReadinessResponse
from app.schemas.document import DocumentResponse, DocumentSummary
from app.schemas.requirement import (
    ApplicationRequirementsSummary,
    BulkUpdateRequest,
    BulkUpdateResponse,
    LinkDocumentRequest,
    RequirementCreate,
    RequirementDetailResponse,
    RequirementFilters,
    RequirementResponse,
    RequirementStatusUpdate,
    RequirementUpdate,
    RequirementValidationResult,
    RequirementsProgress,
    RequirementsQueryOptions,
)
from app.schemas.task import TaskCreate, TaskResponse
from app.schemas.user import CreatorSummary, UserCreate, UserResponse
from app.schemas.requirements_template import (
    ApplyTemplateRequest,
    ApplyTemplateResponse,
    TemplateCreate,
    TemplateFilters,
    TemplateRequirement,
    TemplateResponse,
    TemplateStatistics,
    TemplateUpdate,
)

__all__ = [
    "ApplicationCreate",
    "ApplicationResponse",
    "ReadinessResponse",
    "DocumentResponse",
    "DocumentSummary",
    "ApplicationRequirementsSummary",
    "BulkUpdateRequest",
    "BulkUpdateResponse",
    "LinkDocumentRequest",
    "RequirementCreate",
    "RequirementDetailResponse",
    "RequirementFilters",
    "RequirementResponse",
    "RequirementStatusUpdate",
    "RequirementUpdate",
    "RequirementValidationResult",
    "RequirementsProgress",
    "RequirementsQueryOptions",
    "ApplyTemplateRequest",
    "ApplyTemplateResponse",
    "TemplateCreate",
    "TemplateFilters",
    "TemplateRequirement",
    "TemplateResponse",
    "TemplateStatistics",
    "TemplateUpdate",
    "TaskCreate",
    "TaskResponse",
    "CreatorSummary",
    "UserCreate",
    "UserResponse",
]
