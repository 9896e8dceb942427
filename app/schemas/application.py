"""
Application Pydantic schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import Field
from app.models.enums import ApplicationStatus
from app.schemas.base import CamelModel
from app.schemas.requirement import RequirementsProgress


class ApplicationCreate(CamelModel):
    """Schema for creating a new application"""
    name: str = Field(..., min_length=1, max_length=255, description="School, program or scholarship name")
    institution: Optional[str] = Field(None, max_length=255)
    deadline: Optional[datetime] = None
    status: ApplicationStatus = ApplicationStatus.DRAFT


class ApplicationResponse(CamelModel):
    """Schema for application response, including the cached requirement progress"""
    id: str = Field(..., description="Application UUID")
    name: str
    institution: Optional[str] = None
    status: ApplicationStatus
    deadline: Optional[datetime] = None
    requirement_ids: List[str] = []
    progress: int = Field(..., ge=0, le=100, description="Requirement completion percentage")
    requirements_progress: Optional[RequirementsProgress] = None
    created_at: datetime
    updated_at: datetime


class ReadinessResponse(CamelModel):
    application_id: str
    ready: bool = Field(..., description="True if every required requirement is done")
    progress: RequirementsProgress
