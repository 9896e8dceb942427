"""
Requirements template Pydantic schemas
"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import Field
from app.models.enums import TemplateCategory
from app.schemas.base import CamelModel
from app.schemas.requirement import RequirementFields, RequirementResponse
from app.schemas.user import CreatorSummary


class TemplateRequirement(RequirementFields):
    """Stateless requirement blueprint inside a template"""


class TemplateCreate(CamelModel):
    """Schema for creating a template; checked by the template service"""
    name: str = ""
    description: Optional[str] = None
    category: Optional[TemplateCategory] = None
    requirements: List[TemplateRequirement] = []
    tags: List[str] = []
    is_active: bool = True


class TemplateUpdate(CamelModel):
    """Partial template update"""
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TemplateCategory] = None
    requirements: Optional[List[TemplateRequirement]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None


class TemplateFilters(CamelModel):
    category: Optional[TemplateCategory] = None
    is_system_template: Optional[bool] = None
    is_active: Optional[bool] = None
    created_by: Optional[str] = None
    limit: int = Field(50, ge=1)
    offset: int = Field(0, ge=0)


class TemplateResponse(CamelModel):
    """Schema for template response with creator resolved"""
    id: str = Field(..., description="Template UUID")
    name: str
    description: Optional[str] = None
    category: TemplateCategory
    requirements: List[TemplateRequirement]
    usage_count: int
    is_active: bool
    is_system_template: bool
    created_by: Optional[str] = None
    creator: Optional[CreatorSummary] = None
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime


class ApplyTemplateRequest(CamelModel):
    application_id: str


class ApplyTemplateResponse(CamelModel):
    template_id: str
    application_id: str
    requirements_created: int
    requirements: List[RequirementResponse]


class TemplateStatistics(CamelModel):
    total_templates: int
    system_templates: int
    user_templates: int
    active_templates: int
    total_usage: int
    templates_by_category: Dict[str, int]
