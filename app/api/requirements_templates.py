"""
Requirements template API endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Header, Query, Response
from app.api.deps import get_template_service
from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.enums import TemplateCategory
from app.schemas.requirement import RequirementResponse
from app.schemas.requirements_template import (
    ApplyTemplateRequest,
    ApplyTemplateResponse,
    TemplateCreate,
    TemplateFilters,
    TemplateResponse,
    TemplateStatistics,
    TemplateUpdate,
)
from app.services.requirements_template_service import RequirementsTemplateService

router = APIRouter()


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    category: Optional[TemplateCategory] = None,
    is_system_template: Optional[bool] = Query(None, alias="isSystemTemplate"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    created_by: Optional[str] = Query(None, alias="createdBy"),
    limit: int = Query(settings.DEFAULT_TEMPLATES_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """List templates, most used first."""
    filters = TemplateFilters(
        category=category,
        is_system_template=is_system_template,
        is_active=is_active,
        created_by=created_by,
        limit=limit,
        offset=offset,
    )
    return await service.get_templates(filters)


@router.post("", response_model=TemplateResponse, status_code=201)
async def create_template(
    template_data: TemplateCreate,
    x_user_id: Optional[str] = Header(None),
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """
    Create a user template.

    The X-User-Id header, when present, records the template's creator.

    Raises:
        404: If the creator does not exist
        422: If name, category or requirements are missing
    """
    return await service.create_template(template_data, created_by=x_user_id)


@router.get("/popular", response_model=List[TemplateResponse])
async def popular_templates(
    limit: int = Query(10, ge=1),
    service: RequirementsTemplateService = Depends(get_template_service)
):
    return await service.get_popular_templates(limit)


@router.get("/search", response_model=List[TemplateResponse])
async def search_templates(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1),
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """Match name, description or tags, case-insensitively."""
    return await service.search_templates(q, limit)


@router.get("/statistics", response_model=TemplateStatistics)
async def template_statistics(
    service: RequirementsTemplateService = Depends(get_template_service)
):
    return await service.get_template_statistics()


@router.get("/category/{category}", response_model=List[TemplateResponse])
async def templates_by_category(
    category: TemplateCategory,
    service: RequirementsTemplateService = Depends(get_template_service)
):
    return await service.get_templates_by_category(category)


@router.post("/system", response_model=List[TemplateResponse])
async def seed_system_templates(
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """Create the built-in templates if none exist yet; returns what was created."""
    return await service.create_system_templates()


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    service: RequirementsTemplateService = Depends(get_template_service)
):
    template = await service.get_template_by_id(template_id)
    if template is None:
        raise NotFoundError("Template", template_id)
    return template


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    template_data: TemplateUpdate,
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """
    Update a user template.

    Raises:
        404: If template not found
        409: If it is a system template
    """
    return await service.update_template(template_id, template_data)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """
    Delete a user template.

    Raises:
        404: If template not found
        409: If it is a system template
    """
    await service.delete_template(template_id)
    return Response(status_code=204)


@router.post("/{template_id}/apply", response_model=ApplyTemplateResponse, status_code=201)
async def apply_template(
    template_id: str,
    apply_data: ApplyTemplateRequest,
    service: RequirementsTemplateService = Depends(get_template_service)
):
    """
    Create one requirement per template blueprint on an application.

    Either every requirement is created or none is.

    Raises:
        404: If template or application not found
        409: If the template is inactive
        500: If creation failed partway (nothing is kept)
    """
    created = await service.apply_template_to_application(template_id, apply_data.application_id)
    return ApplyTemplateResponse(
        template_id=template_id,
        application_id=apply_data.application_id,
        requirements_created=len(created),
        requirements=[RequirementResponse.model_validate(r) for r in created],
    )
