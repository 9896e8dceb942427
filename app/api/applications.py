"""
Application API endpoints
"""
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.deps import get_requirements_service
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundError
from app.models.application import Application
from app.models.enums import RequirementCategory, RequirementStatus, RequirementType
from app.models.task import Task
from app.schemas.application import ApplicationCreate, ApplicationResponse, ReadinessResponse
from app.schemas.requirement import (
    ApplicationRequirementsSummary,
    RequirementFilters,
    RequirementResponse,
    RequirementsProgress,
    RequirementsQueryOptions,
)
from app.schemas.task import TaskCreate, TaskResponse
from app.services.requirements_service import RequirementsService

router = APIRouter()


async def _get_application(db: AsyncSession, application_id: str) -> Application:
    application = await db.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    return application


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(
    application_data: ApplicationCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new application with an empty requirements checklist.

    Args:
        application_data: Name, institution, deadline and status
        db: Database session

    Returns:
        ApplicationResponse with progress 0
    """
    new_application = Application(**application_data.model_dump())

    db.add(new_application)
    await db.flush()
    await db.refresh(new_application)

    return new_application


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get an application with its cached requirement progress."""
    return await _get_application(db, application_id)


@router.post("/{application_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    application_id: str,
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db)
):
    """Add a task that requirements can point at."""
    await _get_application(db, application_id)

    new_task = Task(application_id=application_id, **task_data.model_dump())
    db.add(new_task)
    await db.flush()
    await db.refresh(new_task)

    return new_task


@router.get("/{application_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    application_id: str,
    db: AsyncSession = Depends(get_db)
):
    await _get_application(db, application_id)
    result = await db.execute(
        select(Task).where(Task.application_id == application_id).order_by(Task.created_at)
    )
    return result.scalars().all()


@router.get("/{application_id}/requirements", response_model=List[RequirementResponse])
async def list_requirements(
    application_id: str,
    status: List[RequirementStatus] = Query([]),
    category: List[RequirementCategory] = Query([]),
    requirement_type: List[RequirementType] = Query([], alias="requirementType"),
    is_required: Optional[bool] = Query(None, alias="isRequired"),
    is_optional: Optional[bool] = Query(None, alias="isOptional"),
    sort_by: str = Query("order", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    limit: int = Query(settings.DEFAULT_REQUIREMENTS_LIMIT, ge=1),
    offset: int = Query(0, ge=0),
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    List an application's requirements.

    Repeat status, category or requirementType to match any of several values.

    Raises:
        404: If application not found
        422: If sortBy is not a sortable field
    """
    await _get_application(service.session, application_id)

    options = RequirementsQueryOptions(
        filters=RequirementFilters(
            status=status,
            category=category,
            requirement_type=requirement_type,
            is_required=is_required,
            is_optional=is_optional,
        ),
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )
    return await service.get_requirements_by_application(application_id, options)


@router.get("/{application_id}/requirements/progress", response_model=ApplicationRequirementsSummary)
async def get_requirements_summary(
    application_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    """
    Progress summary with requirements grouped by category and type.

    Raises:
        404: If application not found
    """
    return await service.get_application_requirements_summary(application_id)


@router.post("/{application_id}/requirements/progress", response_model=RequirementsProgress)
async def recalculate_progress(
    application_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    """Recompute the cached progress from the current requirements."""
    await _get_application(service.session, application_id)
    return await service.update_application_progress(application_id)


@router.get("/{application_id}/requirements/attention", response_model=List[RequirementResponse])
async def get_requirements_needing_attention(
    application_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    """Required items still pending or in progress."""
    await _get_application(service.session, application_id)
    return await service.get_requirements_needing_attention(application_id)


@router.get("/{application_id}/requirements/readiness", response_model=ReadinessResponse)
async def get_readiness(
    application_id: str,
    service: RequirementsService = Depends(get_requirements_service)
):
    """Whether every required requirement is done."""
    await _get_application(service.session, application_id)
    progress = await service.calculate_application_progress(application_id)
    ready = await service.is_application_ready_to_submit(application_id)
    return ReadinessResponse(application_id=application_id, ready=ready, progress=progress)
