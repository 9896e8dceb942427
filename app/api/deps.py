"""
Service dependencies shared by the routers
"""
import logging
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.services.requirements_service import RequirementsService
from app.services.requirements_template_service import RequirementsTemplateService


def get_requirements_service(db: AsyncSession = Depends(get_db)) -> RequirementsService:
    return RequirementsService(db, logging.getLogger("app.services.requirements"))


def get_template_service(
    requirements_service: RequirementsService = Depends(get_requirements_service),
) -> RequirementsTemplateService:
    return RequirementsTemplateService(
        requirements_service.session,
        requirements_service=requirements_service,
        logger=logging.getLogger("app.services.templates"),
    )
