"""
Database models package
"""
from app.models.enums import (
    ApplicationStatus,
    DocumentType,
    InterviewType,
    RequirementCategory,
    RequirementNecessity,
    RequirementStatus,
    RequirementType,
    TemplateCategory,
    TestType,
)
from app.models.user import User
from app.models.application import Application
from app.models.document import Document
from app.models.task import Task
from app.models.requirement import ApplicationRequirement
from app.models.requirements_template import RequirementsTemplate

__all__ = [
    "ApplicationStatus",
    "DocumentType",
    "InterviewType",
    "RequirementCategory",
    "RequirementNecessity",
    "RequirementStatus",
    "RequirementType",
    "TemplateCategory",
    "TestType",
    "User",
    "Application",
    "Document",
    "Task",
    "ApplicationRequirement",
    "RequirementsTemplate",
]
