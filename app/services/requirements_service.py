"""Requirements management service.

Sole writer of ApplicationRequirement rows and of the requirement cache on
Application (requirement_ids, progress, requirements_progress). Every
mutating operation finishes by recomputing the owning application's progress
from a fresh scan of its requirements.
"""

import logging
import math
from collections import Counter
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import asc, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    NotFoundError,
    PartialFailureError,
    RequirementsError,
    ValidationError,
    wrap_errors,
)
from app.models.application import Application
from app.models.document import Document
from app.models.enums import (
    DONE_STATUSES,
    OPEN_STATUSES,
    RequirementCategory,
    RequirementStatus,
    RequirementType,
)
from app.models.requirement import TYPE_KEY_FIELDS, ApplicationRequirement
from app.models.task import Task
from app.schemas.requirement import (
    ApplicationRequirementsSummary,
    BulkUpdateResponse,
    RequirementCreate,
    RequirementFields,
    RequirementGroup,
    RequirementResponse,
    RequirementUpdate,
    RequirementValidationError,
    RequirementValidationResult,
    RequirementsProgress,
    RequirementsQueryOptions,
)

SORTABLE_FIELDS = {
    "order": ApplicationRequirement.order,
    "name": ApplicationRequirement.name,
    "status": ApplicationRequirement.status,
    "category": ApplicationRequirement.category,
    "requirementType": ApplicationRequirement.requirement_type,
    "requirement_type": ApplicationRequirement.requirement_type,
    "createdAt": ApplicationRequirement.created_at,
    "created_at": ApplicationRequirement.created_at,
    "updatedAt": ApplicationRequirement.updated_at,
    "updated_at": ApplicationRequirement.updated_at,
}

BOTH_FLAGS_MESSAGE = "A requirement cannot be both required and optional"

NON_NEGATIVE_FIELDS = [
    ("max_file_size", "maxFileSize", "Max file size must be non-negative"),
    ("word_limit", "wordLimit", "Word limit must be non-negative"),
    ("character_limit", "characterLimit", "Character limit must be non-negative"),
    ("min_score", "minScore", "Minimum score must be non-negative"),
    ("max_score", "maxScore", "Maximum score must be non-negative"),
    ("application_fee_amount", "applicationFeeAmount", "Application fee amount must be non-negative"),
    ("interview_duration", "interviewDuration", "Interview duration must be non-negative"),
]


def percent(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def compute_progress(requirements: Iterable[ApplicationRequirement]) -> RequirementsProgress:
    """Build the progress snapshot for a set of requirements."""
    requirements = list(requirements)
    required = [r for r in requirements if r.is_required_field]
    optional = [r for r in requirements if r.is_optional]
    completed = sum(1 for r in requirements if r.status in DONE_STATUSES)

    return RequirementsProgress(
        total=len(requirements),
        completed=completed,
        required=len(required),
        required_completed=sum(1 for r in required if r.status in DONE_STATUSES),
        optional=len(optional),
        optional_completed=sum(1 for r in optional if r.status in DONE_STATUSES),
        percentage=percent(completed, len(requirements)),
    )


def validate_requirement_data(data: RequirementFields) -> RequirementValidationResult:
    """Check a requirement (or template blueprint) before it is stored.

    Returns every problem found rather than stopping at the first one.
    """
    errors = []

    if not (data.name or "").strip():
        errors.append(("name", "Name is required"))
    if data.requirement_type is None:
        errors.append(("requirementType", "Requirement type is required"))
    if data.category is None:
        errors.append(("category", "Category is required"))

    key = TYPE_KEY_FIELDS.get(data.requirement_type)
    if key is not None:
        attr, field, message = key
        if getattr(data, attr) is None:
            errors.append((field, message))

    if data.is_required and data.is_optional:
        errors.append(("isOptional", BOTH_FLAGS_MESSAGE))

    for attr, field, message in NON_NEGATIVE_FIELDS:
        value = getattr(data, attr)
        if value is not None and value < 0:
            errors.append((field, message))

    return RequirementValidationResult(
        is_valid=not errors,
        errors=[RequirementValidationError(field=f, message=m) for f, m in errors],
    )


class RequirementsService:
    """CRUD, status transitions and progress tracking for application requirements."""

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None):
        self.session = session
        self.logger = logger or logging.getLogger(__name__)

    validate_requirement_data = staticmethod(validate_requirement_data)

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    async def _get_or_raise(self, requirement_id: str) -> ApplicationRequirement:
        requirement = await self.session.get(ApplicationRequirement, requirement_id)
        if requirement is None:
            raise NotFoundError("Requirement", requirement_id)
        return requirement

    async def _load(self, requirement_id: str, with_application: bool = False) -> Optional[ApplicationRequirement]:
        stmt = (
            select(ApplicationRequirement)
            .where(ApplicationRequirement.id == requirement_id)
            .options(
                selectinload(ApplicationRequirement.linked_document),
                selectinload(ApplicationRequirement.task),
            )
            .execution_options(populate_existing=True)
        )
        if with_application:
            stmt = stmt.options(selectinload(ApplicationRequirement.application))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _check_references(self, changes: dict) -> None:
        if changes.get("linked_document_id") and await self.session.get(Document, changes["linked_document_id"]) is None:
            raise NotFoundError("Document", changes["linked_document_id"])
        if changes.get("task_id") and await self.session.get(Task, changes["task_id"]) is None:
            raise NotFoundError("Task", changes["task_id"])

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @wrap_errors("create requirement")
    async def create_requirement(self, data: RequirementCreate) -> ApplicationRequirement:
        """Create a pending requirement and attach it to its application.

        Raises:
            ValidationError: If the data fails validate_requirement_data
            NotFoundError: If the application does not exist
        """
        validation = self.validate_requirement_data(data)
        if not validation.is_valid:
            raise ValidationError(
                "Validation failed: " + ", ".join(e.message for e in validation.errors),
                errors=[e.model_dump() for e in validation.errors],
            )

        application = await self.session.get(Application, data.application_id)
        if application is None:
            raise NotFoundError("Application", data.application_id)

        requirement = ApplicationRequirement(**data.model_dump(), status=RequirementStatus.PENDING)
        self.session.add(requirement)
        await self.session.flush()

        application.add_requirement_id(requirement.id)
        await self.update_application_progress(application.id)

        self.logger.info(
            "Created requirement requirement_id=%s application_id=%s type=%s",
            requirement.id, application.id, requirement.requirement_type.value,
        )
        return await self._load(requirement.id)

    @wrap_errors("get requirements")
    async def get_requirements_by_application(
        self,
        application_id: str,
        options: Optional[RequirementsQueryOptions] = None,
    ) -> List[ApplicationRequirement]:
        """List an application's requirements with filters, sorting and pagination."""
        options = options or RequirementsQueryOptions()
        filters = options.filters

        column = SORTABLE_FIELDS.get(options.sort_by)
        if column is None:
            message = f"Cannot sort requirements by {options.sort_by}"
            raise ValidationError(message, errors=[{"field": "sortBy", "message": message}])

        stmt = select(ApplicationRequirement).where(ApplicationRequirement.application_id == application_id)
        if filters.status:
            stmt = stmt.where(ApplicationRequirement.status.in_(filters.status))
        if filters.category:
            stmt = stmt.where(ApplicationRequirement.category.in_(filters.category))
        if filters.requirement_type:
            stmt = stmt.where(ApplicationRequirement.requirement_type.in_(filters.requirement_type))
        if filters.is_required is not None:
            stmt = stmt.where(ApplicationRequirement.is_required == filters.is_required)
        if filters.is_optional is not None:
            stmt = stmt.where(ApplicationRequirement.is_optional == filters.is_optional)

        direction = desc if options.sort_order == "desc" else asc
        stmt = stmt.order_by(direction(column), ApplicationRequirement.created_at)
        if options.limit is not None:
            stmt = stmt.limit(options.limit)
        stmt = (
            stmt.offset(options.offset)
            .options(
                selectinload(ApplicationRequirement.linked_document),
                selectinload(ApplicationRequirement.task),
            )
            .execution_options(populate_existing=True)
        )

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @wrap_errors("get requirement")
    async def get_requirement_by_id(self, requirement_id: str) -> Optional[ApplicationRequirement]:
        """Single requirement with linked document, task and application resolved; None if absent."""
        return await self._load(requirement_id, with_application=True)

    @wrap_errors("update requirement")
    async def update_requirement(self, requirement_id: str, data: RequirementUpdate) -> ApplicationRequirement:
        """Merge the set fields of ``data`` onto a requirement.

        A status change goes through the requirement's transition rules. When
        the requirement becomes completed, unset submitted/verified timestamps
        are stamped with the current time.
        """
        requirement = await self._get_or_raise(requirement_id)

        changes = data.model_dump(exclude_unset=True)
        is_required = changes.get("is_required", requirement.is_required)
        is_optional = changes.get("is_optional", requirement.is_optional)
        if is_required and is_optional:
            raise ValidationError(BOTH_FLAGS_MESSAGE, errors=[{"field": "isOptional", "message": BOTH_FLAGS_MESSAGE}])
        await self._check_references(changes)
        new_status = changes.pop("status", None)
        fee_paid = changes.pop("application_fee_paid", None)

        for field, value in changes.items():
            setattr(requirement, field, value)

        if new_status is not None:
            requirement.update_status(new_status)
            if new_status == RequirementStatus.COMPLETED and not requirement.verified_at:
                requirement.verified_at = datetime.utcnow()

        if fee_paid is True and not requirement.application_fee_paid:
            requirement.mark_fee_paid()
        elif fee_paid is False:
            requirement.application_fee_paid = False
            requirement.application_fee_paid_at = None

        await self.session.flush()
        await self.update_application_progress(requirement.application_id)

        self.logger.info("Updated requirement requirement_id=%s fields=%s", requirement_id, sorted(data.model_fields_set))
        return await self._load(requirement_id)

    @wrap_errors("delete requirement")
    async def delete_requirement(self, requirement_id: str) -> None:
        """Delete a requirement and detach it from its application."""
        requirement = await self._get_or_raise(requirement_id)
        application_id = requirement.application_id

        await self.session.delete(requirement)
        await self.session.flush()

        application = await self.session.get(Application, application_id)
        if application is not None:
            application.remove_requirement_id(requirement_id)
        await self.update_application_progress(application_id)

        self.logger.info("Deleted requirement requirement_id=%s application_id=%s", requirement_id, application_id)

    @wrap_errors("update requirement status")
    async def update_requirement_status(
        self,
        requirement_id: str,
        status: RequirementStatus,
        notes: Optional[str] = None,
    ) -> ApplicationRequirement:
        """Apply a status transition.

        Raises:
            NotFoundError: If the requirement does not exist
            GuardError: If the transition is not allowed
        """
        requirement = await self._get_or_raise(requirement_id)
        previous = requirement.status
        requirement.update_status(status, notes)
        await self.session.flush()
        await self.update_application_progress(requirement.application_id)

        self.logger.info(
            "Requirement status changed requirement_id=%s from=%s to=%s",
            requirement_id, previous.value, requirement.status.value,
        )
        return await self._load(requirement_id)

    @wrap_errors("link document")
    async def link_document_to_requirement(
        self,
        requirement_id: str,
        document_id: str,
        notes: Optional[str] = None,
    ) -> ApplicationRequirement:
        """Link a library document; the requirement is completed as a result."""
        requirement = await self._get_or_raise(requirement_id)
        document = await self.session.get(Document, document_id)
        if document is None:
            raise NotFoundError("Document", document_id)

        requirement.linked_document_id = document.id
        requirement.status = RequirementStatus.COMPLETED
        requirement.submitted_at = datetime.utcnow()
        if notes:
            requirement.notes = notes

        await self.session.flush()
        await self.update_application_progress(requirement.application_id)

        self.logger.info("Linked document document_id=%s requirement_id=%s", document_id, requirement_id)
        return await self._load(requirement_id)

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    @wrap_errors("calculate progress")
    async def calculate_application_progress(self, application_id: str) -> RequirementsProgress:
        """Fresh progress snapshot from every requirement of the application."""
        result = await self.session.execute(
            select(ApplicationRequirement).where(ApplicationRequirement.application_id == application_id)
        )
        return compute_progress(result.scalars().all())

    @wrap_errors("update application progress")
    async def update_application_progress(self, application_id: str) -> RequirementsProgress:
        """Recompute progress and cache it on the application."""
        progress = await self.calculate_application_progress(application_id)

        application = await self.session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)

        application.requirements_progress = progress.model_dump(by_alias=True)
        application.progress = progress.percentage
        await self.session.flush()

        self.logger.debug(
            "Application progress application_id=%s completed=%s total=%s percentage=%s",
            application_id, progress.completed, progress.total, progress.percentage,
        )
        return progress

    @wrap_errors("get requirements summary")
    async def get_application_requirements_summary(self, application_id: str) -> ApplicationRequirementsSummary:
        """Progress plus requirements grouped by category and by type."""
        application = await self.session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)

        requirements = await self.get_requirements_by_application(
            application_id, RequirementsQueryOptions(limit=None)
        )
        progress = compute_progress(requirements)

        by_category = {c.value: RequirementGroup() for c in RequirementCategory}
        by_type = {t.value: RequirementGroup() for t in RequirementType}
        for requirement in requirements:
            item = RequirementResponse.model_validate(requirement)
            for group in (by_category[requirement.category.value], by_type[requirement.requirement_type.value]):
                group.total += 1
                group.requirements.append(item)
                if requirement.is_complete:
                    group.completed += 1

        status_counts = Counter(r.status.value for r in requirements)

        return ApplicationRequirementsSummary(
            application_id=application.id,
            application_name=application.name,
            total_requirements=progress.total,
            completed_requirements=progress.completed,
            required_requirements=progress.required,
            completed_required_requirements=progress.required_completed,
            optional_requirements=progress.optional,
            completed_optional_requirements=progress.optional_completed,
            progress_percentage=progress.percentage,
            required_percentage=percent(progress.required_completed, progress.required),
            requirements_by_category=by_category,
            requirements_by_type=by_type,
            by_status={s.value: status_counts.get(s.value, 0) for s in RequirementStatus},
        )

    # ------------------------------------------------------------------
    # Batch and queries
    # ------------------------------------------------------------------

    async def _check_bulk_flags(self, requirement_ids: List[str], values: dict) -> None:
        """Refuse a patch that would leave any target both required and optional."""
        if "is_required" not in values and "is_optional" not in values:
            return
        is_required = values.get("is_required")
        is_optional = values.get("is_optional")
        if is_required is False or is_optional is False:
            return

        conflict = is_required and is_optional
        if not conflict:
            other = ApplicationRequirement.is_optional if is_required else ApplicationRequirement.is_required
            result = await self.session.execute(
                select(func.count())
                .select_from(ApplicationRequirement)
                .where(ApplicationRequirement.id.in_(requirement_ids), other.is_(True))
            )
            conflict = result.scalar_one() > 0
        if conflict:
            raise ValidationError(BOTH_FLAGS_MESSAGE, errors=[{"field": "isOptional", "message": BOTH_FLAGS_MESSAGE}])

    async def bulk_update_requirements(self, requirement_ids: List[str], patch: RequirementUpdate) -> BulkUpdateResponse:
        """Write the same patch to every requirement in one statement.

        Progress is recomputed once per affected application. The batch runs
        inside a SAVEPOINT, so a failure leaves no partial writes behind.

        Returns:
            Number of rows written and the applications whose progress was recomputed
        """
        values = patch.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("No fields to update", errors=[{"field": "patch", "message": "No fields to update"}])
        requirement_ids = list(dict.fromkeys(requirement_ids))
        await self._check_bulk_flags(requirement_ids, values)

        try:
            async with self.session.begin_nested():
                result = await self.session.execute(
                    update(ApplicationRequirement)
                    .where(ApplicationRequirement.id.in_(requirement_ids))
                    .values(**values)
                )
                if result.rowcount == 0:
                    raise RequirementsError("No requirements were updated", {"requirement_ids": requirement_ids})

                app_result = await self.session.execute(
                    select(ApplicationRequirement.application_id)
                    .where(ApplicationRequirement.id.in_(requirement_ids))
                    .distinct()
                )
                application_ids = sorted(app_result.scalars().all())
                for application_id in application_ids:
                    await self.update_application_progress(application_id)
        except RequirementsError:
            raise
        except SQLAlchemyError as e:
            self.logger.exception("Bulk update failed requirement_ids=%s", requirement_ids)
            raise PartialFailureError(
                f"Failed to bulk update requirements: {e}",
                {"requirement_ids": requirement_ids, "fields": sorted(values)},
            ) from e

        self.logger.info(
            "Bulk updated requirements count=%s fields=%s applications=%s",
            result.rowcount, sorted(values), application_ids,
        )
        return BulkUpdateResponse(updated=result.rowcount, application_ids=application_ids)

    @wrap_errors("get requirements needing attention")
    async def get_requirements_needing_attention(self, application_id: str) -> List[ApplicationRequirement]:
        """Required items that are still pending or in progress, in display order."""
        result = await self.session.execute(
            select(ApplicationRequirement)
            .where(
                ApplicationRequirement.application_id == application_id,
                ApplicationRequirement.status.in_(OPEN_STATUSES),
                ApplicationRequirement.is_required.is_(True),
            )
            .order_by(ApplicationRequirement.order, ApplicationRequirement.created_at)
            .options(
                selectinload(ApplicationRequirement.linked_document),
                selectinload(ApplicationRequirement.task),
            )
        )
        return list(result.scalars().all())

    @wrap_errors("check application readiness")
    async def is_application_ready_to_submit(self, application_id: str) -> bool:
        """True only when there is at least one required item and all of them are done."""
        progress = await self.calculate_application_progress(application_id)
        return progress.required > 0 and progress.required_completed == progress.required
