"""Requirements template service.

Manages reusable blueprint sets and expands them into concrete requirements
through RequirementsService, so requirement creation and progress upkeep stay
in one place.
"""

import copy
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import (
    GuardError,
    NotFoundError,
    PartialFailureError,
    RequirementsError,
    ValidationError,
    wrap_errors,
)
from app.models.application import Application
from app.models.enums import TemplateCategory
from app.models.requirement import ApplicationRequirement
from app.models.requirements_template import RequirementsTemplate
from app.models.user import User
from app.schemas.requirement import RequirementCreate
from app.schemas.requirements_template import (
    TemplateCreate,
    TemplateFilters,
    TemplateRequirement,
    TemplateStatistics,
    TemplateUpdate,
)
from app.services.requirements_service import RequirementsService
from app.services.system_templates import SYSTEM_TEMPLATES


TEMPLATE_NOT_NULL_FIELDS = {"name", "category", "is_active", "tags", "requirements"}


def _blueprint_dict(requirement: TemplateRequirement) -> dict:
    return requirement.model_dump(mode="json", exclude_none=True)


def _template_errors(name: Optional[str], category, requirements) -> List[dict]:
    errors = []
    if name is not None and not name.strip():
        errors.append({"field": "name", "message": "Template name is required"})
    if category is None:
        errors.append({"field": "category", "message": "Template category is required"})
    if requirements is not None:
        if not requirements:
            errors.append({"field": "requirements", "message": "Template must have at least one requirement"})
        for requirement in requirements:
            if not (requirement.name or "").strip():
                errors.append({"field": "requirements", "message": "All requirements must have a name"})
            if requirement.requirement_type is None:
                errors.append({"field": "requirements", "message": "All requirements must have a type"})
            if requirement.category is None:
                errors.append({"field": "requirements", "message": "All requirements must have a category"})
    return errors


class RequirementsTemplateService:
    """CRUD, search, statistics and application of requirements templates."""

    def __init__(
        self,
        session: AsyncSession,
        requirements_service: Optional[RequirementsService] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.logger = logger or logging.getLogger(__name__)
        self.requirements_service = requirements_service or RequirementsService(session)

    def _listing(self):
        return (
            select(RequirementsTemplate)
            .options(selectinload(RequirementsTemplate.creator))
            .execution_options(populate_existing=True)
        )

    async def _get_or_raise(self, template_id: str) -> RequirementsTemplate:
        template = await self.session.get(RequirementsTemplate, template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return template

    @wrap_errors("create template")
    async def create_template(self, data: TemplateCreate, created_by: Optional[str] = None) -> RequirementsTemplate:
        """Create a user template.

        Raises:
            ValidationError: If name, category or blueprints are missing
            NotFoundError: If created_by does not match a user
        """
        errors = _template_errors(data.name or "", data.category, data.requirements)
        if errors:
            raise ValidationError(errors[0]["message"], errors=errors)

        if created_by and await self.session.get(User, created_by) is None:
            raise NotFoundError("User", created_by)

        template = RequirementsTemplate(
            name=data.name.strip(),
            description=data.description,
            category=data.category,
            requirements=[_blueprint_dict(r) for r in data.requirements],
            tags=list(data.tags),
            is_active=data.is_active,
            is_system_template=False,
            usage_count=0,
            created_by=created_by,
        )
        self.session.add(template)
        await self.session.flush()

        self.logger.info(
            "Created template template_id=%s category=%s blueprints=%s",
            template.id, template.category.value, len(template.requirements),
        )
        return await self.get_template_by_id(template.id)

    @wrap_errors("get templates")
    async def get_templates(self, filters: Optional[TemplateFilters] = None) -> List[RequirementsTemplate]:
        """Filtered listing, most used first then by name."""
        filters = filters or TemplateFilters()
        stmt = self._listing()
        if filters.category is not None:
            stmt = stmt.where(RequirementsTemplate.category == filters.category)
        if filters.is_system_template is not None:
            stmt = stmt.where(RequirementsTemplate.is_system_template == filters.is_system_template)
        if filters.is_active is not None:
            stmt = stmt.where(RequirementsTemplate.is_active == filters.is_active)
        if filters.created_by:
            stmt = stmt.where(RequirementsTemplate.created_by == filters.created_by)

        stmt = (
            stmt.order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @wrap_errors("get template")
    async def get_template_by_id(self, template_id: str) -> Optional[RequirementsTemplate]:
        result = await self.session.execute(self._listing().where(RequirementsTemplate.id == template_id))
        return result.scalar_one_or_none()

    @wrap_errors("update template")
    async def update_template(self, template_id: str, data: TemplateUpdate) -> RequirementsTemplate:
        """Merge the set fields of ``data``; system templates are refused."""
        template = await self._get_or_raise(template_id)
        if template.is_system_template:
            raise GuardError("Cannot update system templates", {"template_id": template_id})

        changes = data.model_dump(exclude_unset=True)
        errors = _template_errors(
            changes.get("name"),
            changes.get("category") or template.category,
            data.requirements if "requirements" in changes else None,
        )
        if errors:
            raise ValidationError(errors[0]["message"], errors=errors)

        if changes.get("requirements") is not None:
            changes["requirements"] = [_blueprint_dict(r) for r in data.requirements]
        for field, value in changes.items():
            if value is None and field in TEMPLATE_NOT_NULL_FIELDS:
                continue
            setattr(template, field, value)

        await self.session.flush()
        self.logger.info("Updated template template_id=%s fields=%s", template_id, sorted(changes))
        return await self.get_template_by_id(template_id)

    @wrap_errors("delete template")
    async def delete_template(self, template_id: str) -> None:
        template = await self._get_or_raise(template_id)
        if template.is_system_template:
            raise GuardError("Cannot delete system templates", {"template_id": template_id})

        await self.session.delete(template)
        await self.session.flush()
        self.logger.info("Deleted template template_id=%s", template_id)

    async def apply_template_to_application(
        self,
        template_id: str,
        application_id: str,
    ) -> List[ApplicationRequirement]:
        """Create one requirement per blueprint, in template order, and count the use.

        Every blueprint is validated up front. Creation and the usage
        increment run inside one SAVEPOINT: if any step fails, no requirement
        from this call survives and PartialFailureError reports how far it got.

        Raises:
            NotFoundError: If the template or application does not exist
            GuardError: If the template is inactive
            ValidationError: If a blueprint is invalid (nothing is created)
            PartialFailureError: If creation failed partway
        """
        template = await self._get_or_raise(template_id)
        if not template.is_active:
            raise GuardError("Template is not active", {"template_id": template_id})
        if await self.session.get(Application, application_id) is None:
            raise NotFoundError("Application", application_id)

        blueprints = [
            RequirementCreate.model_validate({**blueprint, "application_id": application_id})
            for blueprint in template.requirements
        ]
        for blueprint in blueprints:
            validation = self.requirements_service.validate_requirement_data(blueprint)
            if not validation.is_valid:
                raise ValidationError(
                    f"Template requirement '{blueprint.name}' is invalid: "
                    + ", ".join(e.message for e in validation.errors),
                    errors=[e.model_dump() for e in validation.errors],
                    context={"template_id": template_id},
                )

        created = []
        current = None
        try:
            async with self.session.begin_nested():
                for blueprint in blueprints:
                    current = blueprint.name
                    created.append(await self.requirements_service.create_requirement(blueprint))
                current = None
                template.increment_usage()
                await self.session.flush()
        except (RequirementsError, SQLAlchemyError) as e:
            self.logger.error(
                "Template application rolled back template_id=%s application_id=%s created=%s failed=%s",
                template_id, application_id, len(created), current,
            )
            raise PartialFailureError(
                f"Failed to apply template: {e}",
                {
                    "template_id": template_id,
                    "application_id": application_id,
                    "created": len(created),
                    "failed_requirement": current,
                },
            ) from e

        self.logger.info(
            "Applied template template_id=%s application_id=%s requirements=%s",
            template_id, application_id, len(created),
        )
        return created

    @wrap_errors("get popular templates")
    async def get_popular_templates(self, limit: int = 10) -> List[RequirementsTemplate]:
        result = await self.session.execute(
            self._listing()
            .where(RequirementsTemplate.is_active.is_(True))
            .order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    @wrap_errors("get templates by category")
    async def get_templates_by_category(self, category: TemplateCategory) -> List[RequirementsTemplate]:
        result = await self.session.execute(
            self._listing()
            .where(RequirementsTemplate.category == category, RequirementsTemplate.is_active.is_(True))
            .order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc())
        )
        return list(result.scalars().all())

    @wrap_errors("search templates")
    async def search_templates(self, query: str, limit: int = 20) -> List[RequirementsTemplate]:
        """Case-insensitive substring match on name, description or any tag.

        The query is matched literally, so characters such as ``%`` or ``.``
        have no special meaning.
        """
        needle = query.strip().lower()
        result = await self.session.execute(
            self._listing()
            .where(RequirementsTemplate.is_active.is_(True))
            .order_by(RequirementsTemplate.usage_count.desc(), RequirementsTemplate.name.asc())
        )

        matches = []
        for template in result.scalars():
            haystack = [template.name, template.description or ""] + list(template.tags or [])
            if any(needle in value.lower() for value in haystack):
                matches.append(template)
                if len(matches) >= limit:
                    break
        return matches

    @wrap_errors("create system templates")
    async def create_system_templates(self) -> List[RequirementsTemplate]:
        """Seed the built-in templates; does nothing if any system template exists."""
        existing = await self.session.execute(
            select(RequirementsTemplate.id).where(RequirementsTemplate.is_system_template.is_(True)).limit(1)
        )
        if existing.first() is not None:
            self.logger.debug("System templates already present, skipping seed")
            return []

        templates = [
            RequirementsTemplate(
                name=seed["name"],
                description=seed["description"],
                category=TemplateCategory(seed["category"]),
                requirements=copy.deepcopy(seed["requirements"]),
                tags=[],
                is_active=True,
                is_system_template=True,
                usage_count=0,
            )
            for seed in SYSTEM_TEMPLATES
        ]
        self.session.add_all(templates)
        await self.session.flush()

        self.logger.info("Seeded system templates count=%s", len(templates))
        result = await self.session.execute(
            self._listing()
            .where(RequirementsTemplate.id.in_([t.id for t in templates]))
            .order_by(RequirementsTemplate.name)
        )
        return list(result.scalars().all())

    @wrap_errors("get template statistics")
    async def get_template_statistics(self) -> TemplateStatistics:
        row = (
            await self.session.execute(
                select(
                    func.count(RequirementsTemplate.id),
                    func.count(RequirementsTemplate.id).filter(RequirementsTemplate.is_system_template.is_(True)),
                    func.count(RequirementsTemplate.id).filter(RequirementsTemplate.is_active.is_(True)),
                    func.coalesce(func.sum(RequirementsTemplate.usage_count), 0),
                )
            )
        ).one()
        total, system, active, usage = row

        by_category = {c.value: 0 for c in TemplateCategory}
        category_rows = await self.session.execute(
            select(RequirementsTemplate.category, func.count(RequirementsTemplate.id))
            .group_by(RequirementsTemplate.category)
        )
        for category, count in category_rows:
            by_category[category.value] = count

        return TemplateStatistics(
            total_templates=total,
            system_templates=system,
            user_templates=total - system,
            active_templates=active,
            total_usage=usage,
            templates_by_category=by_category,
        )
