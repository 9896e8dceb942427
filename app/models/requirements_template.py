"""
RequirementsTemplate database model
"""
import uuid
from datetime import datetime
from typing import List
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship, validates
from app.core.database import Base
from app.core.exceptions import ValidationError
from app.models.enums import TemplateCategory


class RequirementsTemplate(Base):
    """
    Reusable, ordered set of requirement blueprints.

    Blueprints are stored as JSON objects with the same classification and
    type-specific keys as ApplicationRequirement, minus status and linkage.

    Invariants (checked whenever ``requirements`` is assigned):
    - blueprint names are unique within the template
    - blueprints are kept sorted by ``order``

    System templates are seeded once and never updated or deleted.
    """
    __tablename__ = "requirements_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(Enum(TemplateCategory), nullable=False)
    requirements = Column(JSON, default=list, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_system_template = Column(Boolean, default=False, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    tags = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = relationship("User", back_populates="templates")

    __table_args__ = (
        Index("idx_template_category_active", "category", "is_active"),
        Index("idx_template_system_active", "is_system_template", "is_active"),
    )

    def __repr__(self):
        return f"<RequirementsTemplate(id={self.id}, name={self.name}, usage_count={self.usage_count})>"

    @validates("requirements")
    def _validate_requirements(self, key, blueprints):
        blueprints = list(blueprints or [])
        names = [bp.get("name") for bp in blueprints]
        if len(names) != len(set(names)):
            raise ValidationError(
                "Requirements must have unique names within a template",
                errors=[{"field": "requirements", "message": "Requirements must have unique names within a template"}],
            )
        return sorted(blueprints, key=lambda bp: bp.get("order") or 0)

    def increment_usage(self) -> None:
        self.usage_count = (self.usage_count or 0) + 1

    def requirements_by_category(self, category: str) -> List[dict]:
        return [bp for bp in self.requirements if bp.get("category") == category]

    def required_requirements(self) -> List[dict]:
        return [bp for bp in self.requirements if bp.get("is_required", True) and not bp.get("is_optional", False)]

    def optional_requirements(self) -> List[dict]:
        return [bp for bp in self.requirements if bp.get("is_optional", False)]
