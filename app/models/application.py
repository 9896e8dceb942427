"""
Application database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Enum, DateTime, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.enums import ApplicationStatus


class Application(Base):
    """
    Application model representing one school, program or scholarship application.

    The requirements service is the only writer of the cached fields:
    - requirement_ids: ids of the requirements attached to this application
    - progress: completion percentage (0-100)
    - requirements_progress: full progress snapshot (camelCase keys)
    """
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False)
    institution = Column(String, nullable=True)
    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.DRAFT, nullable=False)
    deadline = Column(DateTime, nullable=True)
    requirement_ids = Column(JSON, default=list, nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    requirements_progress = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    requirements = relationship(
        "ApplicationRequirement",
        back_populates="application",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tasks = relationship("Task", back_populates="application", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Application(id={self.id}, name={self.name}, progress={self.progress})>"

    def add_requirement_id(self, requirement_id: str) -> None:
        """Append a requirement id (reassigns the list so the JSON change is tracked)"""
        self.requirement_ids = [*(self.requirement_ids or []), requirement_id]

    def remove_requirement_id(self, requirement_id: str) -> None:
        self.requirement_ids = [rid for rid in (self.requirement_ids or []) if rid != requirement_id]
