"""
Task Pydantic schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import Field
from app.schemas.base import CamelModel


class TaskCreate(CamelModel):
    """Schema for adding a task to an application"""
    title: str = Field(..., min_length=1, max_length=255)
    status: str = "todo"
    due_date: Optional[datetime] = None


class TaskResponse(CamelModel):
    id: str
    application_id: str
    title: str
    status: str
    due_date: Optional[datetime] = None
    created_at: datetime
