"""
User Pydantic schemas
"""
from datetime import datetime
from pydantic import EmailStr, Field
from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    """Schema for creating a new user"""
    name: str = Field(..., min_length=1, max_length=255, description="User full name")
    email: EmailStr = Field(..., description="User email address")


class UserResponse(CamelModel):
    """Schema for user response"""
    id: str = Field(..., description="User UUID")
    name: str
    email: str
    created_at: datetime


class CreatorSummary(CamelModel):
    """Template author as shown on template responses"""
    id: str
    name: str
    email: str
