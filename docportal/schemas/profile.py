"""
Pydantic schemas for Profile model.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from docportal.models.choices import Role


class ProfileBase(BaseModel):
    """Base profile schema."""

    email: EmailStr
    full_name: str = Field(..., min_length=1)
    department: Optional[str] = None


class ProfileCreate(ProfileBase):
    """Schema for sign-up."""

    password: str = Field(..., min_length=6)
    role: Role = Role.EMPLOYEE


class ProfileInDB(ProfileBase):
    """Schema for profile in database."""

    id: int
    role: Role
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class Profile(ProfileInDB):
    """Schema for profile response."""

    pass


class ProfileSummary(BaseModel):
    """Compact profile used in pickers and assignee lists."""

    id: int
    full_name: str
    department: Optional[str] = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Schema for JWT token."""

    access_token: str
    token_type: str
    expires_in: int
    role: Role
    landing: str
