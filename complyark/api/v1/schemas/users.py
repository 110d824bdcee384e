# complyark/api/v1/schemas/users.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from complyark.core.records import User, UserRole


class UserCreate(BaseModel):
    """Schema for creating a staff user"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str = Field("", max_length=50)
    role: UserRole = UserRole.USER
    organisation_id: Optional[int] = Field(
        None, ge=0, description="Defaults to the caller's organisation; system admins may choose"
    )


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    role: UserRole
    organisation_id: int
    is_active: bool
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, user: User):
        return cls(**user.model_dump())

    class Config:
        from_attributes = True
