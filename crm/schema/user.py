from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from crm.database.models.auth import UserRole
from crm.schema.common import reject_null


class CreateUserRequest(BaseModel):
    """Request to create a user. Password is generated and sent to email."""
    email: EmailStr = Field(..., description="User email (login and credentials delivery)")
    first_name: str = Field(..., min_length=1, max_length=100, description="User first name")
    last_name: str = Field(..., min_length=1, max_length=100, description="User last name")
    role: UserRole = UserRole.COUNSELOR
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None


class CreateUserResponse(BaseModel):
    """Response after creating a user."""
    user_id: UUID
    email: str
    message: str = "User created. Login credentials have been sent to the email address."


class UserUpdateRequest(BaseModel):
    """Partial update for a user. Only provided fields are updated."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None
    is_active: Optional[bool] = None

    @field_validator("role", "is_active")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class UserResponse(BaseModel):
    """User details for GET response."""
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True
