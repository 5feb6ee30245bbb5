from pydantic import BaseModel, EmailStr
from typing import Optional
from uuid import UUID
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
