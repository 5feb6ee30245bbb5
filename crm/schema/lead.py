from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional, Union
from datetime import datetime
from uuid import UUID

from crm.schema.common import reject_null


def _first_of(value):
    """Older clients send multi-select fields as lists; keep the first choice."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


class LeadBase(BaseModel):
    phone: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[Union[str, List[str]]] = None
    program: Optional[Union[str, List[str]]] = None
    source: Optional[str] = None
    expectation: Optional[str] = None
    type: Optional[str] = None
    study_level: Optional[str] = None
    study_plan: Optional[str] = None
    elt: Optional[str] = None
    lost_reason: Optional[str] = None
    notes: Optional[str] = None
    counsellor_id: Optional[UUID] = None
    partner: Optional[UUID] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None

    @field_validator("country", "program", mode="after")
    @classmethod
    def collapse_multi_select(cls, value):
        return _first_of(value)


class LeadCreate(LeadBase):
    """Create lead"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    status: str = "new"


class LeadUpdate(LeadBase):
    """Update lead"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    status: Optional[str] = None

    @field_validator("name", "email", "status")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class LeadAssign(BaseModel):
    counsellor_id: UUID


class LeadResponse(BaseModel):
    """Lead response"""
    id: UUID
    name: str
    email: str
    phone: Optional[str]
    city: Optional[str]
    country: Optional[str]
    program: Optional[str]
    source: Optional[str]
    status: str
    expectation: Optional[str]
    type: Optional[str]
    study_level: Optional[str]
    study_plan: Optional[str]
    elt: Optional[str]
    lost_reason: Optional[str]
    notes: Optional[str]
    counsellor_id: Optional[UUID]
    partner: Optional[UUID]
    region_id: Optional[UUID]
    branch_id: Optional[UUID]
    created_by: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
