from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional
import datetime as dt
from uuid import UUID

from crm.schema.common import reject_null


# Event Schemas
class EventCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=20)
    venue: Optional[str] = None
    notes: Optional[str] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, max_length=20)
    venue: Optional[str] = None
    notes: Optional[str] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class EventResponse(BaseModel):
    id: UUID
    name: str
    type: Optional[str]
    date: Optional[dt.date]
    time: Optional[str]
    venue: Optional[str]
    notes: Optional[str]
    region_id: Optional[UUID]
    branch_id: Optional[UUID]
    created_by: Optional[UUID]
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]

    class Config:
        from_attributes = True


# EventRegistration Schemas
class RegistrationCreate(BaseModel):
    event_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    number: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = None
    source: Optional[str] = None
    status: str = "attending"

    @model_validator(mode="after")
    def require_contact(self):
        if not self.email and not self.number:
            raise ValueError("Either email or number is required")
        return self


class RegistrationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    number: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = None
    source: Optional[str] = None
    status: Optional[str] = None

    @field_validator("name", "status")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class RegistrationResponse(BaseModel):
    id: UUID
    registration_code: str
    event_id: UUID
    name: str
    email: Optional[str]
    number: Optional[str]
    city: Optional[str]
    source: Optional[str]
    status: str
    lead_id: Optional[UUID]
    region_id: Optional[UUID]
    branch_id: Optional[UUID]
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]

    class Config:
        from_attributes = True
