from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from crm.schema.common import reject_null


class ApplicationBase(BaseModel):
    course_type: Optional[str] = None
    country: Optional[str] = None
    intake: Optional[str] = None
    channel_partner: Optional[str] = None
    case_status: Optional[str] = None
    google_drive_link: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    counsellor_id: Optional[UUID] = None
    admission_officer_id: Optional[UUID] = None
    partner: Optional[UUID] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None


class ApplicationCreate(ApplicationBase):
    """Create application; unset attribution is inherited from the student"""
    student_id: UUID
    university: str = Field(..., min_length=1, max_length=255)
    program: str = Field(..., min_length=1, max_length=255)
    app_status: str = "open"


class ApplicationUpdate(ApplicationBase):
    """Update application"""
    university: Optional[str] = Field(None, min_length=1, max_length=255)
    program: Optional[str] = Field(None, min_length=1, max_length=255)
    app_status: Optional[str] = None

    @field_validator("university", "program", "app_status")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class ApplicationResponse(BaseModel):
    """Application response"""
    id: UUID
    application_code: str
    student_id: UUID
    university: str
    program: str
    course_type: Optional[str]
    country: Optional[str]
    intake: Optional[str]
    channel_partner: Optional[str]
    app_status: str
    case_status: Optional[str]
    google_drive_link: Optional[str]
    notes: Optional[str]
    counsellor_id: Optional[UUID]
    admission_officer_id: Optional[UUID]
    partner: Optional[UUID]
    region_id: Optional[UUID]
    branch_id: Optional[UUID]
    created_by: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
