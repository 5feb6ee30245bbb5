from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime, date
from uuid import UUID

from crm.schema.common import reject_null


class StudentBase(BaseModel):
    phone: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    passport_number: Optional[str] = Field(None, max_length=50)
    academic_background: Optional[str] = None
    english_proficiency: Optional[str] = None
    target_country: Optional[str] = None
    target_program: Optional[str] = None
    budget: Optional[str] = None
    notes: Optional[str] = None
    counsellor_id: Optional[UUID] = None
    admission_officer_id: Optional[UUID] = None
    partner: Optional[UUID] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None


class StudentCreate(StudentBase):
    """Create student"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    status: str = "active"


class StudentConvert(StudentBase):
    """Convert a lead into a student; name and email default to the lead's."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    status: str = "active"


class StudentUpdate(StudentBase):
    """Update student"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    status: Optional[str] = None

    @field_validator("name", "email", "status")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class StudentResponse(BaseModel):
    """Student response"""
    id: UUID
    student_code: str
    lead_id: Optional[UUID]
    name: str
    email: str
    phone: Optional[str]
    date_of_birth: Optional[date]
    nationality: Optional[str]
    passport_number: Optional[str]
    academic_background: Optional[str]
    english_proficiency: Optional[str]
    target_country: Optional[str]
    target_program: Optional[str]
    budget: Optional[str]
    status: str
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
