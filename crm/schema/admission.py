from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from crm.schema.common import reject_null


class AdmissionBase(BaseModel):
    decision_date: Optional[datetime] = None
    scholarship_amount: Optional[str] = None
    conditions: Optional[str] = None
    deposit_amount: Optional[str] = None
    deposit_deadline: Optional[datetime] = None
    notes: Optional[str] = None
    counsellor_id: Optional[UUID] = None
    admission_officer_id: Optional[UUID] = None
    partner: Optional[UUID] = None
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None


class AdmissionCreate(AdmissionBase):
    """Record an admission decision; university/program default to the application's"""
    application_id: UUID
    decision: str = Field(..., min_length=1, max_length=50)
    university: Optional[str] = Field(None, min_length=1, max_length=255)
    program: Optional[str] = Field(None, min_length=1, max_length=255)
    deposit_required: bool = False
    visa_status: str = "pending"


class AdmissionUpdate(AdmissionBase):
    """Update admission"""
    decision: Optional[str] = Field(None, min_length=1, max_length=50)
    university: Optional[str] = Field(None, min_length=1, max_length=255)
    program: Optional[str] = Field(None, min_length=1, max_length=255)
    deposit_required: Optional[bool] = None
    visa_status: Optional[str] = None

    @field_validator("decision", "university", "program", "deposit_required", "visa_status")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class AdmissionResponse(BaseModel):
    """Admission response"""
    id: UUID
    application_id: UUID
    student_id: UUID
    university: str
    program: str
    decision: str
    decision_date: Optional[datetime]
    scholarship_amount: Optional[str]
    conditions: Optional[str]
    deposit_required: bool
    deposit_amount: Optional[str]
    deposit_deadline: Optional[datetime]
    visa_status: str
    notes: Optional[str]
    counsellor_id: Optional[UUID]
    admission_officer_id: Optional[UUID]
    partner: Optional[UUID]
    region_id: Optional[UUID]
    branch_id: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
