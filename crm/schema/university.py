from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID


# Course Schemas
class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    fees: Optional[float] = Field(None, ge=0)
    is_top_course: bool = False


class CourseResponse(BaseModel):
    id: UUID
    name: str
    category: Optional[str]
    fees: Optional[float]
    is_top_course: bool

    class Config:
        from_attributes = True


class CourseListItem(CourseResponse):
    """Course row of the cross-university catalogue."""
    university_id: UUID
    university_name: Optional[str] = None
    country: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class CoursePage(BaseModel):
    data: List[CourseListItem]
    pagination: Pagination


# University Schemas
class UniversityCreate(BaseModel):
    """Create a catalogue entry together with its intakes, accepted tests and courses"""
    name: str = Field(..., min_length=1, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    campus_city: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    cover_image_url: Optional[str] = Field(None, max_length=500)
    logo_image_url: Optional[str] = Field(None, max_length=500)
    about: Optional[str] = None
    total_fees: Optional[float] = Field(None, ge=0)
    initial_deposit_amount: Optional[float] = Field(None, ge=0)
    scholarship_fee: Optional[float] = Field(None, ge=0)
    merit_scholarships: Optional[str] = None
    ug_entry_criteria: Optional[str] = None
    pg_entry_criteria: Optional[str] = None
    elt_requirements: Optional[str] = None
    moi_policy: Optional[str] = None
    study_gap: Optional[str] = Field(None, max_length=255)
    priority: Optional[str] = Field(None, max_length=50)
    drive_url: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    intakes: List[str] = Field(default_factory=list)
    accepted_elts: List[str] = Field(default_factory=list)
    courses: List[CourseCreate] = Field(default_factory=list)

    @field_validator("intakes", "accepted_elts")
    @classmethod
    def drop_blank_labels(cls, v: List[str]) -> List[str]:
        """Strip labels and drop empty or repeated ones, keeping the given order."""
        cleaned = []
        for label in (item.strip() for item in v):
            if label and label not in cleaned:
                cleaned.append(label)
        return cleaned


class UniversitySummary(BaseModel):
    id: UUID
    name: str
    country: Optional[str]
    website: Optional[str]
    cover_image_url: Optional[str]
    logo_image_url: Optional[str]

    class Config:
        from_attributes = True


class UniversityDetail(UniversitySummary):
    campus_city: Optional[str]
    about: Optional[str]
    total_fees: Optional[float]
    initial_deposit_amount: Optional[float]
    scholarship_fee: Optional[float]
    merit_scholarships: Optional[str]
    ug_entry_criteria: Optional[str]
    pg_entry_criteria: Optional[str]
    elt_requirements: Optional[str]
    moi_policy: Optional[str]
    study_gap: Optional[str]
    priority: Optional[str]
    drive_url: Optional[str]
    notes: Optional[str]
    intakes: List[str]
    accepted_elts: List[str]
    courses: List[CourseResponse]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @field_validator("intakes", mode="before")
    @classmethod
    def intake_labels(cls, v):
        return [getattr(item, "intake_label", item) for item in v]

    @field_validator("accepted_elts", mode="before")
    @classmethod
    def elt_names(cls, v):
        return [getattr(item, "elt_name", item) for item in v]
