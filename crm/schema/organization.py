from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from crm.schema.common import reject_null


# Region Schemas
class RegionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    manager_id: Optional[UUID] = None


class RegionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    manager_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class RegionResponse(BaseModel):
    id: UUID
    name: str
    manager_id: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


# Branch Schemas
class BranchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    region_id: UUID
    manager_id: Optional[UUID] = None


class BranchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    region_id: Optional[UUID] = None
    manager_id: Optional[UUID] = None

    @field_validator("name", "region_id")
    @classmethod
    def required_columns(cls, value):
        return reject_null(value)


class BranchResponse(BaseModel):
    id: UUID
    name: str
    region_id: UUID
    manager_id: Optional[UUID]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
