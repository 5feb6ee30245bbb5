from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class ActivityResponse(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    activity_type: str
    title: str
    description: Optional[str]
    field_name: Optional[str]
    old_value: Optional[str]
    new_value: Optional[str]
    user_id: Optional[UUID]
    user_name: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
