from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime
from uuid import UUID


class FollowUpCreate(BaseModel):
    """Schedule a follow-up on a record the caller can see"""
    entity_type: str = Field(..., min_length=1, max_length=50)
    entity_id: UUID
    follow_up_on: datetime
    comments: Optional[str] = None


class FollowUpResponse(BaseModel):
    id: UUID
    user_id: UUID
    entity_type: str
    entity_id: str
    comments: Optional[str]
    follow_up_on: datetime
    status: Literal["overdue", "upcoming"]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class FollowUpWindow(BaseModel):
    start: datetime
    end: datetime
    total: int


class FollowUpList(BaseModel):
    data: List[FollowUpResponse]
    meta: FollowUpWindow
