from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from crm import settings
from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.follow_up import FollowUp
from crm.exceptions import NotFound
from crm.schema.follow_up import FollowUpCreate, FollowUpList, FollowUpResponse
from crm.utils.activity import TIMELINE_ENTITIES, log_activity
from crm.utils.auth import get_access_scope, get_current_user
from crm.utils.records import visible_reference
from crm.utils.scope import AccessScope

follow_up_router = APIRouter(prefix="/follow-ups", tags=["Follow-ups"])


def _as_utc(value: datetime) -> datetime:
    # Naive values (and what SQLite hands back) are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _entity_types(raw: Optional[List[str]]) -> Optional[set]:
    """``?entity_type=lead,student&entity_type=event`` -> {"lead", "student", "event"}"""
    types = {
        part.strip().lower()
        for value in raw or []
        for part in value.split(",")
        if part.strip()
    }
    return types or None


def _with_status(follow_up: FollowUp, now: datetime) -> dict:
    due = _as_utc(follow_up.follow_up_on)
    return {
        "id": follow_up.id,
        "user_id": follow_up.user_id,
        "entity_type": follow_up.entity_type,
        "entity_id": follow_up.entity_id,
        "comments": follow_up.comments,
        "follow_up_on": due,
        "status": "overdue" if due < now else "upcoming",
        "created_at": follow_up.created_at,
        "updated_at": follow_up.updated_at,
    }


@follow_up_router.get("", response_model=FollowUpList)
def list_follow_ups(
    start: datetime,
    end: datetime,
    entity_type: Optional[List[str]] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    The caller's follow-ups due between `start` and `end` (inclusive), soonest first.

    Each item is marked `overdue` or `upcoming` against the current time.
    `entity_type` may be repeated or comma separated.
    """
    start, end = _as_utc(start), _as_utc(end)
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date must be before end date",
        )
    if end - start > timedelta(days=settings.FOLLOW_UP_MAX_RANGE_DAYS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date range exceeds maximum allowed window",
        )

    query = db.query(FollowUp).filter(
        FollowUp.user_id == current_user.id,
        FollowUp.follow_up_on >= start,
        FollowUp.follow_up_on <= end,
    )
    types = _entity_types(entity_type)
    if types:
        query = query.filter(func.lower(FollowUp.entity_type).in_(types))
    rows = query.order_by(FollowUp.follow_up_on, FollowUp.created_at).all()

    now = datetime.now(timezone.utc)
    data = [_with_status(row, now) for row in rows]
    return {"data": data, "meta": {"start": start, "end": end, "total": len(data)}}


@follow_up_router.post("", response_model=FollowUpResponse, status_code=status.HTTP_201_CREATED)
def create_follow_up(
    follow_up: FollowUpCreate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Schedule a follow-up for the caller on a record they can see.
    The record's timeline notes the appointment.
    """
    entity_type = follow_up.entity_type.strip().lower()
    if entity_type not in TIMELINE_ENTITIES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown entity type '{follow_up.entity_type}'",
        )
    model, label = TIMELINE_ENTITIES[entity_type]
    visible_reference(db, model, follow_up.entity_id, scope, label)

    due = _as_utc(follow_up.follow_up_on)
    db_follow_up = FollowUp(
        user_id=current_user.id,
        entity_type=entity_type,
        entity_id=str(follow_up.entity_id),
        comments=follow_up.comments,
        follow_up_on=due,
    )
    db.add(db_follow_up)
    log_activity(
        db, entity_type, follow_up.entity_id, "follow_up_scheduled", "Follow-up scheduled",
        f"Follow-up set for {due:%Y-%m-%d %H:%M} UTC",
        user=current_user,
    )
    db.commit()
    db.refresh(db_follow_up)
    return _with_status(db_follow_up, datetime.now(timezone.utc))


@follow_up_router.delete("/{follow_up_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_follow_up(
    follow_up_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Delete one of the caller's own follow-ups.
    """
    db_follow_up = db.get(FollowUp, follow_up_id)
    if db_follow_up is None or db_follow_up.user_id != current_user.id:
        raise NotFound("Follow-up")
    db.delete(db_follow_up)
    db.commit()
