from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.schema.activity import ActivityResponse
from crm.utils.activity import TIMELINE_ENTITIES, list_activities
from crm.utils.auth import get_access_scope
from crm.utils.scope import AccessScope, get_scoped_or_404

activity_router = APIRouter(prefix="/activities", tags=["Activities"])


@activity_router.get("/{entity_type}/{entity_id}", response_model=List[ActivityResponse])
def get_timeline(
    entity_type: str,
    entity_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Activity timeline of one record, newest first.
    The record itself must be visible to the caller.
    """
    if entity_type not in TIMELINE_ENTITIES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown entity type '{entity_type}'",
        )
    model, label = TIMELINE_ENTITIES[entity_type]
    get_scoped_or_404(db, model, entity_id, scope, label)
    return list_activities(db, entity_type, entity_id)
