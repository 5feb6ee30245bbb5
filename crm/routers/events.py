from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.event import Event, EventRegistration
from crm.schema.event import EventCreate, EventUpdate, EventResponse, RegistrationResponse
from crm.utils.activity import log_activity, log_changes
from crm.utils.auth import get_current_user, get_access_scope
from crm.utils.records import (
    apply_updates,
    reattach,
    resolve_attachment,
    search_filter,
    snapshot,
    stamp_attribution,
)
from crm.utils.scope import AccessScope, get_scoped_or_404, list_scoped

event_router = APIRouter(prefix="/events", tags=["Events"])


@event_router.get("", response_model=List[EventResponse])
def list_events(
    q: Optional[str] = None,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List events visible to the caller, most recent first.
    `q` searches name, type and venue.
    """
    criteria = []
    if q:
        criteria.append(search_filter(Event, q, "name", "type", "venue"))
    return list_scoped(db, Event, scope, *criteria)


@event_router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    event: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create an event; branch and region default to the creator's.
    """
    data = stamp_attribution(event.model_dump(), current_user, Event)
    data["region_id"], data["branch_id"] = resolve_attachment(
        db, data.get("region_id"), data.get("branch_id")
    )
    db_event = Event(**data, created_by=current_user.id)
    db.add(db_event)
    db.flush()
    log_activity(
        db, "event", db_event.id, "created", "Event created",
        f"Event {db_event.name} was created",
        user=current_user,
    )
    db.commit()
    db.refresh(db_event)
    return db_event


@event_router.get("/{event_id}", response_model=EventResponse)
def get_event(
    event_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, Event, event_id, scope, "Event")


@event_router.get("/{event_id}/registrations", response_model=List[RegistrationResponse])
def list_event_registrations(
    event_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    event = get_scoped_or_404(db, Event, event_id, scope, "Event")
    return list_scoped(db, EventRegistration, scope, EventRegistration.event_id == event.id)


@event_router.patch("/{event_id}", response_model=EventResponse)
def update_event(
    event_id: UUID,
    event_update: EventUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Update an event.

    Registrations carry a copy of the event's branch and region, so moving
    the event moves its registrations with it.
    """
    db_event = get_scoped_or_404(db, Event, event_id, scope, "Event")
    update_data = event_update.model_dump(exclude_unset=True)
    reattach(db, db_event, update_data)

    before = snapshot(db_event, update_data.keys())
    apply_updates(db_event, update_data)
    if "region_id" in update_data:
        db.query(EventRegistration).filter(EventRegistration.event_id == db_event.id).update(
            {
                EventRegistration.region_id: db_event.region_id,
                EventRegistration.branch_id: db_event.branch_id,
            },
            synchronize_session=False,
        )
    log_changes(db, "event", db_event.id, before, update_data, user=current_user)
    db.commit()
    db.refresh(db_event)
    return db_event


@event_router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Delete an event and its registrations.
    """
    db_event = get_scoped_or_404(db, Event, event_id, scope, "Event")
    log_activity(
        db, "event", db_event.id, "deleted", "Event deleted",
        f"Event {db_event.name} was deleted",
        user=current_user,
    )
    db.delete(db_event)
    db.commit()
