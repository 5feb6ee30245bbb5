import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.event import Event, EventRegistration
from crm.database.models.lead import Lead
from crm.exceptions import Conflict
from crm.schema.event import RegistrationCreate, RegistrationUpdate, RegistrationResponse
from crm.schema.lead import LeadResponse
from crm.utils.activity import log_activity, log_changes
from crm.utils.auth import get_current_user, get_access_scope
from crm.utils.codes import REGISTRATION_CODES, create_with_code
from crm.utils.records import (
    apply_updates,
    search_filter,
    snapshot,
    stamp_attribution,
    visible_reference,
)
from crm.utils.scope import AccessScope, get_scoped_or_404, list_scoped

logger = logging.getLogger(__name__)

registration_router = APIRouter(prefix="/event-registrations", tags=["Event Registrations"])


def _guard_duplicate(
    db: Session,
    event_id: UUID,
    email: Optional[str],
    number: Optional[str],
    exclude_id: Optional[UUID] = None,
) -> None:
    """Reject a second registration with the same email or number for one event."""
    query = db.query(EventRegistration).filter(EventRegistration.event_id == event_id)
    if exclude_id is not None:
        query = query.filter(EventRegistration.id != exclude_id)
    if email and query.filter(func.lower(EventRegistration.email) == email.lower()).first():
        raise Conflict("This email is already registered for the event")
    if number and query.filter(EventRegistration.number == number).first():
        raise Conflict("This number is already registered for the event")


@registration_router.get("", response_model=List[RegistrationResponse])
def list_registrations(
    q: Optional[str] = None,
    event_id: Optional[UUID] = None,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List registrations visible to the caller, most recent first.
    `q` searches name, email, number and registration code.
    """
    criteria = []
    if q:
        criteria.append(
            search_filter(EventRegistration, q, "name", "email", "number", "registration_code")
        )
    if event_id:
        criteria.append(EventRegistration.event_id == event_id)
    return list_scoped(db, EventRegistration, scope, *criteria)


@registration_router.post("", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
def create_registration(
    registration: RegistrationCreate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Register an attendee for an event and assign a daily registration code
    (EVT-YYMMDD-NNNN). Branch and region are copied from the event.
    """
    event = visible_reference(db, Event, registration.event_id, scope, "Event")
    _guard_duplicate(db, event.id, registration.email, registration.number)

    db_registration = EventRegistration(
        **registration.model_dump(),
        region_id=event.region_id,
        branch_id=event.branch_id,
    )
    create_with_code(db, REGISTRATION_CODES, db_registration)
    log_activity(
        db, "event", event.id, "registration_added", "Registration added",
        f"{db_registration.name} registered ({db_registration.registration_code})",
        user=current_user,
    )
    db.commit()
    db.refresh(db_registration)
    return db_registration


@registration_router.get("/{registration_id}", response_model=RegistrationResponse)
def get_registration(
    registration_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, EventRegistration, registration_id, scope, "Registration")


@registration_router.patch("/{registration_id}", response_model=RegistrationResponse)
def update_registration(
    registration_id: UUID,
    registration_update: RegistrationUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_registration = get_scoped_or_404(
        db, EventRegistration, registration_id, scope, "Registration"
    )
    update_data = registration_update.model_dump(exclude_unset=True)
    if not update_data.get("email", db_registration.email) and not update_data.get(
        "number", db_registration.number
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either email or number is required",
        )
    _guard_duplicate(
        db,
        db_registration.event_id,
        update_data.get("email"),
        update_data.get("number"),
        exclude_id=db_registration.id,
    )

    before = snapshot(db_registration, update_data.keys())
    apply_updates(db_registration, update_data)
    log_changes(
        db, "event_registration", db_registration.id, before, update_data, user=current_user
    )
    db.commit()
    db.refresh(db_registration)
    return db_registration


@registration_router.post(
    "/{registration_id}/convert-to-lead",
    response_model=LeadResponse,
    status_code=status.HTTP_201_CREATED,
)
def convert_registration(
    registration_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Create a lead from an event registration. A registration converts once.
    """
    db_registration = get_scoped_or_404(
        db, EventRegistration, registration_id, scope, "Registration"
    )
    if db_registration.lead_id is not None:
        raise Conflict("Registration has already been converted to a lead")
    if not db_registration.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Registration has no email address; a lead requires one",
        )

    event = db_registration.event
    data = stamp_attribution(
        {
            "name": db_registration.name,
            "email": db_registration.email,
            "phone": db_registration.number,
            "city": db_registration.city,
            "source": db_registration.source or "event",
            "region_id": db_registration.region_id,
            "branch_id": db_registration.branch_id,
        },
        current_user,
        Lead,
    )
    db_lead = Lead(**data, created_by=current_user.id)
    db.add(db_lead)
    db.flush()
    db_registration.lead_id = db_lead.id
    db_registration.status = "converted"

    log_activity(
        db, "lead", db_lead.id, "created", "Lead created from event",
        f"Lead {db_lead.name} was created from registration "
        f"{db_registration.registration_code} at {event.name}",
        user=current_user,
    )
    db.commit()
    db.refresh(db_lead)
    logger.info("Registration %s converted to lead %s", db_registration.id, db_lead.id)
    return db_lead


@registration_router.delete("/{registration_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_registration(
    registration_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_registration = get_scoped_or_404(
        db, EventRegistration, registration_id, scope, "Registration"
    )
    log_activity(
        db, "event", db_registration.event_id, "registration_deleted", "Registration deleted",
        f"Registration {db_registration.registration_code} ({db_registration.name}) was deleted",
        user=current_user,
    )
    db.delete(db_registration)
    db.commit()
