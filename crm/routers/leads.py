from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import exists
from sqlalchemy.orm import Session

from crm.database.config.db import get_db
from crm.database.models.auth import User
from crm.database.models.lead import Lead
from crm.database.models.student import Student
from crm.exceptions import InvalidReference
from crm.schema.lead import LeadCreate, LeadUpdate, LeadAssign, LeadResponse
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

lead_router = APIRouter(prefix="/leads", tags=["Leads"])


@lead_router.get("", response_model=List[LeadResponse])
def list_leads(
    q: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    List leads visible to the caller, most recent first.

    Leads already converted into a student are not listed.
    `q` searches name, email, program and country.
    """
    criteria = [~exists().where(Student.lead_id == Lead.id)]
    if q:
        criteria.append(search_filter(Lead, q, "name", "email", "program", "country"))
    if status_filter:
        criteria.append(Lead.status == status_filter)
    return list_scoped(db, Lead, scope, *criteria)


@lead_router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
def create_lead(
    lead: LeadCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a lead.

    A counselor creating a lead becomes its counsellor; branch and region
    default to the creator's.
    """
    data = stamp_attribution(lead.model_dump(), current_user, Lead)
    data["region_id"], data["branch_id"] = resolve_attachment(
        db, data.get("region_id"), data.get("branch_id")
    )
    db_lead = Lead(**data, created_by=current_user.id)
    db.add(db_lead)
    db.flush()
    log_activity(
        db, "lead", db_lead.id, "created", "Lead created",
        f"Lead {db_lead.name} was added to the system",
        user=current_user,
    )
    db.commit()
    db.refresh(db_lead)
    return db_lead


@lead_router.get("/{lead_id}", response_model=LeadResponse)
def get_lead(
    lead_id: UUID,
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    return get_scoped_or_404(db, Lead, lead_id, scope, "Lead")


@lead_router.patch("/{lead_id}", response_model=LeadResponse)
def update_lead(
    lead_id: UUID,
    lead_update: LeadUpdate,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Update a lead; every changed field is written to the lead's timeline.
    """
    db_lead = get_scoped_or_404(db, Lead, lead_id, scope, "Lead")
    update_data = lead_update.model_dump(exclude_unset=True)
    reattach(db, db_lead, update_data)

    before = snapshot(db_lead, update_data.keys())
    apply_updates(db_lead, update_data)
    log_changes(db, "lead", db_lead.id, before, update_data, user=current_user)
    db.commit()
    db.refresh(db_lead)
    return db_lead


@lead_router.patch("/{lead_id}/assign", response_model=LeadResponse)
def assign_lead(
    lead_id: UUID,
    body: LeadAssign,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    """
    Assign a lead to a counselor.
    """
    db_lead = get_scoped_or_404(db, Lead, lead_id, scope, "Lead")
    if not db.get(User, body.counsellor_id):
        raise InvalidReference("Counselor not found")

    db_lead.counsellor_id = body.counsellor_id
    log_activity(
        db, "lead", db_lead.id, "assigned", "Lead assigned to counselor",
        f"Lead assigned to counselor {body.counsellor_id}",
        user=current_user,
    )
    db.commit()
    db.refresh(db_lead)
    return db_lead


@lead_router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lead(
    lead_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_access_scope),
    db: Session = Depends(get_db),
):
    db_lead = get_scoped_or_404(db, Lead, lead_id, scope, "Lead")
    log_activity(
        db, "lead", db_lead.id, "deleted", "Lead deleted",
        f"Lead {db_lead.name} was deleted from the system",
        user=current_user,
    )
    db.delete(db_lead)
    db.commit()
