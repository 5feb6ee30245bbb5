"""
Activity timeline helpers.

Entries are added to the caller's session and committed together with the
change they describe.
"""
import re
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from crm.database.models.activity import Activity, SYSTEM_USER_NAME
from crm.database.models.admission import Admission
from crm.database.models.application import Application
from crm.database.models.auth import User
from crm.database.models.event import Event, EventRegistration
from crm.database.models.follow_up import FollowUp
from crm.database.models.lead import Lead
from crm.database.models.student import Student

# Entity type -> (model, label) for timelines and follow-ups
TIMELINE_ENTITIES = {
    "lead": (Lead, "Lead"),
    "student": (Student, "Student"),
    "application": (Application, "Application"),
    "admission": (Admission, "Admission"),
    "event": (Event, "Event"),
    "event_registration": (EventRegistration, "Registration"),
}


def format_field_name(field_name: str) -> str:
    """Humanise a column name: ``target_country`` / ``targetCountry`` -> ``Target Country``."""
    spaced = re.sub(r"([A-Z])", r" \1", field_name).replace("_", " ")
    return " ".join(word.capitalize() for word in spaced.split())


def _stringify(value: Any) -> str:
    return "" if value is None else str(value)


def log_activity(
    db: Session,
    entity_type: str,
    entity_id,
    activity_type: str,
    title: str,
    description: Optional[str] = None,
    *,
    field_name: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
    user: Optional[User] = None,
) -> Activity:
    activity = Activity(
        entity_type=entity_type,
        entity_id=str(entity_id),
        activity_type=activity_type,
        title=title,
        description=description,
        field_name=field_name,
        old_value=old_value,
        new_value=new_value,
        user_id=user.id if user else None,
        user_name=user.display_name if user else SYSTEM_USER_NAME,
    )
    db.add(activity)
    return activity


def log_changes(
    db: Session,
    entity_type: str,
    entity_id,
    before: Mapping[str, Any],
    updates: Mapping[str, Any],
    user: Optional[User] = None,
) -> int:
    """Record one ``updated`` activity per field whose value actually changed."""
    logged = 0
    for field_name, new_value in updates.items():
        if field_name == "updated_at":
            continue
        old_value = before.get(field_name)
        if old_value == new_value:
            continue
        label = format_field_name(field_name)
        log_activity(
            db,
            entity_type,
            entity_id,
            "updated",
            f"{label} updated",
            f'{label} changed from "{_stringify(old_value) or "empty"}" '
            f'to "{_stringify(new_value) or "empty"}"',
            field_name=field_name,
            old_value=_stringify(old_value),
            new_value=_stringify(new_value),
            user=user,
        )
        logged += 1
    return logged


def transfer_activities(
    db: Session,
    from_type: str,
    from_id,
    to_type: str,
    to_id,
) -> int:
    """
    Move a timeline from one entity to another (e.g. lead -> student).
    Follow-ups scheduled on the old entity move with it.

    Returns the number of activities moved.
    """
    db.query(FollowUp).filter(
        FollowUp.entity_type == from_type, FollowUp.entity_id == str(from_id)
    ).update(
        {FollowUp.entity_type: to_type, FollowUp.entity_id: str(to_id)},
        synchronize_session=False,
    )
    return (
        db.query(Activity)
        .filter(Activity.entity_type == from_type, Activity.entity_id == str(from_id))
        .update(
            {Activity.entity_type: to_type, Activity.entity_id: str(to_id)},
            synchronize_session=False,
        )
    )


def list_activities(db: Session, entity_type: str, entity_id) -> list:
    return (
        db.query(Activity)
        .filter(Activity.entity_type == entity_type, Activity.entity_id == str(entity_id))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .all()
    )
