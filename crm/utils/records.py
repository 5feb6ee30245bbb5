"""
Shared helpers for creating and updating scoped records.
"""
from typing import Any, Dict, Iterable, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from crm.database.models.auth import User, UserRole, normalize_role
from crm.database.models.organization import Branch, Region
from crm.exceptions import InvalidReference
from crm.utils.scope import (
    AccessScope,
    ADMISSION_OFFICER,
    BRANCH,
    COUNSELLOR,
    PARTNER,
    REGION,
    SCOPE_COLUMNS,
    ScopeFields,
    can_view,
)

# Role whose holder becomes the owner of records they create
_OWNER_COLUMN_BY_ROLE = {
    UserRole.COUNSELOR.value: COUNSELLOR,
    UserRole.ADMISSION_OFFICER.value: ADMISSION_OFFICER,
    UserRole.PARTNER.value: PARTNER,
}


def resolve_attachment(
    db: Session,
    region_id: Optional[UUID],
    branch_id: Optional[UUID],
) -> Tuple[Optional[UUID], Optional[UUID]]:
    """
    Validate a region/branch pair and fill the region from the branch.

    Raises:
        InvalidReference: unknown region or branch, or a branch outside the region
    """
    if branch_id is not None:
        branch = db.get(Branch, branch_id)
        if branch is None:
            raise InvalidReference("Branch not found")
        if region_id is None:
            region_id = branch.region_id
        elif region_id != branch.region_id:
            raise InvalidReference("Branch does not belong to the given region")
    if region_id is not None and db.get(Region, region_id) is None:
        raise InvalidReference("Region not found")
    return region_id, branch_id


def reattach(db: Session, entity, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Work out the new region/branch pair for a partial update, in place.

    A new branch brings its region along; moving to another region detaches
    the entity from a branch outside it.
    """
    if "branch_id" not in updates and "region_id" not in updates:
        return updates
    branch_id = updates.get("branch_id", entity.branch_id)
    if "region_id" in updates:
        region_id = updates["region_id"]
        if "branch_id" not in updates and branch_id is not None:
            branch = db.get(Branch, branch_id)
            if branch is None or branch.region_id != region_id:
                branch_id = None
    else:
        region_id = None if branch_id is not None else entity.region_id
    updates["region_id"], updates["branch_id"] = resolve_attachment(db, region_id, branch_id)
    return updates


def stamp_attribution(data: Dict[str, Any], user: User, model) -> Dict[str, Any]:
    """
    Default unset attribution fields from the creating user.

    A counselor (admission officer, partner) becomes the owner of what they
    create; the user's branch and region are stamped when neither is given.
    An explicit branch keeps its own region.
    """
    fields = ScopeFields.of(model)
    owner_column = _OWNER_COLUMN_BY_ROLE.get(normalize_role(user.role))
    if owner_column and owner_column in fields and data.get(owner_column) is None:
        data[owner_column] = user.id
    if data.get(BRANCH) is not None or data.get(REGION) is not None:
        return data
    if BRANCH in fields:
        data[BRANCH] = user.branch_id
    if REGION in fields:
        data[REGION] = user.region_id
    return data


def inherit_attribution(data: Dict[str, Any], parent, model) -> Dict[str, Any]:
    """Copy scope fields the payload left unset from a parent record."""
    fields = ScopeFields.of(model)
    parent_fields = ScopeFields.of(type(parent))
    for column in SCOPE_COLUMNS:
        if column in fields and column in parent_fields and data.get(column) is None:
            data[column] = getattr(parent, column)
    return data


def search_filter(model, q: str, *columns):
    """Case-insensitive substring match of ``q`` against any of ``columns``."""
    pattern = f"%{q}%"
    return or_(*[getattr(model, column).ilike(pattern) for column in columns])


def snapshot(entity, keys: Iterable[str]) -> Dict[str, Any]:
    return {key: getattr(entity, key) for key in keys}


def apply_updates(entity, updates: Dict[str, Any]) -> None:
    for field, value in updates.items():
        setattr(entity, field, value)


def visible_reference(db: Session, model, entity_id, scope: AccessScope, entity: str):
    """
    Resolve a record referenced from a payload, e.g. an application's student.

    Raises:
        InvalidReference: the record does not exist or is outside the caller's scope
    """
    row = db.get(model, entity_id)
    if row is None or not can_view(row, scope):
        raise InvalidReference(f"{entity} not found")
    return row
