"""
Role-scoped visibility for leads, students, applications, admissions and events.

Who sees what is decided from the caller's role and organisational
attachment (region/branch) by an ordered rule table; the first rule that
applies wins. The same rules drive both the collection filter and the
single-row check, so a row is readable by id exactly when it shows up in the
caller's list.

Access failures are never raised as errors: lists come back empty and single
reads raise ``NotFound`` just like a missing row.
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import false, inspect as sa_inspect
from sqlalchemy.orm import Query, Session

from crm.database.models.auth import User, UserRole, normalize_role
from crm.exceptions import NotFound

COUNSELLOR = "counsellor_id"
ADMISSION_OFFICER = "admission_officer_id"
PARTNER = "partner"
BRANCH = "branch_id"
REGION = "region_id"

SCOPE_COLUMNS = (COUNSELLOR, ADMISSION_OFFICER, PARTNER, BRANCH, REGION)


@dataclass(frozen=True)
class AccessScope:
    """Caller identity used for row filtering. Built fresh for every request."""

    user_id: UUID
    role: str
    region_id: Optional[UUID] = None
    branch_id: Optional[UUID] = None

    @classmethod
    def from_user(cls, user: User) -> "AccessScope":
        return cls(
            user_id=user.id,
            role=normalize_role(user.role),
            region_id=user.region_id,
            branch_id=user.branch_id,
        )

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value


@dataclass(frozen=True)
class ScopeFields:
    """Which scoping columns an entity type carries."""

    columns: frozenset = frozenset()

    @classmethod
    def of(cls, model) -> "ScopeFields":
        mapped = set(sa_inspect(model).columns.keys())
        return cls(frozenset(c for c in SCOPE_COLUMNS if c in mapped))

    def __contains__(self, column: str) -> bool:
        return column in self.columns


@dataclass(frozen=True)
class ScopeRule:
    """Outcome of rule resolution: equality constraints, or nothing visible."""

    conditions: Tuple[Tuple[str, UUID], ...] = field(default_factory=tuple)
    deny: bool = False

    @property
    def unrestricted(self) -> bool:
        return not self.deny and not self.conditions


DENY = ScopeRule(deny=True)
ALLOW_ALL = ScopeRule()


# ==================== RULES ====================
# Each rule returns None when it does not apply to the (scope, fields) pair.

RuleFn = Callable[[AccessScope, ScopeFields], Optional[ScopeRule]]


def _own_records(role: UserRole, column: str) -> RuleFn:
    def rule(scope: AccessScope, fields: ScopeFields) -> Optional[ScopeRule]:
        if scope.role == role.value and column in fields:
            return ScopeRule(conditions=((column, scope.user_id),))
        return None

    rule.__name__ = f"own_{column}"
    return rule


def _manager_of(role: UserRole, column: str, attachment: str) -> RuleFn:
    def rule(scope: AccessScope, fields: ScopeFields) -> Optional[ScopeRule]:
        if scope.role != role.value or column not in fields:
            return None
        value = getattr(scope, attachment)
        if value is None:
            # A manager without an attachment sees nothing, not everything
            return DENY
        return ScopeRule(conditions=((column, value),))

    rule.__name__ = f"manager_{column}"
    return rule


def _attached(scope: AccessScope, fields: ScopeFields) -> Optional[ScopeRule]:
    if scope.is_super_admin:
        return None
    conditions = []
    if scope.branch_id is not None and BRANCH in fields:
        conditions.append((BRANCH, scope.branch_id))
    if scope.region_id is not None and REGION in fields:
        conditions.append((REGION, scope.region_id))
    if not conditions:
        return None
    return ScopeRule(conditions=tuple(conditions))


def _everything(scope: AccessScope, fields: ScopeFields) -> Optional[ScopeRule]:
    return ALLOW_ALL


RULES: List[RuleFn] = [
    _own_records(UserRole.COUNSELOR, COUNSELLOR),
    _own_records(UserRole.ADMISSION_OFFICER, ADMISSION_OFFICER),
    _own_records(UserRole.PARTNER, PARTNER),
    _manager_of(UserRole.BRANCH_MANAGER, BRANCH, "branch_id"),
    _manager_of(UserRole.REGIONAL_MANAGER, REGION, "region_id"),
    _attached,
    _everything,
]


def resolve(scope: AccessScope, fields: ScopeFields) -> ScopeRule:
    """Return the first applicable rule outcome for the caller."""
    for rule in RULES:
        outcome = rule(scope, fields)
        if outcome is not None:
            return outcome
    return ALLOW_ALL


# ==================== COLLECTIONS ====================


def apply_scope(query: Query, model, scope: AccessScope) -> Query:
    """Narrow ``query`` over ``model`` to the rows the caller may see."""
    outcome = resolve(scope, ScopeFields.of(model))
    if outcome.deny:
        return query.filter(false())
    for column, value in outcome.conditions:
        query = query.filter(getattr(model, column) == value)
    return query


def list_scoped(db: Session, model, scope: AccessScope, *criteria) -> list:
    """Visible rows of ``model`` matching ``criteria``, most recent first."""
    query = db.query(model)
    if criteria:
        query = query.filter(*criteria)
    query = apply_scope(query, model, scope)
    return query.order_by(model.created_at.desc(), model.id.desc()).all()


# ==================== SINGLE ROWS ====================


def can_view(entity, scope: AccessScope) -> bool:
    """Evaluate the caller's rule against one already-fetched row."""
    outcome = resolve(scope, ScopeFields.of(type(entity)))
    if outcome.deny:
        return False
    return all(getattr(entity, column) == value for column, value in outcome.conditions)


def get_scoped_or_404(db: Session, model, entity_id, scope: AccessScope, entity: str = None):
    """
    Fetch a row by primary key if the caller may see it.

    Raises:
        NotFound: the row does not exist or is outside the caller's scope
    """
    label = entity or model.__name__
    row = db.get(model, entity_id)
    if row is None or not can_view(row, scope):
        raise NotFound(label)
    return row
