import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crm.database.config.db import Base


class UserRole(str, enum.Enum):
    """User role enumeration."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ADMIN_STAFF = "admin_staff"
    REGIONAL_MANAGER = "regional_manager"
    BRANCH_MANAGER = "branch_manager"
    COUNSELOR = "counselor"
    ADMISSION_OFFICER = "admission_officer"
    PARTNER = "partner"
    PROCESSING = "processing"


# Spellings seen in role records and tokens issued by older clients
ROLE_ALIASES = {
    "counsellor": UserRole.COUNSELOR.value,
    "branch_head": UserRole.BRANCH_MANAGER.value,
    "region_manager": UserRole.REGIONAL_MANAGER.value,
    "superadmin": UserRole.SUPER_ADMIN.value,
}


def normalize_role(raw) -> str:
    """Normalize a free-form role name ("Branch Head", "counsellor") to a UserRole value."""
    if raw is None:
        return ""
    if isinstance(raw, UserRole):
        return raw.value
    norm = "_".join(str(raw).strip().lower().replace("-", " ").split())
    return ROLE_ALIASES.get(norm, norm)


class User(Base):
    __tablename__ = "users"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    password_hash = Column(String(255), nullable=False)
    is_temporary_password = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    role = Column(
        Enum(*[e.value for e in UserRole], name="user_role"),
        nullable=False,
        default=UserRole.COUNSELOR.value,
        index=True,
    )
    region_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("regions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    branch_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    region = relationship("Region", foreign_keys=[region_id])
    branch = relationship("Branch", foreign_keys=[branch_id])

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.email or "User"
