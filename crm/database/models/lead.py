import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class Lead(Base):
    """Prospective students captured from walk-ins, campaigns, partners and events."""
    __tablename__ = "leads"

    # Primary Key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )

    # ==================== CONTACT ====================
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)

    # ==================== INTEREST ====================
    country = Column(String(100), nullable=True)
    program = Column(String(255), nullable=True)
    source = Column(String(100), nullable=True)
    status = Column(String(50), nullable=False, default="new", index=True)
    expectation = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)
    study_level = Column(String(100), nullable=True)
    study_plan = Column(String(100), nullable=True)
    elt = Column(String(100), nullable=True)  # English language test
    lost_reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # ==================== ATTRIBUTION ====================
    counsellor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    partner = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
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

    # ==================== METADATA ====================
    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_lead_branch_status", "branch_id", "status"),
    )
