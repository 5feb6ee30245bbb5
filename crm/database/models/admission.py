import uuid
from sqlalchemy import (
    Column, String, Boolean, DateTime, Text, ForeignKey, Uuid
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class Admission(Base):
    """Admission decisions received from universities for an application."""
    __tablename__ = "admissions"

    # Primary Key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ==================== DECISION ====================
    university = Column(String(255), nullable=False)
    program = Column(String(255), nullable=False)
    decision = Column(String(50), nullable=False)
    decision_date = Column(DateTime(timezone=True), nullable=True)
    scholarship_amount = Column(String(50), nullable=True)
    conditions = Column(Text, nullable=True)

    # ==================== DEPOSIT & VISA ====================
    deposit_required = Column(Boolean, default=False, nullable=False)
    deposit_amount = Column(String(50), nullable=True)
    deposit_deadline = Column(DateTime(timezone=True), nullable=True)
    visa_status = Column(String(50), nullable=False, default="pending")
    notes = Column(Text, nullable=True)

    # ==================== ATTRIBUTION ====================
    counsellor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    admission_officer_id = Column(
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

    # ==================== RELATIONSHIPS ====================
    application = relationship("Application", back_populates="admissions")
