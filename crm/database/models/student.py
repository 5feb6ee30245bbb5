import uuid
from sqlalchemy import Column, String, DateTime, Date, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class Student(Base):
    """Students being counselled through the application process."""
    __tablename__ = "students"

    # Primary Key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )

    # Human-readable student code (e.g., "STD-250110-001")
    student_code = Column(String(32), unique=True, nullable=False, index=True)

    lead_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leads.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ==================== PERSONAL INFORMATION ====================
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    nationality = Column(String(100), nullable=True)
    passport_number = Column(String(50), nullable=True)

    # ==================== STUDY PLAN ====================
    academic_background = Column(Text, nullable=True)
    english_proficiency = Column(String(100), nullable=True)
    target_country = Column(String(100), nullable=True)
    target_program = Column(String(255), nullable=True)
    budget = Column(String(100), nullable=True)
    status = Column(String(50), nullable=False, default="active", index=True)
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
    applications = relationship(
        "Application",
        back_populates="student",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_student_branch_status", "branch_id", "status"),
    )
