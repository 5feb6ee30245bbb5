import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class Application(Base):
    """University applications filed on behalf of a student."""
    __tablename__ = "applications"

    # Primary Key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )

    # Human-readable application code (e.g., "APP-250307-001")
    application_code = Column(String(32), unique=True, nullable=False, index=True)

    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ==================== APPLICATION TARGET ====================
    university = Column(String(255), nullable=False)
    program = Column(String(255), nullable=False)
    course_type = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    intake = Column(String(50), nullable=True)
    channel_partner = Column(String(255), nullable=True)

    # ==================== STATUS ====================
    app_status = Column(String(50), nullable=False, default="open", index=True)
    case_status = Column(String(50), nullable=True)
    google_drive_link = Column(String(500), nullable=True)
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
    student = relationship("Student", back_populates="applications")
    admissions = relationship(
        "Admission",
        back_populates="application",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_application_student_status", "student_id", "app_status"),
    )
