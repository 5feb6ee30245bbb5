import uuid
from sqlalchemy import (
    Column, String, DateTime, Text, Numeric, Boolean, Integer, ForeignKey, Uuid
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class University(Base):
    """Partner universities counselors recommend to students."""
    __tablename__ = "universities"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )

    # ==================== OVERVIEW ====================
    name = Column(String(255), unique=True, nullable=False, index=True)
    country = Column(String(100), nullable=True, index=True)
    campus_city = Column(String(100), nullable=True)
    website = Column(String(500), nullable=True)
    cover_image_url = Column(String(500), nullable=True)
    logo_image_url = Column(String(500), nullable=True)
    about = Column(Text, nullable=True)

    # ==================== FEES & FUNDING ====================
    total_fees = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    initial_deposit_amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    scholarship_fee = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    merit_scholarships = Column(Text, nullable=True)

    # ==================== ADMISSION REQUIREMENTS ====================
    ug_entry_criteria = Column(Text, nullable=True)
    pg_entry_criteria = Column(Text, nullable=True)
    elt_requirements = Column(Text, nullable=True)
    moi_policy = Column(Text, nullable=True)  # medium of instruction waiver
    study_gap = Column(String(255), nullable=True)
    priority = Column(String(50), nullable=True)

    # ==================== RESOURCES ====================
    drive_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    intakes = relationship(
        "UniversityIntake", back_populates="university", cascade="all, delete-orphan"
    )
    accepted_elts = relationship(
        "UniversityAcceptedElt", back_populates="university", cascade="all, delete-orphan"
    )
    courses = relationship(
        "UniversityCourse", back_populates="university", cascade="all, delete-orphan"
    )


class UniversityIntake(Base):
    """Intake windows a university admits in, e.g. 'September 2025'."""
    __tablename__ = "university_intakes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    university_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("universities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    intake_label = Column(String(100), nullable=False)

    university = relationship("University", back_populates="intakes")


class UniversityAcceptedElt(Base):
    """English language tests a university accepts."""
    __tablename__ = "university_accepted_elts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    university_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("universities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    elt_name = Column(String(100), nullable=False)

    university = relationship("University", back_populates="accepted_elts")


class UniversityCourse(Base):
    """Courses offered by a university."""
    __tablename__ = "university_courses"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    university_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("universities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    fees = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    is_top_course = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)

    university = relationship("University", back_populates="courses")
