import uuid
from sqlalchemy import (
    Column, String, DateTime, Date, Text, ForeignKey, Index, Uuid
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class Event(Base):
    """Fairs, seminars and webinars run by a region or branch."""
    __tablename__ = "events"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    date = Column(Date, nullable=True)
    time = Column(String(20), nullable=True)
    venue = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

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

    created_by = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    registrations = relationship(
        "EventRegistration",
        back_populates="event",
        cascade="all, delete-orphan",
    )


class EventRegistration(Base):
    """Attendee sign-ups for an event; may later be converted into leads."""
    __tablename__ = "event_registrations"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )

    # Human-readable registration code (e.g., "EVT-250307-0001")
    registration_code = Column(String(32), unique=True, nullable=False, index=True)

    event_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    number = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    source = Column(String(100), nullable=True)
    status = Column(String(50), nullable=False, default="attending")
    lead_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("leads.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Copied from the event at registration time
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

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    event = relationship("Event", back_populates="registrations")

    __table_args__ = (
        Index("ix_registration_event_email", "event_id", "email"),
        Index("ix_registration_event_number", "event_id", "number"),
    )
