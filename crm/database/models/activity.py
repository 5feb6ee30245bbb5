from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now

SYSTEM_USER_NAME = "Next Bot"


class Activity(Base):
    """Timeline entries for leads, students, applications, admissions and events."""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(50), nullable=False)  # lead, student, application, ... event_registration
    entity_id = Column(String(64), nullable=False)
    activity_type = Column(String(50), nullable=False)
    # created, updated, deleted, assigned, converted, application_added, ...
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    field_name = Column(String(100), nullable=True)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_name = Column(String(255), nullable=False, default=SYSTEM_USER_NAME)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())

    __table_args__ = (
        Index("ix_activity_entity", "entity_type", "entity_id"),
    )
