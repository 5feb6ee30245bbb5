import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.sql import func

from crm.database.config.db import Base, utc_now


class FollowUp(Base):
    """A reminder a user sets to get back to a lead, student, application, ..."""
    __tablename__ = "follow_ups"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    entity_type = Column(String(50), nullable=False)  # same names as the activity timeline
    entity_id = Column(String(64), nullable=False)
    comments = Column(Text, nullable=True)
    follow_up_on = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("ix_follow_up_user_due", "user_id", "follow_up_on"),
        Index("ix_follow_up_entity", "entity_type", "entity_id"),
    )
