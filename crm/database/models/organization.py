import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from crm.database.config.db import Base


class Region(Base):
    """Geographic regions grouping the consultancy's branches."""
    __tablename__ = "regions"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    name = Column(String(255), unique=True, nullable=False, index=True)
    manager_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    branches = relationship("Branch", back_populates="region", cascade="all, delete-orphan")


class Branch(Base):
    """Consultancy offices; every branch belongs to exactly one region."""
    __tablename__ = "branches"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False,
    )
    name = Column(String(255), nullable=False, index=True)
    region_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("regions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    manager_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    region = relationship("Region", back_populates="branches")

    __table_args__ = (
        UniqueConstraint("region_id", "name", name="uq_branch_region_name"),
    )
