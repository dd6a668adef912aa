"""
SQLAlchemy tables for the local SQLite store.

Dates are written as naive UTC; repositories reattach the zone on read.
"""

from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from collab.core.config import get_settings
from collab.utils.datetime_utils import now_utc


class Base(DeclarativeBase):
    pass


def new_id() -> str:
    return str(uuid4())


# ===========================================
# ORM Models
# ===========================================


class ProposalORM(Base):
    """Milestone proposal ORM model."""

    __tablename__ = "milestone_proposals"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(64), nullable=False, index=True)
    proposer_id = Column(String(255), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    scope = Column(Text, nullable=False)
    acceptance_criteria = Column(Text, nullable=False)
    due_date = Column(DateTime, nullable=False)
    amount = Column(Float, nullable=True)
    status = Column(String(20), default="PROPOSED", index=True)
    version = Column(Integer, nullable=False, default=1)
    accepted_by = Column(String(255), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    finalized_by = Column(String(255), nullable=True)
    finalized_at = Column(DateTime, nullable=True)
    milestone_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)


class MilestoneORM(Base):
    """Milestone ORM model."""

    __tablename__ = "milestones"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(64), nullable=False, index=True)
    # Unique so a proposal can never materialize twice.
    source_proposal_id = Column(
        String(36), ForeignKey("milestone_proposals.id"), nullable=True, unique=True
    )
    title = Column(String(200), nullable=False)
    scope = Column(Text, nullable=False)
    acceptance_criteria = Column(Text, nullable=False)
    due_date = Column(DateTime, nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), default="USD")
    escrow_status = Column(String(20), default="PENDING")
    supervisor_gate = Column(Boolean, default=False)
    status = Column(String(20), default="FINALIZED", index=True)
    finalized_by = Column(String(255), nullable=True)
    review_notes = Column(Text, nullable=True)
    progress_readiness = Column(Integer, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=now_utc)
    updated_at = Column(DateTime, default=now_utc)


class SubmissionORM(Base):
    """Milestone submission ORM model."""

    __tablename__ = "milestone_submissions"

    id = Column(String(36), primary_key=True, default=new_id)
    milestone_id = Column(String(36), ForeignKey("milestones.id"), nullable=False, index=True)
    by_student_id = Column(String(255), nullable=True)
    by_group_id = Column(String(255), nullable=True)
    notes = Column(Text, nullable=False)
    files = Column(JSON, nullable=False, default=list)
    work_url = Column(String(1000), nullable=True)
    submitted_at = Column(DateTime, default=now_utc, index=True)


class PortfolioItemORM(Base):
    """Verified portfolio entry ORM model."""

    __tablename__ = "portfolio_items"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(255), nullable=False, index=True)
    project_id = Column(String(64), nullable=False)
    milestone_id = Column(String(36), nullable=True, index=True)
    role = Column(String(200), nullable=False)
    scope = Column(Text, nullable=False)
    proof = Column(JSON, nullable=False, default=list)
    rating = Column(Integer, nullable=True)
    complexity = Column(String(10), nullable=False)
    amount_delivered = Column(Float, nullable=False)
    currency = Column(String(3), default="USD")
    on_time = Column(Boolean, nullable=False)
    verified_at = Column(DateTime, default=now_utc)
    created_at = Column(DateTime, default=now_utc)


class NotificationORM(Base):
    """Notification ORM model."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(255), nullable=False, index=True)
    type = Column(String(40), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(500), nullable=False)
    link_type = Column(String(20), nullable=True)
    link_id = Column(String(36), nullable=True)
    project_id = Column(String(64), nullable=True)
    is_read = Column(Boolean, default=False, index=True)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=now_utc, index=True)


class ChatMessageORM(Base):
    """Project chat message ORM model."""

    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(64), nullable=False, index=True)
    sender_id = Column(String(255), nullable=False)
    kind = Column(String(30), nullable=False, default="text")
    content = Column(Text, nullable=False, default="")
    reference_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=now_utc, index=True)


# ===========================================
# Engine and sessions
# ===========================================


@lru_cache()
def get_engine():
    """One engine per process, built from ``DATABASE_URL``."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)


def get_session_factory():
    # Objects stay readable after commit; repositories map them after writing.
    return sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db():
    """Create missing tables. Existing tables are left untouched."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
