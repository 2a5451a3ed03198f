"""
Activity model.

WHAT: SQLAlchemy model for sales activities (calls, meetings, notes, tasks).

WHY: Activities are the day-to-day log of work on a customer or deal:
1. Timeline on the customer and deal pages
2. Task list with due dates ("open items")
3. System notes recorded when proposals change

HOW: Optional links to a customer and/or a deal; tasks use due_date and
completed.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin, enum_column


class ActivityType(str, Enum):
    """Kinds of activity a sales rep can log."""

    NOTE = "note"
    EMAIL = "email"
    CALL = "call"
    MEETING = "meeting"
    TASK = "task"


class Activity(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Logged sales activity.

    Attributes:
        type: Activity kind
        title: Short summary
        description: Optional details
        customer_id: Related customer (optional)
        deal_id: Related deal (optional)
        completed: Whether the activity is done
        due_date: When a task is due (optional)
    """

    __tablename__ = "activities"

    type: Mapped[ActivityType] = mapped_column(
        enum_column(ActivityType, "activitytype"),
        nullable=False,
        default=ActivityType.NOTE,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    customer_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=True
    )
    deal_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("deals.id", ondelete="CASCADE"), nullable=True
    )

    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_activities_customer_id", "customer_id"),
        Index("ix_activities_deal_id", "deal_id"),
        Index("ix_activities_due_date", "due_date"),
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, type={self.type}, title={self.title})>"
