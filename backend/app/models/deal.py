"""
Deal and deal stage models.

WHAT: SQLAlchemy models for the sales pipeline.

WHY: A deal is a sales opportunity moving through ordered stages. Its
monetary value is split into recurring (subscription) and one-time revenue.

HOW: Once any proposal references a deal, the three value columns are
owned by the proposals: DealValuationService re-derives them after every
proposal mutation and the API refuses manual edits.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.customer import Customer
    from app.models.proposal import Proposal


# Default pipeline created when an organisation has no stages yet
# Format: (name, color, order)
DEFAULT_STAGES = [
    ("Lead", "#6B7280", 1),
    ("Qualified", "#3B82F6", 2),
    ("Proposal", "#F59E0B", 3),
    ("Negotiation", "#EF4444", 4),
    ("Closed Won", "#10B981", 5),
    ("Closed Lost", "#6B7280", 6),
]


class DealStage(PrimaryKeyMixin, Base):
    """
    Pipeline stage.

    Attributes:
        name: Stage label shown on the board
        color: Hex color for UI grouping
        order: Position in the pipeline (ascending)
        is_default: Whether the stage came from the default pipeline
    """

    __tablename__ = "deal_stages"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#6B7280")
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    deals: Mapped[List["Deal"]] = relationship("Deal", back_populates="stage")

    def __repr__(self) -> str:
        return f"<DealStage(id={self.id}, name={self.name}, order={self.order})>"


class Deal(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Sales opportunity.

    Attributes:
        title: Deal title
        description: Optional free text
        value: subscription_value + one_time_value
        subscription_value: Recurring revenue part
        one_time_value: One-off revenue part
        customer_id: Owning customer
        stage_id: Current pipeline stage
        probability: Win probability (0-100)
        expected_close_date: Optional forecast date
    """

    __tablename__ = "deals"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    subscription_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=0
    )
    one_time_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    stage_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("deal_stages.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    probability: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    expected_close_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="deals")
    stage: Mapped["DealStage"] = relationship("DealStage", back_populates="deals")
    proposals: Mapped[List["Proposal"]] = relationship("Proposal", back_populates="deal")

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, title={self.title}, value={self.value})>"

    @property
    def weighted_value(self) -> Decimal:
        """Value weighted by win probability, used for forecasting."""
        return (self.value or Decimal(0)) * Decimal(self.probability or 0) / Decimal(100)
