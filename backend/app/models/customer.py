"""
Customer model.

WHAT: SQLAlchemy model for the companies and people we sell to.

WHY: Customers are the root of the CRM graph. Deals, proposals, invoices
and activities all hang off a customer.

HOW: Email is the natural key. It is not declared unique at the database
level because uniqueness is case-insensitive; the DAO enforces it.
"""

from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from app.models.deal import Deal
    from app.models.proposal import Proposal


class Customer(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Customer record.

    Attributes:
        id: Primary key
        name: Display name
        email: Contact email (natural key, case-insensitive)
        phone: Optional phone number
        company: Optional company name
        address: Optional postal address
    """

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    deals: Mapped[List["Deal"]] = relationship(
        "Deal",
        back_populates="customer",
        cascade="all, delete-orphan",
    )
    proposals: Mapped[List["Proposal"]] = relationship(
        "Proposal",
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, email={self.email})>"
