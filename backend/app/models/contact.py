"""
Contact model.

WHAT: SQLAlchemy model for the people we talk to at a customer.

WHY: A customer is usually a company; the deal is negotiated with named
people there. Contacts give each customer a list of people, one of them
marked primary, and record which people are involved in which deals and
activities.

HOW: Contacts belong to one customer (deleted with it). Deal and activity
involvement are plain link tables; a link disappears with either side.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin


deal_contacts = Table(
    "deal_contacts",
    Base.metadata,
    Column("deal_id", Integer, ForeignKey("deals.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "contact_id", Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True
    ),
)

activity_contacts = Table(
    "activity_contacts",
    Base.metadata,
    Column(
        "activity_id", Integer, ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "contact_id", Integer, ForeignKey("contacts.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Contact(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Person at a customer.

    Attributes:
        customer_id: Customer the person works for
        first_name, last_name: Person's name
        email: Work email
        phone, mobile: Optional numbers
        title: Job title (optional)
        department: Department (optional)
        is_primary: Main point of contact for the customer
        notes: Free text
    """

    __tablename__ = "contacts"

    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_contacts_customer_id", "customer_id"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, customer_id={self.customer_id}, email={self.email})>"
