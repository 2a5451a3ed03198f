"""
Product model.

WHAT: SQLAlchemy model for the catalog of things we sell.

WHY: Proposal lines are usually picked from a price list rather than typed
in. A product carries the default name, description, price and billing
kind of such a line.

HOW: Proposals copy product data into their JSON items, so changing or
deleting a product never rewrites an existing proposal. Inactive products
stay on file but cannot be added to new lines.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, PrimaryKeyMixin, TimestampMixin


SUBSCRIPTION_INTERVALS = ("monthly", "quarterly", "yearly")


class Product(PrimaryKeyMixin, TimestampMixin, Base):
    """
    Catalog product.

    Attributes:
        name: Product name shown on proposal lines
        description: Default line description (optional)
        price: Default unit price
        is_subscription: Recurring revenue product
        subscription_interval: monthly, quarterly or yearly (subscriptions only)
        is_active: Offered for new proposal lines
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    is_subscription: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    subscription_interval: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name}, price={self.price})>"
