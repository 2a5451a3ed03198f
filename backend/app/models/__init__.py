"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from app.models.base import Base, TimestampMixin, PrimaryKeyMixin
from app.models.customer import Customer
from app.models.deal import Deal, DealStage, DEFAULT_STAGES
from app.models.proposal import Proposal, ProposalStatus
from app.models.invoice import Invoice, InvoiceStatus
from app.models.activity import Activity, ActivityType
from app.models.contact import Contact, activity_contacts, deal_contacts
from app.models.product import Product, SUBSCRIPTION_INTERVALS

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "Customer",
    "Deal",
    "DealStage",
    "DEFAULT_STAGES",
    "Proposal",
    "ProposalStatus",
    "Invoice",
    "InvoiceStatus",
    "Activity",
    "ActivityType",
    "Contact",
    "deal_contacts",
    "activity_contacts",
    "Product",
    "SUBSCRIPTION_INTERVALS",
]
