"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from app.dao.base import BaseDAO
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO, DealStageDAO
from app.dao.proposal import ProposalDAO
from app.dao.invoice import InvoiceDAO
from app.dao.activity import ActivityDAO
from app.dao.contact import ContactDAO
from app.dao.product import ProductDAO

__all__ = [
    "BaseDAO",
    "CustomerDAO",
    "DealDAO",
    "DealStageDAO",
    "ProposalDAO",
    "InvoiceDAO",
    "ActivityDAO",
    "ContactDAO",
    "ProductDAO",
]
