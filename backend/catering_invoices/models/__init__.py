"""
SQLAlchemy database models
Project: Catering Invoices

Central import of every model, used by the SQL invoice store and by
``init_db`` to create the tables.

Models:
- Customer: Customer directory
- Invoice: Invoices
- LineItem: Invoice line items
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for every SQLAlchemy model."""
    pass


from catering_invoices.models.customer import Customer
from catering_invoices.models.invoice import Invoice, LineItem

__all__ = [
    "Base",
    "Customer",
    "Invoice",
    "LineItem",
]
