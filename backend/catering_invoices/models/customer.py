"""
SQLAlchemy model for customers
Project: Catering Invoices
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering_invoices.models import Base
from catering_invoices.models.mixins import CreatedAtMixin, UUIDMixin

if TYPE_CHECKING:
    from catering_invoices.models.invoice import Invoice


class Customer(Base, UUIDMixin, CreatedAtMixin):
    """
    A customer of the catering company.

    Customers are immutable once created. Invoices may reference one, but
    always carry their own copy of name, email and address.

    Attributes:
        id: UUID primary key
        name: Customer or company name
        email: Billing email
        address: Postal address (may contain newlines)
        created_at: Creation time
    """

    __tablename__ = "customers"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)

    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="customer",
        doc="Invoices linked to this customer",
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name})>"
