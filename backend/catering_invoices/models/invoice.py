"""
SQLAlchemy models for invoicing
Project: Catering Invoices

Contains:
- Invoice: The invoice header with denormalized customer data and totals
- LineItem: Billable rows of an invoice
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catering_invoices.models import Base
from catering_invoices.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from catering_invoices.models.customer import Customer


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    Model for invoices.

    Attributes:
        id: UUID primary key
        number: Unique invoice number (format: INV-YYYY-NNN)
        customer_id: Optional link to a stored customer
        customer_name: Billed name (denormalized, always present)
        customer_email: Billed email (denormalized, always present)
        customer_address: Billed address (denormalized, always present)
        event_date: Free-text event date
        event_type: Event type (wedding, corporate lunch...)
        subtotal: Sum of the line amounts
        tax_rate: Tax rate as a fraction (default 0.0825)
        tax_amount: subtotal * tax_rate
        total: subtotal + tax_amount
        status: draft, pending or paid
        notes: Free-text notes
        created_at: Creation time
        updated_at: Last update time

    Relationships:
        customer: Linked customer, if any
        line_items: Line items ordered by ``order``
    """

    __tablename__ = "invoices"

    # ------------------------------------------------------------
    # Identification
    # ------------------------------------------------------------
    number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        doc="Unique invoice number",
    )

    # ------------------------------------------------------------
    # Customer
    # ------------------------------------------------------------
    customer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="SET NULL"),
        nullable=True,
        doc="UUID of the linked customer",
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_address: Mapped[str] = mapped_column(Text, nullable=False)

    # ------------------------------------------------------------
    # Event
    # ------------------------------------------------------------
    event_date: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Amounts
    # ------------------------------------------------------------
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 4),
        nullable=False,
        default=Decimal("0.0825"),
    )

    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="draft",
        doc="draft, pending, paid",
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped[Optional["Customer"]] = relationship(
        "Customer",
        back_populates="invoices",
    )

    line_items: Mapped[List["LineItem"]] = relationship(
        "LineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LineItem.order",
        doc="Line items of the invoice",
    )

    __table_args__ = (
        Index("ix_invoices_created_at", "created_at"),
        CheckConstraint("subtotal >= 0", name="ck_invoices_subtotal_positive"),
        CheckConstraint("tax_rate >= 0", name="ck_invoices_tax_rate_positive"),
        CheckConstraint("tax_amount >= 0", name="ck_invoices_tax_amount_positive"),
        CheckConstraint("total >= 0", name="ck_invoices_total_positive"),
        CheckConstraint(
            "status IN ('draft', 'pending', 'paid')",
            name="ck_invoices_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.number}, total={self.total})>"


class LineItem(Base, UUIDMixin):
    """
    Model for invoice line items.

    Attributes:
        id: UUID primary key
        invoice_id: Owning invoice
        description: What is being billed
        quantity: Number of units (>= 1)
        rate: Price per unit
        amount: quantity * rate, as supplied by the service
        order: Position inside the invoice
    """

    __tablename__ = "line_items"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID of the owning invoice",
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Display and print position inside the invoice",
    )

    invoice: Mapped["Invoice"] = relationship(
        "Invoice",
        back_populates="line_items",
    )

    __table_args__ = (
        Index("ix_line_items_invoice_order", "invoice_id", "order"),
        CheckConstraint("quantity >= 1", name="ck_line_items_quantity_positive"),
        CheckConstraint("rate >= 0", name="ck_line_items_rate_positive"),
        CheckConstraint("amount >= 0", name="ck_line_items_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<LineItem(id={self.id}, description={self.description[:30]}, amount={self.amount})>"
