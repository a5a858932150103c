"""
Invoice store interface
Project: Catering Invoices

The InvoiceRepository is the only owner of customers, invoices and line
items. The service layer talks to it exclusively through this interface,
so the in-memory store and the SQL store are interchangeable.

Conventions shared by every implementation:
- Lookups return ``None`` (or ``False`` for deletes) when nothing matches;
  turning that into NotFoundError is the service's job.
- Records are returned as frozen Pydantic read schemas, never as live
  storage objects.
- Line items of an invoice are always ordered by ``order`` ascending.
- ``transaction()`` groups several calls so that they are all undone if
  the block raises.
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import List, Optional

from catering_invoices.schemas import (
    CustomerCreate,
    CustomerRead,
    InvoiceCreate,
    InvoiceRead,
    InvoiceUpdate,
    InvoiceWithLineItems,
    LineItemCreate,
    LineItemRead,
    LineItemUpdate,
)


class InvoiceRepository(ABC):
    """Abstract store for customers, invoices and line items."""

    # ------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------
    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """
        Group the calls made inside the block into one unit of work.

        Nested blocks join the outermost one.

        Usage:
            async with repository.transaction():
                invoice = await repository.create_invoice(data)
                await repository.create_line_item(item)
        """

    # ------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------
    @abstractmethod
    async def create_customer(self, data: CustomerCreate) -> CustomerRead:
        """Store a new customer with a generated id and creation time."""

    @abstractmethod
    async def list_customers(self) -> List[CustomerRead]:
        """All customers, in a stable order."""

    @abstractmethod
    async def get_customer(self, customer_id: uuid.UUID) -> Optional[CustomerRead]:
        """The customer, or None."""

    # ------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------
    @abstractmethod
    async def create_invoice(self, data: InvoiceCreate) -> InvoiceRead:
        """
        Store a new invoice.

        Raises:
            DuplicateError: ``data.number`` is already used
        """

    @abstractmethod
    async def list_invoices(self) -> List[InvoiceRead]:
        """All invoices, most recently created first."""

    @abstractmethod
    async def get_invoice(self, invoice_id: uuid.UUID) -> Optional[InvoiceWithLineItems]:
        """The invoice with its line items, or None."""

    @abstractmethod
    async def get_invoice_by_number(self, number: str) -> Optional[InvoiceWithLineItems]:
        """The invoice with the given number and its line items, or None."""

    @abstractmethod
    async def update_invoice(self, invoice_id: uuid.UUID, data: InvoiceUpdate) -> Optional[InvoiceRead]:
        """
        Merge the fields set in ``data`` and refresh ``updated_at``.

        Line items are left untouched.

        Raises:
            DuplicateError: the new number is used by another invoice
        """

    @abstractmethod
    async def delete_invoice(self, invoice_id: uuid.UUID) -> bool:
        """Delete the invoice and its line items. False if it did not exist."""

    # ------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------
    @abstractmethod
    async def create_line_item(self, data: LineItemCreate) -> LineItemRead:
        """
        Store a new line item.

        Raises:
            NotFoundError: ``data.invoice_id`` does not reference an invoice
        """

    @abstractmethod
    async def list_line_items_by_invoice(self, invoice_id: uuid.UUID) -> List[LineItemRead]:
        """Line items of the invoice ordered by ``order`` (empty if none)."""

    @abstractmethod
    async def update_line_item(self, line_item_id: uuid.UUID, data: LineItemUpdate) -> Optional[LineItemRead]:
        """Merge the fields set in ``data``. None if the line item does not exist."""

    @abstractmethod
    async def delete_line_items_by_invoice(self, invoice_id: uuid.UUID) -> None:
        """Delete every line item of the invoice (no-op if there are none)."""

    @abstractmethod
    async def delete_line_item(self, line_item_id: uuid.UUID) -> bool:
        """Delete one line item. False if it did not exist."""
