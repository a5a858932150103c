"""
In-memory invoice store
Project: Catering Invoices

Keeps customers, invoices and line items in dictionaries keyed by UUID.
This is the default backend; its contents are lost on restart.

None of the methods awaits anything internally, so each one runs to
completion without yielding to the event loop and is atomic for other
coroutines. ``transaction()`` snapshots the three maps and restores them
if the block raises; transactions are serialized by one asyncio.Lock.
"""

import asyncio
import datetime
import logging
import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, Callable, Dict, List, Optional

from catering_invoices.core.exceptions import DuplicateError, NotFoundError
from catering_invoices.models.mixins import utcnow
from catering_invoices.repositories.base import InvoiceRepository
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

logger = logging.getLogger(__name__)


class MemoryInvoiceRepository(InvoiceRepository):
    """
    Invoice store backed by Python dictionaries.

    Args:
        clock: Returns the current time; defaults to timezone-aware UTC now.
    """

    def __init__(self, clock: Optional[Callable[[], datetime.datetime]] = None) -> None:
        self._clock = clock or utcnow
        self._customers: Dict[uuid.UUID, CustomerRead] = {}
        self._invoices: Dict[uuid.UUID, InvoiceRead] = {}
        self._line_items: Dict[uuid.UUID, LineItemRead] = {}
        self._lock = asyncio.Lock()
        self._in_transaction: ContextVar[bool] = ContextVar(
            f"memory_repository_tx_{id(self)}", default=False
        )

    # ------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._in_transaction.get():
            yield
            return

        async with self._lock:
            snapshot = (
                dict(self._customers),
                dict(self._invoices),
                dict(self._line_items),
            )
            token = self._in_transaction.set(True)
            try:
                yield
            except BaseException:
                self._customers, self._invoices, self._line_items = snapshot
                logger.warning("Transaction rolled back, in-memory store restored")
                raise
            finally:
                self._in_transaction.reset(token)

    # ------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------
    async def create_customer(self, data: CustomerCreate) -> CustomerRead:
        customer = CustomerRead(
            id=uuid.uuid4(),
            created_at=self._clock(),
            **data.model_dump(),
        )
        self._customers[customer.id] = customer
        return customer

    async def list_customers(self) -> List[CustomerRead]:
        return list(self._customers.values())

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[CustomerRead]:
        return self._customers.get(customer_id)

    # ------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------
    def _find_by_number(self, number: str) -> Optional[InvoiceRead]:
        for invoice in self._invoices.values():
            if invoice.number == number:
                return invoice
        return None

    def _with_line_items(self, invoice: InvoiceRead) -> InvoiceWithLineItems:
        return InvoiceWithLineItems(
            **invoice.model_dump(),
            line_items=self._line_items_of(invoice.id),
        )

    def _line_items_of(self, invoice_id: uuid.UUID) -> List[LineItemRead]:
        items = [item for item in self._line_items.values() if item.invoice_id == invoice_id]
        # sorted() is stable: equal orders keep insertion order
        return sorted(items, key=lambda item: item.order)

    async def create_invoice(self, data: InvoiceCreate) -> InvoiceRead:
        if self._find_by_number(data.number) is not None:
            raise DuplicateError(f"Invoice number {data.number} already exists")

        now = self._clock()
        invoice = InvoiceRead(
            id=uuid.uuid4(),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._invoices[invoice.id] = invoice
        logger.debug("Invoice %s stored with id %s", invoice.number, invoice.id)
        return invoice

    async def list_invoices(self) -> List[InvoiceRead]:
        # Newest first; on equal timestamps the later insertion wins
        indexed = list(enumerate(self._invoices.values()))
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [invoice for _, invoice in indexed]

    async def get_invoice(self, invoice_id: uuid.UUID) -> Optional[InvoiceWithLineItems]:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            return None
        return self._with_line_items(invoice)

    async def get_invoice_by_number(self, number: str) -> Optional[InvoiceWithLineItems]:
        invoice = self._find_by_number(number)
        if invoice is None:
            return None
        return self._with_line_items(invoice)

    async def update_invoice(self, invoice_id: uuid.UUID, data: InvoiceUpdate) -> Optional[InvoiceRead]:
        existing = self._invoices.get(invoice_id)
        if existing is None:
            return None

        changes = data.model_dump(exclude_unset=True)
        new_number = changes.get("number")
        if new_number is not None and new_number != existing.number:
            if self._find_by_number(new_number) is not None:
                raise DuplicateError(f"Invoice number {new_number} already exists")

        changes["updated_at"] = self._clock()
        updated = existing.model_copy(update=changes)
        self._invoices[invoice_id] = updated
        return updated

    async def delete_invoice(self, invoice_id: uuid.UUID) -> bool:
        if self._invoices.pop(invoice_id, None) is None:
            return False
        await self.delete_line_items_by_invoice(invoice_id)
        return True

    # ------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------
    async def create_line_item(self, data: LineItemCreate) -> LineItemRead:
        if data.invoice_id not in self._invoices:
            raise NotFoundError(f"Invoice {data.invoice_id} not found")

        line_item = LineItemRead(id=uuid.uuid4(), **data.model_dump())
        self._line_items[line_item.id] = line_item
        return line_item

    async def list_line_items_by_invoice(self, invoice_id: uuid.UUID) -> List[LineItemRead]:
        return self._line_items_of(invoice_id)

    async def update_line_item(self, line_item_id: uuid.UUID, data: LineItemUpdate) -> Optional[LineItemRead]:
        existing = self._line_items.get(line_item_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
        self._line_items[line_item_id] = updated
        return updated

    async def delete_line_items_by_invoice(self, invoice_id: uuid.UUID) -> None:
        for line_item_id in [key for key, item in self._line_items.items() if item.invoice_id == invoice_id]:
            del self._line_items[line_item_id]

    async def delete_line_item(self, line_item_id: uuid.UUID) -> bool:
        return self._line_items.pop(line_item_id, None) is not None
