"""
SQL invoice store - SQLAlchemy 2.0 Async
Project: Catering Invoices

Implements InvoiceRepository on top of the ORM models. Outside a
``transaction()`` block every call runs in its own short session and
commits on success; inside a block all calls share one session and the
whole block commits or rolls back together.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import AsyncIterator, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from catering_invoices.core.exceptions import AppException, DuplicateError, InternalError, NotFoundError
from catering_invoices.models import Customer, Invoice, LineItem
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


class SqlInvoiceRepository(InvoiceRepository):
    """
    Invoice store backed by a relational database.

    Args:
        session_factory: Factory returned by ``create_session_factory``
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._current: ContextVar[Optional[AsyncSession]] = ContextVar(
            f"sql_repository_session_{id(self)}", default=None
        )

    # ------------------------------------------------------------
    # Sessions and transactions
    # ------------------------------------------------------------
    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """The transaction's session, or a fresh one committed on exit."""
        session = self._current.get()
        if session is not None:
            yield session
            return

        async with self.transaction():
            yield self._current.get()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._current.get() is not None:
            yield
            return

        async with self._session_factory() as session:
            token = self._current.set(session)
            try:
                async with session.begin():
                    yield
            except AppException:
                logger.warning("Transaction rolled back")
                raise
            except SQLAlchemyError as e:
                logger.error("Database error, transaction rolled back: %s", e, exc_info=True)
                raise InternalError("Database operation failed") from e
            finally:
                self._current.reset(token)

    # ------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------
    async def create_customer(self, data: CustomerCreate) -> CustomerRead:
        async with self._session() as session:
            customer = Customer(**data.model_dump())
            session.add(customer)
            await session.flush()
            return CustomerRead.model_validate(customer)

    async def list_customers(self) -> List[CustomerRead]:
        async with self._session() as session:
            result = await session.execute(
                select(Customer).order_by(Customer.created_at, Customer.id)
            )
            return [CustomerRead.model_validate(c) for c in result.scalars().all()]

    async def get_customer(self, customer_id: uuid.UUID) -> Optional[CustomerRead]:
        async with self._session() as session:
            customer = await session.get(Customer, customer_id)
            return CustomerRead.model_validate(customer) if customer else None

    # ------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------
    async def _number_taken(self, session: AsyncSession, number: str) -> bool:
        result = await session.execute(select(Invoice.id).where(Invoice.number == number))
        return result.first() is not None

    async def _flush_unique(self, session: AsyncSession, number: str) -> None:
        try:
            await session.flush()
        except IntegrityError as e:
            raise DuplicateError(f"Invoice number {number} already exists") from e

    async def _load_with_line_items(self, session: AsyncSession, *criteria) -> Optional[InvoiceWithLineItems]:
        stmt = (
            select(Invoice)
            .where(*criteria)
            .options(selectinload(Invoice.line_items))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        invoice = result.scalar_one_or_none()
        if invoice is None:
            return None
        return InvoiceWithLineItems.model_validate(invoice)

    async def create_invoice(self, data: InvoiceCreate) -> InvoiceRead:
        async with self._session() as session:
            if await self._number_taken(session, data.number):
                raise DuplicateError(f"Invoice number {data.number} already exists")

            values = data.model_dump()
            values["status"] = data.status.value
            now = utcnow()
            invoice = Invoice(**values, created_at=now, updated_at=now)
            session.add(invoice)
            await self._flush_unique(session, data.number)
            logger.debug("Invoice %s stored with id %s", invoice.number, invoice.id)
            return InvoiceRead.model_validate(invoice)

    async def list_invoices(self) -> List[InvoiceRead]:
        async with self._session() as session:
            result = await session.execute(
                select(Invoice).order_by(Invoice.created_at.desc(), Invoice.number.desc())
            )
            return [InvoiceRead.model_validate(i) for i in result.scalars().all()]

    async def get_invoice(self, invoice_id: uuid.UUID) -> Optional[InvoiceWithLineItems]:
        async with self._session() as session:
            return await self._load_with_line_items(session, Invoice.id == invoice_id)

    async def get_invoice_by_number(self, number: str) -> Optional[InvoiceWithLineItems]:
        async with self._session() as session:
            return await self._load_with_line_items(session, Invoice.number == number)

    async def update_invoice(self, invoice_id: uuid.UUID, data: InvoiceUpdate) -> Optional[InvoiceRead]:
        async with self._session() as session:
            invoice = await session.get(Invoice, invoice_id)
            if invoice is None:
                return None

            changes = data.model_dump(exclude_unset=True)
            new_number = changes.get("number")
            if new_number is not None and new_number != invoice.number:
                if await self._number_taken(session, new_number):
                    raise DuplicateError(f"Invoice number {new_number} already exists")

            if "status" in changes:
                changes["status"] = changes["status"].value
            for field, value in changes.items():
                setattr(invoice, field, value)
            invoice.updated_at = utcnow()

            await self._flush_unique(session, invoice.number)
            return InvoiceRead.model_validate(invoice)

    async def delete_invoice(self, invoice_id: uuid.UUID) -> bool:
        async with self._session() as session:
            await session.execute(delete(LineItem).where(LineItem.invoice_id == invoice_id))
            result = await session.execute(delete(Invoice).where(Invoice.id == invoice_id))
            return result.rowcount > 0

    # ------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------
    async def create_line_item(self, data: LineItemCreate) -> LineItemRead:
        async with self._session() as session:
            if await session.get(Invoice, data.invoice_id) is None:
                raise NotFoundError(f"Invoice {data.invoice_id} not found")

            line_item = LineItem(**data.model_dump())
            session.add(line_item)
            await session.flush()
            return LineItemRead.model_validate(line_item)

    async def list_line_items_by_invoice(self, invoice_id: uuid.UUID) -> List[LineItemRead]:
        async with self._session() as session:
            result = await session.execute(
                select(LineItem)
                .where(LineItem.invoice_id == invoice_id)
                .order_by(LineItem.order)
            )
            return [LineItemRead.model_validate(li) for li in result.scalars().all()]

    async def update_line_item(self, line_item_id: uuid.UUID, data: LineItemUpdate) -> Optional[LineItemRead]:
        async with self._session() as session:
            line_item = await session.get(LineItem, line_item_id)
            if line_item is None:
                return None
            for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(line_item, field, value)
            await session.flush()
            return LineItemRead.model_validate(line_item)

    async def delete_line_items_by_invoice(self, invoice_id: uuid.UUID) -> None:
        async with self._session() as session:
            await session.execute(delete(LineItem).where(LineItem.invoice_id == invoice_id))

    async def delete_line_item(self, line_item_id: uuid.UUID) -> bool:
        async with self._session() as session:
            result = await session.execute(delete(LineItem).where(LineItem.id == line_item_id))
            return result.rowcount > 0
