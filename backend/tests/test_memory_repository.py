"""
Tests for MemoryInvoiceRepository.
"""

import datetime
import uuid
from decimal import Decimal

import pytest

from catering_invoices.core.exceptions import DuplicateError, NotFoundError
from catering_invoices.repositories import MemoryInvoiceRepository
from catering_invoices.schemas import (
    CustomerCreate,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceUpdate,
    LineItemCreate,
    LineItemUpdate,
)


def _invoice(number="INV-2024-001", **overrides):
    data = {
        "number": number,
        "customer_name": "Jane Doe",
        "customer_email": "jane@example.com",
        "customer_address": "42 Elm Street",
    }
    data.update(overrides)
    return InvoiceCreate(**data)


def _line_item(invoice_id, order=0, description="Buffet", quantity=1, rate="10.00"):
    rate = Decimal(rate)
    return LineItemCreate(
        invoice_id=invoice_id,
        description=description,
        quantity=quantity,
        rate=rate,
        amount=rate * quantity,
        order=order,
    )


# ============================================================
# Customers
# ============================================================


class TestCustomers:
    """Tests for customer storage."""

    async def test_create_and_get(self, repository):
        customer = await repository.create_customer(
            CustomerCreate(name="Acme", email="a@acme.com", address="1 Main St")
        )

        assert customer.id is not None
        assert await repository.get_customer(customer.id) == customer
        assert await repository.list_customers() == [customer]

    async def test_get_unknown_returns_none(self, repository):
        assert await repository.get_customer(uuid.uuid4()) is None


# ============================================================
# Invoices
# ============================================================


class TestInvoices:
    """Tests for invoice storage."""

    async def test_create_applies_defaults(self, repository):
        invoice = await repository.create_invoice(_invoice())

        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.tax_rate == Decimal("0.0825")
        assert invoice.subtotal == Decimal("0.00")
        assert invoice.created_at == invoice.updated_at

    async def test_duplicate_number_rejected(self, repository):
        await repository.create_invoice(_invoice())

        with pytest.raises(DuplicateError):
            await repository.create_invoice(_invoice())

    async def test_list_newest_first(self, repository):
        first = await repository.create_invoice(_invoice("INV-2024-001"))
        second = await repository.create_invoice(_invoice("INV-2024-002"))
        third = await repository.create_invoice(_invoice("INV-2024-003"))

        listed = await repository.list_invoices()

        assert [i.id for i in listed] == [third.id, second.id, first.id]

    async def test_list_ties_break_on_insertion(self):
        """With a frozen clock the later insertion comes first."""
        instant = datetime.datetime(2024, 5, 1, tzinfo=datetime.timezone.utc)
        repository = MemoryInvoiceRepository(clock=lambda: instant)
        first = await repository.create_invoice(_invoice("INV-2024-001"))
        second = await repository.create_invoice(_invoice("INV-2024-002"))

        listed = await repository.list_invoices()

        assert [i.id for i in listed] == [second.id, first.id]

    async def test_get_by_number(self, repository):
        invoice = await repository.create_invoice(_invoice("INV-2024-042"))

        found = await repository.get_invoice_by_number("INV-2024-042")

        assert found.id == invoice.id
        assert found.line_items == []
        assert await repository.get_invoice_by_number("INV-2024-999") is None

    async def test_update_merges_and_refreshes_timestamp(self, repository):
        invoice = await repository.create_invoice(_invoice(notes="first"))

        updated = await repository.update_invoice(
            invoice.id, InvoiceUpdate(status=InvoiceStatus.PAID)
        )

        assert updated.status == InvoiceStatus.PAID
        assert updated.notes == "first"
        assert updated.customer_name == invoice.customer_name
        assert updated.created_at == invoice.created_at
        assert updated.updated_at > invoice.updated_at

    async def test_update_can_clear_nullable_field(self, repository):
        invoice = await repository.create_invoice(_invoice(notes="first"))

        updated = await repository.update_invoice(invoice.id, InvoiceUpdate(notes=None))

        assert updated.notes is None

    async def test_update_unknown_returns_none(self, repository):
        assert await repository.update_invoice(uuid.uuid4(), InvoiceUpdate(notes="x")) is None

    async def test_update_to_existing_number_rejected(self, repository):
        await repository.create_invoice(_invoice("INV-2024-001"))
        second = await repository.create_invoice(_invoice("INV-2024-002"))

        with pytest.raises(DuplicateError):
            await repository.update_invoice(second.id, InvoiceUpdate(number="INV-2024-001"))

    async def test_delete_cascades_to_line_items(self, repository):
        invoice = await repository.create_invoice(_invoice())
        other = await repository.create_invoice(_invoice("INV-2024-002"))
        await repository.create_line_item(_line_item(invoice.id))
        await repository.create_line_item(_line_item(invoice.id, order=1))
        kept = await repository.create_line_item(_line_item(other.id))

        assert await repository.delete_invoice(invoice.id) is True

        assert await repository.get_invoice(invoice.id) is None
        assert await repository.list_line_items_by_invoice(invoice.id) == []
        assert await repository.list_line_items_by_invoice(other.id) == [kept]

    async def test_delete_unknown_returns_false(self, repository):
        assert await repository.delete_invoice(uuid.uuid4()) is False


# ============================================================
# Line items
# ============================================================


class TestLineItems:
    """Tests for line item storage."""

    async def test_requires_existing_invoice(self, repository):
        with pytest.raises(NotFoundError):
            await repository.create_line_item(_line_item(uuid.uuid4()))

    async def test_listed_by_order(self, repository):
        invoice = await repository.create_invoice(_invoice())
        for order, description in [(2, "c"), (0, "a"), (1, "b")]:
            await repository.create_line_item(_line_item(invoice.id, order=order, description=description))

        items = await repository.list_line_items_by_invoice(invoice.id)
        detail = await repository.get_invoice(invoice.id)

        assert [i.description for i in items] == ["a", "b", "c"]
        assert [i.description for i in detail.line_items] == ["a", "b", "c"]

    async def test_update_line_item(self, repository):
        invoice = await repository.create_invoice(_invoice())
        item = await repository.create_line_item(_line_item(invoice.id))

        updated = await repository.update_line_item(item.id, LineItemUpdate(description="Brunch"))

        assert updated.description == "Brunch"
        assert updated.amount == item.amount
        assert await repository.update_line_item(uuid.uuid4(), LineItemUpdate(order=3)) is None

    async def test_delete_line_items(self, repository):
        invoice = await repository.create_invoice(_invoice())
        first = await repository.create_line_item(_line_item(invoice.id))
        await repository.create_line_item(_line_item(invoice.id, order=1))

        assert await repository.delete_line_item(first.id) is True
        assert await repository.delete_line_item(first.id) is False
        assert len(await repository.list_line_items_by_invoice(invoice.id)) == 1

        await repository.delete_line_items_by_invoice(invoice.id)
        await repository.delete_line_items_by_invoice(invoice.id)

        assert await repository.list_line_items_by_invoice(invoice.id) == []


# ============================================================
# Transactions
# ============================================================


class TestTransactions:
    """Tests for transaction() rollback."""

    async def test_failure_restores_previous_state(self, repository):
        existing = await repository.create_invoice(_invoice("INV-2024-001"))

        with pytest.raises(RuntimeError):
            async with repository.transaction():
                invoice = await repository.create_invoice(_invoice("INV-2024-002"))
                await repository.create_line_item(_line_item(invoice.id))
                await repository.delete_invoice(existing.id)
                raise RuntimeError("boom")

        listed = await repository.list_invoices()
        assert [i.id for i in listed] == [existing.id]
        assert await repository.get_invoice_by_number("INV-2024-002") is None

    async def test_nested_blocks_join_outer(self, repository):
        with pytest.raises(RuntimeError):
            async with repository.transaction():
                async with repository.transaction():
                    await repository.create_invoice(_invoice())
                raise RuntimeError("boom")

        assert await repository.list_invoices() == []

    async def test_success_keeps_changes(self, repository):
        async with repository.transaction():
            await repository.create_invoice(_invoice())

        assert len(await repository.list_invoices()) == 1
