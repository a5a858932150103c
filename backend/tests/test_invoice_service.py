"""
Unit tests for InvoiceService.

The service runs on the in-memory store with a ticking clock and a number
generator pinned to 2024.
"""

import asyncio
import uuid
from decimal import Decimal

import pytest

from catering_invoices.core.exceptions import (
    BusinessValidationError,
    DuplicateError,
    NotFoundError,
)
from catering_invoices.schemas import (
    CustomerCreate,
    InvoicePayload,
    InvoiceStatus,
    InvoiceUpdatePayload,
)


# ============================================================
# Creation
# ============================================================


class TestCreateInvoice:
    """Tests for create_invoice_with_line_items."""

    async def test_totals_and_line_order(self, service, invoice_payload):
        invoice_payload["lineItems"].append(
            {"description": "Staff", "quantity": 3, "rate": "40"}
        )

        invoice = await service.create_invoice_with_line_items(
            InvoicePayload.model_validate(invoice_payload)
        )

        assert [item.order for item in invoice.line_items] == [0, 1, 2]
        assert [item.description for item in invoice.line_items] == [
            "Buffet dinner", "Dessert table", "Staff",
        ]
        assert [item.amount for item in invoice.line_items] == [
            Decimal("250.00"), Decimal("120.50"), Decimal("120.00"),
        ]
        assert invoice.subtotal == Decimal("490.50")
        assert invoice.tax_amount == Decimal("40.47")
        assert invoice.total == Decimal("530.97")

    async def test_reference_example(self, service):
        payload = InvoicePayload(
            customer_name="Jane Doe",
            customer_email="jane@example.com",
            customer_address="42 Elm Street",
            line_items=[{"description": "Buffet", "quantity": 10, "rate": "25.00"}],
        )

        invoice = await service.create_invoice_with_line_items(payload)

        assert invoice.tax_rate == Decimal("0.0825")
        assert (invoice.subtotal, invoice.tax_amount, invoice.total) == (
            Decimal("250.00"), Decimal("20.63"), Decimal("270.63"),
        )

    async def test_generates_number_when_missing(self, service, invoice_payload):
        first = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))
        second = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        assert first.number == "INV-2024-001"
        assert second.number == "INV-2024-002"

    async def test_client_amounts_are_ignored(self, service, invoice_payload):
        invoice_payload["lineItems"] = [
            {"description": "Buffet", "quantity": 2, "rate": "10.00", "amount": "999.99"}
        ]

        invoice = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        assert invoice.line_items[0].amount == Decimal("20.00")
        assert invoice.subtotal == Decimal("20.00")

    async def test_no_line_items(self, service, invoice_payload):
        invoice_payload["lineItems"] = []

        invoice = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        assert invoice.line_items == []
        assert invoice.total == Decimal("0.00")

    async def test_duplicate_number(self, service, invoice_payload, repository):
        invoice_payload["number"] = "CUSTOM-1"
        await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        with pytest.raises(DuplicateError):
            await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        assert len(await repository.list_invoices()) == 1

    async def test_failed_line_item_rolls_back_invoice(self, service, repository, invoice_payload, monkeypatch):
        calls = []
        original = repository.create_line_item

        async def failing_create_line_item(data):
            calls.append(data)
            if len(calls) == 2:
                raise RuntimeError("storage failure")
            return await original(data)

        monkeypatch.setattr(repository, "create_line_item", failing_create_line_item)

        with pytest.raises(RuntimeError):
            await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        assert await repository.list_invoices() == []
        assert len(calls) == 2


# ============================================================
# Customer resolution
# ============================================================


class TestCustomerResolution:
    """Tests for the denormalized customer fields."""

    async def test_fields_copied_from_customer(self, service):
        customer = await service.create_customer(
            CustomerCreate(name="Acme Corp", email="billing@acme.com", address="1 Main St")
        )

        invoice = await service.create_invoice_with_line_items(
            InvoicePayload(customer_id=customer.id, customer_name="Acme Events")
        )

        assert invoice.customer_id == customer.id
        assert invoice.customer_name == "Acme Events"
        assert invoice.customer_email == "billing@acme.com"
        assert invoice.customer_address == "1 Main St"

    async def test_unknown_customer(self, service, repository):
        with pytest.raises(NotFoundError):
            await service.create_invoice_with_line_items(InvoicePayload(customer_id=uuid.uuid4()))

        assert await repository.list_invoices() == []

    async def test_missing_fields_without_customer(self, service, number_generator):
        with pytest.raises(BusinessValidationError) as exc_info:
            await service.create_invoice_with_line_items(InvoicePayload(customer_name="Jane"))

        locs = [error["loc"] for error in exc_info.value.extra["errors"]]
        assert locs == [["body", "customerEmail"], ["body", "customerAddress"]]
        # Validation happens before a number is consumed
        assert number_generator.peek == 1


# ============================================================
# Update
# ============================================================


class TestReplaceInvoiceLineItems:
    """Tests for replace_invoice_line_items."""

    async def _create(self, service, invoice_payload):
        return await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

    async def test_replaces_line_items_and_totals(self, service, invoice_payload):
        invoice = await self._create(service, invoice_payload)

        updated = await service.replace_invoice_line_items(
            invoice.id,
            InvoiceUpdatePayload.model_validate(
                {"lineItems": [{"description": "Brunch", "quantity": 4, "rate": "12.50"}]}
            ),
        )

        assert [item.description for item in updated.line_items] == ["Brunch"]
        assert updated.line_items[0].order == 0
        assert updated.subtotal == Decimal("50.00")
        assert updated.tax_amount == Decimal("4.13")
        assert updated.total == Decimal("54.13")
        assert updated.customer_name == invoice.customer_name
        assert updated.updated_at > invoice.updated_at

    async def test_fields_only_keeps_line_items(self, service, invoice_payload):
        invoice = await self._create(service, invoice_payload)

        updated = await service.replace_invoice_line_items(
            invoice.id, InvoiceUpdatePayload.model_validate({"status": "paid"})
        )

        assert updated.status == InvoiceStatus.PAID
        assert [item.id for item in updated.line_items] == [item.id for item in invoice.line_items]
        assert updated.total == invoice.total

    async def test_tax_rate_change_recomputes_totals(self, service, invoice_payload):
        invoice = await self._create(service, invoice_payload)

        updated = await service.replace_invoice_line_items(
            invoice.id, InvoiceUpdatePayload.model_validate({"taxRate": "0.10"})
        )

        assert updated.subtotal == Decimal("370.50")
        assert updated.tax_amount == Decimal("37.05")
        assert updated.total == Decimal("407.55")

    async def test_empty_line_items_clears_them(self, service, invoice_payload):
        invoice = await self._create(service, invoice_payload)

        updated = await service.replace_invoice_line_items(
            invoice.id, InvoiceUpdatePayload.model_validate({"lineItems": []})
        )

        assert updated.line_items == []
        assert updated.total == Decimal("0.00")

    async def test_unknown_invoice(self, service):
        with pytest.raises(NotFoundError):
            await service.replace_invoice_line_items(
                uuid.uuid4(), InvoiceUpdatePayload.model_validate({"notes": "x"})
            )

    async def test_concurrent_updates_keep_totals_consistent(self, service, repository, invoice_payload, monkeypatch):
        """A tax-rate change racing a line item replacement uses the replaced items."""
        invoice = await self._create(service, invoice_payload)
        original = repository.delete_line_items_by_invoice

        async def slow_delete(invoice_id):
            await asyncio.sleep(0)
            await original(invoice_id)

        monkeypatch.setattr(repository, "delete_line_items_by_invoice", slow_delete)

        await asyncio.gather(
            service.replace_invoice_line_items(
                invoice.id,
                InvoiceUpdatePayload.model_validate(
                    {"lineItems": [{"description": "Brunch", "quantity": 4, "rate": "12.50"}]}
                ),
            ),
            service.replace_invoice_line_items(
                invoice.id, InvoiceUpdatePayload.model_validate({"taxRate": "0.10"})
            ),
        )

        current = await service.get_invoice(invoice.id)
        assert [item.description for item in current.line_items] == ["Brunch"]
        assert current.tax_rate == Decimal("0.1000")
        assert current.subtotal == Decimal("50.00")
        assert current.total == Decimal("55.00")

    async def test_failure_keeps_previous_line_items(self, service, repository, invoice_payload, monkeypatch):
        invoice = await self._create(service, invoice_payload)

        async def failing_create_line_item(data):
            raise RuntimeError("storage failure")

        monkeypatch.setattr(repository, "create_line_item", failing_create_line_item)

        with pytest.raises(RuntimeError):
            await service.replace_invoice_line_items(
                invoice.id,
                InvoiceUpdatePayload.model_validate(
                    {"notes": "changed", "lineItems": [{"description": "X", "quantity": 1, "rate": "1"}]}
                ),
            )

        current = await service.get_invoice(invoice.id)
        assert current == invoice


# ============================================================
# Queries and deletion
# ============================================================


class TestQueriesAndDelete:
    """Tests for lookups and delete_invoice_cascade."""

    async def test_get_unknown_invoice(self, service):
        with pytest.raises(NotFoundError):
            await service.get_invoice(uuid.uuid4())

    async def test_get_by_number(self, service, invoice_payload):
        invoice = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        found = await service.get_invoice_by_number(invoice.number)

        assert found == invoice

    async def test_delete_cascade(self, service, repository, invoice_payload):
        invoice = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))

        await service.delete_invoice_cascade(invoice.id)

        assert await repository.list_line_items_by_invoice(invoice.id) == []
        with pytest.raises(NotFoundError):
            await service.delete_invoice_cascade(invoice.id)

    async def test_numbers_are_not_reused_after_delete(self, service, invoice_payload):
        invoice = await service.create_invoice_with_line_items(InvoicePayload.model_validate(invoice_payload))
        await service.delete_invoice_cascade(invoice.id)

        assert service.generate_invoice_number() == "INV-2024-002"
