"""
Service layer for invoicing
Project: Catering Invoices

Business logic on top of the invoice store: number assignment, money
totals, customer resolution and the multi-step create/replace workflows.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catering_invoices.core.exceptions import BusinessValidationError, NotFoundError
from catering_invoices.repositories.base import InvoiceRepository
from catering_invoices.schemas import (
    DEFAULT_TAX_RATE,
    CustomerCreate,
    CustomerRead,
    InvoiceCreate,
    InvoicePayload,
    InvoiceRead,
    InvoiceUpdate,
    InvoiceUpdatePayload,
    InvoiceWithLineItems,
    LineItemCreate,
    LineItemInput,
)
from catering_invoices.services.invoice_number import InvoiceNumberGenerator
from catering_invoices.services.totals import compute_line_amount, compute_totals

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# (invoice attribute, JSON name, customer attribute) of the denormalized customer fields
_CUSTOMER_FIELDS = (
    ("customer_name", "customerName", "name"),
    ("customer_email", "customerEmail", "email"),
    ("customer_address", "customerAddress", "address"),
)


def _validated(model: Type[ModelT], values: Dict[str, Any]) -> ModelT:
    """Build ``model`` from ``values``, reporting failures as BusinessValidationError."""
    try:
        return model.model_validate(values)
    except PydanticValidationError as e:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        raise BusinessValidationError(
            f"Invalid {model.__name__} data",
            extra={"errors": errors},
        ) from e


class InvoiceService:
    """
    Service for invoice and customer operations.

    Depends only on the InvoiceRepository interface, never on FastAPI or on
    a specific storage backend.

    Implements:
    - Automatic invoice numbering (INV-YYYY-NNN)
    - Line amounts and invoice totals computed server-side
    - Invoice creation and line item replacement as single transactions
    - Cascade deletion

    Args:
        repository: Invoice store
        number_generator: Sequence used when an invoice has no number
        default_tax_rate: Tax rate used when a new invoice does not specify one
    """

    def __init__(
        self,
        repository: InvoiceRepository,
        number_generator: InvoiceNumberGenerator,
        default_tax_rate: Decimal = DEFAULT_TAX_RATE,
    ) -> None:
        self.repository = repository
        self.number_generator = number_generator
        self.default_tax_rate = default_tax_rate

    # ------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------
    async def list_customers(self) -> List[CustomerRead]:
        """All customers."""
        return await self.repository.list_customers()

    async def get_customer(self, customer_id: uuid.UUID) -> CustomerRead:
        """
        Retrieve a customer by id.

        Raises:
            NotFoundError: Customer not found
        """
        customer = await self.repository.get_customer(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    async def create_customer(self, data: CustomerCreate) -> CustomerRead:
        """Create a new customer."""
        customer = await self.repository.create_customer(data)
        logger.info("Customer %s created", customer.id)
        return customer

    # ------------------------------------------------------------
    # Invoice numbers
    # ------------------------------------------------------------
    def generate_invoice_number(self) -> str:
        """
        Consume and return the next invoice number.

        Returns:
            str: Number in the format INV-YYYY-NNN
        """
        return self.number_generator.next_number()

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    async def list_invoices(self) -> List[InvoiceRead]:
        """All invoices without line items, most recent first."""
        return await self.repository.list_invoices()

    async def get_invoice(self, invoice_id: uuid.UUID) -> InvoiceWithLineItems:
        """
        Retrieve an invoice with its line items.

        Raises:
            NotFoundError: Invoice not found
        """
        invoice = await self.repository.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    async def get_invoice_by_number(self, number: str) -> InvoiceWithLineItems:
        """
        Retrieve an invoice by number.

        Raises:
            NotFoundError: Invoice not found
        """
        invoice = await self.repository.get_invoice_by_number(number)
        if invoice is None:
            raise NotFoundError(f"Invoice {number} not found")
        return invoice

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------
    @staticmethod
    def _line_item_values(invoice_id: uuid.UUID, items: List[LineItemInput]) -> List[LineItemCreate]:
        """Line items ready to store: amount recomputed, order = position in the list."""
        return [
            _validated(
                LineItemCreate,
                {
                    "invoice_id": invoice_id,
                    "description": item.description,
                    "quantity": item.quantity,
                    "rate": item.rate,
                    "amount": compute_line_amount(item.quantity, item.rate),
                    "order": index,
                },
            )
            for index, item in enumerate(items)
        ]

    @staticmethod
    def _totals_values(amounts: List[Decimal], tax_rate: Decimal) -> Dict[str, Decimal]:
        totals = compute_totals(amounts, tax_rate)
        return {
            "subtotal": totals.subtotal,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
        }

    async def _resolve_customer_fields(self, payload: InvoicePayload) -> Dict[str, Any]:
        """
        Denormalized customer fields for a new invoice.

        Fields missing from the payload are copied from the linked customer.
        Without a linked customer, all three are required.

        Raises:
            NotFoundError: customerId does not reference a stored customer
            BusinessValidationError: a customer field is still missing
        """
        customer = None
        if payload.customer_id is not None:
            customer = await self.get_customer(payload.customer_id)

        values: Dict[str, Any] = {}
        errors = []
        for attr, json_name, customer_attr in _CUSTOMER_FIELDS:
            value = getattr(payload, attr)
            if value is None and customer is not None:
                value = getattr(customer, customer_attr)
            if value is None:
                errors.append({
                    "loc": ["body", json_name],
                    "msg": "Field required when no customerId is given",
                    "type": "missing",
                })
            values[attr] = value

        if errors:
            raise BusinessValidationError("Invalid invoice data", extra={"errors": errors})
        return values

    # ------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------
    async def create_invoice_with_line_items(self, payload: InvoicePayload) -> InvoiceWithLineItems:
        """
        Create an invoice together with its line items.

        Steps:
        1. Resolve the customer fields (fails before anything is written)
        2. Compute each line amount and the invoice totals
        3. Assign a generated number if the payload has none
        4. In one transaction: store the invoice, then each line item with
           ``order`` equal to its position in the payload
        5. Return the invoice as re-read from the store

        Args:
            payload: Invoice fields and line items

        Returns:
            InvoiceWithLineItems: The stored invoice

        Raises:
            NotFoundError: customerId does not reference a stored customer
            BusinessValidationError: Missing customer fields
            DuplicateError: The number is already used
        """
        customer_values = await self._resolve_customer_fields(payload)

        tax_rate = payload.tax_rate if payload.tax_rate is not None else self.default_tax_rate
        amounts = [compute_line_amount(item.quantity, item.rate) for item in payload.line_items]

        number = payload.number or self.generate_invoice_number()
        invoice_data = _validated(
            InvoiceCreate,
            {
                "number": number,
                "customer_id": payload.customer_id,
                **customer_values,
                "event_date": payload.event_date,
                "event_type": payload.event_type,
                "tax_rate": tax_rate,
                "status": payload.status,
                "notes": payload.notes,
                **self._totals_values(amounts, tax_rate),
            },
        )

        async with self.repository.transaction():
            invoice = await self.repository.create_invoice(invoice_data)
            for line_item in self._line_item_values(invoice.id, payload.line_items):
                await self.repository.create_line_item(line_item)

        logger.info(
            "Invoice %s created with %d line items, total %s",
            invoice.number, len(payload.line_items), invoice.total,
        )
        return await self.get_invoice(invoice.id)

    async def replace_invoice_line_items(
        self,
        invoice_id: uuid.UUID,
        payload: InvoiceUpdatePayload,
    ) -> InvoiceWithLineItems:
        """
        Update an invoice and, when given, replace all of its line items.

        Only the fields present in the payload change. If ``lineItems`` is
        present, every existing line item is deleted and the new ones are
        stored with ``order`` equal to their position. Totals are
        recomputed whenever the line items or the tax rate change.

        Both steps run in one transaction: a failure leaves the invoice and
        its line items as they were.

        Args:
            invoice_id: UUID of the invoice
            payload: Fields to change and optional replacement line items

        Returns:
            InvoiceWithLineItems: The updated invoice

        Raises:
            NotFoundError: Invoice or referenced customer not found
            DuplicateError: The new number is already used
        """
        changes = payload.invoice_fields().model_dump(exclude_unset=True)
        if changes.get("customer_id") is not None:
            await self.get_customer(changes["customer_id"])

        replacement = None
        if payload.line_items is not None:
            replacement = self._line_item_values(invoice_id, payload.line_items)

        async with self.repository.transaction():
            # Totals are computed from the state read inside the transaction
            existing = await self.get_invoice(invoice_id)
            if replacement is not None or "tax_rate" in changes:
                amounts = (
                    [item.amount for item in replacement]
                    if replacement is not None
                    else [item.amount for item in existing.line_items]
                )
                tax_rate = changes.get("tax_rate", existing.tax_rate)
                changes.update(self._totals_values(amounts, tax_rate))

            update = _validated(InvoiceUpdate, changes)
            updated = await self.repository.update_invoice(invoice_id, update)
            if updated is None:
                raise NotFoundError(f"Invoice {invoice_id} not found")

            if replacement is not None:
                await self.repository.delete_line_items_by_invoice(invoice_id)
                for line_item in replacement:
                    await self.repository.create_line_item(line_item)

        logger.info(
            "Invoice %s updated (%s)%s",
            updated.number,
            ", ".join(sorted(changes)) or "no field changes",
            f", {len(replacement)} line items replaced" if replacement is not None else "",
        )
        return await self.get_invoice(invoice_id)

    async def delete_invoice_cascade(self, invoice_id: uuid.UUID) -> None:
        """
        Delete an invoice and all of its line items.

        Raises:
            NotFoundError: Invoice not found
        """
        if not await self.repository.delete_invoice(invoice_id):
            raise NotFoundError(f"Invoice {invoice_id} not found")
        logger.info("Invoice %s deleted", invoice_id)
