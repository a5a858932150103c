"""
Pydantic schemas for invoices
Project: Catering Invoices

Contains:
- Enum: InvoiceStatus
- Schemas for LineItem (request input, store create/update, read)
- Schemas for Invoice (store create/update, request payloads, read)

JSON field names are camelCase (``customerName``, ``taxRate``...); Python
code uses the snake_case attribute names. Decimal values are normalised to
their fixed scale and serialized as strings.
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)

from catering_invoices.services.totals import to_currency, to_rate


# -------------------------------------------------------------------
# Enum
# -------------------------------------------------------------------

class InvoiceStatus(str, Enum):
    """Invoice lifecycle states recognised by the UI."""
    DRAFT = "draft"
    PENDING = "pending"
    PAID = "paid"


DEFAULT_TAX_RATE = Decimal("0.0825")


# -------------------------------------------------------------------
# Schemas for LineItem
# -------------------------------------------------------------------

class LineItemInput(BaseModel):
    """
    A line item as sent by the client inside an invoice payload.

    ``amount`` is accepted for compatibility with the form, but the service
    always recomputes it from quantity and rate.
    """

    description: str = Field(
        ...,
        min_length=1,
        description="What is being billed",
    )
    quantity: int = Field(
        ...,
        ge=1,
        description="Number of units",
    )
    rate: Decimal = Field(
        ...,
        ge=0,
        description="Price per unit",
    )
    amount: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Ignored: recomputed as quantity x rate",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("rate", "amount")
    @classmethod
    def round_currency(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else to_currency(v)


class LineItemCreate(BaseModel):
    """Schema for persisting a line item."""

    invoice_id: uuid.UUID = Field(..., alias="invoiceId")
    description: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    rate: Decimal = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)
    order: int = Field(
        default=0,
        description="Position of the line inside the invoice",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("rate", "amount")
    @classmethod
    def round_currency(cls, v: Decimal) -> Decimal:
        return to_currency(v)


class LineItemUpdate(BaseModel):
    """Partial update of a persisted line item."""

    description: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=1)
    rate: Optional[Decimal] = Field(None, ge=0)
    amount: Optional[Decimal] = Field(None, ge=0)
    order: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("rate", "amount")
    @classmethod
    def round_currency(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else to_currency(v)


class LineItemRead(BaseModel):
    """Schema for reading a line item."""

    id: uuid.UUID
    invoice_id: uuid.UUID = Field(..., alias="invoiceId")
    description: str
    quantity: int
    rate: Decimal
    amount: Decimal
    order: int

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)

    @field_validator("rate", "amount")
    @classmethod
    def round_currency(cls, v: Decimal) -> Decimal:
        return to_currency(v)


# -------------------------------------------------------------------
# Schemas for Invoice
# -------------------------------------------------------------------

# Fields that may be omitted from a partial update but never set to null
_NON_NULLABLE_FIELDS = (
    "number",
    "customer_name",
    "customer_email",
    "customer_address",
    "tax_rate",
    "status",
    "subtotal",
    "tax_amount",
    "total",
)


class InvoiceCreate(BaseModel):
    """
    Schema for persisting a complete invoice.

    The number and the totals are expected to be already resolved
    (see InvoiceService.create_invoice_with_line_items).
    """

    number: str = Field(..., min_length=1, description="Unique invoice number")
    customer_id: Optional[uuid.UUID] = Field(None, alias="customerId")
    customer_name: str = Field(..., min_length=1, alias="customerName")
    customer_email: EmailStr = Field(..., alias="customerEmail")
    customer_address: str = Field(..., min_length=1, alias="customerAddress")
    event_date: Optional[str] = Field(None, alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType")
    subtotal: Decimal = Field(default=Decimal("0.00"), ge=0)
    tax_rate: Decimal = Field(default=DEFAULT_TAX_RATE, ge=0, alias="taxRate")
    tax_amount: Decimal = Field(default=Decimal("0.00"), ge=0, alias="taxAmount")
    total: Decimal = Field(default=Decimal("0.00"), ge=0)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("subtotal", "tax_amount", "total")
    @classmethod
    def round_currency(cls, v: Decimal) -> Decimal:
        return to_currency(v)

    @field_validator("tax_rate")
    @classmethod
    def round_rate(cls, v: Decimal) -> Decimal:
        return to_rate(v)


class InvoiceFieldsUpdate(BaseModel):
    """
    Editable scalar fields of an invoice, all optional.

    Only the fields actually present in the payload are applied
    (``model_dump(exclude_unset=True)``). Nullable fields (customerId,
    eventDate, eventType, notes) may be cleared with an explicit null;
    the others may not.
    """

    number: Optional[str] = Field(None, min_length=1)
    customer_id: Optional[uuid.UUID] = Field(None, alias="customerId")
    customer_name: Optional[str] = Field(None, min_length=1, alias="customerName")
    customer_email: Optional[EmailStr] = Field(None, alias="customerEmail")
    customer_address: Optional[str] = Field(None, min_length=1, alias="customerAddress")
    event_date: Optional[str] = Field(None, alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType")
    tax_rate: Optional[Decimal] = Field(None, ge=0, alias="taxRate")
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tax_rate")
    @classmethod
    def round_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else to_rate(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        """Explicit nulls are only allowed on nullable fields."""
        for name in _NON_NULLABLE_FIELDS:
            if name in self.model_fields_set and getattr(self, name, None) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class InvoiceUpdate(InvoiceFieldsUpdate):
    """Partial update as applied by the store, totals included."""

    subtotal: Optional[Decimal] = Field(None, ge=0)
    tax_amount: Optional[Decimal] = Field(None, ge=0, alias="taxAmount")
    total: Optional[Decimal] = Field(None, ge=0)

    @field_validator("subtotal", "tax_amount", "total")
    @classmethod
    def round_currency(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else to_currency(v)


class InvoicePayload(BaseModel):
    """
    Body of ``POST /api/invoices``.

    ``number`` is generated when omitted, ``taxRate`` falls back to the
    configured default, and the customer fields may be omitted when
    ``customerId`` references a stored customer. Totals sent by the client
    are ignored and recomputed from the line items.
    """

    number: Optional[str] = Field(None, min_length=1)
    customer_id: Optional[uuid.UUID] = Field(None, alias="customerId")
    customer_name: Optional[str] = Field(None, min_length=1, alias="customerName")
    customer_email: Optional[EmailStr] = Field(None, alias="customerEmail")
    customer_address: Optional[str] = Field(None, min_length=1, alias="customerAddress")
    event_date: Optional[str] = Field(None, alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType")
    tax_rate: Optional[Decimal] = Field(None, ge=0, alias="taxRate")
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    line_items: list[LineItemInput] = Field(default_factory=list, alias="lineItems")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("number", mode="before")
    @classmethod
    def blank_number_to_none(cls, v):
        """An empty number (form submitted before one was generated) means: generate it."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tax_rate")
    @classmethod
    def round_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return None if v is None else to_rate(v)


class InvoiceUpdatePayload(InvoiceFieldsUpdate):
    """
    Body of ``PUT /api/invoices/{id}``.

    When ``lineItems`` is present it replaces every existing line item.
    """

    line_items: Optional[list[LineItemInput]] = Field(None, alias="lineItems")

    def invoice_fields(self) -> InvoiceFieldsUpdate:
        """The scalar part of the payload, keeping track of which fields were set."""
        data = self.model_dump(exclude_unset=True, exclude={"line_items"})
        return InvoiceFieldsUpdate.model_validate(data)


class InvoiceRead(BaseModel):
    """Schema for reading an invoice (without line items)."""

    id: uuid.UUID
    number: str
    customer_id: Optional[uuid.UUID] = Field(None, alias="customerId")
    customer_name: str = Field(..., alias="customerName")
    customer_email: str = Field(..., alias="customerEmail")
    customer_address: str = Field(..., alias="customerAddress")
    event_date: Optional[str] = Field(None, alias="eventDate")
    event_type: Optional[str] = Field(None, alias="eventType")
    subtotal: Decimal
    tax_rate: Decimal = Field(..., alias="taxRate")
    tax_amount: Decimal = Field(..., alias="taxAmount")
    total: Decimal
    status: InvoiceStatus
    notes: Optional[str] = None
    created_at: datetime.datetime = Field(..., alias="createdAt")
    updated_at: datetime.datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)

    @field_validator("subtotal", "tax_amount", "total")
    @classmethod
    def round_currency(cls, v: Decimal) -> Decimal:
        return to_currency(v)

    @field_validator("tax_rate")
    @classmethod
    def round_rate(cls, v: Decimal) -> Decimal:
        return to_rate(v)


class InvoiceWithLineItems(InvoiceRead):
    """An invoice together with its line items, ordered by ``order``."""

    line_items: list[LineItemRead] = Field(default_factory=list, alias="lineItems")


class InvoiceNumberResponse(BaseModel):
    """Body of ``GET /api/invoices/generate/number``."""

    number: str
