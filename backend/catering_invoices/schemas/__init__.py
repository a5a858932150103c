"""
Pydantic schemas for the Catering Invoices project

Validation and serialization of API payloads and of the records
returned by the invoice store.
"""

from catering_invoices.schemas.customer import CustomerCreate, CustomerRead
from catering_invoices.schemas.invoice import (
    DEFAULT_TAX_RATE,
    InvoiceCreate,
    InvoiceFieldsUpdate,
    InvoiceNumberResponse,
    InvoicePayload,
    InvoiceRead,
    InvoiceStatus,
    InvoiceUpdate,
    InvoiceUpdatePayload,
    InvoiceWithLineItems,
    LineItemCreate,
    LineItemInput,
    LineItemRead,
    LineItemUpdate,
)

__all__ = [
    "CustomerCreate",
    "CustomerRead",
    "DEFAULT_TAX_RATE",
    "InvoiceCreate",
    "InvoiceFieldsUpdate",
    "InvoiceNumberResponse",
    "InvoicePayload",
    "InvoiceRead",
    "InvoiceStatus",
    "InvoiceUpdate",
    "InvoiceUpdatePayload",
    "InvoiceWithLineItems",
    "LineItemCreate",
    "LineItemInput",
    "LineItemRead",
    "LineItemUpdate",
]
