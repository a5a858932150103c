"""
FastAPI router for invoices
Project: Catering Invoices

Invoice endpoints: listing, lookup by id or number, number generation,
creation with line items, full update and cascade deletion.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Path, Response, status

from catering_invoices.core.deps import get_invoice_service
from catering_invoices.schemas import (
    InvoiceNumberResponse,
    InvoicePayload,
    InvoiceRead,
    InvoiceUpdatePayload,
    InvoiceWithLineItems,
)
from catering_invoices.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


# -------------------------------------------------------------------
# Queries
# -------------------------------------------------------------------

@router.get(
    "",
    name="invoices_list",
    summary="List invoices",
    description="All invoices without line items, most recently created first.",
    response_model=list[InvoiceRead],
    status_code=status.HTTP_200_OK,
)
async def get_invoices(
    service: InvoiceService = Depends(get_invoice_service),
) -> list[InvoiceRead]:
    return await service.list_invoices()


@router.get(
    "/generate/number",
    name="invoices_generate_number",
    summary="Generate an invoice number",
    description="Consume and return the next number of the sequence (INV-YYYY-NNN).",
    response_model=InvoiceNumberResponse,
    status_code=status.HTTP_200_OK,
)
async def generate_invoice_number(
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceNumberResponse:
    """
    The number is consumed even if no invoice is created with it,
    so two calls never return the same value.
    """
    return InvoiceNumberResponse(number=service.generate_invoice_number())


@router.get(
    "/number/{number}",
    name="invoices_by_number",
    summary="Invoice by number",
    description="Retrieve an invoice and its line items by invoice number.",
    response_model=InvoiceWithLineItems,
    status_code=status.HTTP_200_OK,
)
async def get_invoice_by_number(
    number: str = Path(..., description="Invoice number, e.g. INV-2024-001"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceWithLineItems:
    return await service.get_invoice_by_number(number)


@router.get(
    "/{invoice_id}",
    name="invoices_detail",
    summary="Invoice detail",
    description="Retrieve an invoice and its line items ordered by position.",
    response_model=InvoiceWithLineItems,
    status_code=status.HTTP_200_OK,
)
async def get_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceWithLineItems:
    return await service.get_invoice(invoice_id)


# -------------------------------------------------------------------
# Commands
# -------------------------------------------------------------------

@router.post(
    "",
    name="invoices_create",
    summary="Create invoice",
    description=(
        "Create an invoice with its line items. Line amounts and totals are "
        "computed server-side; the number is generated when omitted."
    ),
    response_model=InvoiceWithLineItems,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    payload: InvoicePayload,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceWithLineItems:
    """
    Create an invoice in a single transaction.

    Returns 404 when customerId is unknown, 400 when customer fields are
    missing and 409 when the number is already used.
    """
    return await service.create_invoice_with_line_items(payload)


@router.put(
    "/{invoice_id}",
    name="invoices_update",
    summary="Update invoice",
    description=(
        "Update the fields present in the body. When lineItems is present "
        "it replaces every existing line item."
    ),
    response_model=InvoiceWithLineItems,
    status_code=status.HTTP_200_OK,
)
async def update_invoice(
    payload: InvoiceUpdatePayload,
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceWithLineItems:
    return await service.replace_invoice_line_items(invoice_id, payload)


@router.delete(
    "/{invoice_id}",
    name="invoices_delete",
    summary="Delete invoice",
    description="Delete an invoice together with all of its line items.",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    service: InvoiceService = Depends(get_invoice_service),
) -> Response:
    await service.delete_invoice_cascade(invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
