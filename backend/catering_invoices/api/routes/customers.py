"""
FastAPI router for customers
Project: Catering Invoices
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Path, status

from catering_invoices.core.deps import get_invoice_service
from catering_invoices.schemas import CustomerCreate, CustomerRead
from catering_invoices.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
)


@router.get(
    "",
    name="customers_list",
    summary="List customers",
    response_model=list[CustomerRead],
    status_code=status.HTTP_200_OK,
)
async def get_customers(
    service: InvoiceService = Depends(get_invoice_service),
) -> list[CustomerRead]:
    return await service.list_customers()


@router.post(
    "",
    name="customers_create",
    summary="Create customer",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    data: CustomerCreate,
    service: InvoiceService = Depends(get_invoice_service),
) -> CustomerRead:
    return await service.create_customer(data)


@router.get(
    "/{customer_id}",
    name="customers_detail",
    summary="Customer detail",
    response_model=CustomerRead,
    status_code=status.HTTP_200_OK,
)
async def get_customer(
    customer_id: uuid.UUID = Path(..., description="Customer UUID"),
    service: InvoiceService = Depends(get_invoice_service),
) -> CustomerRead:
    return await service.get_customer(customer_id)
