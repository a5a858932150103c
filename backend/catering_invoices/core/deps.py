"""
Dependency Injection
Project: Catering Invoices

Dependencies giving route handlers access to the objects built at startup.
"""

from fastapi import Request

from catering_invoices.services.invoice_service import InvoiceService


def get_invoice_service(request: Request) -> InvoiceService:
    """
    Dependency returning the InvoiceService created in the lifespan handler.

    Example:
        @router.get("/invoices")
        async def list_invoices(service: InvoiceService = Depends(get_invoice_service)):
            ...
    """
    return request.app.state.invoice_service
