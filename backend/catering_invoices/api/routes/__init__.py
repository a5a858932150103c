"""
API Routes
Project: Catering Invoices

Aggregated router mounted under ``/api``.
"""

from fastapi import APIRouter

from catering_invoices.api.routes import customers, invoices

api_router = APIRouter(prefix="/api")

api_router.include_router(customers.router)
api_router.include_router(invoices.router)

__all__ = ["api_router"]
