"""
Pytest configuration and fixtures for the Catering Invoices tests.

Every fixture builds fresh objects: nothing is shared between tests.
"""

import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from catering_invoices.core.config import Settings
from catering_invoices.main import create_app
from catering_invoices.repositories import MemoryInvoiceRepository
from catering_invoices.services.invoice_number import InvoiceNumberGenerator
from catering_invoices.services.invoice_service import InvoiceService


# ============================================================
# Clock and number sequence
# ============================================================


class TickingClock:
    """Clock advancing one second per call, so timestamps are strictly ordered."""

    def __init__(self, start: datetime.datetime = None):
        self.now = start or datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)

    def __call__(self) -> datetime.datetime:
        self.now += datetime.timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def number_generator():
    """Generator pinned to 2024."""
    return InvoiceNumberGenerator(today=lambda: datetime.date(2024, 5, 1))


# ============================================================
# Store and service
# ============================================================


@pytest.fixture
def repository(clock):
    return MemoryInvoiceRepository(clock=clock)


@pytest.fixture
def service(repository, number_generator):
    return InvoiceService(repository, number_generator, default_tax_rate=Decimal("0.0825"))


# ============================================================
# Payloads
# ============================================================


@pytest.fixture
def customer_payload():
    return {
        "name": "Acme Corp",
        "email": "billing@acme.com",
        "address": "1 Main St\nSpringfield",
    }


@pytest.fixture
def invoice_payload():
    """Valid POST /api/invoices body with two line items."""
    return {
        "customerName": "Jane Doe",
        "customerEmail": "jane@example.com",
        "customerAddress": "42 Elm Street",
        "eventDate": "2024-06-15",
        "eventType": "Wedding",
        "taxRate": "0.0825",
        "status": "draft",
        "notes": "Outdoor ceremony",
        "lineItems": [
            {"description": "Buffet dinner", "quantity": 10, "rate": "25.00"},
            {"description": "Dessert table", "quantity": 1, "rate": "120.50"},
        ],
    }


# ============================================================
# HTTP client
# ============================================================


@pytest.fixture
def app():
    return create_app(Settings(storage_backend="memory", app_env="testing", debug=False))


@pytest.fixture
def client(app, service):
    """TestClient whose requests go to the ``service`` fixture."""
    with TestClient(app) as test_client:
        app.state.invoice_service = service
        yield test_client
