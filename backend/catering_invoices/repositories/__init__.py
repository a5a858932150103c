"""
Invoice store implementations
Project: Catering Invoices
"""

from catering_invoices.repositories.base import InvoiceRepository
from catering_invoices.repositories.memory import MemoryInvoiceRepository
from catering_invoices.repositories.sql import SqlInvoiceRepository

__all__ = [
    "InvoiceRepository",
    "MemoryInvoiceRepository",
    "SqlInvoiceRepository",
]
