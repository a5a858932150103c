"""
Catering Invoices backend
Project: Catering Invoices

Invoice management for a catering business: customers, invoices with
line items, server-side totals and sequential invoice numbers.
"""

__version__ = "1.0.0"
