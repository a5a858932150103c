"""
API package
Project: Catering Invoices
"""
