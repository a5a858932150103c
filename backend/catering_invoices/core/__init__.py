"""
Core: configuration, exceptions, database, dependencies
Project: Catering Invoices
"""
