"""
Services
Project: Catering Invoices
"""
