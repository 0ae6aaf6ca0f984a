"""
Serving Layer

HTTP API for the storefront services.
"""
