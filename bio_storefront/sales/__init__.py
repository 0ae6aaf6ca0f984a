"""
Sales Ledger
"""

from bio_storefront.sales.ledger import SaleCreate, SaleOut, SalesLedger, SalesSummary

__all__ = ["SaleCreate", "SaleOut", "SalesLedger", "SalesSummary"]
