"""
Bio Storefront

Link-in-bio pages built from ordered components, with view, click and sales
analytics.
"""

__version__ = "1.0.0"
