"""
Bio Pages
"""

from bio_storefront.pages.service import PageOut, PagePatch, PageService, render_page

__all__ = ["PageOut", "PagePatch", "PageService", "render_page"]
