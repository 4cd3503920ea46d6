"""
Database Package
================

ORM models, connection management and repositories.
"""

from catalog_advisor.db.connection import DatabaseManager, get_session
from catalog_advisor.db.models import Base, CatalogUpload, Product, UserInteraction

__all__ = [
    "Base",
    "CatalogUpload",
    "DatabaseManager",
    "Product",
    "UserInteraction",
    "get_session",
]
