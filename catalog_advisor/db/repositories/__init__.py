"""Repositories for products, catalog uploads and user interactions."""

from catalog_advisor.db.repositories.interactions_repo import InteractionRepository
from catalog_advisor.db.repositories.products_repo import ProductRepository
from catalog_advisor.db.repositories.uploads_repo import CatalogUploadRepository

__all__ = ["CatalogUploadRepository", "InteractionRepository", "ProductRepository"]
