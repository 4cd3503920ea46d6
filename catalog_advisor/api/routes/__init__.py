"""
API Routes
==========

Route modules for the catalog advisor service.
"""

from catalog_advisor.api.routes.catalog import router as catalog_router
from catalog_advisor.api.routes.chat import router as chat_router

__all__ = ["catalog_router", "chat_router"]
