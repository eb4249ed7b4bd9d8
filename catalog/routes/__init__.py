# API Routers
from .categories.api import router as categories_api_router
from .departments.api import router as departments_api_router

__all__ = [
    "categories_api_router",
    "departments_api_router",
]
