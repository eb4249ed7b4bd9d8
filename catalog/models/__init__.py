from .base import PyObjectId
from .category import Category, CategoryLevel

__all__ = [
    "PyObjectId",
    "Category",
    "CategoryLevel",
]
