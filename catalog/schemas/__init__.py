from .category import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryDetailResponse,
    CategoryPathResponse, CategoryNode, DepartmentCategory, DepartmentEntry,
    DepartmentsResponse
)

__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryDetailResponse",
    "CategoryPathResponse",
    "CategoryNode",
    "DepartmentCategory",
    "DepartmentEntry",
    "DepartmentsResponse",
]
