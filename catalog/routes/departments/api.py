import logging
from fastapi import APIRouter, Depends
from ...schemas.category import DepartmentsResponse
from ...services.category_store import CategoryStore
from ..categories.api import get_category_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Departments API"])


@router.get("/departments", response_model=DepartmentsResponse)
async def get_departments_with_categories(store: CategoryStore = Depends(get_category_store)):
    """Get active departments with their categories and subcategory names"""
    departments = await store.get_departments()

    if not departments:
        return DepartmentsResponse(departments=[], message="No active categories found")

    logger.debug(f"Serving {len(departments)} departments")
    return DepartmentsResponse(departments=departments)
