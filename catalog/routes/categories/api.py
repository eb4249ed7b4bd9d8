import logging
from typing import List, Optional
from bson import ObjectId
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from ...config.database import get_database
from ...exceptions import IntegrityError
from ...models import Category
from ...schemas.category import (
    CategoryCreate,
    CategoryDetailResponse,
    CategoryNode,
    CategoryPathResponse,
    CategoryResponse,
    CategoryUpdate,
)
from ...services.category_store import CategoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["Categories API"])


async def get_category_store(db=Depends(get_database)) -> CategoryStore:
    return CategoryStore(db)


async def get_actor_id(x_user_id: Optional[str] = Header(None)) -> ObjectId:
    """Acting user for write requests, handed over by the identity layer"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id header is required"
        )
    if not ObjectId.is_valid(x_user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-User-Id header"
        )
    return ObjectId(x_user_id)


def to_response(category: Category) -> CategoryResponse:
    return CategoryResponse.model_validate(category.model_dump())


@router.get("/", response_model=List[CategoryNode])
async def get_category_tree(
    active_only: bool = Query(True, description="Return only active categories"),
    store: CategoryStore = Depends(get_category_store)
):
    """Get the nested Department > Category > Subcategory tree"""
    return await store.get_tree(active_only=active_only)


@router.get("/roots", response_model=List[CategoryResponse])
async def get_root_categories(
    active_only: bool = Query(False, description="Return only active departments"),
    store: CategoryStore = Depends(get_category_store)
):
    """Get departments in display order"""
    return [to_response(category) async for category in store.list_roots(active_only=active_only)]


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    actor_id: ObjectId = Depends(get_actor_id),
    store: CategoryStore = Depends(get_category_store)
):
    """Create a new category"""
    category = await store.create(category_data, created_by=actor_id)
    return to_response(category)


@router.get("/{category_id}", response_model=CategoryDetailResponse)
async def get_category(
    category_id: str,
    store: CategoryStore = Depends(get_category_store)
):
    """Get a single category with its direct children"""
    category = await store.get(category_id)
    children = [to_response(child) async for child in store.list_children(category.id)]
    return CategoryDetailResponse(**to_response(category).model_dump(), children=children)


@router.get("/{category_id}/children", response_model=List[CategoryResponse])
async def get_category_children(
    category_id: str,
    active_only: bool = Query(False, description="Return only active children"),
    store: CategoryStore = Depends(get_category_store)
):
    """Get the direct children of a category in display order"""
    await store.get(category_id)
    return [to_response(child) async for child in store.list_children(category_id, active_only=active_only)]


@router.get("/{category_id}/path", response_model=CategoryPathResponse)
async def get_category_path(
    category_id: str,
    store: CategoryStore = Depends(get_category_store)
):
    """Get the breadcrumb from the department down to this category"""
    try:
        path = await store.get_path(category_id)
    except IntegrityError as e:
        logger.warning(f"Serving partial path for category {category_id}: {e.message}")
        return CategoryPathResponse(
            path=[to_response(category) for category in e.partial_path],
            degraded=True,
            warning=e.message
        )
    return CategoryPathResponse(path=[to_response(category) for category in path])


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    actor_id: ObjectId = Depends(get_actor_id),
    store: CategoryStore = Depends(get_category_store)
):
    """Update a category"""
    category = await store.update(category_id, category_update, updated_by=actor_id)
    return to_response(category)


@router.post("/{category_id}/deactivate", response_model=CategoryResponse)
async def deactivate_category(
    category_id: str,
    actor_id: ObjectId = Depends(get_actor_id),
    store: CategoryStore = Depends(get_category_store)
):
    """Hide a category; its children keep their own visibility"""
    category = await store.deactivate(category_id, updated_by=actor_id)
    return to_response(category)


@router.post("/{category_id}/activate", response_model=CategoryResponse)
async def activate_category(
    category_id: str,
    actor_id: ObjectId = Depends(get_actor_id),
    store: CategoryStore = Depends(get_category_store)
):
    """Make a category visible again"""
    category = await store.activate(category_id, updated_by=actor_id)
    return to_response(category)


@router.delete("/{category_id}", response_model=dict)
async def delete_category(
    category_id: str,
    actor_id: ObjectId = Depends(get_actor_id),
    store: CategoryStore = Depends(get_category_store)
):
    """Delete a category that has no children"""
    category = await store.delete(category_id)
    logger.info(f"Category {category.id} deleted by {actor_id}")
    return {
        "success": True,
        "message": f"Category '{category.name}' deleted successfully",
        "deleted_category": {
            "id": str(category.id),
            "name": category.name
        }
    }
