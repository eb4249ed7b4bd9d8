from datetime import datetime
from enum import IntEnum
from typing import Optional
from bson import ObjectId
from pydantic import BaseModel, Field
from .base import PyObjectId
from ..utils.timezone import utc_now


class CategoryLevel(IntEnum):
    DEPARTMENT = 0
    CATEGORY = 1
    SUBCATEGORY = 2


class Category(BaseModel):
    """A node of the Department > Category > Subcategory tree.

    Records live flat in the ``categories`` collection and point at their
    parent by id. Stored keys keep the camelCase names the storefront already
    reads (``sortOrder``, ``isActive``, ``createdAt`` ...), so documents are
    written with ``model_dump(by_alias=True)``. Children are never stored;
    they are queried by ``parent``.
    """
    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    name: str = Field(..., min_length=1)
    parent: Optional[PyObjectId] = None
    level: int = Field(..., ge=CategoryLevel.DEPARTMENT, le=CategoryLevel.SUBCATEGORY)
    sort_order: int = Field(default=0, alias="sortOrder")
    is_active: bool = Field(default=True, alias="isActive")
    description: Optional[str] = None
    image: Optional[str] = None
    created_by: Optional[PyObjectId] = Field(None, alias="createdBy")
    updated_by: Optional[PyObjectId] = Field(None, alias="updatedBy")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "name": "Whiskey",
                "parent": "507f1f77bcf86cd799439011",
                "level": 1,
                "sortOrder": 0,
                "isActive": True,
                "description": "Bourbon, Scotch and Irish whiskey",
                "image": "https://cdn.example.com/categories/whiskey.jpg"
            }
        }

    @property
    def level_name(self) -> str:
        return CategoryLevel(self.level).name.lower()
