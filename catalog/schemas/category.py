from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, field_serializer
from ..models.base import PyObjectId
from ..utils.timezone import to_store_time


class CategoryBase(BaseModel):
    """Base category schema"""
    name: str = Field(..., min_length=1, description="Category name")
    level: int = Field(..., ge=0, le=2, description="0 = Department, 1 = Category, 2 = Subcategory")
    parent: Optional[PyObjectId] = Field(None, description="Parent category id, null for departments")
    sort_order: int = Field(default=0, alias="sortOrder", description="Display order among siblings")
    is_active: bool = Field(default=True, alias="isActive", description="Whether the category is visible")
    description: Optional[str] = Field(None, description="Category description")
    image: Optional[str] = Field(None, description="Image URL")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True


class CategoryCreate(CategoryBase):
    """Schema for creating a new category"""
    created_by: Optional[PyObjectId] = Field(None, alias="createdBy")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True
        json_schema_extra = {
            "example": {
                "name": "Spirits",
                "level": 0,
                "sortOrder": 1,
                "description": "Whiskey, vodka, rum and more"
            }
        }


class CategoryUpdate(BaseModel):
    """Schema for updating a category; only the fields sent are applied"""
    name: Optional[str] = Field(None, min_length=1)
    level: Optional[int] = Field(None, ge=0, le=2)
    parent: Optional[PyObjectId] = None
    sort_order: Optional[int] = Field(None, alias="sortOrder")
    is_active: Optional[bool] = Field(None, alias="isActive")
    description: Optional[str] = None
    image: Optional[str] = None

    class Config:
        populate_by_name = True
        str_strip_whitespace = True

    @field_validator("name", "level", "sort_order", "is_active")
    @classmethod
    def reject_null(cls, v):
        # parent, description and image may be cleared; these may not
        if v is None:
            raise ValueError("may not be null")
        return v


class CategoryResponse(BaseModel):
    """Schema for category response"""
    id: PyObjectId = Field(alias="_id")
    name: str
    parent: Optional[PyObjectId] = None
    level: int
    sort_order: int = Field(alias="sortOrder")
    is_active: bool = Field(alias="isActive")
    description: Optional[str] = None
    image: Optional[str] = None
    created_by: Optional[PyObjectId] = Field(None, alias="createdBy")
    updated_by: Optional[PyObjectId] = Field(None, alias="updatedBy")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "_id": "507f1f77bcf86cd799439011",
                "name": "Spirits",
                "parent": None,
                "level": 0,
                "sortOrder": 1,
                "isActive": True,
                "description": "Whiskey, vodka, rum and more",
                "createdAt": "2026-01-20T05:00:00-05:00",
                "updatedAt": "2026-01-20T05:00:00-05:00"
            }
        }

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_timestamp(self, value: datetime) -> str:
        return to_store_time(value).isoformat()


class CategoryDetailResponse(CategoryResponse):
    """Category with its direct children, ordered for display"""
    children: List[CategoryResponse] = Field(default_factory=list)


class CategoryPathResponse(BaseModel):
    """Breadcrumb from the department down to the requested category"""
    path: List[CategoryResponse]
    degraded: bool = False
    warning: Optional[str] = None


class CategoryNode(BaseModel):
    """Nested navigation entry"""
    id: PyObjectId = Field(alias="_id")
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    level: int
    sort_order: int = Field(alias="sortOrder")
    parent: Optional[PyObjectId] = None
    subcategories: List["CategoryNode"] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class DepartmentCategory(BaseModel):
    category: str
    subcategories: List[str] = Field(default_factory=list)


class DepartmentEntry(BaseModel):
    department: str
    categories: List[DepartmentCategory] = Field(default_factory=list)


class DepartmentsResponse(BaseModel):
    success: bool = True
    departments: List[DepartmentEntry]
    message: Optional[str] = None
