import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Union
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel, ValidationError as PydanticValidationError
from pymongo import ReturnDocument

from ..exceptions import ConflictError, IntegrityError, NotFoundError, ValidationError
from ..models.category import Category, CategoryLevel
from ..schemas.category import (
    CategoryCreate,
    CategoryNode,
    CategoryUpdate,
    DepartmentCategory,
    DepartmentEntry,
)
from ..utils.timezone import utc_now

logger = logging.getLogger(__name__)

# Siblings display by sortOrder, ties broken by name
SIBLING_SORT = [("sortOrder", 1), ("name", 1)]
TREE_SORT = [("level", 1), ("sortOrder", 1), ("name", 1)]

CATEGORY_INDEXES = [
    [("level", 1), ("isActive", 1), ("sortOrder", 1)],
    [("parent", 1), ("isActive", 1), ("sortOrder", 1)],
    [("name", 1), ("level", 1)],
]

MAX_DEPTH = len(CategoryLevel)


def to_object_id(value: Any, field: str = "id") -> ObjectId:
    """Coerce a path/body identifier into an ObjectId"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValidationError(f"Invalid {field}: {value!r}", field=field, value=value)


def validate_placement(level: int, parent: Optional[Category]) -> None:
    """Check that ``level`` fits under ``parent``.

    Departments have no parent; every other record sits exactly one level
    below its parent. Called on every create and on updates that touch
    ``level`` or ``parent``.
    """
    if parent is None:
        if level != CategoryLevel.DEPARTMENT:
            raise ValidationError(
                f"Only departments (level 0) may have no parent, got level {level}",
                field="parent",
                value=None,
            )
        return

    if parent.level != level - 1:
        raise ValidationError(
            f"Parent '{parent.name}' is at level {parent.level}; "
            f"a level {level} category needs a parent at level {level - 1}",
            field="level",
            value=level,
        )


def _parse(schema: type, data: Union[BaseModel, Mapping[str, Any], None]) -> BaseModel:
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data or {})
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise ValidationError(
            f"{field}: {error['msg']}" if field else error["msg"],
            field=field,
            value=error.get("input"),
        ) from e


def to_category(document: Mapping[str, Any]) -> Category:
    """Build a Category from a stored document.

    Records that no longer fit the model (written by hand or by an older
    backend) surface as IntegrityError naming the offending key.
    """
    try:
        return Category(**document)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise IntegrityError(
            f"Stored category {document.get('_id')} is malformed: {field}: {error['msg']}",
            field=field,
            value=document.get("_id"),
        ) from e


def _stored_keys(changes: Dict[str, Any]) -> Dict[str, Any]:
    """Map Category attribute names onto the keys used in the collection"""
    stored = {}
    for name, value in changes.items():
        alias = Category.model_fields[name].alias
        stored[alias or name] = value
    return stored


class CategorySequence:
    """Lazy, restartable view over a category query.

    Nothing is read until the sequence is iterated, and every iteration runs
    the query again, so the same object can be walked more than once.
    """

    def __init__(self, collection: AsyncIOMotorCollection, query: Dict[str, Any], sort: List[tuple]):
        self._collection = collection
        self._query = query
        self._sort = sort

    def __aiter__(self) -> AsyncIterator[Category]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Category]:
        cursor = self._collection.find(self._query, sort=self._sort)
        async for document in cursor:
            yield to_category(document)

    async def to_list(self) -> List[Category]:
        return [category async for category in self]


class CategoryStore:
    """Persists the category tree and keeps its level/parent invariants"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.categories

    async def ensure_indexes(self) -> None:
        """Create the indexes the tree queries rely on"""
        for keys in CATEGORY_INDEXES:
            await self.collection.create_index(keys)

    async def find_by_id(self, category_id: Any, field: str = "id") -> Optional[Category]:
        document = await self.collection.find_one({"_id": to_object_id(category_id, field)})
        if document is None:
            return None
        return to_category(document)

    async def get(self, category_id: Any, field: str = "id") -> Category:
        category = await self.find_by_id(category_id, field)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found", field=field, value=category_id)
        return category

    async def create(self, data: Union[CategoryCreate, Mapping[str, Any]], created_by: Any = None) -> Category:
        """Insert a new category after checking its placement in the tree"""
        payload = _parse(CategoryCreate, data)

        actor = created_by if created_by is not None else payload.created_by
        if actor is None:
            raise ValidationError("createdBy is required", field="createdBy", value=None)
        actor = to_object_id(actor, "createdBy")

        parent = None
        if payload.parent is not None:
            parent = await self.get(payload.parent, field="parent")
        validate_placement(payload.level, parent)

        now = utc_now()
        category = Category(
            name=payload.name,
            parent=payload.parent,
            level=payload.level,
            sort_order=payload.sort_order,
            is_active=payload.is_active,
            description=payload.description,
            image=payload.image,
            created_by=actor,
            updated_by=actor,
            created_at=now,
            updated_at=now,
        )
        await self.collection.insert_one(category.model_dump(by_alias=True))

        logger.info(f"Created {category.level_name} '{category.name}' ({category.id})")
        return category

    async def update(
        self,
        category_id: Any,
        patch: Union[CategoryUpdate, Mapping[str, Any], None],
        updated_by: Any = None,
    ) -> Category:
        """Apply a partial update.

        Placement is re-checked whenever ``level`` or ``parent`` is part of the
        patch. Everything is validated before the single write, so a rejected
        patch leaves the record untouched.
        """
        changes = _parse(CategoryUpdate, patch).model_dump(exclude_unset=True)
        current = await self.get(category_id)

        if "level" in changes or "parent" in changes:
            level = changes.get("level", current.level)
            parent_id = changes["parent"] if "parent" in changes else current.parent

            if parent_id is not None and parent_id == current.id:
                raise ValidationError("A category cannot be its own parent", field="parent", value=parent_id)

            parent = None
            if parent_id is not None:
                parent = await self.get(parent_id, field="parent")
            validate_placement(level, parent)

            if level != current.level:
                child_count = await self.count_children(current.id)
                if child_count:
                    raise ConflictError(
                        f"Cannot move '{current.name}' from level {current.level} to level {level}: "
                        f"it has {child_count} children at level {current.level + 1}",
                        field="level",
                        value=level,
                    )

        changes["updated_at"] = utc_now()
        if updated_by is not None:
            changes["updated_by"] = to_object_id(updated_by, "updatedBy")

        document = await self.collection.find_one_and_update(
            {"_id": current.id},
            {"$set": _stored_keys(changes)},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            raise NotFoundError(f"Category {category_id} not found", field="id", value=category_id)

        logger.info(f"Updated category '{document['name']}' ({current.id}): {sorted(changes)}")
        return to_category(document)

    async def deactivate(self, category_id: Any, updated_by: Any = None) -> Category:
        """Hide a category. Children keep their own isActive flag."""
        return await self.update(category_id, {"is_active": False}, updated_by=updated_by)

    async def activate(self, category_id: Any, updated_by: Any = None) -> Category:
        return await self.update(category_id, {"is_active": True}, updated_by=updated_by)

    def list_children(self, parent_id: Any, active_only: bool = False) -> CategorySequence:
        query: Dict[str, Any] = {"parent": to_object_id(parent_id, "parent")}
        if active_only:
            query["isActive"] = True
        return CategorySequence(self.collection, query, SIBLING_SORT)

    def list_roots(self, active_only: bool = False) -> CategorySequence:
        query: Dict[str, Any] = {"parent": None}
        if active_only:
            query["isActive"] = True
        return CategorySequence(self.collection, query, SIBLING_SORT)

    async def count_children(self, category_id: Any) -> int:
        return await self.collection.count_documents({"parent": to_object_id(category_id)})

    async def delete(self, category_id: Any) -> Category:
        """Remove a category for good. Refused while anything still points at it."""
        category = await self.get(category_id)

        child_count = await self.count_children(category.id)
        if child_count:
            raise ConflictError(
                f"Cannot delete '{category.name}': it has {child_count} child categories. "
                "Move or delete them first, or deactivate the category instead.",
                field="id",
                value=category.id,
            )

        await self.collection.delete_one({"_id": category.id})
        logger.info(f"Deleted {category.level_name} '{category.name}' ({category.id})")
        return category

    async def get_path(self, category_id: Any) -> List[Category]:
        """Ancestor chain from the department down to ``category_id``"""
        node = await self.get(category_id)
        chain = [node]
        seen = {node.id}

        def corrupted(message: str, value: Any) -> IntegrityError:
            logger.error(f"Category tree integrity problem at {node.id}: {message}")
            return IntegrityError(message, field="parent", value=value, partial_path=list(reversed(chain)))

        while node.parent is not None:
            if node.parent in seen:
                raise corrupted(f"Cycle detected: {node.parent} is already on the path", node.parent)
            if len(chain) >= MAX_DEPTH:
                raise corrupted(f"Ancestor chain is deeper than {MAX_DEPTH} levels", node.parent)

            try:
                parent = await self.find_by_id(node.parent, field="parent")
            except IntegrityError as e:
                raise corrupted(e.message, node.parent) from e
            if parent is None:
                raise corrupted(f"Category '{node.name}' references missing parent {node.parent}", node.parent)
            if parent.level != node.level - 1:
                raise corrupted(
                    f"Category '{node.name}' is at level {node.level} but its parent "
                    f"'{parent.name}' is at level {parent.level}",
                    parent.id,
                )

            chain.append(parent)
            seen.add(parent.id)
            node = parent

        if node.level != CategoryLevel.DEPARTMENT:
            raise corrupted(f"Top ancestor '{node.name}' has no parent but is at level {node.level}", None)

        return list(reversed(chain))

    async def get_tree(self, active_only: bool = True) -> List[CategoryNode]:
        """Nested navigation tree built from a single sorted query"""
        query = {"isActive": True} if active_only else {}
        documents = await self.collection.find(query, sort=TREE_SORT).to_list(length=None)

        nodes: Dict[ObjectId, CategoryNode] = {}
        for document in documents:
            try:
                category = to_category(document)
            except IntegrityError as e:
                logger.warning(f"Leaving {document.get('_id')} out of the tree: {e.message}")
                continue
            nodes[category.id] = CategoryNode(
                id=category.id,
                name=category.name,
                description=category.description,
                image=category.image,
                level=category.level,
                sort_order=category.sort_order,
                parent=category.parent,
            )

        roots = []
        # Insertion order follows TREE_SORT, so siblings come out already ordered
        for node in nodes.values():
            if node.parent is None:
                roots.append(node)
            elif node.parent in nodes:
                nodes[node.parent].subcategories.append(node)
            else:
                logger.warning(f"Leaving '{node.name}' ({node.id}) out of the tree: parent {node.parent} not in result")
        return roots

    async def get_departments(self) -> List[DepartmentEntry]:
        """Active departments with their categories and subcategory names"""
        documents = await self.collection.find({"isActive": True}, sort=TREE_SORT).to_list(length=None)
        by_level: Dict[int, List[Category]] = {level: [] for level in CategoryLevel}
        for document in documents:
            try:
                category = to_category(document)
            except IntegrityError as e:
                logger.warning(f"Leaving {document.get('_id')} out of the departments: {e.message}")
                continue
            by_level[category.level].append(category)

        departments = []
        for department in by_level[CategoryLevel.DEPARTMENT]:
            entries = []
            for category in by_level[CategoryLevel.CATEGORY]:
                if category.parent != department.id:
                    continue
                subcategories = sorted(
                    sub.name for sub in by_level[CategoryLevel.SUBCATEGORY] if sub.parent == category.id
                )
                entries.append(DepartmentCategory(category=category.name, subcategories=subcategories))
            departments.append(DepartmentEntry(department=department.name, categories=entries))
        return departments
