from typing import Any, Optional


class CatalogError(Exception):
    """Base error for category catalog operations"""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value

    def to_dict(self) -> dict:
        return {
            "detail": self.message,
            "field": self.field,
            "value": None if self.value is None else str(self.value),
        }


class ValidationError(CatalogError):
    """Malformed or out-of-range input"""


class NotFoundError(CatalogError):
    """A referenced category id does not exist"""


class ConflictError(CatalogError):
    """The change would break level/parent consistency of existing records"""


class IntegrityError(CatalogError):
    """Structural corruption found while walking the tree"""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, partial_path: Optional[list] = None):
        super().__init__(message, field=field, value=value)
        # Ancestors resolved before the problem, root first
        self.partial_path = partial_path or []
