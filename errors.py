"""Errors raised by the category hierarchy engine.

Every error carries a stable ``code`` the calling layer can map to a user
facing message, plus a ``details`` dict with the offending ids or counts.
"""

from typing import Any, Dict, Optional


class CategoryError(Exception):
    """Base class for all expected category failures."""

    code = "CATEGORY_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for the calling layer."""
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(CategoryError):
    """Malformed name, color, type or parent id."""

    code = "VALIDATION_ERROR"


class CategoryNotFound(CategoryError):
    """The id does not resolve within the caller's scope."""

    code = "CATEGORY_NOT_FOUND"

    def __init__(self, category_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"Category {category_id} not found",
            {"category_id": category_id},
        )
        self.category_id = category_id


class DuplicateName(CategoryError):
    code = "DUPLICATE_NAME"


class InvalidParent(CategoryError):
    """The proposed parent is missing or not visible to the owner."""

    code = "INVALID_PARENT"


class TypeMismatch(CategoryError):
    code = "TYPE_MISMATCH"


class CircularReference(CategoryError):
    code = "CIRCULAR_REFERENCE"


class MaxDepthExceeded(CategoryError):
    code = "MAX_DEPTH_EXCEEDED"


class GlobalCategoryNotEditable(CategoryError):
    code = "GLOBAL_CATEGORY_NOT_EDITABLE"


class GlobalCategoryUndeletable(CategoryError):
    code = "GLOBAL_CATEGORY_UNDELETABLE"


class CategoryInUse(CategoryError):
    """Deletion blocked by transactions, subcategories or budget allocations."""

    code = "CATEGORY_IN_USE"

    def __init__(self, category_id: str, transactions: int, subcategories: int, budgets: int):
        blockers = []
        if transactions:
            blockers.append(f"{transactions} transaction(s)")
        if subcategories:
            blockers.append(f"{subcategories} subcategory(ies)")
        if budgets:
            blockers.append(f"{budgets} budget allocation(s)")
        super().__init__(
            f"Category {category_id} is in use by " + ", ".join(blockers),
            {
                "category_id": category_id,
                "transactions": transactions,
                "subcategories": subcategories,
                "budgets": budgets,
            },
        )
        self.transactions = transactions
        self.subcategories = subcategories
        self.budgets = budgets
