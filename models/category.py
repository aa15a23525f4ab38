"""Category model and the query structures used to look categories up."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from models.usage import Usage

# Root is level 0, so a category may have at most two ancestors
MAX_DEPTH = 3


class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


@dataclass
class Category:
    """Represents an income or expense category.

    Attributes:
        id: Opaque unique identifier, assigned at creation.
        owner_id: Owning user, or None for a global (system-provided) category.
        name: Display name, unique per owner scope and type (case-insensitive).
        type: INCOME or EXPENSE, immutable after creation.
        color: Optional "#RRGGBB" color code.
        parent_id: Optional parent category ID.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    id: str
    owner_id: Optional[str]
    name: str
    type: CategoryType
    color: Optional[str] = None
    parent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_global(self) -> bool:
        return self.owner_id is None

    def to_dict(self) -> dict:
        """Convert category to a plain dictionary for the calling layer."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "type": self.type.value,
            "color": self.color,
            "parent_id": self.parent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class Scope:
    """Which categories a caller can see: their own, plus globals if asked.

    An owner_id of None means the global categories only.
    """

    owner_id: Optional[str]
    include_global: bool = True

    @classmethod
    def global_only(cls) -> "Scope":
        return cls(owner_id=None)


@dataclass(frozen=True)
class CategoryFilter:
    """Optional criteria for category listings.

    Attributes:
        type: Only categories of this type.
        parent_id: Only direct children of this category.
        roots_only: Only categories without a parent.
        name_contains: Case-insensitive substring of the name.
    """

    type: Optional[CategoryType] = None
    parent_id: Optional[str] = None
    roots_only: bool = False
    name_contains: Optional[str] = None


@dataclass
class CategoryNode:
    """A category in an assembled tree view, with its usage counts."""

    category: Category
    usage: Usage
    depth: int = 0
    children: List["CategoryNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.category.to_dict()
        data["depth"] = self.depth
        data["usage"] = self.usage.to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data
