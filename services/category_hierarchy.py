"""Category hierarchy service: the entry point for every category operation.

Each call is stateless: it reads what it needs from the store, validates,
and performs at most one write after every check has passed.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from errors import (
    CategoryError,
    CategoryInUse,
    CategoryNotFound,
    DuplicateName,
    GlobalCategoryNotEditable,
    GlobalCategoryUndeletable,
    ValidationError,
)
from logger import get_logger
from models.category import (
    MAX_DEPTH,
    Category,
    CategoryFilter,
    CategoryNode,
    CategoryType,
    Scope,
)
from models.payloads import CategoryCreate, CategoryUpdate, parse_payload
from models.usage import Dependencies, UsageStats

logger = get_logger("categories")


class CategoryHierarchyService:
    """Creates, edits, deletes and reads a user's category tree.

    Args:
        store: CategoryStore for persistence.
        validator: HierarchyValidator consulted before any parent change.
        inspector: DependencyInspector consulted before deletion.
    """

    def __init__(self, store, validator, inspector):
        self.store = store
        self.validator = validator
        self.inspector = inspector

    def create(self, owner_id: str, data: Dict[str, Any]) -> Category:
        """Create a category owned by owner_id.

        Args:
            owner_id: Authenticated owner.
            data: Payload with name, type, and optional color and parent_id.

        Returns:
            The created Category.

        Raises:
            ValidationError, DuplicateName, InvalidParent, TypeMismatch,
            MaxDepthExceeded.
        """
        with self._log_rejection("create", owner_id):
            self._require_owner(owner_id)
            payload = parse_payload(CategoryCreate, data)

            self._check_unique_name(owner_id, payload.type, payload.name)

            if payload.parent_id is not None:
                self.validator.validate(owner_id, payload.parent_id, payload.type)

            category = self.store.create(
                owner_id=owner_id,
                name=payload.name,
                category_type=payload.type,
                color=payload.color,
                parent_id=payload.parent_id,
            )

        logger.info(
            f"Created category {category.id} '{category.name}' "
            f"({category.type.value}) for owner {owner_id}"
        )
        return category

    def update(self, owner_id: str, category_id: str, data: Dict[str, Any]) -> Category:
        """Rename, recolor or reparent one of the owner's categories.

        Only fields present in data and different from the stored values are
        written. The category type can never change.

        Raises:
            CategoryNotFound, GlobalCategoryNotEditable, ValidationError,
            DuplicateName, InvalidParent, TypeMismatch, CircularReference,
            MaxDepthExceeded.
        """
        with self._log_rejection("update", owner_id, category_id):
            category = self._load_mutable(owner_id, category_id, action="update")
            changes = parse_payload(CategoryUpdate, data).changes()

            patch = {}

            if "name" in changes and changes["name"] != category.name:
                self._check_unique_name(
                    owner_id, category.type, changes["name"], exclude_id=category.id
                )
                patch["name"] = changes["name"]

            if "color" in changes and changes["color"] != category.color:
                patch["color"] = changes["color"]

            if "parent_id" in changes and changes["parent_id"] != category.parent_id:
                # Detaching to the root can neither deepen the tree nor loop it
                if changes["parent_id"] is not None:
                    self.validator.validate(
                        owner_id,
                        changes["parent_id"],
                        category.type,
                        child_id=category.id,
                    )
                patch["parent_id"] = changes["parent_id"]

            if not patch:
                return category

            updated = self.store.update(category.id, patch)

        logger.info(
            f"Updated category {category_id} for owner {owner_id}: {sorted(patch)}"
        )
        return updated

    def delete(self, owner_id: str, category_id: str) -> None:
        """Delete one of the owner's categories if nothing references it.

        Raises:
            CategoryNotFound, GlobalCategoryUndeletable, CategoryInUse.
        """
        with self._log_rejection("delete", owner_id, category_id):
            category = self._load_mutable(owner_id, category_id, action="delete")

            dependencies = self.inspector.dependencies(category)
            if not dependencies.can_delete:
                raise CategoryInUse(
                    category.id,
                    transactions=dependencies.transactions,
                    subcategories=dependencies.subcategories,
                    budgets=dependencies.budgets,
                )

            self.store.delete(category.id)

        logger.info(f"Deleted category {category_id} for owner {owner_id}")

    def get_hierarchy(
        self,
        owner_id: str,
        category_type: Optional[CategoryType] = None,
        include_global: bool = True,
    ) -> List[CategoryNode]:
        """Assemble the visible category forest with usage counts.

        Only categories without a parent start a tree, and nodes are attached
        down to MAX_DEPTH levels. With include_global=False an owned category
        filed under a global parent has no visible root, so it is left out
        together with its children; list() still returns it.

        Args:
            owner_id: Owner whose view is built.
            category_type: Optional type filter.
            include_global: Whether global categories are part of the view.

        Returns:
            Root CategoryNode objects ordered by name, children likewise.
        """
        scope = Scope(owner_id=owner_id, include_global=include_global)
        categories = self.store.find_by_scope(scope, category_type)
        usages = self.store.count_usages_many(c.id for c in categories)

        nodes = {c.id: CategoryNode(category=c, usage=usages[c.id]) for c in categories}
        children_of = {}
        for category in categories:
            children_of.setdefault(category.parent_id, []).append(nodes[category.id])

        roots = children_of.get(None, [])

        # Arena walk from the roots keeps the view bounded even on bad data
        stack = list(roots)
        while stack:
            node = stack.pop()
            if node.depth >= MAX_DEPTH - 1:
                continue
            for child in children_of.get(node.category.id, []):
                child.depth = node.depth + 1
                node.children.append(child)
                stack.append(child)

        return roots

    def check_dependencies(self, owner_id: str, category_id: str) -> Dependencies:
        """Report what blocks deleting a visible category.

        Raises:
            CategoryNotFound: If the category is not visible to owner_id.
        """
        return self.inspector.dependencies(self.get(owner_id, category_id))

    def get_usage_stats(self, owner_id: str, category_id: str) -> UsageStats:
        """Aggregate transaction counts and amounts for a visible category.

        Raises:
            CategoryNotFound: If the category is not visible to owner_id.
        """
        return self.inspector.usage_stats(self.get(owner_id, category_id))

    def get(
        self, owner_id: str, category_id: str, include_global: bool = True
    ) -> Category:
        """Get a single visible category.

        Raises:
            CategoryNotFound: If the category is not visible to owner_id.
        """
        scope = Scope(owner_id=owner_id, include_global=include_global)
        category = self.store.get(category_id, scope)
        if category is None:
            raise CategoryNotFound(category_id)
        return category

    def list(
        self,
        owner_id: str,
        criteria: Optional[CategoryFilter] = None,
        include_global: bool = True,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[Category]:
        """List visible categories matching optional criteria, by name."""
        scope = Scope(owner_id=owner_id, include_global=include_global)
        return self.store.find(scope, criteria, skip=skip, take=take)

    def count(
        self,
        owner_id: str,
        criteria: Optional[CategoryFilter] = None,
        include_global: bool = True,
    ) -> int:
        scope = Scope(owner_id=owner_id, include_global=include_global)
        return self.store.count(scope, criteria)

    def list_by_type(
        self, owner_id: str, category_type: CategoryType, include_global: bool = True
    ) -> List[Category]:
        return self.list(
            owner_id, CategoryFilter(type=CategoryType(category_type)), include_global
        )

    def search(
        self, owner_id: str, query: str, include_global: bool = True
    ) -> List[Category]:
        """Find visible categories whose name contains query (any case)."""
        return self.list(owner_id, CategoryFilter(name_contains=query), include_global)

    def _load_mutable(self, owner_id: str, category_id: str, action: str) -> Category:
        """Load a category the owner may change.

        Global categories are visible but never mutable; other owners'
        categories are not visible at all.
        """
        self._require_owner(owner_id)
        category = self.get(owner_id, category_id)

        if category.is_global:
            if action == "delete":
                raise GlobalCategoryUndeletable(
                    f"Global category {category_id} cannot be deleted",
                    {"category_id": category_id},
                )
            raise GlobalCategoryNotEditable(
                f"Global category {category_id} cannot be edited",
                {"category_id": category_id},
            )

        return category

    def _check_unique_name(
        self,
        owner_id: str,
        category_type: CategoryType,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        existing = self.store.find_by_name_in_scope(
            Scope(owner_id=owner_id, include_global=True),
            category_type,
            name,
            exclude_id=exclude_id,
        )
        if existing is not None:
            raise DuplicateName(
                f"A {CategoryType(category_type).value.lower()} category named "
                f"'{existing.name}' already exists",
                {"name": name, "existing_id": existing.id},
            )

    def _require_owner(self, owner_id: str) -> None:
        if not isinstance(owner_id, str) or not owner_id.strip():
            raise ValidationError(
                "An owner is required to change categories",
                {"fields": {"owner_id": "required"}},
            )

    @contextmanager
    def _log_rejection(self, action: str, owner_id: str, category_id: str = None):
        try:
            yield
        except CategoryError as e:
            target = f" {category_id}" if category_id else ""
            logger.info(
                f"Rejected {action}{target} for owner {owner_id}: {e.code} - {e.message}"
            )
            raise
