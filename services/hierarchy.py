"""Structural validation of proposed parent/child links between categories.

Categories form a forest addressed by id. Both walks below are iterative and
track visited ids, so malformed data (a cycle already present in storage)
is reported instead of looping forever.
"""

from typing import Dict, List, Optional

from errors import CircularReference, InvalidParent, MaxDepthExceeded, TypeMismatch
from logger import get_logger
from models.category import MAX_DEPTH, Category, CategoryType, Scope

logger = get_logger("hierarchy")


class HierarchyValidator:
    """Decides whether a proposed parent keeps the category tree valid.

    The validator never writes; it is called immediately before a create or
    a parent change is persisted.
    """

    def __init__(self, store):
        """Initialize the validator.

        Args:
            store: CategoryStore used to resolve parents and children.
        """
        self.store = store

    def validate(
        self,
        owner_id: str,
        parent_id: str,
        child_type: CategoryType,
        child_id: Optional[str] = None,
    ) -> Category:
        """Check a proposed parent for a new or existing category.

        Checks run in order: the parent must be visible, share the child's
        type, not create a cycle (only when child_id is given), and keep every
        affected node within MAX_DEPTH levels.

        Args:
            owner_id: Owner performing the change.
            parent_id: Proposed parent category ID.
            child_type: Type of the category being attached.
            child_id: ID of the category being moved, None for a new category.

        Returns:
            The resolved parent Category.

        Raises:
            InvalidParent: Parent does not exist or is not visible to owner_id.
            TypeMismatch: Parent type differs from child_type.
            CircularReference: The child would become its own ancestor.
            MaxDepthExceeded: A node would end up on a fourth level.
        """
        scope = Scope(owner_id=owner_id, include_global=True)

        parent = self.store.get(parent_id, scope)
        if parent is None:
            raise InvalidParent(
                f"Parent category {parent_id} not found",
                {"parent_id": parent_id},
            )

        if parent.type != CategoryType(child_type):
            raise TypeMismatch(
                f"Parent category type {parent.type.value} does not match "
                f"{CategoryType(child_type).value}",
                {
                    "parent_id": parent_id,
                    "parent_type": parent.type.value,
                    "child_type": CategoryType(child_type).value,
                },
            )

        ancestors = self.ancestors(parent, scope)
        subtree_height = 0

        if child_id is not None:
            if parent_id == child_id:
                raise CircularReference(
                    "A category cannot be its own parent",
                    {"category_id": child_id, "parent_id": parent_id},
                )

            if any(ancestor.id == child_id for ancestor in ancestors):
                raise CircularReference(
                    f"Category {child_id} is an ancestor of {parent_id}",
                    {"category_id": child_id, "parent_id": parent_id},
                )

            descendants = self.descendant_levels(child_id, scope)
            if parent_id in descendants:
                raise CircularReference(
                    f"Category {parent_id} is a descendant of {child_id}",
                    {"category_id": child_id, "parent_id": parent_id},
                )
            subtree_height = max(descendants.values(), default=0)

        # Levels are 0-based: parent sits at len(ancestors), the child one below
        deepest_level = len(ancestors) + 1 + subtree_height
        logger.debug(
            f"Parent {parent_id} has {len(ancestors)} ancestor(s); "
            f"deepest affected level would be {deepest_level}"
        )
        if len(ancestors) >= MAX_DEPTH - 1 or deepest_level > MAX_DEPTH - 1:
            raise MaxDepthExceeded(
                f"Category hierarchy cannot exceed {MAX_DEPTH} levels",
                {
                    "parent_id": parent_id,
                    "category_id": child_id,
                    "max_depth": MAX_DEPTH,
                },
            )

        return parent

    def ancestors(self, category: Category, scope: Scope) -> List[Category]:
        """Walk parent links from a category up to its root.

        Args:
            category: Starting category (not included in the result).
            scope: Visibility scope used to resolve each parent.

        Returns:
            Ancestors ordered from the direct parent up to the root.

        Raises:
            InvalidParent: A parent link points at a missing category.
            CircularReference: The stored chain loops back on itself.
        """
        chain = []
        seen = {category.id}
        current = category

        while current.parent_id is not None:
            if current.parent_id in seen:
                raise CircularReference(
                    f"Stored hierarchy loops at category {current.parent_id}",
                    {"category_id": current.parent_id},
                )
            parent = self.store.get(current.parent_id, scope)
            if parent is None:
                # Deleted by a concurrent request between reads
                raise InvalidParent(
                    f"Parent category {current.parent_id} not found",
                    {"parent_id": current.parent_id},
                )
            seen.add(parent.id)
            chain.append(parent)
            current = parent

        return chain

    def depth(self, category: Category, scope: Scope) -> int:
        """Level of a category in its tree (root = 0)."""
        return len(self.ancestors(category, scope))

    def descendant_levels(self, category_id: str, scope: Scope) -> Dict[str, int]:
        """Collect every descendant of a category, breadth first.

        Args:
            category_id: Root of the subtree (not included in the result).
            scope: Visibility scope used to list children.

        Returns:
            Dictionary of descendant ID to its level below category_id
            (direct children are level 1).
        """
        levels = {}
        frontier = [category_id]
        level = 0

        while frontier:
            level += 1
            next_frontier = []
            for parent_id in frontier:
                for child in self.store.get_children(parent_id, scope):
                    if child.id in levels or child.id == category_id:
                        continue
                    levels[child.id] = level
                    next_frontier.append(child.id)
            frontier = next_frontier

        return levels
