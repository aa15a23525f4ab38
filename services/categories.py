"""Category store: durable access to category records, no business rules."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from errors import CategoryNotFound
from models.category import Category, CategoryFilter, CategoryType, Scope
from models.usage import Usage, UsageStats

_CATEGORY_SELECT_FIELDS = (
    "id, owner_id, name, type, color, parent_id, created_at, updated_at"
)

# Usage tables and the Usage attribute each one counts into
_USAGE_SOURCES = {
    "incomes": "incomes",
    "expenses": "expenses",
    "categories": "children",
    "budget_allocations": "budget_allocations",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_name(name: str) -> str:
    return name.strip().casefold()


def _scope_clause(scope: Scope):
    """Build the visibility condition for a scope.

    Returns:
        Tuple of (SQL condition, params).
    """
    if scope.owner_id is None:
        return "owner_id IS NULL", []
    if scope.include_global:
        return "(owner_id = ? OR owner_id IS NULL)", [scope.owner_id]
    return "owner_id = ?", [scope.owner_id]


class CategoryStore:
    """Reads and writes category rows.

    Every read takes an explicit Scope; writes address rows by id only and
    leave all validation to the caller.
    """

    def __init__(self, db_manager):
        """Initialize the category store.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def get(self, category_id: str, scope: Scope) -> Optional[Category]:
        """Get a single category visible in scope.

        Args:
            category_id: The category ID to find.
            scope: Visibility scope of the caller.

        Returns:
            Category object if found and visible, None otherwise.
        """
        condition, params = _scope_clause(scope)
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ? AND {condition}",
                [category_id] + params,
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def get_children(self, category_id: str, scope: Scope) -> List[Category]:
        """Get the direct children of a category, ordered by name."""
        return self.find(scope, CategoryFilter(parent_id=category_id))

    def find_by_scope(
        self, scope: Scope, category_type: Optional[CategoryType] = None
    ) -> List[Category]:
        """Get every category visible in scope, optionally of one type."""
        return self.find(scope, CategoryFilter(type=category_type))

    def find(
        self,
        scope: Scope,
        criteria: Optional[CategoryFilter] = None,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[Category]:
        """Get categories visible in scope that match the criteria.

        Args:
            scope: Visibility scope of the caller.
            criteria: Optional filter. name_contains is matched case-insensitively.
            skip: Number of matching rows to skip.
            take: Maximum number of rows to return (None for all).

        Returns:
            List of Category objects ordered by name.
        """
        criteria = criteria or CategoryFilter()
        condition, params = _scope_clause(scope)

        query = f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE {condition}"

        if criteria.type is not None:
            query += " AND type = ?"
            params.append(CategoryType(criteria.type).value)

        if criteria.parent_id is not None:
            query += " AND parent_id = ?"
            params.append(criteria.parent_id)

        if criteria.roots_only:
            query += " AND parent_id IS NULL"

        query += " ORDER BY name COLLATE NOCASE, id"

        with self.db_manager.connect() as conn:
            cursor = conn.execute(query, params)
            categories = [self._row_to_category(row) for row in cursor.fetchall()]

        # SQLite's LIKE and LOWER only fold ASCII, so match names here
        if criteria.name_contains:
            needle = _normalize_name(criteria.name_contains)
            categories = [c for c in categories if needle in c.name.casefold()]

        end = skip + take if take is not None else None
        return categories[skip:end]

    def count(self, scope: Scope, criteria: Optional[CategoryFilter] = None) -> int:
        """Count categories visible in scope that match the criteria."""
        return len(self.find(scope, criteria))

    def find_by_name_in_scope(
        self,
        scope: Scope,
        category_type: CategoryType,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Category]:
        """Find a category of the given type whose name collides with name.

        Names are compared trimmed and case-folded, so "Rent" and " rent"
        collide.

        Args:
            scope: Visibility scope of the caller.
            category_type: Only categories of this type are compared.
            name: Candidate name.
            exclude_id: Category to ignore (the one being renamed).

        Returns:
            The colliding Category, or None.
        """
        wanted = _normalize_name(name)
        for category in self.find_by_scope(scope, category_type):
            if category.id == exclude_id:
                continue
            if _normalize_name(category.name) == wanted:
                return category
        return None

    def find_owned_by_name(self, category_type: CategoryType, name: str) -> List[Category]:
        """Find owned categories of any owner whose name collides with name.

        Used before adding a global category, which every owner would see.
        """
        wanted = _normalize_name(name)
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories "
                "WHERE owner_id IS NOT NULL AND type = ? ORDER BY owner_id, id",
                [CategoryType(category_type).value],
            )
            rows = cursor.fetchall()
        categories = [self._row_to_category(row) for row in rows]
        return [c for c in categories if _normalize_name(c.name) == wanted]

    def exists(self, category_id: str) -> bool:
        """Whether any row, of any owner, uses category_id."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute("SELECT 1 FROM categories WHERE id = ?", (category_id,))
            return cursor.fetchone() is not None

    def create(
        self,
        owner_id: Optional[str],
        name: str,
        category_type: CategoryType,
        color: Optional[str] = None,
        parent_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> Category:
        """Insert a new category row.

        Args:
            owner_id: Owning user, or None for a global category.
            name: Category name.
            category_type: INCOME or EXPENSE.
            color: Optional color code.
            parent_id: Optional parent category ID.
            category_id: Explicit ID (used for seeded rows); a random one otherwise.

        Returns:
            The created Category object.

        Raises:
            sqlite3.IntegrityError: If the id already exists or the parent is gone.
        """
        category_id = category_id or uuid.uuid4().hex
        timestamp = _now()

        with self.db_manager.connect() as conn:
            conn.execute(
                f"""
                INSERT INTO categories ({_CATEGORY_SELECT_FIELDS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    category_id,
                    owner_id,
                    name,
                    CategoryType(category_type).value,
                    color,
                    parent_id,
                    timestamp,
                    timestamp,
                ),
            )
            conn.commit()

        return Category(
            id=category_id,
            owner_id=owner_id,
            name=name,
            type=CategoryType(category_type),
            color=color,
            parent_id=parent_id,
            created_at=datetime.fromisoformat(timestamp),
            updated_at=datetime.fromisoformat(timestamp),
        )

    def update(self, category_id: str, patch: Dict[str, object]) -> Category:
        """Update the given fields of a category.

        Args:
            category_id: The category ID to update.
            patch: Mapping of field name to new value. Supported fields:
                   'name', 'color', 'parent_id'.

        Returns:
            The updated Category object.

        Raises:
            ValueError: If unsupported or no field names are provided.
            CategoryNotFound: If the row no longer exists.
        """
        if not patch:
            raise ValueError("patch cannot be empty")

        supported_fields = {"name", "color", "parent_id"}
        invalid_fields = set(patch) - supported_fields
        if invalid_fields:
            raise ValueError(f"Unsupported field names: {invalid_fields}")

        field_names = sorted(patch)
        set_clause = ", ".join([f"{field} = ?" for field in field_names])
        params = [patch[field] for field in field_names]
        params.extend([_now(), category_id])

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"UPDATE categories SET {set_clause}, updated_at = ? WHERE id = ?",
                params,
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise CategoryNotFound(category_id)

            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ?",
                (category_id,),
            )
            return self._row_to_category(cursor.fetchone())

    def delete(self, category_id: str) -> None:
        """Delete a category by ID.

        Raises:
            CategoryNotFound: If the row no longer exists.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            conn.commit()

            if cursor.rowcount == 0:
                raise CategoryNotFound(category_id)

    def count_usages(self, category_id: str) -> Usage:
        """Count the rows referencing a category."""
        return self.count_usages_many([category_id])[category_id]

    def count_usages_many(self, category_ids: Iterable[str]) -> Dict[str, Usage]:
        """Count the rows referencing each of several categories at once.

        Children are counted regardless of their owner.

        Returns:
            Dictionary of category ID to Usage. Every requested ID is present.
        """
        category_ids = list(dict.fromkeys(category_ids))
        usages = {category_id: Usage() for category_id in category_ids}
        if not category_ids:
            return usages

        placeholders = ", ".join(["?"] * len(category_ids))

        with self.db_manager.connect() as conn:
            for table, attribute in _USAGE_SOURCES.items():
                column = "parent_id" if table == "categories" else "category_id"
                cursor = conn.execute(
                    f"""
                    SELECT {column}, COUNT(*)
                    FROM {table}
                    WHERE {column} IN ({placeholders})
                    GROUP BY {column}
                    """,
                    category_ids,
                )
                for category_id, count in cursor.fetchall():
                    setattr(usages[category_id], attribute, count)

        return usages

    def usage_totals(self, category_id: str) -> UsageStats:
        """Aggregate income and expense amounts for a category."""
        with self.db_manager.connect() as conn:
            income_count, income_total, income_last = conn.execute(
                """
                SELECT COUNT(*), COALESCE(SUM(amount), 0), MAX(income_date)
                FROM incomes
                WHERE category_id = ?
                """,
                (category_id,),
            ).fetchone()
            expense_count, expense_total, expense_last = conn.execute(
                """
                SELECT COUNT(*), COALESCE(SUM(amount), 0), MAX(created_at)
                FROM expenses
                WHERE category_id = ?
                """,
                (category_id,),
            ).fetchone()

        last_used = [
            datetime.fromisoformat(value)
            for value in (income_last, expense_last)
            if value is not None
        ]

        return UsageStats(
            category_id=category_id,
            income_count=income_count,
            expense_count=expense_count,
            income_total=_to_decimal(income_total),
            expense_total=_to_decimal(expense_total),
            last_used=max(last_used) if last_used else None,
        )

    def _row_to_category(self, row: tuple) -> Category:
        """Convert a database row to a Category object."""
        return Category(
            id=row[0],
            owner_id=row[1],
            name=row[2],
            type=CategoryType(row[3]),
            color=row[4],
            parent_id=row[5],
            created_at=datetime.fromisoformat(row[6]),
            updated_at=datetime.fromisoformat(row[7]),
        )


def _to_decimal(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))
