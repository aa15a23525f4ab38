"""Dependency inspection: what references a category before it is deleted."""

from models.category import Category
from models.usage import Dependencies, UsageStats


class DependencyInspector:
    """Read-only aggregation of the rows that reference a category.

    A category can be deleted only when no income, expense, subcategory or
    budget allocation references it and it is not a global category.
    """

    def __init__(self, store):
        """Initialize the inspector.

        Args:
            store: CategoryStore used for the count queries.
        """
        self.store = store

    def dependencies(self, category: Category) -> Dependencies:
        """Count everything that blocks deleting a category.

        Args:
            category: The category to inspect.

        Returns:
            Dependencies with transaction, subcategory and budget counts.
        """
        usage = self.store.count_usages(category.id)
        return Dependencies(
            transactions=usage.transactions,
            subcategories=usage.children,
            budgets=usage.budget_allocations,
            can_delete=(
                not category.is_global
                and usage.transactions == 0
                and usage.children == 0
                and usage.budget_allocations == 0
            ),
        )

    def can_delete(self, category: Category) -> bool:
        return self.dependencies(category).can_delete

    def usage_stats(self, category: Category) -> UsageStats:
        """Aggregate the incomes and expenses filed under a category."""
        return self.store.usage_totals(category.id)
