"""Usage counts and statistics attached to a category."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Usage:
    """Raw reference counts for one category.

    Attributes:
        incomes: Incomes referencing the category.
        expenses: Expenses referencing the category.
        children: Direct subcategories.
        budget_allocations: Budget allocations referencing the category.
    """

    incomes: int = 0
    expenses: int = 0
    children: int = 0
    budget_allocations: int = 0

    @property
    def transactions(self) -> int:
        return self.incomes + self.expenses

    def to_dict(self) -> dict:
        return {
            "incomes": self.incomes,
            "expenses": self.expenses,
            "transactions": self.transactions,
            "children": self.children,
            "budget_allocations": self.budget_allocations,
        }


@dataclass
class Dependencies:
    """What blocks (or doesn't block) deleting a category."""

    transactions: int
    subcategories: int
    budgets: int
    can_delete: bool

    def to_dict(self) -> dict:
        return {
            "transactions": self.transactions,
            "subcategories": self.subcategories,
            "budgets": self.budgets,
            "can_delete": self.can_delete,
        }


@dataclass
class UsageStats:
    """Aggregated transaction figures for one category."""

    category_id: str
    income_count: int
    expense_count: int
    income_total: Decimal
    expense_total: Decimal
    last_used: Optional[datetime]

    @property
    def transaction_count(self) -> int:
        return self.income_count + self.expense_count

    @property
    def total_amount(self) -> Decimal:
        return self.income_total + self.expense_total
