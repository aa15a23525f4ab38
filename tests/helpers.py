"""Helper utilities for tests."""

from pathlib import Path
import sqlite3
import uuid

OWNER = "user-1"
OTHER_OWNER = "user-2"


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        with open(migration_file, "r") as f:
            conn.executescript(f.read())

    conn.commit()


def add_income(conn, category_id, amount="100.00", income_date="2025-01-15", owner_id="user-1"):
    """Insert an income filed under a category and return its id."""
    income_id = uuid.uuid4().hex
    conn.execute(
        """
        INSERT INTO incomes (id, owner_id, category_id, description, amount, income_date)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (income_id, owner_id, category_id, "Income", float(amount), income_date),
    )
    conn.commit()
    return income_id


def add_expense(conn, category_id, amount="50.00", created_at="2025-01-20 10:00:00", owner_id="user-1"):
    """Insert an expense filed under a category and return its id."""
    expense_id = uuid.uuid4().hex
    conn.execute(
        """
        INSERT INTO expenses (id, owner_id, category_id, description, amount, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (expense_id, owner_id, category_id, "Expense", float(amount), created_at),
    )
    conn.commit()
    return expense_id


def add_budget_allocation(conn, category_id, amount="200.00", owner_id="user-1"):
    """Insert a monthly budget with one allocation for a category."""
    budget_id = uuid.uuid4().hex
    allocation_id = uuid.uuid4().hex
    conn.execute(
        """
        INSERT INTO budgets (id, owner_id, name, period, start_date, end_date)
        VALUES (?, ?, ?, 'MONTHLY', '2025-01-01', '2025-01-31')
        """,
        (budget_id, owner_id, "January"),
    )
    conn.execute(
        "INSERT INTO budget_allocations (id, budget_id, category_id, amount) VALUES (?, ?, ?, ?)",
        (allocation_id, budget_id, category_id, float(amount)),
    )
    conn.commit()
    return allocation_id


def remove_row(conn, table, row_id):
    conn.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
    conn.commit()
