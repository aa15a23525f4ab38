#!/usr/bin/env python3

import json
import re
import sys
from pathlib import Path

from config import get_seed_file
from logger import get_logger
from models.category import MAX_DEPTH, CategoryFilter, CategoryType, Scope

logger = get_logger()


def _owner(args, services):
    return args.owner or services.config.owner_id


def _category_type(value):
    return CategoryType(value.upper()) if value else None


def _describe(category):
    scope = "global" if category.is_global else "own"
    color = f" {category.color}" if category.color else ""
    return f"{category.name} [{category.type.value}, {scope}{color}] (ID: {category.id})"


def cmd_list(args, services):
    """List categories visible to the owner."""
    criteria = CategoryFilter(
        type=_category_type(args.type), name_contains=args.search
    )
    categories = services.categories.list(
        _owner(args, services), criteria, include_global=not args.no_global
    )

    if not categories:
        logger.info("No categories found.")
        return

    logger.info("\nCategories:")
    logger.info("=" * 80)
    for category in categories:
        logger.info(_describe(category))
        if category.parent_id:
            logger.info(f"  Parent ID: {category.parent_id}")

    logger.info(f"\nTotal categories: {len(categories)}")


def cmd_tree(args, services):
    """Print the category hierarchy with usage counts."""
    roots = services.categories.get_hierarchy(
        _owner(args, services),
        _category_type(args.type),
        include_global=not args.no_global,
    )

    if not roots:
        logger.info("No categories found.")
        return

    # Depth-first, children printed in name order
    stack = list(reversed(roots))
    while stack:
        node = stack.pop()
        indent = "  " * node.depth
        logger.info(
            f"{indent}- {_describe(node.category)} "
            f"txns={node.usage.transactions} budgets={node.usage.budget_allocations}"
        )
        stack.extend(reversed(node.children))


def cmd_show(args, services):
    """Show one category with its dependencies and usage stats."""
    owner_id = _owner(args, services)
    category = services.categories.get(owner_id, args.category_id)
    dependencies = services.categories.check_dependencies(owner_id, category.id)
    stats = services.categories.get_usage_stats(owner_id, category.id)

    logger.info(_describe(category))
    if category.parent_id:
        logger.info(f"  Parent ID: {category.parent_id}")
    logger.info(f"  Transactions: {stats.transaction_count} "
                f"(incomes {stats.income_count}, expenses {stats.expense_count})")
    logger.info(f"  Total amount: {stats.total_amount}")
    logger.info(f"  Last used: {stats.last_used or 'never'}")
    logger.info(f"  Subcategories: {dependencies.subcategories}")
    logger.info(f"  Budget allocations: {dependencies.budgets}")
    logger.info(f"  Can delete: {'yes' if dependencies.can_delete else 'no'}")


def cmd_create(args, services):
    """Create a new category."""
    data = {"name": args.name, "type": args.type.upper()}
    if args.color:
        data["color"] = args.color
    if args.parent:
        data["parent_id"] = args.parent

    category = services.categories.create(_owner(args, services), data)

    logger.info(f"\n✓ Category created successfully with ID: {category.id}")
    logger.info(f"  {_describe(category)}")


def cmd_update(args, services):
    """Rename, recolor or move a category."""
    data = {}
    if args.name is not None:
        data["name"] = args.name
    if args.clear_color:
        data["color"] = None
    elif args.color is not None:
        data["color"] = args.color
    if args.root:
        data["parent_id"] = None
    elif args.parent is not None:
        data["parent_id"] = args.parent

    if not data:
        logger.error("Nothing to update. Pass --name, --color, --parent or --root.")
        sys.exit(1)

    category = services.categories.update(_owner(args, services), args.category_id, data)
    logger.info(f"✓ Category updated: {_describe(category)}")


def cmd_delete(args, services):
    """Delete a category by ID."""
    owner_id = _owner(args, services)
    category = services.categories.get(owner_id, args.category_id)

    logger.info("\nCategory to delete:")
    logger.info(f"  {_describe(category)}")

    if not args.yes:
        confirm = (
            input("\nAre you sure you want to delete this category? (yes/no): ")
            .strip()
            .lower()
        )
        if confirm != "yes":
            logger.info("Deletion cancelled.")
            return

    services.categories.delete(owner_id, category.id)
    logger.info(f"✓ Category '{category.name}' deleted successfully.")


def cmd_deps(args, services):
    """Show what blocks deleting a category."""
    dependencies = services.categories.check_dependencies(
        _owner(args, services), args.category_id
    )
    logger.info(json.dumps(dependencies.to_dict(), indent=2))


def cmd_search(args, services):
    """Search categories by name."""
    categories = services.categories.search(
        _owner(args, services), args.query, include_global=not args.no_global
    )

    if not categories:
        logger.info(f"No categories matching '{args.query}'.")
        return

    for category in categories:
        logger.info(_describe(category))
    logger.info(f"\nMatches: {len(categories)}")


def global_category_id(name, category_type):
    """Stable ID for a seeded global category, e.g. "rent-mortgage-expense"."""
    return re.sub(r"[^a-z0-9]", "-", f"{name}-{CategoryType(category_type).value}".lower())


def _unused_global_id(store, name, category_type):
    """global_category_id, suffixed when another name already folded to it."""
    base_id = global_category_id(name, category_type)
    category_id = base_id
    suffix = 2
    while store.exists(category_id):
        category_id = f"{base_id}-{suffix}"
        suffix += 1
    return category_id


def seed_global_categories(services, entries):
    """Insert missing global categories from nested seed entries.

    Entries are dicts with name, type, optional color and optional children.
    Children inherit their parent's type when they do not set one. Entries
    whose name already exists among the global categories of the same type are
    skipped, but their children are still processed under the existing row,
    counting levels from where that row really sits. An entry whose name an
    owner already uses for that type is skipped together with its children.

    Args:
        services: Services container.
        entries: List of top-level seed entries.

    Returns:
        Tuple of (created count, skipped count).
    """
    store = services.category_store
    scope = Scope.global_only()
    created_count = 0
    skipped_count = 0

    # (entry, parent category or None, level the entry would land on)
    stack = [(entry, None, 0) for entry in reversed(entries)]
    while stack:
        entry, parent, level = stack.pop()
        name = (entry.get("name") or "").strip()
        if not name:
            logger.warning("Skipping seed entry with no name")
            continue

        category_type = entry.get("type") or (parent.type.value if parent else None)
        try:
            category_type = CategoryType(category_type)
        except ValueError:
            logger.warning(f"Skipping '{name}': invalid type {category_type!r}")
            continue

        if parent is not None and parent.type != category_type:
            logger.warning(f"Skipping '{name}': type differs from parent '{parent.name}'")
            continue

        category = store.find_by_name_in_scope(scope, category_type, name)
        if category is not None:
            level = services.hierarchy.depth(category, scope)
            logger.info(f"{'  ' * level}⊘ Skipped '{name}' (already exists)")
            skipped_count += 1
        else:
            if level >= MAX_DEPTH:
                logger.warning(f"Skipping '{name}': deeper than {MAX_DEPTH} levels")
                continue

            owned = store.find_owned_by_name(category_type, name)
            if owned:
                owners = ", ".join(sorted({c.owner_id for c in owned}))
                logger.warning(
                    f"Skipping '{name}' and its children: name already used by {owners}"
                )
                skipped_count += 1
                continue

            category = store.create(
                owner_id=None,
                name=name,
                category_type=category_type,
                color=entry.get("color"),
                parent_id=parent.id if parent else None,
                category_id=_unused_global_id(store, name, category_type),
            )
            logger.info(f"{'  ' * level}✓ Created '{name}' (ID: {category.id})")
            created_count += 1

        for child in reversed(entry.get("children", [])):
            stack.append((child, category, level + 1))

    return created_count, skipped_count


def cmd_seed(args, services):
    """Seed global categories from a JSON file."""
    seed_file = Path(args.file) if args.file else get_seed_file(services.config)

    if not seed_file.exists():
        logger.error(f"Seed file not found: {seed_file}")
        sys.exit(1)

    try:
        with open(seed_file, "r") as f:
            entries = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Error parsing JSON file: {e}")
        sys.exit(1)

    logger.info(f"\nSeeding global categories from {seed_file}")
    logger.info("=" * 80)

    created_count, skipped_count = seed_global_categories(services, entries)

    logger.info("=" * 80)
    logger.info("\nSeeding complete!")
    logger.info(f"Created: {created_count}")
    logger.info(f"Skipped: {skipped_count}")
    logger.info(f"Total: {created_count + skipped_count}")


def setup_parser(subparsers):
    """Setup categories subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "categories",
        help="Manage categories",
        description="Create, list, move and delete income and expense categories",
    )
    parser.add_argument(
        "--owner", help="Act as this owner (defaults to owner_id from the config)"
    )

    categories_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available category commands",
        dest="subcommand",
        required=True,
    )

    type_choices = [t.value for t in CategoryType] + [t.value.lower() for t in CategoryType]

    list_parser = categories_subparsers.add_parser("list", help="List categories")
    list_parser.add_argument("--type", choices=type_choices)
    list_parser.add_argument("--search", help="Only names containing this text")
    list_parser.add_argument(
        "--no-global", action="store_true", help="Hide global categories"
    )
    list_parser.set_defaults(func=cmd_list)

    tree_parser = categories_subparsers.add_parser(
        "tree", help="Show the category hierarchy"
    )
    tree_parser.add_argument("--type", choices=type_choices)
    tree_parser.add_argument(
        "--no-global", action="store_true", help="Hide global categories"
    )
    tree_parser.set_defaults(func=cmd_tree)

    show_parser = categories_subparsers.add_parser(
        "show", help="Show a category with usage stats"
    )
    show_parser.add_argument("category_id", help="ID of the category")
    show_parser.set_defaults(func=cmd_show)

    create_parser = categories_subparsers.add_parser(
        "create", help="Create a new category"
    )
    create_parser.add_argument("name", help="Category name")
    create_parser.add_argument("--type", choices=type_choices, required=True)
    create_parser.add_argument("--color", help="Color code, e.g. #ef4444")
    create_parser.add_argument("--parent", help="Parent category ID")
    create_parser.set_defaults(func=cmd_create)

    update_parser = categories_subparsers.add_parser(
        "update", help="Rename, recolor or move a category"
    )
    update_parser.add_argument("category_id", help="ID of the category")
    update_parser.add_argument("--name", help="New name")
    update_parser.add_argument("--color", help="New color code")
    update_parser.add_argument(
        "--clear-color", action="store_true", help="Remove the color"
    )
    update_parser.add_argument("--parent", help="New parent category ID")
    update_parser.add_argument(
        "--root", action="store_true", help="Detach the category from its parent"
    )
    update_parser.set_defaults(func=cmd_update)

    delete_parser = categories_subparsers.add_parser(
        "delete", help="Delete a category by ID"
    )
    delete_parser.add_argument("category_id", help="ID of the category to delete")
    delete_parser.add_argument(
        "--yes", action="store_true", help="Do not ask for confirmation"
    )
    delete_parser.set_defaults(func=cmd_delete)

    deps_parser = categories_subparsers.add_parser(
        "deps", help="Show what blocks deleting a category"
    )
    deps_parser.add_argument("category_id", help="ID of the category")
    deps_parser.set_defaults(func=cmd_deps)

    search_parser = categories_subparsers.add_parser(
        "search", help="Search categories by name"
    )
    search_parser.add_argument("query", help="Text to look for (any case)")
    search_parser.add_argument(
        "--no-global", action="store_true", help="Hide global categories"
    )
    search_parser.set_defaults(func=cmd_search)

    seed_parser = categories_subparsers.add_parser(
        "seed", help="Seed global categories from a JSON file"
    )
    seed_parser.add_argument(
        "--file", help="Seed file (defaults to db/seed/categories.json)"
    )
    seed_parser.set_defaults(func=cmd_seed)
