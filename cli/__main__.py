#!/usr/bin/env python3
"""
Finanzas CLI - command-line interface for the category hierarchy.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    categories   Manage income and expense categories
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli categories seed
    python -m cli categories tree --type EXPENSE
    python -m cli categories create Rent --type EXPENSE --color "#dc2626"
    python -m cli categories update <id> --parent <parent-id>
    python -m cli categories delete <id>
"""

import sys
import argparse
from pathlib import Path
from cli import categories, migrate
from config import load_config
from errors import CategoryError
from services.base import Services
from db.manager import DatabaseManager
from logger import get_logger, setup_logging

logger = get_logger()


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Finanzas - Income and expense category management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to the config file (defaults to ~/.config/finanzas.toml)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config(args.config)
            setup_logging(config)

            # categories go through the services container, migrate needs raw db access
            if args.command == "categories":
                args.func(args, Services(config))
            elif args.command == "migrate":
                args.func(args, DatabaseManager(config))
            else:
                args.func(args)
        except CategoryError as e:
            logger.error(f"{e.code}: {e.message}")
            sys.exit(1)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
