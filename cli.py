#!/usr/bin/env python3
"""
Statement preview CLI - print the SQL and parameters a builder produces.

Usage:
    python cli.py build select person --columns id,name,age --query "age=18&name=Doe"
    python cli.py build update person --query "id=1234" --set age=25
    python cli.py build delete person
    python cli.py --version
"""

import argparse
import json
import logging
import sys
from typing import Optional

from config import configure_logging
from query import (
    DeleteStatement,
    InsertStatement,
    Queries,
    QuerySet,
    SelectStatement,
    UpdateStatement,
    __version__,
)

logger = logging.getLogger(__name__)

BUILDERS = {
    "select": SelectStatement,
    "insert": InsertStatement,
    "update": UpdateStatement,
    "delete": DeleteStatement,
}


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="sql-queries",
        description="Build parameterized SQL statements from URL style queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    sql-queries build select person --columns id,name --query "name=Doe"
    sql-queries build select person --columns id --query "age=18&age=21"   # age IN (...)
    sql-queries build insert person --set id=1234 --set name=Doe
    sql-queries build update person --query "id=1234" --set age=25
        """
    )
    parser.add_argument('--version', '-v', action='store_true', help='Show version')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest="command")
    build = subparsers.add_parser("build", help="Build a statement")
    build.add_argument("kind", choices=sorted(BUILDERS), help="Statement kind")
    build.add_argument("table", help="Table name")
    build.add_argument("--columns", default="*", help="Comma separated columns (select only, default: *)")
    build.add_argument("--query", default="", help="Filters as a URL query string, e.g. 'age=18&name=Doe'")
    build.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="COLUMN=VALUE",
        help="Assignment (insert/update), repeatable",
    )
    return parser.parse_args(argv)


def build_statement(kind: str, table: str, columns: str, query: str, assignments: list[str]) -> tuple[str, list]:
    """Build a statement from command line values"""
    queries = Queries.from_url(f"?{query}") if query else Queries()
    for assignment in assignments:
        column, separator, value = assignment.partition("=")
        if not separator:
            raise ValueError(f"Invalid assignment '{assignment}', expected COLUMN=VALUE")
        queries.add(column.strip(), QuerySet, value)

    column_list = [column.strip() for column in columns.split(",") if column.strip()]
    return BUILDERS[kind]().build(table, column_list, queries)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    if args.version:
        print(f"sql-queries version {__version__}")
        return 0

    configure_logging("DEBUG" if args.debug else None)

    if args.command != "build":
        print("Nothing to do, try: sql-queries build --help", file=sys.stderr)
        return 2

    try:
        statement, params = build_statement(args.kind, args.table, args.columns, args.query, args.assignments)
    except ValueError as e:
        logger.error(str(e))
        return 2

    if not statement:
        logger.error(f"Refused to build {args.kind} statement for {args.table}")
        return 1

    print(statement)
    print(json.dumps(params, default=str))
    return 0


def cli_entry():
    """Entry point for console script"""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
