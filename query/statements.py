"""
Statement Builders

Turn a table name, a column list and Queries into a complete SQL statement and
its positional parameters, ready for asyncpg:

    sql, params = SelectStatement().with_db(db).build("person", ["id", "name"], queries)
    rows = await db.fetch(sql, *params)

Builders hold no state between calls; with_db() returns a bound copy.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from .queries import Queries

logger = logging.getLogger("sql")


@dataclass(frozen=True)
class Statement(ABC):
    """Something that can be built into a statement string with its parameters"""

    db: Any = None
    logger: logging.Logger = logger

    def with_db(self, db: Any) -> "Statement":
        """Return a copy of this builder bound to a database connection"""
        parent = getattr(db, "logger", None) or logger
        return replace(self, db=db, logger=parent.getChild("statement"))

    @abstractmethod
    def build(self, table: str, columns: Optional[Sequence[str]], queries: Queries) -> tuple[str, list]:
        """
        Build the statement.

        Returns:
            (sql, params)
        """

    def _trace(self, sql: str, params: list) -> None:
        self.logger.debug(f"Statement: {sql} with {len(params)} parameters")


class SelectStatement(Statement):
    """SELECT columns FROM table [WHERE ...]"""

    def build(self, table: str, columns: Optional[Sequence[str]], queries: Queries) -> tuple[str, list]:
        where, params = queries.where_clause()
        sql = f"SELECT {', '.join(columns or [])} FROM {table}"
        if where:
            sql = f"{sql} WHERE {where}"
        self._trace(sql, params)
        return sql, params


class InsertStatement(Statement):
    """INSERT INTO table (columns) VALUES (...), one value per Queries entry"""

    def build(self, table: str, columns: Optional[Sequence[str]], queries: Queries) -> tuple[str, list]:
        names: list[str] = []
        values: list[str] = []
        params: list = []

        for column, query in queries.items():
            if len(query) < 2:
                self.logger.debug(f"Skipping {column.name}: no value to insert")
                continue
            names.append(column.name)
            params.append(query[1])
            values.append(f"${len(params)}")

        sql = f"INSERT INTO {table} ({', '.join(names)}) VALUES ({', '.join(values)})"
        self._trace(sql, params)
        return sql, params


class UpdateStatement(Statement):
    """
    UPDATE table SET ... WHERE ...

    An UPDATE without a WHERE clause would touch every row: the builder
    refuses it and returns ("", []). An UPDATE without any assignment
    (no QuerySet entry) would be invalid SQL and is refused the same way.
    """

    def build(self, table: str, columns: Optional[Sequence[str]], queries: Queries) -> tuple[str, list]:
        where, params = queries.where_clause()
        if not where:
            self.logger.warning(f"Refusing to build an UPDATE of {table} without a WHERE clause")
            return "", []

        assignments, values = queries.assignments(start=len(params) + 1)
        if not assignments:
            self.logger.warning(f"Refusing to build an UPDATE of {table} without any assignment")
            return "", []
        params.extend(values)

        sql = f"UPDATE {table} SET {', '.join(assignments)} WHERE {where}"
        self._trace(sql, params)
        return sql, params


class DeleteStatement(Statement):
    """DELETE FROM table [WHERE ...]"""

    def build(self, table: str, columns: Optional[Sequence[str]], queries: Queries) -> tuple[str, list]:
        where, params = queries.where_clause()
        sql = f"DELETE FROM {table}"
        if where:
            sql = f"{sql} WHERE {where}"
        self._trace(sql, params)
        return sql, params
