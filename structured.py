"""
Record mapping

Store and retrieve pydantic records in tables named after their type, using
the Queries and statement builders of the query package.

    repo = RecordRepository(db)
    await repo.create_table(Person)
    await repo.insert(Person(id="1234", name="Doe", age=34))
    people = await repo.find_all(Person, Queries().add("name", "Doe"))
    await repo.update_all(Person, Queries().add("age", 18).add("age", QuerySet, 25))
    await repo.delete_all(Person, Queries().add("age", QueryGreater, 50))
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from errors import ArgumentInvalidError, NotFoundError
from query import (
    DeleteStatement,
    InsertStatement,
    Queries,
    QuerySet,
    SelectStatement,
    UpdateStatement,
)
from scanners import DBTime
from schema import ColumnInfo, get_columns, schema_type, table_name

Record = TypeVar("Record", bound=BaseModel)


class RecordRepository:
    """Create, insert, find, update and delete records of any pydantic type"""

    def __init__(self, db):
        self.db = db
        parent = getattr(db, "logger", None) or logging.getLogger("sql")
        self.logger = parent.getChild("structured")

    def _log(self, operation: str, table: str) -> logging.Logger:
        log = self.logger.getChild(operation)
        log.debug(f"Schema => table={table}")
        return log

    async def create_table(self, schema: type[BaseModel]) -> None:
        """
        Create the table storing records of schema, plus its indexes.

        Raises:
            ArgumentInvalidError: unsupported field type or invalid foreign key
        """
        table = table_name(schema)
        log = self._log("create", table)

        definitions = []
        indexes = []
        for column in get_columns(schema):
            log.debug(f"Field: {column.field}, column={column.name}, type={column.sql_type}")
            definition = f"{column.name} {column.sql_type}"
            if column.options.primary_key:
                definition += " PRIMARY KEY"
            if column.is_foreign:
                definition += f" REFERENCES {table_name(column.foreign)} ({_referenced_column(column)})"
            definitions.append(definition)
            if column.options.index:
                indexes.append(column.name)

        statement = f"CREATE TABLE {table} ({', '.join(definitions)})"
        log.debug(f"Statement: {statement}")
        await self.db.execute(statement)

        for column_name in indexes:
            statement = f"CREATE INDEX IF NOT EXISTS {table}_{column_name}_idx ON {table} ({column_name})"
            log.debug(f"Statement: {statement}")
            await self.db.execute(statement)

    async def delete_table(self, schema: type[BaseModel]) -> None:
        """Drop the table storing records of schema"""
        table = table_name(schema)
        log = self._log("drop", table)
        statement = f"DROP TABLE {table}"
        log.debug(f"Statement: {statement}")
        await self.db.execute(statement)

    async def insert(self, record: BaseModel) -> None:
        """
        Insert a record in its table.

        Raises:
            ArgumentInvalidError: record is not a record instance, or its
                foreign keys cannot be resolved
        """
        if isinstance(record, type) or not isinstance(record, BaseModel):
            raise ArgumentInvalidError("record", type(record).__name__)

        table = table_name(record)
        log = self._log("insert", table)

        queries = Queries()
        for column in get_columns(record):
            value = _column_value(column, getattr(record, column.field))
            queries.add(column.name, QuerySet, value)

        statement, params = InsertStatement().with_db(self.db).build(table, None, queries)
        log.debug(f"Statement: {statement} with {len(params)} parameters")
        await self.db.execute(statement, *params)

    async def find_all(self, schema: type[Record], queries: Optional[Queries] = None) -> list[Record]:
        """Retrieve all records of schema matching queries"""
        schema = schema_type(schema)
        table = table_name(schema)
        log = self._log("find_all", table)

        columns = get_columns(schema)
        statement, params = SelectStatement().with_db(self.db).build(
            table, [column.name for column in columns], queries or Queries()
        )
        log.debug(f"Statement: {statement} with {len(params)} parameters")
        rows = await self.db.fetch(statement, *params)

        results = [_to_record(schema, columns, row) for row in rows]
        log.debug(f"Found {len(results)} results")
        return results

    async def find(self, schema: type[Record], queries: Optional[Queries] = None) -> Record:
        """
        Retrieve the first record of schema matching queries

        Raises:
            NotFoundError: nothing matched
        """
        results = await self.find_all(schema, queries)
        if not results:
            raise NotFoundError(table_name(schema))
        return results[0]

    async def update_all(self, schema: type[BaseModel], queries: Queries) -> Optional[str]:
        """
        Update records of schema matching queries.

        Assignments are given with QuerySet:
            Queries().add("age", 18).add("age", QuerySet, 25)

        Returns:
            The database status, None when there was nothing to update
            (no filter or no assignment)
        """
        table = table_name(schema)
        log = self._log("update", table)

        statement, params = UpdateStatement().with_db(self.db).build(
            table, [column.name for column in get_columns(schema)], queries
        )
        if not statement:
            log.warning(f"Nothing to update in {table}")
            return None
        log.debug(f"Statement: {statement} with {len(params)} parameters")
        return await self.db.execute(statement, *params)

    async def delete_all(self, schema: type[BaseModel], queries: Optional[Queries] = None) -> str:
        """Delete records of schema matching queries, all of them when queries is empty"""
        table = table_name(schema)
        log = self._log("delete_all", table)

        statement, params = DeleteStatement().with_db(self.db).build(
            table, [column.name for column in get_columns(schema)], queries or Queries()
        )
        log.debug(f"Statement: {statement} with {len(params)} parameters")
        return await self.db.execute(statement, *params)


def _referenced_column(column: ColumnInfo) -> str:
    """Column name of the key a foreign column references"""
    for target in get_columns(column.foreign):
        if target.field == column.foreign_field:
            return target.name
    return column.foreign_field.lower()


def _column_value(column: ColumnInfo, value: Any) -> Any:
    """Database value of a record field"""
    if column.is_foreign:
        if value is None:
            return None
        if not isinstance(value, BaseModel):
            raise ArgumentInvalidError("typeof", column.field)
        if column.foreign_field not in type(value).model_fields:
            raise ArgumentInvalidError("foreignkey", column.options.foreign_key)
        value = getattr(value, column.foreign_field)
    if isinstance(value, Enum):
        return value.value
    return value


def _to_record(schema: type[Record], columns: list[ColumnInfo], row: Any) -> Record:
    """Build a record from a database row"""
    data = {}
    for column in columns:
        value = row[column.name]
        if value is None:
            data[column.field] = None
        elif column.is_foreign:
            # Only the key of the related record is known
            data[column.field] = column.foreign.model_construct(**{column.foreign_field: value})
        elif isinstance(column.annotation, type) and issubclass(column.annotation, datetime):
            data[column.field] = DBTime.scan(value)
        else:
            data[column.field] = value
    return schema.model_validate(data)
