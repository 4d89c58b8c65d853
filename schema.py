"""
Schema introspection for record types

Records are pydantic models. Column options are given per field with
json_schema_extra, using a comma separated tag:

    class Employee(BaseModel):
        id: UUID = Field(json_schema_extra={"sql": "key"})
        name: str = Field(json_schema_extra={"sql": "index,varchar(60)"})
        manager: Optional[Manager] = Field(None, json_schema_extra={"sql": "foreign=id"})
        notes: str = Field("", json_schema_extra={"sql": "-"})

Tag items:
- key:            primary key
- index:          create an index on the column
- -:              not stored
- foreign=<field>: foreign key to <field> of the referenced record
- first other item: column name, later ones: column type
"""

import types
from dataclasses import dataclass, field as dataclass_field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union, get_args, get_origin
from uuid import UUID

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from errors import ArgumentInvalidError

# Checked in order: bool before int, datetime before date
SQL_TYPES: list[tuple[type, str]] = [
    (bool, "BOOL"),
    (int, "BIGINT"),
    (float, "FLOAT8"),
    (Decimal, "NUMERIC"),
    (str, "VARCHAR(80)"),
    (UUID, "UUID"),
    (datetime, "TIMESTAMPTZ"),
    (date, "DATE"),
    (time, "TIME"),
    (timedelta, "INTERVAL"),
    (bytes, "BYTEA"),
]


@dataclass
class FieldOptions:
    """Options parsed from a field sql tag"""
    primary_key: bool = False
    index: bool = False
    ignore: bool = False
    column_name: str = ""
    column_type: str = ""
    foreign_key: str = ""


@dataclass
class ColumnInfo:
    """A stored field of a record type"""
    field: str
    name: str
    sql_type: str
    options: FieldOptions = dataclass_field(default_factory=FieldOptions)
    annotation: Any = None
    foreign: Optional[type[BaseModel]] = None
    foreign_field: Optional[str] = None

    @property
    def is_foreign(self) -> bool:
        return self.foreign is not None


def table_name(schema: Any) -> str:
    """Table name of a record type or instance"""
    return schema_type(schema).__name__.lower()


def schema_type(schema: Any) -> type[BaseModel]:
    """Record type of a record type or instance"""
    schema_class = schema if isinstance(schema, type) else type(schema)
    if not issubclass(schema_class, BaseModel):
        raise ArgumentInvalidError("schema", schema_class.__name__)
    return schema_class


def get_options(field_info: FieldInfo) -> FieldOptions:
    """Parse the sql tag of a field"""
    options = FieldOptions()
    extra = field_info.json_schema_extra
    tag = extra.get("sql", "") if isinstance(extra, dict) else ""

    for i, option in enumerate(str(tag).split(",")):
        raw = option.strip()
        name = raw.lower()
        if name == "index":
            options.index = True
        elif name == "key":
            options.primary_key = True
        elif name == "-":
            options.ignore = True
        elif name.startswith("foreign="):
            options.foreign_key = raw.split("=", 1)[1].strip()
        elif i == 0:
            options.column_name = name
        elif name:
            options.column_type = name
    return options


def unwrap_optional(annotation: Any) -> Any:
    """Optional[X] -> X"""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def get_sql_type(name: str, annotation: Any) -> str:
    """
    SQL type for a field annotation.

    Raises:
        ArgumentInvalidError: ("typeof", name) when the type is not supported
    """
    annotation = unwrap_optional(annotation)
    if not isinstance(annotation, type) or get_origin(annotation) is not None:
        raise ArgumentInvalidError("typeof", name)

    if issubclass(annotation, Enum):
        if issubclass(annotation, int):
            return "BIGINT"
        if issubclass(annotation, str):
            return "VARCHAR(80)"
        raise ArgumentInvalidError("typeof", name)

    for python_type, sql_type in SQL_TYPES:
        if issubclass(annotation, python_type):
            return sql_type
    raise ArgumentInvalidError("typeof", name)


def find_field(schema: type[BaseModel], name: str) -> Optional[str]:
    """Field of schema matching name, case insensitive"""
    for field_name in schema.model_fields:
        if field_name.lower() == name.lower():
            return field_name
    return None


def get_columns(schema: Any) -> list[ColumnInfo]:
    """
    Stored columns of a record type, in field order.

    Raises:
        ArgumentInvalidError: unsupported field type or invalid foreign key
    """
    schema = schema_type(schema)
    columns: list[ColumnInfo] = []

    for field_name, field_info in schema.model_fields.items():
        options = get_options(field_info)
        if options.ignore:
            continue
        column_name = options.column_name or field_name.lower()

        if options.foreign_key:
            columns.append(_foreign_column(field_name, field_info, options))
            continue

        sql_type = options.column_type.upper() or get_sql_type(field_name, field_info.annotation)
        columns.append(ColumnInfo(
            field=field_name,
            name=column_name,
            sql_type=sql_type,
            options=options,
            annotation=unwrap_optional(field_info.annotation),
        ))
    return columns


def _foreign_column(field_name: str, field_info: FieldInfo, options: FieldOptions) -> ColumnInfo:
    """Column storing the key of a referenced record"""
    target = unwrap_optional(field_info.annotation)
    if not isinstance(target, type) or not issubclass(target, BaseModel):
        raise ArgumentInvalidError("typeof", field_name)

    target_field = find_field(target, options.foreign_key)
    if target_field is None:
        raise ArgumentInvalidError("foreignkey", options.foreign_key)

    sql_type = options.column_type.upper()
    if not sql_type:
        target_info = target.model_fields[target_field]
        target_options = get_options(target_info)
        sql_type = target_options.column_type.upper() or get_sql_type(target_field, target_info.annotation)

    return ColumnInfo(
        field=field_name,
        name=options.column_name or f"{field_name.lower()}_{target_field.lower()}",
        sql_type=sql_type,
        options=options,
        annotation=target,
        foreign=target,
        foreign_field=target_field,
    )
