"""
Query construction for PostgreSQL

Declarative predicates (Queries) compiled into parameterized SQL by the
Select/Insert/Update/Delete statement builders.
All values are passed as asyncpg positional parameters ($1, $2, ...).
"""

from .operators import (
    QueryOperator,
    QueryBetween,
    QueryDifferent,
    QueryEqual,
    QueryGreater,
    QueryGreaterOrEqual,
    QueryIn,
    QueryLesser,
    QueryLesserOrEqual,
    QueryLike,
    QuerySet,
)
from .queries import Column, Queries, Query, Role
from .statements import (
    DeleteStatement,
    InsertStatement,
    SelectStatement,
    Statement,
    UpdateStatement,
)

__version__ = "1.0.0"

__all__ = [
    'QueryOperator',
    'QueryBetween',
    'QueryDifferent',
    'QueryEqual',
    'QueryGreater',
    'QueryGreaterOrEqual',
    'QueryIn',
    'QueryLesser',
    'QueryLesserOrEqual',
    'QueryLike',
    'QuerySet',
    'Column',
    'Queries',
    'Query',
    'Role',
    'Statement',
    'SelectStatement',
    'InsertStatement',
    'UpdateStatement',
    'DeleteStatement',
]
