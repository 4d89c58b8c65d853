"""
Queries

Declarative filter predicates for statement WHERE clauses.

A Queries object maps a Column to a Query entry: a list whose first element is
a QueryOperator and whose remaining elements are the operands. Columns carry a
role so the same logical column can be used once as a filter and once as an
assignment (UPDATE ... SET) without collision.

All values are emitted as positional parameters ($1, $2, ...), never
interpolated into the SQL text.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Union
from urllib.parse import parse_qsl, urlsplit

from .operators import QueryOperator

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """What a column is used for in a statement"""
    FILTER = "filter"
    ASSIGNMENT = "assignment"


@dataclass(frozen=True)
class Column:
    """Storage key of a Query entry"""
    name: str
    role: Role = Role.FILTER

    @property
    def is_assignment(self) -> bool:
        return self.role is Role.ASSIGNMENT

    def __str__(self) -> str:
        return self.name


class Query(list):
    """A single column predicate: [operator, operand, ...]"""

    @property
    def operator(self) -> Optional[QueryOperator]:
        if self and isinstance(self[0], QueryOperator):
            return self[0]
        return None

    @property
    def operands(self) -> list:
        return list(self[1:])


class Queries:
    """
    Ordered collection of Query entries keyed by Column.

    Entries are kept in insertion order, so the compiled WHERE clause is
    deterministic for a given sequence of add() calls.

    Usage:
        queries = Queries().add("id", "abcd1235").add("age", QueryOperator.GREATER, 18)
        where, params = queries.where_clause()
        # where  == "id = $1 AND age > $2"
        # params == ["abcd1235", 18]
    """

    def __init__(self, entries: Optional[dict] = None):
        self._entries: dict[Column, Query] = {}
        for key, values in (entries or {}).items():
            column = key if isinstance(key, Column) else Column(key)
            self._entries[column] = Query(values)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_url(cls, url: Any) -> "Queries":
        """
        Create Queries from the query part of a URL.

        Args:
            url: URL string, or any object with a `query` attribute
                 (urllib SplitResult, starlette URL, ...)

        Repeated keys become a single IN entry, single keys an = entry.
        """
        query_string = url.query if hasattr(url, "query") else urlsplit(str(url)).query

        grouped: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            grouped.setdefault(key, []).append(value)

        queries = cls()
        for key, values in grouped.items():
            queries.add(key, *values)
        return queries

    @classmethod
    def from_request(cls, request: Any) -> "Queries":
        """Create Queries from an HTTP request (Starlette/FastAPI Request)"""
        return cls.from_url(request.url)

    def add(self, key: str, *values: Any) -> "Queries":
        """
        Add values for a column.

        - No values: Queries is unchanged
        - First value is QueryOperator.SET: the column is stored as an assignment
        - First value is another QueryOperator: it governs a new entry
        - Plain values on a new column: = for one value, IN for more
        - Existing column holding a single operand: promoted to IN

        Returns:
            self, to allow chaining
        """
        if not values:
            return self

        first = values[0]
        role = Role.ASSIGNMENT if first is QueryOperator.SET else Role.FILTER
        column = Column(key, role)
        current = self._entries.get(column)

        if current is None:
            if isinstance(first, QueryOperator):
                self._entries[column] = Query(values)
            elif len(values) == 1:
                self._entries[column] = Query([QueryOperator.EQUAL, *values])
            else:
                self._entries[column] = Query([QueryOperator.IN, *values])
            return self

        operands = values[1:] if isinstance(first, QueryOperator) else values
        if isinstance(first, QueryOperator) and first is not current.operator:
            logger.debug(
                f"Ignoring {first.name} for {key}: merging {len(operands)} operand(s) "
                f"into the existing {current.operator!r} entry"
            )
        if not operands:
            return self

        if column.is_assignment:
            # An assignment holds a single value, the last one wins
            current[1:] = [operands[-1]]
            return self

        if len(current) == 2:
            current[0] = QueryOperator.IN
        current.extend(operands)
        return self

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Column]:
        return iter(self._entries)

    def __contains__(self, key: Union[str, Column]) -> bool:
        return self._as_column(key) in self._entries

    def __getitem__(self, key: Union[str, Column]) -> Query:
        return self._entries[self._as_column(key)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Queries):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Queries({self._entries!r})"

    def get(self, key: Union[str, Column], default: Optional[Query] = None) -> Optional[Query]:
        return self._entries.get(self._as_column(key), default)

    def items(self):
        return self._entries.items()

    def entries(self) -> list[tuple[Column, Query]]:
        return list(self._entries.items())

    @staticmethod
    def _as_column(key: Union[str, Column]) -> Column:
        return key if isinstance(key, Column) else Column(key)

    # ------------------------------------------------------------------
    # Clause compilation
    # ------------------------------------------------------------------

    def where_clause(self, start: int = 1) -> tuple[str, list]:
        """
        Build the WHERE clause (without the WHERE keyword).

        Malformed entries (wrong number of operands) and assignments are
        skipped, they never raise.

        Args:
            start: number of the first placeholder

        Returns:
            (clause, params), ("", []) when nothing applies
        """
        conditions: list[str] = []
        params: list = []

        def placeholder(value: Any) -> str:
            params.append(value)
            return f"${start + len(params) - 1}"

        for column, values in self._entries.items():
            if column.is_assignment:
                continue

            operator = values.operator
            if operator is None or operator is QueryOperator.SET:
                logger.debug(f"Skipping {column.name}: no filter operator in {values!r}")
                continue

            operands = values.operands
            if operator.is_membership:
                if not operands:
                    logger.debug(f"Skipping {column.name}: IN without values")
                    continue
                args = ", ".join(placeholder(value) for value in operands)
                conditions.append(f"{column.name} {operator} ({args})")
                continue

            if len(values) != operator.arity:
                logger.debug(
                    f"Skipping {column.name}: {operator.name} expects {operator.arity - 1} "
                    f"operand(s), got {len(operands)}"
                )
                continue

            if operator is QueryOperator.BETWEEN:
                low, high = operands
                conditions.append(f"{column.name} {operator} {placeholder(low)} AND {placeholder(high)}")
            else:
                conditions.append(f"{column.name} {operator} {placeholder(operands[0])}")

        return " AND ".join(conditions), params

    def assignments(self, start: int = 1) -> tuple[list[str], list]:
        """
        Build the SET list of an UPDATE statement.

        Args:
            start: number of the first placeholder

        Returns:
            (["column = $n", ...], params)
        """
        parts: list[str] = []
        params: list = []

        for column, values in self._entries.items():
            if not column.is_assignment or values.operator is not QueryOperator.SET:
                continue
            if len(values) != QueryOperator.SET.arity:
                logger.debug(f"Skipping assignment {column.name}: expects 1 value, got {len(values) - 1}")
                continue
            params.append(values[1])
            parts.append(f"{column.name} = ${start + len(params) - 1}")

        return parts, params
