"""
Query Operators

Comparison and membership operators understood by the WHERE clause compiler.
Each operator carries its SQL symbol and its arity: the expected length of a
query entry, operator slot included.
"""

import math
from enum import Enum


class QueryOperator(Enum):
    """Operators usable in a Query entry."""

    EQUAL = ("=", 2)
    DIFFERENT = ("<>", 2)
    GREATER = (">", 2)
    GREATER_OR_EQUAL = (">=", 2)
    LESSER = ("<", 2)
    LESSER_OR_EQUAL = ("<=", 2)
    LIKE = ("LIKE", 2)
    BETWEEN = ("BETWEEN", 3)
    IN = ("IN", math.inf)
    # Marks an assignment (UPDATE ... SET / INSERT), never a comparison
    SET = ("SET", 2)

    def __init__(self, symbol: str, arity: float):
        self.symbol = symbol
        self.arity = arity

    @property
    def is_membership(self) -> bool:
        return self is QueryOperator.IN

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"QueryOperator.{self.name}"


# Flat aliases
QueryEqual = QueryOperator.EQUAL
QueryDifferent = QueryOperator.DIFFERENT
QueryGreater = QueryOperator.GREATER
QueryGreaterOrEqual = QueryOperator.GREATER_OR_EQUAL
QueryLesser = QueryOperator.LESSER
QueryLesserOrEqual = QueryOperator.LESSER_OR_EQUAL
QueryLike = QueryOperator.LIKE
QueryBetween = QueryOperator.BETWEEN
QueryIn = QueryOperator.IN
QuerySet = QueryOperator.SET
