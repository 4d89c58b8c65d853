"""
Error kinds raised by the database and record-mapping layers

The query builders never raise: malformed predicates are dropped.
Errors carry what went wrong and the offending value so callers can react
without parsing messages.
"""

from typing import Any, Optional


class SQLError(Exception):
    """Base class for all errors raised by this package"""


class ArgumentInvalidError(SQLError, ValueError):
    """
    An argument cannot be used.

    Examples:
        ArgumentInvalidError("typeof", "price")      # unsupported field type
        ArgumentInvalidError("foreignkey", "WrongID") # unknown referenced field
    """

    def __init__(self, what: str, value: Any):
        self.what = what
        self.value = value
        super().__init__(f"Argument {what} is invalid (value: {value})")


class ArgumentMissingError(SQLError, ValueError):
    """A required argument is missing"""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Argument {what} is missing")


class NotFoundError(SQLError, LookupError):
    """No record matched"""

    def __init__(self, what: Optional[str] = None):
        self.what = what
        super().__init__(f"{what} not found" if what else "Not found")


class UnsupportedError(SQLError, TypeError):
    """A value cannot be converted"""

    def __init__(self, what: str, value: Any):
        self.what = what
        self.value = value
        super().__init__(f"Unsupported {what}: {value!r}")
