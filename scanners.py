"""
Scanners

Convert raw column payloads back into Python values.
asyncpg already decodes timestamps; other drivers, text casts and legacy
rows may hand back the textual form "2020-01-02 15:04:05.123 +0000 UTC".
"""

import re
from datetime import datetime
from typing import Any

from errors import UnsupportedError

_TIME_RE = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r" (?P<offset>[+-]\d{4})"
    r"(?: [A-Za-z][A-Za-z0-9_+-]*)?$"
)


class DBTime:
    """Time scanner"""

    @staticmethod
    def scan(payload: Any) -> datetime:
        """
        Parse a time payload.

        Args:
            payload: datetime, bytes or str

        Returns:
            timezone aware datetime (or the datetime as given)

        Raises:
            UnsupportedError: payload is not a recognizable time
        """
        if isinstance(payload, datetime):
            return payload
        if isinstance(payload, (bytes, bytearray)):
            payload = bytes(payload).decode("utf-8", errors="replace")
        if not isinstance(payload, str):
            raise UnsupportedError("time", payload)

        # Drop the monotonic clock reading if present
        value = payload.split(" m=")[0].strip()
        match = _TIME_RE.match(value)
        if not match:
            raise UnsupportedError("time", payload)

        fraction = (match.group("fraction") or "0")[:6].ljust(6, "0")
        return datetime.strptime(
            f"{match.group('stamp')}.{fraction} {match.group('offset')}",
            "%Y-%m-%d %H:%M:%S.%f %z",
        )
