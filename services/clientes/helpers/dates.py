"""
Date display formatting for customer records.

Formatted strings are memoized in a fixed-capacity ordered map that evicts
its oldest entry first, so repeated renders of the same timestamps stay cheap
without growing without bound.
"""

from collections import OrderedDict
from datetime import datetime
from typing import Any, Optional

FECHA_NO_DISPONIBLE = "No disponible"
FECHA_INVALIDA = "Fecha inválida"

# es-CL style: 19-10-2026, 14:30:00
DISPLAY_FORMAT = "%d-%m-%Y, %H:%M:%S"

DEFAULT_MEMO_CAPACITY = 100


class BoundedMemo:
    """Ordered cache with FIFO eviction once capacity is exceeded."""

    def __init__(self, capacity: int = DEFAULT_MEMO_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: "OrderedDict[str, str]" = OrderedDict()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, value: str) -> None:
        if key in self._entries:
            self._entries[key] = value
            return

        self._entries[key] = value
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()


_memo = BoundedMemo()


def parse_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp as returned by the API.

    Raises:
        ValueError: If the value is not a valid ISO 8601 date or datetime
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def format_date(value: Any) -> str:
    """
    Format an API timestamp for display.

    Args:
        value: ISO 8601 string (or datetime) from the API

    Returns:
        Display string like "19-10-2026, 14:30:00", "No disponible" for
        empty input or "Fecha inválida" when it cannot be parsed

    Examples:
        >>> format_date("2026-10-19T14:30:00")
        '19-10-2026, 14:30:00'
        >>> format_date(None)
        'No disponible'
    """
    if not value:
        return FECHA_NO_DISPONIBLE

    if isinstance(value, datetime):
        return value.strftime(DISPLAY_FORMAT)

    key = str(value)
    cached = _memo.get(key)
    if cached is not None:
        return cached

    try:
        formatted = parse_datetime(key).strftime(DISPLAY_FORMAT)
    except ValueError:
        return FECHA_INVALIDA

    _memo.put(key, formatted)
    return formatted
