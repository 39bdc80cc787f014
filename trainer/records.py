# trainer/records.py
from __future__ import annotations

from collections.abc import Mapping


def field_value(record, name: str, default=None):
    """Read a field from an ORM row, a dataclass or a plain dict alike."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def as_count(value) -> int:
    """Missing or malformed numeric fields count as zero."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
