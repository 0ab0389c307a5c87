"""Identifier helpers. Users and workout sessions are keyed by ULID strings."""

from datetime import datetime
from typing import Optional

import ulid

ULID_LENGTH = 26


def generate_ulid() -> str:
    return str(ulid.ULID())


def parse_ulid(value: str) -> Optional[ulid.ULID]:
    """Return the parsed ULID, or ``None`` when ``value`` is not one."""
    try:
        return ulid.ULID.from_str(value)
    except (ValueError, TypeError, AttributeError):
        return None


def get_timestamp_from_ulid(value: str) -> Optional[datetime]:
    parsed = parse_ulid(value)
    return parsed.datetime if parsed is not None else None


def is_valid_ulid(value: str) -> bool:
    """Cheap length check first; path parameters are often obviously wrong."""
    return isinstance(value, str) and len(value) == ULID_LENGTH and parse_ulid(value) is not None
