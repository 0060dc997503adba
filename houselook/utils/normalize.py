# File: houselook/utils/normalize.py
# Coercion helpers for schema-less records. Malformed values never raise.

import math
import re
import time
from datetime import datetime, timezone
from typing import Any, Optional

RENT_NOISE = re.compile(r"[^\d.]")
LEADING_NUMBER = re.compile(r"^\d*\.?\d+|^\d+\.?")


def now_millis() -> int:
    return int(time.time() * 1000)


def parse_rent(value: Any) -> float:
    """
    Rent as a number. Strings like "KES 12,500" are cleaned down to digits and
    dots first; anything unparsable or non-finite is 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        rent = float(value)
    elif isinstance(value, str):
        cleaned = RENT_NOISE.sub("", value)
        # parseFloat semantics: take the longest leading number ("1.2.3" -> 1.2)
        match = LEADING_NUMBER.match(cleaned)
        if not match:
            return 0.0
        try:
            rent = float(match.group(0))
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(rent):
        return 0.0
    return rent


def to_number(value: Any, default: float = 0.0) -> float:
    """Number() style coercion for amounts and points."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
        return number if math.isfinite(number) else default
    return default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or an epoch-millis number into an aware UTC
    datetime. Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def month_key(moment: datetime) -> int:
    """Calendar month bucket key: year * 12 + zero-based month."""
    return moment.year * 12 + (moment.month - 1)


def first_non_empty(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value:
            return value
    return default
