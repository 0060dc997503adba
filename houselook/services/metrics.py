# File: houselook/services/metrics.py
"""
Metric aggregation over raw record snapshots.

Every function here is pure: it takes collections as read from the store
({key: record}) and returns fresh values without touching its inputs.
Malformed fields are coerced (0, "Unknown") or the record is left out of a
time bucket; nothing raises on bad data.
"""

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from houselook.utils.normalize import month_key, parse_rent, parse_timestamp, to_number

Records = Mapping[str, Mapping[str, Any]]

MONTHS_IN_SERIES = 12
LOCATION_LIMIT = 10
UNKNOWN = "Unknown"

# (label, upper bound, upper bound inclusive)
PRICE_BUCKETS = (
    ("Under 5K", 5000, False),
    ("5K - 10K", 10000, False),
    ("10K - 20K", 20000, True),
    ("Over 20K", None, False),
)


def _values(records: Optional[Records]) -> List[Mapping[str, Any]]:
    if not records:
        return []
    return [record for record in records.values() if isinstance(record, Mapping)]


def count_records(records: Optional[Records]) -> int:
    return len(records) if records else 0


def total_revenue(transactions: Optional[Records], revenue_node: Any = None) -> float:
    """
    Sum of transaction amounts. Falls back to the precomputed `revenue` scalar
    only when there is no transaction collection at all.
    """
    if transactions:
        return sum(to_number(t.get("amount")) for t in _values(transactions))
    if revenue_node is not None:
        return to_number(revenue_node)
    return 0.0


def trailing_months(now: datetime, months: int = MONTHS_IN_SERIES) -> List[datetime]:
    """First day of each of the last `months` calendar months, oldest first, current month last."""
    current = month_key(now)
    starts = []
    for key in range(current - months + 1, current + 1):
        year, month_index = divmod(key, 12)
        starts.append(datetime(year, month_index + 1, 1, tzinfo=now.tzinfo))
    return starts


def monthly_buckets(
    records: Iterable[Mapping[str, Any]],
    now: datetime,
    timestamp_of: Callable[[Mapping[str, Any]], Any],
    amount_of: Optional[Callable[[Mapping[str, Any]], float]] = None,
    months: int = MONTHS_IN_SERIES,
) -> List[Dict[str, Any]]:
    """
    Bucket records into the trailing calendar months.

    Each bucket is {"key", "month", "label", "count", "total"} where key is
    year * 12 + zero-based month. Records whose timestamp is missing,
    unparsable or outside the window are skipped.
    """
    buckets = []
    index_by_key = {}
    for start in trailing_months(now, months):
        key = month_key(start)
        index_by_key[key] = len(buckets)
        buckets.append({
            "key": key,
            "month": start.strftime("%b"),
            "label": start.strftime("%b %Y"),
            "count": 0,
            "total": 0.0,
        })

    for record in records:
        moment = parse_timestamp(timestamp_of(record))
        if moment is None:
            continue
        index = index_by_key.get(month_key(moment))
        if index is None:
            continue
        buckets[index]["count"] += 1
        if amount_of is not None:
            buckets[index]["total"] += amount_of(record)
    return buckets


def price_bucket(rent: float) -> str:
    for label, upper, inclusive in PRICE_BUCKETS:
        if upper is None:
            return label
        if rent < upper or (inclusive and rent == upper):
            return label
    return PRICE_BUCKETS[-1][0]


def price_histogram(properties: Optional[Records]) -> List[Dict[str, Any]]:
    """Four fixed rent buckets; every listing lands in exactly one."""
    counts = OrderedDict((label, 0) for label, _, _ in PRICE_BUCKETS)
    for prop in _values(properties):
        counts[price_bucket(parse_rent(prop.get("rent")))] += 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def location_label(prop: Mapping[str, Any]) -> str:
    """town, then city, then "Unknown"."""
    for field in ("town", "city"):
        value = prop.get(field)
        if value:
            return str(value)
    return UNKNOWN


def location_histogram(properties: Optional[Records], limit: int = LOCATION_LIMIT) -> List[Dict[str, Any]]:
    """
    Listings per location, most common first, capped at `limit`.

    The sort is stable so equal counts keep the order in which the store
    returned them; that order is not guaranteed by the store.
    """
    counts: Dict[str, int] = OrderedDict()
    for prop in _values(properties):
        label = location_label(prop)
        counts[label] = counts.get(label, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [{"name": name, "value": value} for name, value in ranked[:limit]]


def distribution(records: Optional[Records], fields: Sequence[str], default: str = UNKNOWN) -> List[Dict[str, Any]]:
    """Count records by the first truthy of `fields`, in encounter order."""
    counts: Dict[str, int] = OrderedDict()
    for record in _values(records):
        label = default
        for field in fields:
            if record.get(field):
                label = str(record[field])
                break
        counts[label] = counts.get(label, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def availability_split(properties: Optional[Records]) -> Dict[str, int]:
    values = _values(properties)
    total = count_records(properties)
    available = sum(1 for prop in values if prop.get("available") is True)
    return {"available": available, "full": total - available, "total": total}


def total_rent(properties: Optional[Records]) -> float:
    return sum(parse_rent(prop.get("rent")) for prop in _values(properties))


def average_price(properties: Optional[Records]) -> float:
    total = count_records(properties)
    if total == 0:
        return 0.0
    return total_rent(properties) / total


def active_users(users: Optional[Records], now: datetime, days: int = 30) -> int:
    """Users who logged in within `days`, or who joined within `days` when no login is recorded."""
    cutoff = now - timedelta(days=days)
    active = 0
    for user in _values(users):
        if user.get("lastLoginAt"):
            moment = parse_timestamp(user.get("lastLoginAt"))
        else:
            moment = parse_timestamp(user.get("createdAt"))
        if moment is not None and moment > cutoff:
            active += 1
    return active


def active_sessions(users: Optional[Records], now_ms: int, minutes: int = 30) -> int:
    """Users whose lastActive (epoch millis) is within the last `minutes`."""
    cutoff = now_ms - minutes * 60 * 1000
    sessions = 0
    for user in _values(users):
        last_active = user.get("lastActive")
        if isinstance(last_active, (int, float)) and not isinstance(last_active, bool) and last_active >= cutoff:
            sessions += 1
    return sessions


def user_joined_at(user: Mapping[str, Any]) -> Any:
    return user.get("createdAt") or user.get("joinedAt")


def transaction_time(transaction: Mapping[str, Any]) -> Any:
    return transaction.get("timestamp") or transaction.get("date")
