# File: houselook/services/ranking.py
# Derivation rules for the admin dashboard: rankings, user types, XP, growth

import math
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Sequence

from houselook.services.metrics import Records
from houselook.utils.normalize import parse_rent, to_number

TOP_USERS_LIMIT = 10
PREMIUM_POINTS = 300

AGENT = "agent"
PROPERTY_OWNER = "Property Owner"
TENANT = "Tenant"
INACTIVE = "Inactive"

# Chart labels, in display order
USER_TYPE_LABELS = OrderedDict([
    (PROPERTY_OWNER, "Property Owners"),
    (TENANT, "Tenants"),
    (AGENT, "Agents"),
    (INACTIVE, "Inactive"),
])

XP_PER_RENT = 1000  # 1 XP per 1000 KES of rent
XP_PER_LISTING = 10

REVENUE_LEVELS = (
    ("Last 30 Days", "Bronze", 1),
    ("Last 3 Months", "Silver", 3),
    ("Last 6 Months", "Gold", 6),
    ("Last Year", "Diamond", 12),
)


def top_users(users: Optional[Records], limit: int = TOP_USERS_LIMIT) -> List[Dict[str, Any]]:
    """
    Users with the most points. Python's sort is stable, so ties keep the
    order the store returned the users in (unspecified by the store).
    """
    ranked = []
    for uid, user in (users or {}).items():
        if not isinstance(user, Mapping):
            continue
        points = to_number(user.get("points"))
        ranked.append({
            "id": uid,
            "name": user.get("name") or user.get("email") or "Unknown User",
            "email": user.get("email") or "",
            "points": int(points) if points.is_integer() else points,
            "properties": len(user.get("properties") or {}),
            "joined": user.get("createdAt") or user.get("joinedAt") or "Unknown",
            "status": "Premium" if points > PREMIUM_POINTS else "Active",
        })
    ranked.sort(key=lambda entry: -entry["points"])
    return ranked[:limit]


def classify_user(user: Mapping[str, Any]) -> str:
    """First match wins: agent, owner of listings, tenant with saved houses, inactive."""
    if user.get("role") == AGENT or user.get("userType") == AGENT:
        return AGENT
    if user.get("properties"):
        return PROPERTY_OWNER
    if user.get("saved"):
        return TENANT
    return INACTIVE


def user_type_distribution(users: Optional[Records]) -> List[Dict[str, Any]]:
    counts = OrderedDict((label, 0) for label in USER_TYPE_LABELS.values())
    for user in (users or {}).values():
        if isinstance(user, Mapping):
            counts[USER_TYPE_LABELS[classify_user(user)]] += 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def is_active_listing(prop: Mapping[str, Any]) -> bool:
    return prop.get("available") is True or prop.get("status") == "available"


def compute_xp(properties: Optional[Records]) -> Dict[str, int]:
    """
    revenueXp = floor(total rent / 1000), listingXp = 10 per active listing.

    Recomputed from the current listings every time; there is no XP ledger.
    """
    total = 0.0
    active = 0
    for prop in (properties or {}).values():
        if not isinstance(prop, Mapping):
            continue
        total += parse_rent(prop.get("rent"))
        if is_active_listing(prop):
            active += 1
    revenue_xp = math.floor(total / XP_PER_RENT)
    listing_xp = active * XP_PER_LISTING
    return {"totalXp": revenue_xp + listing_xp, "revenueXp": revenue_xp, "listingXp": listing_xp}


def mom_growth(series: Sequence[float]) -> float:
    """
    Month-over-month growth of the last point against the one before it.

    A previous value of exactly 0 yields 100 when the last is positive; this
    jump at zero is intended.
    """
    if len(series) < 2:
        return 0.0
    last = to_number(series[-1])
    prev = to_number(series[-2])
    if prev > 0:
        return (last - prev) / prev * 100
    if prev == 0 and last > 0:
        return 100.0
    return 0.0


def revenue_levels(monthly_amounts: Sequence[float]) -> List[Dict[str, Any]]:
    """
    Gamified revenue tiers over trailing windows of the monthly series.

    Growth compares each window with the window just before it when the
    series is long enough, using the same rule as mom_growth; streak counts
    trailing months with revenue.
    """
    amounts = [to_number(a) for a in monthly_amounts]
    streak = 0
    for amount in reversed(amounts):
        if amount <= 0:
            break
        streak += 1

    levels = []
    for period, level, window in REVENUE_LEVELS:
        current = sum(amounts[-window:]) if amounts else 0.0
        growth = 0.0
        if len(amounts) >= window * 2:
            previous = sum(amounts[-window * 2:-window])
            growth = round(mom_growth([previous, current]), 1)
        levels.append({
            "period": period,
            "amount": current,
            "growth": growth,
            "level": level,
            "streak": min(streak, window),
        })
    return levels


def achievements(xp: Mapping[str, int], active_user_count: int, available_listings: int, avg_price: float) -> List[Dict[str, str]]:
    earned = []
    if xp.get("totalXp", 0) >= 1000:
        earned.append({
            "title": "XP Master",
            "description": f"Earned {xp['totalXp']:,} total XP",
        })
    if active_user_count >= 100:
        earned.append({
            "title": "Active Community",
            "description": f"{active_user_count}+ active users (30 days)",
        })
    if available_listings >= 50:
        earned.append({
            "title": "Property Empire",
            "description": f"{available_listings}+ active listings",
        })
    if avg_price >= 15000:
        earned.append({
            "title": "Premium Market",
            "description": f"KES {round(avg_price):,} average price",
        })
    return earned
