# File: houselook/services/analytics_service.py
# Admin analytics loaders: read whole collections, aggregate in memory
# Dependencies: houselook.services.metrics, houselook.services.ranking

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from houselook.core.config import settings
from houselook.db import collections
from houselook.db.store import RecordStore, StoreUnavailable, Unsubscribe, read_collection
from houselook.services import metrics, ranking
from houselook.utils.csv_export import REPORT_TYPES
from houselook.utils.normalize import now_millis, to_number

logger = logging.getLogger(__name__)


class AnalyticsService:
    """
    Every loader catches StoreUnavailable and returns the zero value for its
    shape, so one unreachable collection never takes the dashboard down.
    """

    def __init__(self, clock: Callable[[], int] = now_millis):
        self.clock = clock

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.clock() / 1000, tz=timezone.utc)

    def get_admin_statistics(self, store: RecordStore) -> Dict[str, Any]:
        try:
            users = read_collection(store, collections.USERS)
            properties = read_collection(store, collections.PROPERTIES)
            transactions = read_collection(store, collections.TRANSACTIONS)
            revenue_node = None if transactions else store.get(collections.REVENUE)
            return {
                "totalUsers": metrics.count_records(users),
                "totalProperties": metrics.count_records(properties),
                "totalRevenue": metrics.total_revenue(transactions, revenue_node),
            }
        except StoreUnavailable as e:
            logger.error(f"Error fetching admin statistics: {e}")
            return {"totalUsers": 0, "totalProperties": 0, "totalRevenue": 0}

    def subscribe_admin_stats(self, store: RecordStore, callback: Callable[[Dict[str, Any]], None]) -> Unsubscribe:
        """
        Push statistics to `callback` whenever the `statistics` node changes.
        Without that node the stats are computed from the collections instead.
        """
        def on_change(value):
            if isinstance(value, dict) and value:
                callback(value)
            else:
                callback(self.get_admin_statistics(store))

        try:
            return store.subscribe(collections.STATISTICS, on_change)
        except StoreUnavailable as e:
            logger.error(f"Error listening to admin stats: {e}")
            callback(self.get_admin_statistics(store))
            return lambda: None

    def get_user_analytics(self, store: RecordStore) -> Dict[str, Any]:
        try:
            users = read_collection(store, collections.USERS)
        except StoreUnavailable as e:
            logger.error(f"Error fetching user analytics: {e}")
            users = None
        if not users:
            return {"userTypes": [], "registrationTrends": [], "topUsers": []}

        buckets = metrics.monthly_buckets(users.values(), self.now(), metrics.user_joined_at)
        return {
            "userTypes": ranking.user_type_distribution(users),
            "registrationTrends": [
                {"month": b["month"], "users": b["count"], "revenue": 0} for b in buckets
            ],
            "topUsers": ranking.top_users(users),
        }

    def get_property_analytics(self, store: RecordStore) -> Dict[str, Any]:
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error fetching property analytics: {e}")
            properties = None
        if not properties:
            return {"propertyTypes": [], "locationDistribution": [], "priceRanges": []}

        return {
            "propertyTypes": metrics.distribution(properties, ("type", "propertyType", "propertyCategory")),
            "locationDistribution": metrics.location_histogram(properties),
            "priceRanges": metrics.price_histogram(properties),
        }

    def get_revenue_analytics(self, store: RecordStore) -> Dict[str, Any]:
        try:
            transactions = read_collection(store, collections.TRANSACTIONS)
        except StoreUnavailable as e:
            logger.error(f"Error fetching revenue analytics: {e}")
            transactions = None
        if not transactions:
            return {"monthlyRevenue": [], "revenueLevels": [], "transactionTypes": []}

        buckets = metrics.monthly_buckets(
            transactions.values(),
            self.now(),
            metrics.transaction_time,
            amount_of=lambda t: to_number(t.get("amount")),
        )
        monthly = [
            {"month": b["month"], "revenue": b["total"], "transactions": b["count"]} for b in buckets
        ]
        return {
            "monthlyRevenue": monthly,
            "revenueLevels": ranking.revenue_levels([m["revenue"] for m in monthly]),
            "transactionTypes": metrics.distribution(transactions, ("type", "paymentType")),
        }

    def get_realtime_stats(self, store: RecordStore) -> Dict[str, Any]:
        now_ms = self.clock()
        current_time = self.now().isoformat()
        try:
            users = read_collection(store, collections.USERS)
        except StoreUnavailable as e:
            logger.error(f"Error fetching real-time stats: {e}")
            return {"activeSessions": 0, "currentTime": current_time}
        return {
            "activeSessions": metrics.active_sessions(users, now_ms, settings.ACTIVE_SESSION_MINUTES),
            "currentTime": current_time,
        }

    def subscribe_active_sessions(self, store: RecordStore, callback: Callable[[Dict[str, Any]], None]) -> Unsubscribe:
        def on_change(value):
            users = value if isinstance(value, dict) else {}
            callback({
                "activeSessions": metrics.active_sessions(users, self.clock(), settings.ACTIVE_SESSION_MINUTES),
                "currentTime": self.now().isoformat(),
            })

        try:
            return store.subscribe(collections.USERS, on_change)
        except StoreUnavailable as e:
            logger.error(f"Error listening to active sessions: {e}")
            callback({"activeSessions": 0, "currentTime": self.now().isoformat()})
            return lambda: None

    def get_availability(self, store: RecordStore) -> Dict[str, int]:
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error loading availability stats: {e}")
            properties = {}
        return metrics.availability_split(properties)

    def get_property_growth(self, store: RecordStore) -> List[Dict[str, Any]]:
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error loading property growth: {e}")
            return []
        buckets = metrics.monthly_buckets(properties.values(), self.now(), lambda p: p.get("createdAt"))
        return [{"month": b["label"], "properties": b["count"]} for b in buckets]

    def get_price_ranges(self, store: RecordStore) -> List[Dict[str, Any]]:
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error loading price ranges: {e}")
            return []
        return metrics.price_histogram(properties)

    def get_location_distribution(self, store: RecordStore) -> List[Dict[str, Any]]:
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error loading location distribution: {e}")
            return []
        return metrics.location_histogram(properties)

    def get_active_users(self, store: RecordStore) -> int:
        try:
            users = read_collection(store, collections.USERS)
        except StoreUnavailable as e:
            logger.error(f"Error loading active users: {e}")
            return 0
        return metrics.active_users(users, self.now(), settings.ACTIVE_USER_DAYS)

    def get_xp(self, store: RecordStore) -> Dict[str, Any]:
        """XP totals plus the average listing price, both from one read of the listings."""
        try:
            properties = read_collection(store, collections.PROPERTIES)
        except StoreUnavailable as e:
            logger.error(f"Error calculating XP: {e}")
            properties = {}
        xp = ranking.compute_xp(properties)
        xp["averagePrice"] = metrics.average_price(properties)
        return xp

    def get_property_requests(self, store: RecordStore) -> List[Dict[str, Any]]:
        try:
            requests = read_collection(store, collections.PROPERTY_REQUESTS)
        except StoreUnavailable as e:
            logger.error(f"Error loading property requests: {e}")
            return []
        return [dict(request, id=request.get("id") or key) for key, request in requests.items()]

    def export_data(self, store: RecordStore, report_type: str) -> List[tuple]:
        """(key, value) entries of one collection for the CSV reports."""
        paths = {
            "users": collections.USERS,
            "properties": collections.PROPERTIES,
            "transactions": collections.TRANSACTIONS,
            "revenue": collections.REVENUE,
        }
        if report_type not in REPORT_TYPES:
            return []
        try:
            value = store.get(paths[report_type])
        except StoreUnavailable as e:
            logger.error(f"Error exporting {report_type} data: {e}")
            return []
        if isinstance(value, dict):
            return list(value.items())
        if isinstance(value, list):
            return [(str(i), item) for i, item in enumerate(value) if item is not None]
        if value is not None:
            return [(report_type, value)]
        return []


# Create singleton instance
analytics_service = AnalyticsService()
