# File: houselook/services/dashboard_service.py
# Admin dashboard loading: concurrent fan-out at first load, periodic refresh

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from starlette.concurrency import run_in_threadpool

from houselook.core.config import settings
from houselook.db.store import RecordStore
from houselook.services import ranking
from houselook.services.analytics_service import AnalyticsService, analytics_service

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load dashboard data. Please check your Firebase connection and refresh the page."


class DashboardLoader:
    """
    Holds the latest dashboard snapshot for one store.

    `load` runs the five primary loaders concurrently and waits for all of
    them. The refresh loop re-runs the user, property and revenue loaders on
    a fixed interval and does not wait for the previous refresh to finish, so
    refreshes can overlap; whichever finishes last owns the snapshot.
    """

    def __init__(
        self,
        store: RecordStore,
        analytics: AnalyticsService = analytics_service,
        refresh_seconds: Optional[int] = None,
    ):
        self.store = store
        self.analytics = analytics
        self.refresh_seconds = refresh_seconds if refresh_seconds is not None else settings.DASHBOARD_REFRESH_SECONDS
        self.snapshot: Dict[str, Any] = {}
        self._loop_task: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()
        self._unsubscribers = []

    async def _call(self, loader, *args):
        return await run_in_threadpool(loader, self.store, *args)

    async def _load_panels(self) -> Dict[str, Any]:
        a = self.analytics
        requests, availability, growth, prices, locations, active, xp = await asyncio.gather(
            self._call(a.get_property_requests),
            self._call(a.get_availability),
            self._call(a.get_property_growth),
            self._call(a.get_price_ranges),
            self._call(a.get_location_distribution),
            self._call(a.get_active_users),
            self._call(a.get_xp),
        )
        return {
            "propertyRequests": requests,
            "availability": availability,
            "propertyGrowth": growth,
            "priceRanges": prices,
            "locationDistribution": locations,
            "activeUsers": active,
            "xp": xp,
        }

    def _derive(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        xp = snapshot.get("xp") or {}
        stats = dict(snapshot.get("stats") or {})
        stats["activeUsers"] = snapshot.get("activeUsers", 0)
        stats["averagePrice"] = xp.get("averagePrice", 0)
        snapshot["stats"] = stats

        trends = (snapshot.get("userAnalytics") or {}).get("registrationTrends") or []
        snapshot["userGrowth"] = ranking.mom_growth([point.get("users", 0) for point in trends])
        snapshot["achievements"] = ranking.achievements(
            xp,
            stats["activeUsers"],
            (snapshot.get("availability") or {}).get("available", 0),
            stats["averagePrice"],
        )
        snapshot["refreshedAt"] = self.analytics.now().isoformat()
        return snapshot

    async def load(self) -> Dict[str, Any]:
        """Full recompute of every panel from the latest store contents."""
        a = self.analytics
        snapshot: Dict[str, Any] = {"error": None}
        try:
            stats, users, properties, revenue, realtime = await asyncio.gather(
                self._call(a.get_admin_statistics),
                self._call(a.get_user_analytics),
                self._call(a.get_property_analytics),
                self._call(a.get_revenue_analytics),
                self._call(a.get_realtime_stats),
            )
            snapshot.update({
                "stats": stats,
                "userAnalytics": users,
                "propertyAnalytics": properties,
                "revenueAnalytics": revenue,
                "realTimeStats": realtime,
            })
        except Exception as e:
            logger.error(f"Error loading admin data: {e}")
            snapshot["error"] = LOAD_ERROR

        snapshot.update(await self._load_panels())
        self.snapshot = self._derive(snapshot)
        return self.snapshot

    async def refresh(self) -> Dict[str, Any]:
        a = self.analytics
        try:
            users, properties, revenue = await asyncio.gather(
                self._call(a.get_user_analytics),
                self._call(a.get_property_analytics),
                self._call(a.get_revenue_analytics),
            )
        except Exception as e:
            logger.error(f"Error refreshing analytics data: {e}")
            return self.snapshot

        panels = await self._load_panels()
        snapshot = dict(self.snapshot)
        snapshot.update({
            "userAnalytics": users,
            "propertyAnalytics": properties,
            "revenueAnalytics": revenue,
        })
        snapshot.update(panels)
        self.snapshot = self._derive(snapshot)
        return self.snapshot

    def _on_stats(self, stats: Dict[str, Any]) -> None:
        merged = dict(self.snapshot.get("stats") or {})
        merged.update(stats)
        self.snapshot = dict(self.snapshot, stats=merged)

    def _on_sessions(self, realtime: Dict[str, Any]) -> None:
        self.snapshot = dict(self.snapshot, realTimeStats=realtime)

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_seconds)
            task = asyncio.create_task(self.refresh())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    def start(self) -> None:
        """Subscribe to live stats and start the periodic refresh."""
        self._unsubscribers = [
            self.analytics.subscribe_admin_stats(self.store, self._on_stats),
            self.analytics.subscribe_active_sessions(self.store, self._on_sessions),
        ]
        if self.refresh_seconds > 0 and self._loop_task is None:
            self._loop_task = asyncio.create_task(self._refresh_loop())
            logger.info(f"Dashboard refresh every {self.refresh_seconds}s")

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        tasks = list(self._inflight)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


_loader: Optional[DashboardLoader] = None


async def get_dashboard_loader(store: RecordStore) -> DashboardLoader:
    """
    The process-wide loader, rebuilt if the store changed underneath it. The
    replaced loader is stopped so its refresh loop and subscriptions end.
    """
    global _loader
    if _loader is not None and _loader.store is store:
        return _loader
    previous, _loader = _loader, DashboardLoader(store)
    if previous is not None:
        await previous.stop()
    return _loader


async def stop_dashboard_loader() -> None:
    if _loader is not None:
        await _loader.stop()
