# File: houselook/api/api_v1/endpoints/admin.py
# Admin dashboard, analytics and report downloads
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from houselook.api import deps
from houselook.core.session import SessionContext
from houselook.db.store import RecordStore
from houselook.services.analytics_service import analytics_service
from houselook.services.dashboard_service import get_dashboard_loader
from houselook.utils.csv_export import REPORT_TYPES, convert_to_csv, entries_to_rows, report_filename

router = APIRouter()
logger = logging.getLogger(__name__)

ANALYTICS = {
    "users": analytics_service.get_user_analytics,
    "properties": analytics_service.get_property_analytics,
    "revenue": analytics_service.get_revenue_analytics,
    "realtime": analytics_service.get_realtime_stats,
}


@router.get("/dashboard", response_model=Dict[str, Any])
async def get_dashboard(
    refresh: bool = False,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    """
    Latest dashboard snapshot. The first request, or `refresh=true`, runs a
    full load before answering.
    """
    loader = await get_dashboard_loader(store)
    if refresh or not loader.snapshot:
        return await loader.load()
    return loader.snapshot


@router.get("/statistics", response_model=Dict[str, Any])
def get_statistics(
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    stats = analytics_service.get_admin_statistics(store)
    stats["activeUsers"] = analytics_service.get_active_users(store)
    return stats


@router.get("/analytics/{section}", response_model=Dict[str, Any])
def get_analytics(
    section: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Any:
    loader = ANALYTICS.get(section)
    if loader is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown analytics section: {section}")
    return loader(store)


@router.get("/reports/{report_type}")
def download_report(
    report_type: str,
    store: RecordStore = Depends(deps.get_store),
    session: SessionContext = Depends(deps.get_current_admin_user),
) -> Response:
    if report_type not in REPORT_TYPES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown report type: {report_type}")
    rows = entries_to_rows(analytics_service.export_data(store, report_type))
    filename = report_filename(report_type, analytics_service.now().date())
    logger.info(f"Exporting {len(rows)} {report_type} rows for admin {session.uid}")
    return Response(
        content=convert_to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
