"""
Dashboard API routes for analytics data.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from backoffice.models.order import OrderStatus
from backoffice.routers.deps import AdminIdentity, get_analytics_engine
from backoffice.schemas.dashboard import DashboardResponse
from backoffice.services.analytics_engine import AnalyticsEngine

router = APIRouter(prefix="/admin/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardResponse)
async def get_dashboard_stats(
    admin: AdminIdentity,
    engine: Annotated[AnalyticsEngine, Depends(get_analytics_engine)],
    status: OrderStatus = Query(
        OrderStatus.DELIVERED,
        description="Order status the top products ranking is computed over",
    ),
) -> DashboardResponse:
    """
    Get the full dashboard: counts, recognized revenue, rollups by day,
    ISO week, month and half-year, status and payment breakdowns, and the
    best selling products.
    """
    return await engine.dashboard(top_status=status)
