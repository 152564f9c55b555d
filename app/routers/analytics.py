# =============================================================================
# app/routers/analytics.py - Dashboard Analytics
# =============================================================================

import asyncio

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models.report import AnalyticsSummary, DateRangePreset
from core.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    user: AuthUser = Depends(get_current_user),
    preset: DateRangePreset = Query(DateRangePreset.LAST_30_DAYS, description="Date range"),
):
    """
    Income, expenses and balance over a preset date range.

    Example: GET /analytics/summary?preset=thisMonth
    """
    return await asyncio.to_thread(AnalyticsService.get_summary, user.id, preset)
