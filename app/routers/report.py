# =============================================================================
# app/routers/report.py - Report Endpoints
# =============================================================================
# Reports are produced by the monthly cron job; these endpoints list them
# and switch generation on or off.
# =============================================================================

import asyncio

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user
from core.models.report import ReportList, ReportSettingResponse, ReportSettingUpdate
from core.services.report_service import ReportService

router = APIRouter()


@router.get("/all", response_model=ReportList)
async def list_reports(
    user: AuthUser = Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    rows, total = await asyncio.to_thread(ReportService.list_reports, user.id, page, page_size)
    return ReportList(reports=rows, total=total, page=page, page_size=page_size)


@router.put("/update-setting", response_model=ReportSettingResponse)
async def update_report_setting(
    body: ReportSettingUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """Enable or disable the monthly report."""
    return await asyncio.to_thread(ReportService.update_setting, user.id, body.is_enabled)
