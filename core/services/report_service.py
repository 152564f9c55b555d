# =============================================================================
# core/services/report_service.py - Monthly Reports
# =============================================================================
# Report settings (per user on/off switch) and monthly report generation.
#
# Tables:
# - report_settings: user_id, is_enabled, next_report_date
# - reports: one row per user per month
# =============================================================================

import datetime as dt
import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseQueryError
from core.models.report import ReportStatus
from core.services.analytics_service import summarize
from core.services.transaction_service import TransactionService
from lib.supabase_client import SupabaseClient
from lib.utils import add_months, normalize_uuid, previous_month_range

logger = logging.getLogger(__name__)


def format_period(start: dt.date, end: dt.date) -> str:
    """
    Example:
        format_period(date(2024, 3, 1), date(2024, 3, 31))  # "March 1 - 31, 2024"
    """
    if start.month == end.month and start.year == end.year:
        return f"{start:%B} {start.day} - {end.day}, {end.year}"
    return f"{start:%B} {start.day}, {start.year} - {end:%B} {end.day}, {end.year}"


class ReportService:
    """Service for report settings and generated reports."""

    @staticmethod
    def list_reports(
        user_id: str | UUID,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        offset = (page - 1) * page_size
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table("reports")
                .select("*", count="exact")
                .eq("user_id", normalize_uuid(user_id))
                .order("period_start", desc=True)
                .range(offset, offset + page_size - 1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list reports for user {user_id}: {e}")
            raise DatabaseQueryError("list_reports", str(e)) from e

        rows = response.data or []
        return rows, response.count if response.count is not None else len(rows)

    @staticmethod
    def update_setting(
        user_id: str | UUID,
        is_enabled: bool,
        today: dt.date | None = None,
    ) -> dict[str, Any]:
        """
        Turn monthly reports on or off.

        Enabling schedules the next report for the 1st of next month;
        disabling clears the schedule.
        """
        today = today or dt.date.today()
        data = {
            "user_id": normalize_uuid(user_id),
            "is_enabled": is_enabled,
            "next_report_date": add_months(today.replace(day=1), 1).isoformat() if is_enabled else None,
        }
        try:
            client = SupabaseClient.get_client()
            response = client.table("report_settings").upsert(data, on_conflict="user_id").execute()
        except Exception as e:
            logger.error(f"Failed to update report setting for user {user_id}: {e}")
            raise DatabaseQueryError("update_report_setting", str(e)) from e

        logger.info(f"Report setting for user {user_id}: enabled={is_enabled}")
        return response.data[0] if response.data else data

    # -------------------------------------------------------------------------
    # Monthly generation (cron)
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_monthly_reports(today: dt.date | None = None) -> dict[str, int]:
        """
        Generate last month's report for every user whose report is due.

        Returns:
            Counts: {"generated": ..., "failed": ...}
        """
        today = today or dt.date.today()
        period_start, period_end = previous_month_range(today)
        try:
            client = SupabaseClient.get_client()
            due = (
                client.table("report_settings")
                .select("*")
                .eq("is_enabled", True)
                .lte("next_report_date", today.isoformat())
                .execute()
            ).data or []
        except Exception as e:
            logger.error(f"Failed to load due report settings: {e}")
            raise DatabaseQueryError("generate_monthly_reports", str(e)) from e

        stats = {"generated": 0, "failed": 0}
        for setting in due:
            user_id = setting["user_id"]
            try:
                rows = TransactionService.list_in_range(user_id, period_start, period_end)
                client.table("reports").insert(
                    build_report(user_id, rows, period_start, period_end)
                ).execute()
                client.table("report_settings").update({
                    "next_report_date": add_months(today.replace(day=1), 1).isoformat(),
                }).eq("user_id", user_id).execute()
            except Exception as e:
                stats["failed"] += 1
                logger.error(f"Failed to generate report for user {user_id}: {e}")
                continue
            stats["generated"] += 1

        logger.info(f"Monthly reports for {format_period(period_start, period_end)}: {stats}")
        return stats


def build_report(
    user_id: str,
    rows: list[dict[str, Any]],
    period_start: dt.date,
    period_end: dt.date,
) -> dict[str, Any]:
    """Report row for one user and period."""
    totals = summarize(rows)
    return {
        "user_id": user_id,
        "period": format_period(period_start, period_end),
        "period_start": period_start.isoformat(),
        "period_end": period_end.isoformat(),
        "total_income": totals["total_income"],
        "total_expenses": totals["total_expenses"],
        "available_balance": totals["available_balance"],
        "savings_rate": totals["savings_rate"],
        "top_categories": totals["top_categories"],
        "status": (ReportStatus.SENT if totals["transaction_count"] else ReportStatus.NO_ACTIVITY).value,
    }
