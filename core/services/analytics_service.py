# =============================================================================
# core/services/analytics_service.py - Financial Summaries
# =============================================================================
# Aggregates transactions into income / expense / balance figures.
# summarize() is pure so reports and the dashboard share one calculation.
# =============================================================================

import datetime as dt
import logging
from collections import defaultdict
from typing import Any, Iterable
from uuid import UUID

from core.models.report import AnalyticsSummary, DateRangePreset
from core.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


def summarize(rows: Iterable[dict[str, Any]], top_n: int = 5) -> dict[str, Any]:
    """
    Totals for a set of transaction rows.

    Args:
        rows: Dicts with at least "type", "amount" and "category"
        top_n: Number of expense categories to keep

    Returns:
        Dict with total_income, total_expenses, available_balance,
        savings_rate (percent, 1 decimal), transaction_count and
        top_categories (largest expenses first)
    """
    income = 0.0
    expenses = 0.0
    count = 0
    by_category: dict[str, float] = defaultdict(float)

    for row in rows:
        amount = abs(float(row.get("amount") or 0))
        count += 1
        if row.get("type") == "INCOME":
            income += amount
        else:
            expenses += amount
            by_category[row.get("category") or "other"] += amount

    savings_rate = round((income - expenses) / income * 100, 1) if income > 0 else 0.0
    top = sorted(by_category.items(), key=lambda item: item[1], reverse=True)[:top_n]

    return {
        "total_income": round(income, 2),
        "total_expenses": round(expenses, 2),
        "available_balance": round(income - expenses, 2),
        "savings_rate": savings_rate,
        "transaction_count": count,
        "top_categories": {name: round(value, 2) for name, value in top},
    }


class AnalyticsService:
    """Dashboard analytics for one user."""

    @staticmethod
    def get_summary(
        user_id: str | UUID,
        preset: DateRangePreset,
        today: dt.date | None = None,
    ) -> AnalyticsSummary:
        start, end = preset.resolve(today or dt.date.today())
        rows = TransactionService.list_in_range(user_id, start, end)
        totals = summarize(rows)
        logger.debug(f"Summary for user {user_id} ({preset.value}): {totals['transaction_count']} transactions")

        return AnalyticsSummary(
            preset=preset,
            start_date=start,
            end_date=end,
            total_income=totals["total_income"],
            total_expenses=totals["total_expenses"],
            available_balance=totals["available_balance"],
            transaction_count=totals["transaction_count"],
            savings_rate=totals["savings_rate"],
        )
