# =============================================================================
# core/models/report.py - Report & Analytics Schemas
# =============================================================================
# - ReportSettingUpdate: toggle the monthly email report
# - ReportResponse / ReportList: generated monthly reports
# - DateRangePreset / AnalyticsSummary: dashboard summary over a date range
# =============================================================================

import datetime as dt
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from lib.utils import add_months


class ReportStatus(str, Enum):
    SENT = "SENT"
    PENDING = "PENDING"
    FAILED = "FAILED"
    NO_ACTIVITY = "NO_ACTIVITY"


class ReportSettingUpdate(BaseModel):
    is_enabled: bool = Field(..., description="Generate a report on the 1st of every month")


class ReportSettingResponse(BaseModel):
    user_id: UUID
    is_enabled: bool
    next_report_date: dt.date | None = None


class ReportResponse(BaseModel):
    id: UUID
    user_id: UUID
    period: str = Field(..., description="Human-readable period, e.g. 'March 1 - 31, 2024'")
    period_start: dt.date
    period_end: dt.date
    total_income: float = 0.0
    total_expenses: float = 0.0
    available_balance: float = 0.0
    savings_rate: float = 0.0
    top_categories: dict[str, float] = Field(default_factory=dict)
    status: ReportStatus = ReportStatus.PENDING
    created_at: dt.datetime | None = None


class ReportList(BaseModel):
    reports: list[ReportResponse]
    total: int
    page: int
    page_size: int


# =============================================================================
# Analytics
# =============================================================================

class DateRangePreset(str, Enum):
    LAST_30_DAYS = "30days"
    LAST_MONTH = "lastMonth"
    LAST_3_MONTHS = "last3Months"
    LAST_YEAR = "lastYear"
    THIS_MONTH = "thisMonth"
    THIS_YEAR = "thisYear"
    ALL_TIME = "allTime"

    def resolve(self, today: dt.date) -> tuple[dt.date | None, dt.date]:
        """
        Concrete (start, end) for this preset; start is None for ALL_TIME.

        Example:
            DateRangePreset.THIS_MONTH.resolve(date(2024, 3, 17))  # (2024-03-01, 2024-03-17)
        """
        if self is DateRangePreset.LAST_30_DAYS:
            return today - dt.timedelta(days=30), today
        if self is DateRangePreset.LAST_MONTH:
            end = today.replace(day=1) - dt.timedelta(days=1)
            return end.replace(day=1), end
        if self is DateRangePreset.LAST_3_MONTHS:
            return add_months(today.replace(day=1), -3), today.replace(day=1) - dt.timedelta(days=1)
        if self is DateRangePreset.LAST_YEAR:
            return dt.date(today.year - 1, 1, 1), dt.date(today.year - 1, 12, 31)
        if self is DateRangePreset.THIS_MONTH:
            return today.replace(day=1), today
        if self is DateRangePreset.THIS_YEAR:
            return dt.date(today.year, 1, 1), today
        return None, today


class AnalyticsSummary(BaseModel):
    preset: DateRangePreset
    start_date: dt.date | None = None
    end_date: dt.date
    total_income: float
    total_expenses: float
    available_balance: float
    transaction_count: int
    savings_rate: float = Field(..., description="Percentage of income not spent, 0 when there is no income")
