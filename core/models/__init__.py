# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - transaction.py: Transaction CRUD schemas and recurrence
# - report.py: Report settings, generated reports, analytics summary
#
# These models define the "contract" between API and clients.
# =============================================================================

from .transaction import (
    PaymentMethod,
    RecurringInterval,
    TransactionCreate,
    TransactionList,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)
from .report import (
    AnalyticsSummary,
    DateRangePreset,
    ReportList,
    ReportResponse,
    ReportSettingResponse,
    ReportSettingUpdate,
    ReportStatus,
)

__all__ = [
    # Transactions
    "PaymentMethod",
    "RecurringInterval",
    "TransactionCreate",
    "TransactionList",
    "TransactionResponse",
    "TransactionType",
    "TransactionUpdate",
    # Reports / analytics
    "AnalyticsSummary",
    "DateRangePreset",
    "ReportList",
    "ReportResponse",
    "ReportSettingResponse",
    "ReportSettingUpdate",
    "ReportStatus",
]
