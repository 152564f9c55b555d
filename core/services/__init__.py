# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .user_service import UserService
from .transaction_service import TransactionService
from .analytics_service import AnalyticsService, summarize
from .report_service import ReportService

__all__ = [
    "UserService",
    "TransactionService",
    "AnalyticsService",
    "summarize",
    "ReportService",
]
