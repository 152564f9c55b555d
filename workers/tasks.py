# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Recurring background jobs. In production they are fired by Celery beat
# (see CRON_JOBS in workers/schedule.py); in development the API process
# runs them itself via initialize_crons().
#
# Tasks:
# - process_recurring_transactions: materialize due recurring transactions
# - generate_monthly_reports: build last month's report for opted-in users
# =============================================================================

import logging
from typing import Any

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="workers.tasks.process_recurring_transactions")
def process_recurring_transactions(self) -> dict[str, Any]:
    """
    Insert the occurrences of every recurring transaction that has come due.

    Returns:
        Dict with processed / created / failed counts
    """
    from core.services.transaction_service import TransactionService

    logger.info(f"Processing recurring transactions [{self.request.id}]")
    return TransactionService.process_recurring_transactions()


@shared_task(bind=True, name="workers.tasks.generate_monthly_reports")
def generate_monthly_reports(self) -> dict[str, Any]:
    """
    Generate the previous month's report for every user with reports enabled.

    Returns:
        Dict with generated / failed counts
    """
    from core.services.report_service import ReportService

    logger.info(f"Generating monthly reports [{self.request.id}]")
    return ReportService.generate_monthly_reports()
