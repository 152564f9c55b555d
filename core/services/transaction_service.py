# =============================================================================
# core/services/transaction_service.py - Transaction Business Logic
# =============================================================================
# Handles transaction CRUD and recurring-transaction processing.
# Separates HTTP concerns from database/business logic.
#
# Every query is scoped by user_id: the service-role client bypasses RLS.
# =============================================================================

import datetime as dt
import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseQueryError, NotFoundException
from core.models.transaction import RecurringInterval, TransactionCreate, TransactionUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

TABLE = "transactions"


class TransactionService:
    """
    Service for transaction operations.

    Provides a clean interface between API routes, cron jobs and database.
    """

    @staticmethod
    def create_transaction(user_id: str | UUID, txn: TransactionCreate) -> dict[str, Any]:
        """
        Insert a transaction for a user.

        Recurring transactions get next_recurrence_date set to the occurrence
        after `txn.date`.
        """
        data = txn.model_dump(mode="json")
        data["user_id"] = normalize_uuid(user_id)
        if txn.is_recurring and txn.recurring_interval:
            data["next_recurrence_date"] = txn.recurring_interval.next_date(txn.date).isoformat()

        try:
            client = SupabaseClient.get_client()
            response = client.table(TABLE).insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to create transaction for user {user_id}: {e}")
            raise DatabaseQueryError("create_transaction", str(e)) from e

        transaction = response.data[0]
        logger.info(f"Created transaction {transaction['id']} for user: {user_id}")
        return transaction

    @staticmethod
    def list_transactions(
        user_id: str | UUID,
        page: int = 1,
        page_size: int = 20,
        transaction_type: str | None = None,
        keyword: str | None = None,
        recurring: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        Page through a user's transactions, newest first.

        Returns:
            (rows for the page, total matching count)
        """
        offset = (page - 1) * page_size
        try:
            client = SupabaseClient.get_client()
            query = (
                client.table(TABLE)
                .select("*", count="exact")
                .eq("user_id", normalize_uuid(user_id))
            )
            if transaction_type:
                query = query.eq("type", transaction_type)
            if keyword:
                query = query.ilike("title", f"%{keyword}%")
            if recurring is not None:
                query = query.eq("is_recurring", recurring)

            response = (
                query.order("date", desc=True)
                .range(offset, offset + page_size - 1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list transactions for user {user_id}: {e}")
            raise DatabaseQueryError("list_transactions", str(e)) from e

        rows = response.data or []
        return rows, response.count if response.count is not None else len(rows)

    @staticmethod
    def list_in_range(
        user_id: str | UUID,
        start: dt.date | None,
        end: dt.date,
    ) -> list[dict[str, Any]]:
        """All of a user's transactions dated within [start, end]."""
        try:
            client = SupabaseClient.get_client()
            query = (
                client.table(TABLE)
                .select("type, amount, category, date")
                .eq("user_id", normalize_uuid(user_id))
                .lte("date", end.isoformat())
            )
            if start is not None:
                query = query.gte("date", start.isoformat())
            return query.execute().data or []
        except Exception as e:
            logger.error(f"Failed to load transactions for user {user_id}: {e}")
            raise DatabaseQueryError("list_in_range", str(e)) from e

    @staticmethod
    def get_transaction(user_id: str | UUID, transaction_id: str | UUID) -> dict[str, Any]:
        """
        Raises:
            NotFoundException: If missing or owned by another user
        """
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .select("*")
                .eq("id", normalize_uuid(transaction_id))
                .eq("user_id", normalize_uuid(user_id))
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch transaction {transaction_id}: {e}")
            raise DatabaseQueryError("get_transaction", str(e)) from e

        if not response.data:
            raise NotFoundException("Transaction", normalize_uuid(transaction_id))
        return response.data[0]

    @staticmethod
    def update_transaction(
        user_id: str | UUID,
        transaction_id: str | UUID,
        changes: TransactionUpdate,
    ) -> dict[str, Any]:
        """Apply a partial update; recomputes next_recurrence_date when recurrence changes."""
        current = TransactionService.get_transaction(user_id, transaction_id)
        updates = changes.model_dump(mode="json", exclude_unset=True)
        if not updates:
            return current

        merged = {**current, **updates}
        if merged.get("is_recurring") and merged.get("recurring_interval"):
            interval = RecurringInterval(merged["recurring_interval"])
            base = dt.date.fromisoformat(str(merged["date"])[:10])
            updates["next_recurrence_date"] = interval.next_date(base).isoformat()
        else:
            updates["recurring_interval"] = None
            updates["next_recurrence_date"] = None

        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .update(updates)
                .eq("id", normalize_uuid(transaction_id))
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update transaction {transaction_id}: {e}")
            raise DatabaseQueryError("update_transaction", str(e)) from e

        logger.info(f"Updated transaction {transaction_id} ({', '.join(sorted(updates))})")
        return response.data[0] if response.data else merged

    @staticmethod
    def delete_transaction(user_id: str | UUID, transaction_id: str | UUID) -> None:
        try:
            client = SupabaseClient.get_client()
            response = (
                client.table(TABLE)
                .delete()
                .eq("id", normalize_uuid(transaction_id))
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to delete transaction {transaction_id}: {e}")
            raise DatabaseQueryError("delete_transaction", str(e)) from e

        if not response.data:
            raise NotFoundException("Transaction", normalize_uuid(transaction_id))
        logger.info(f"Deleted transaction {transaction_id} for user: {user_id}")

    # -------------------------------------------------------------------------
    # Recurring transactions (cron)
    # -------------------------------------------------------------------------

    @staticmethod
    def process_recurring_transactions(today: dt.date | None = None) -> dict[str, int]:
        """
        Materialize every recurring transaction whose next occurrence is due.

        For each due template a plain (non-recurring) copy is inserted for
        each missed occurrence up to `today`, then the template's
        next_recurrence_date is advanced past `today`.

        Returns:
            Counts: {"processed": templates handled, "created": rows inserted, "failed": errors}
        """
        today = today or dt.date.today()
        try:
            client = SupabaseClient.get_client()
            due = (
                client.table(TABLE)
                .select("*")
                .eq("is_recurring", True)
                .lte("next_recurrence_date", today.isoformat())
                .execute()
            ).data or []
        except Exception as e:
            logger.error(f"Failed to load due recurring transactions: {e}")
            raise DatabaseQueryError("process_recurring_transactions", str(e)) from e

        stats = {"processed": 0, "created": 0, "failed": 0}
        for template in due:
            try:
                created, next_date = _materialize(template, today)
                if created:
                    client.table(TABLE).insert(created).execute()
                client.table(TABLE).update({
                    "next_recurrence_date": next_date.isoformat(),
                    "last_processed": dt.datetime.now(dt.timezone.utc).isoformat(),
                }).eq("id", template["id"]).execute()
            except Exception as e:
                stats["failed"] += 1
                logger.error(f"Failed recurring transaction {template.get('id')}: {e}")
                continue
            stats["processed"] += 1
            stats["created"] += len(created)

        logger.info(f"Recurring transactions: {stats}")
        return stats


def _materialize(template: dict[str, Any], today: dt.date) -> tuple[list[dict[str, Any]], dt.date]:
    """Copies of `template` for each occurrence <= today, and the following occurrence."""
    interval = RecurringInterval(template["recurring_interval"])
    occurrence = dt.date.fromisoformat(str(template["next_recurrence_date"])[:10])

    copies = []
    while occurrence <= today:
        copies.append({
            "user_id": template["user_id"],
            "title": template["title"],
            "type": template["type"],
            "amount": template["amount"],
            "category": template["category"],
            "description": template.get("description"),
            "payment_method": template.get("payment_method"),
            "date": occurrence.isoformat(),
            "is_recurring": False,
        })
        occurrence = interval.next_date(occurrence)
    return copies, occurrence
