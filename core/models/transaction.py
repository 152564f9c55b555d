# =============================================================================
# core/models/transaction.py - Transaction Schemas
# =============================================================================
# These models define the API contract for transaction operations:
# - TransactionType / RecurringInterval / PaymentMethod: enums
# - TransactionCreate / TransactionUpdate: request bodies
# - TransactionResponse / TransactionList: responses
#
# Amounts are stored as positive numbers; the sign comes from `type`.
# =============================================================================

import datetime as dt
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from lib.utils import add_months


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    MOBILE_PAYMENT = "MOBILE_PAYMENT"
    AUTO_DEBIT = "AUTO_DEBIT"
    CASH = "CASH"
    OTHER = "OTHER"


class RecurringInterval(str, Enum):
    """How often a recurring transaction repeats."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    def next_date(self, current: dt.date) -> dt.date:
        """
        The occurrence after `current`.

        Example:
            RecurringInterval.MONTHLY.next_date(date(2024, 1, 31))  # 2024-02-29
        """
        if self is RecurringInterval.DAILY:
            return current + dt.timedelta(days=1)
        if self is RecurringInterval.WEEKLY:
            return current + dt.timedelta(weeks=1)
        if self is RecurringInterval.MONTHLY:
            return add_months(current, 1)
        return add_months(current, 12)


class TransactionCreate(BaseModel):
    """
    Schema for creating a transaction.

    Example:
        {
            "title": "Salary",
            "type": "INCOME",
            "amount": 4200.00,
            "category": "salary",
            "date": "2024-01-31",
            "is_recurring": true,
            "recurring_interval": "MONTHLY"
        }
    """
    title: str = Field(..., min_length=1, max_length=255)
    type: TransactionType
    amount: float = Field(..., gt=0, description="Positive amount; sign is implied by type")
    category: str = Field(..., min_length=1, max_length=100)
    date: dt.date
    description: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod = PaymentMethod.CASH
    is_recurring: bool = False
    recurring_interval: RecurringInterval | None = None

    @model_validator(mode="after")
    def check_recurrence(self):
        if self.is_recurring and self.recurring_interval is None:
            raise ValueError("recurring_interval is required when is_recurring is true")
        if not self.is_recurring:
            self.recurring_interval = None
        return self


class TransactionUpdate(BaseModel):
    """Partial update; only supplied fields change."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    type: TransactionType | None = None
    amount: float | None = Field(default=None, gt=0)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    date: dt.date | None = None
    description: str | None = Field(default=None, max_length=1000)
    payment_method: PaymentMethod | None = None
    is_recurring: bool | None = None
    recurring_interval: RecurringInterval | None = None


class TransactionResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    type: TransactionType
    amount: float
    category: str
    date: dt.date
    description: str | None = None
    payment_method: PaymentMethod | None = None
    is_recurring: bool = False
    recurring_interval: RecurringInterval | None = None
    next_recurrence_date: dt.date | None = None
    last_processed: dt.datetime | None = None
    created_at: dt.datetime | None = None


class TransactionList(BaseModel):
    transactions: list[TransactionResponse]
    total: int
    page: int
    page_size: int
