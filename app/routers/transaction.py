# =============================================================================
# app/routers/transaction.py - Transaction CRUD Endpoints
# =============================================================================
# Mounted behind the bearer-token gate; every operation is scoped to the
# authenticated user.
# =============================================================================

import asyncio
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, get_current_user
from core.models.transaction import (
    TransactionCreate,
    TransactionList,
    TransactionResponse,
    TransactionType,
    TransactionUpdate,
)
from core.services.transaction_service import TransactionService

router = APIRouter()


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/create", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: TransactionCreate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Create a transaction.

    Recurring transactions are materialized by the daily cron job.
    """
    return await asyncio.to_thread(TransactionService.create_transaction, user.id, body)


@router.get("/all", response_model=TransactionList)
async def list_transactions(
    user: AuthUser = Depends(get_current_user),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    type: TransactionType | None = Query(None, description="Only INCOME or EXPENSE"),
    keyword: str | None = Query(None, max_length=100, description="Case-insensitive title search"),
    recurring: bool | None = Query(None, description="Only recurring / non-recurring"),
):
    """List the user's transactions, newest first."""
    rows, total = await asyncio.to_thread(
        TransactionService.list_transactions,
        user.id,
        page=page,
        page_size=page_size,
        transaction_type=type.value if type else None,
        keyword=keyword,
        recurring=recurring,
    )
    return TransactionList(transactions=rows, total=total, page=page, page_size=page_size)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID = Path(..., description="Transaction ID"),
    user: AuthUser = Depends(get_current_user),
):
    return await asyncio.to_thread(TransactionService.get_transaction, user.id, transaction_id)


@router.put("/update/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    body: TransactionUpdate,
    transaction_id: UUID = Path(..., description="Transaction ID"),
    user: AuthUser = Depends(get_current_user),
):
    return await asyncio.to_thread(TransactionService.update_transaction, user.id, transaction_id, body)


@router.delete("/delete/{transaction_id}")
async def delete_transaction(
    transaction_id: UUID = Path(..., description="Transaction ID"),
    user: AuthUser = Depends(get_current_user),
):
    await asyncio.to_thread(TransactionService.delete_transaction, user.id, transaction_id)
    return {"message": "Transaction deleted successfully", "id": str(transaction_id)}
