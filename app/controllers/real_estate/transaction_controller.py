"""
Transaction Controller - closing records for accepted offers
"""
from fastapi import APIRouter, status
from typing import List
from app.schemas.transaction import (
    TransactionCreateRequest,
    TransactionUpdateRequest,
    TransactionResponse,
    TransactionDetailResponse,
)
from app.services.real_estate.transaction_service import (
    create_transaction,
    update_transaction,
    delete_transaction,
    get_transaction,
    list_transactions,
)

router = APIRouter(prefix="/real-estate/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionResponse])
async def get_transactions(limit: int = 50, offset: int = 0):
    transactions = await list_transactions(limit=limit, offset=offset)
    return [TransactionResponse(**t) for t in transactions]


@router.get("/{transaction_id}", response_model=TransactionDetailResponse)
async def get_transaction_detail(transaction_id: str):
    transaction = await get_transaction(transaction_id)
    return TransactionDetailResponse(**transaction)


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_new_transaction(request: TransactionCreateRequest):
    """Close an accepted offer; listing and property become Sold"""
    transaction = await create_transaction(
        offer_id=request.offer_id,
        closing_date=request.closing_date,
        commission_amount=request.commission_amount,
        closing_costs=request.closing_costs,
        notes=request.notes,
    )
    return TransactionResponse(**transaction)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction_info(transaction_id: str, request: TransactionUpdateRequest):
    transaction = await update_transaction(transaction_id, request.dict(exclude_unset=True))
    return TransactionResponse(**transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction_endpoint(transaction_id: str):
    """Delete a transaction; listing returns to Active, property to Available"""
    await delete_transaction(transaction_id)
