"""Transaction log viewer, paginated, newest first."""

from typing import Optional
from fastapi import APIRouter, Depends
from app.dependencies import get_transaction_service, unwrap
from app.schemas.transaction import TransactionPage, DeviceTransactionPage
from app.services.transaction_service import TransactionService

router = APIRouter()


@router.get("/transactions", response_model=TransactionPage, summary="List transactions")
async def list_transactions(
    device_id: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    service: TransactionService = Depends(get_transaction_service),
):
    """Optional device_id filter. limit defaults to 100, capped at 1000."""
    return unwrap(await service.get_transactions(device_id=device_id, limit=limit, offset=offset))


@router.get("/devices/{device_id}/transactions", response_model=DeviceTransactionPage,
            summary="Transactions for one device")
async def list_device_transactions(
    device_id: str,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    service: TransactionService = Depends(get_transaction_service),
):
    return unwrap(await service.get_device_transactions(device_id, limit=limit, offset=offset))
