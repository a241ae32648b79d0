# app/services/transaction_service.py
"""Read-only transaction listing with limit/offset pagination."""

from typing import Optional

from app.services.record_store import TransactionRepository
from app.services.results import ErrorKind, ServiceResult
from app.utils.logger import get_logger

logger = get_logger(__name__)


class TransactionService:
    def __init__(self, transactions: TransactionRepository,
                 default_limit: int = 100, max_limit: int = 1000):
        self._transactions = transactions
        self.default_limit = default_limit
        self.max_limit = max_limit

    def _page(self, limit: Optional[int], offset: Optional[int]) -> tuple[int, int]:
        limit = self.default_limit if not limit else limit
        return max(1, min(limit, self.max_limit)), max(0, offset or 0)

    async def get_transactions(self, device_id: Optional[str] = None,
                               limit: Optional[int] = None,
                               offset: Optional[int] = None) -> ServiceResult:
        limit, offset = self._page(limit, offset)
        try:
            rows, total = await self._transactions.find_all(device_id=device_id,
                                                            limit=limit, offset=offset)
        except Exception as e:
            logger.error(f"Error fetching transactions: {e}", exc_info=True)
            return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to fetch transactions")
        return ServiceResult.ok({
            "transactions": rows,
            "pagination": {"total": total, "limit": limit, "offset": offset},
        })

    async def get_device_transactions(self, device_id: str,
                                      limit: Optional[int] = None,
                                      offset: Optional[int] = None) -> ServiceResult:
        limit, offset = self._page(limit, offset)
        try:
            rows, total = await self._transactions.find_by_device_id(device_id,
                                                                     limit=limit, offset=offset)
        except Exception as e:
            logger.error(f"Error fetching transactions for device {device_id}: {e}", exc_info=True)
            return ServiceResult.fail(ErrorKind.INTERNAL_ERROR,
                                      "Failed to fetch device transactions")
        return ServiceResult.ok({
            "device_id": device_id,
            "transactions": rows,
            "pagination": {"total": total, "limit": limit, "offset": offset},
        })
