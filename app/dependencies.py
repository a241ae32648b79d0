# app/dependencies.py
"""
FastAPI dependencies. Hand routers the service objects built at startup,
and turn failed ServiceResults into HTTP errors.
"""

from fastapi import HTTPException, Request, status
from app.services.device_service import DeviceService
from app.services.results import ErrorKind, ServiceResult
from app.services.scheduler import TransactionScheduler
from app.services.transaction_service import TransactionService

_STATUS_BY_ERROR = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_device_service(request: Request) -> DeviceService:
    return request.app.state.device_service


def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service


def get_scheduler(request: Request) -> TransactionScheduler:
    return request.app.state.scheduler


def unwrap(result: ServiceResult):
    """Return the result's value, or raise the HTTPException matching its error kind."""
    if result.success:
        return result.value
    raise HTTPException(
        status_code=_STATUS_BY_ERROR.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail={"error": result.error.value, "message": result.message},
    )
