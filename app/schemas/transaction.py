from pydantic import BaseModel
from datetime import datetime
from typing import Any, Optional
from app.schemas.device import DeviceOut


class TransactionOut(BaseModel):
    id: str
    device_id: str
    username: str
    event_type: str
    timestamp: datetime
    payload: Optional[dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True


class TransactionWithDeviceOut(TransactionOut):
    device: Optional[DeviceOut] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int


class TransactionPage(BaseModel):
    transactions: list[TransactionWithDeviceOut]
    pagination: Pagination


class DeviceTransactionPage(BaseModel):
    device_id: str
    transactions: list[TransactionOut]
    pagination: Pagination
