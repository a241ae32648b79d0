# app/services/record_store.py
"""
Record store: async CRUD over the devices and transactions tables.

Every call opens its own short-lived AsyncSession, so callers (HTTP handlers,
the transaction scheduler) never share a session across awaits.
Deleting a device removes its transactions in the same DB transaction.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from app.models.device import Device, DEVICE_STATUS_INACTIVE
from app.models.transaction import Transaction


class DeviceRepository:
    def __init__(self, sessionmaker: async_sessionmaker):
        self._sessionmaker = sessionmaker

    async def create(self, name: str, device_type: str, ip_address: str) -> Device:
        now = datetime.now(timezone.utc)
        device = Device(
            id=str(uuid.uuid4()),
            name=name,
            device_type=device_type,
            ip_address=ip_address,
            status=DEVICE_STATUS_INACTIVE,
            created_at=now,
            updated_at=now,
        )
        async with self._sessionmaker() as session:
            session.add(device)
            await session.commit()
        return device

    async def find_all(self) -> list[Device]:
        async with self._sessionmaker() as session:
            result = await session.execute(select(Device).order_by(Device.created_at.desc()))
            return list(result.scalars().all())

    async def find_by_id(self, device_id: str) -> Optional[Device]:
        async with self._sessionmaker() as session:
            return await session.get(Device, device_id)

    async def find_by_status(self, status: str) -> list[Device]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(Device).where(Device.status == status).order_by(Device.created_at)
            )
            return list(result.scalars().all())

    async def update_status(self, device_id: str, status: str) -> Optional[Device]:
        """Returns the updated device, or None if it no longer exists."""
        async with self._sessionmaker() as session:
            device = await session.get(Device, device_id)
            if device is None:
                return None
            device.status = status
            device.updated_at = datetime.now(timezone.utc)
            await session.commit()
            return device

    async def delete(self, device_id: str) -> None:
        async with self._sessionmaker() as session:
            await session.execute(delete(Transaction).where(Transaction.device_id == device_id))
            await session.execute(delete(Device).where(Device.id == device_id))
            await session.commit()


class TransactionRepository:
    def __init__(self, sessionmaker: async_sessionmaker):
        self._sessionmaker = sessionmaker

    async def create(self, device_id: str, username: str, event_type: str,
                     timestamp: datetime, payload: Optional[dict] = None) -> Transaction:
        txn = Transaction(
            id=str(uuid.uuid4()),
            device_id=device_id,
            username=username,
            event_type=event_type,
            timestamp=timestamp,
            payload=payload,
            created_at=datetime.now(timezone.utc),
        )
        async with self._sessionmaker() as session:
            session.add(txn)
            await session.commit()
        return txn

    async def find_all(self, device_id: Optional[str] = None, limit: int = 100,
                       offset: int = 0) -> Tuple[list[Transaction], int]:
        """Newest first, with the owning device loaded for display."""
        q = select(Transaction).options(selectinload(Transaction.device))
        count_q = select(func.count(Transaction.id))
        if device_id:
            q = q.where(Transaction.device_id == device_id)
            count_q = count_q.where(Transaction.device_id == device_id)

        async with self._sessionmaker() as session:
            result = await session.execute(
                q.order_by(Transaction.timestamp.desc()).limit(limit).offset(offset)
            )
            total = await session.scalar(count_q)
            return list(result.scalars().all()), total or 0

    async def find_by_device_id(self, device_id: str, limit: int = 100,
                                offset: int = 0) -> Tuple[list[Transaction], int]:
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(Transaction)
                .where(Transaction.device_id == device_id)
                .order_by(Transaction.timestamp.desc())
                .limit(limit)
                .offset(offset)
            )
            total = await session.scalar(
                select(func.count(Transaction.id)).where(Transaction.device_id == device_id)
            )
            return list(result.scalars().all()), total or 0
