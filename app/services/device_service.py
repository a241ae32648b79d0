# app/services/device_service.py
"""
Device lifecycle: create, list, get, activate, deactivate, delete.

Activation persists "active" first and then starts the generation chain;
deactivation stops the chain first and then persists "inactive". A crash
between the two steps leaves a device marked active but not generating,
which reconcile_on_startup() repairs on the next boot.

Mutating calls on the same device are serialized by a per-device lock, so a
deactivate can never slip in between an activate's persist and its start.
The loser of a race sees the winner's status and fails with INVALID_STATE.
"""

import asyncio
from typing import Optional, Sequence

from app.models.device import DEVICE_STATUS_ACTIVE, DEVICE_STATUS_INACTIVE
from app.services.record_store import DeviceRepository
from app.services.results import ErrorKind, ServiceResult
from app.services.scheduler import TransactionScheduler
from app.utils.logger import get_logger

logger = get_logger(__name__)


class DeviceService:
    def __init__(self, devices: DeviceRepository, scheduler: TransactionScheduler,
                 device_types: Sequence[str]):
        self._devices = devices
        self._scheduler = scheduler
        self.device_types = tuple(device_types)
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, device_id: str) -> asyncio.Lock:
        return self._locks.setdefault(device_id, asyncio.Lock())

    async def create_device(self, name: Optional[str], device_type: Optional[str],
                            ip_address: Optional[str]) -> ServiceResult:
        if not name or not name.strip() or not ip_address or not ip_address.strip():
            return ServiceResult.fail(
                ErrorKind.VALIDATION_ERROR,
                "Missing required fields: name, device_type, ip_address",
            )
        if device_type not in self.device_types:
            return ServiceResult.fail(
                ErrorKind.VALIDATION_ERROR,
                f"Invalid device type. Must be one of: {', '.join(self.device_types)}",
            )

        try:
            device = await self._devices.create(name.strip(), device_type, ip_address.strip())
        except Exception as e:
            logger.error(f"Error creating device '{name}': {e}", exc_info=True)
            return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to create device")

        logger.info(f"Device created: {device.id} name={device.name} type={device.device_type}")
        return ServiceResult.ok(device)

    async def list_devices(self) -> ServiceResult:
        try:
            return ServiceResult.ok(await self._devices.find_all())
        except Exception as e:
            logger.error(f"Error fetching devices: {e}", exc_info=True)
            return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to fetch devices")

    async def get_device(self, device_id: str) -> ServiceResult:
        try:
            device = await self._devices.find_by_id(device_id)
        except Exception as e:
            logger.error(f"Error fetching device {device_id}: {e}", exc_info=True)
            return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to fetch device")
        if device is None:
            return _not_found(device_id)
        return ServiceResult.ok(device)

    async def activate_device(self, device_id: str) -> ServiceResult:
        async with self._lock_for(device_id):
            try:
                device = await self._devices.find_by_id(device_id)
                if device is None:
                    return _not_found(device_id)
                if device.status == DEVICE_STATUS_ACTIVE:
                    return ServiceResult.fail(ErrorKind.INVALID_STATE, "Device is already active")

                updated = await self._devices.update_status(device_id, DEVICE_STATUS_ACTIVE)
                if updated is None:
                    return _not_found(device_id)
            except Exception as e:
                logger.error(f"Error activating device {device_id}: {e}", exc_info=True)
                return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to activate device")

            self._scheduler.start(device_id)
            logger.info(f"Device activated: {device_id}")
            return ServiceResult.ok(updated)

    async def deactivate_device(self, device_id: str) -> ServiceResult:
        async with self._lock_for(device_id):
            try:
                device = await self._devices.find_by_id(device_id)
                if device is None:
                    return _not_found(device_id)
                if device.status == DEVICE_STATUS_INACTIVE:
                    return ServiceResult.fail(ErrorKind.INVALID_STATE, "Device is already inactive")

                self._scheduler.stop(device_id)
                updated = await self._devices.update_status(device_id, DEVICE_STATUS_INACTIVE)
                if updated is None:
                    return _not_found(device_id)
            except Exception as e:
                logger.error(f"Error deactivating device {device_id}: {e}", exc_info=True)
                return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to deactivate device")

            logger.info(f"Device deactivated: {device_id}")
            return ServiceResult.ok(updated)

    async def delete_device(self, device_id: str) -> ServiceResult:
        async with self._lock_for(device_id):
            try:
                device = await self._devices.find_by_id(device_id)
                if device is None:
                    return _not_found(device_id)

                if device.status == DEVICE_STATUS_ACTIVE or self._scheduler.is_running(device_id):
                    self._scheduler.stop(device_id)

                # Transactions go with the device row
                await self._devices.delete(device_id)
            except Exception as e:
                logger.error(f"Error deleting device {device_id}: {e}", exc_info=True)
                return ServiceResult.fail(ErrorKind.INTERNAL_ERROR, "Failed to delete device")

        self._locks.pop(device_id, None)
        logger.info(f"Device deleted: {device_id}")
        return ServiceResult.ok()

    async def reconcile_on_startup(self, resume: bool = True) -> int:
        """
        Devices persisted as active have no chain after a restart.
        resume=True restarts their chains, resume=False marks them inactive.
        Returns how many devices were touched.
        """
        stale = [d for d in await self._devices.find_by_status(DEVICE_STATUS_ACTIVE)
                 if not self._scheduler.is_running(d.id)]
        for device in stale:
            if resume:
                self._scheduler.start(device.id)
            else:
                await self._devices.update_status(device.id, DEVICE_STATUS_INACTIVE)

        if stale:
            action = "resumed" if resume else "reset to inactive"
            logger.info(f"Startup reconciliation: {len(stale)} active device(s) {action}")
        return len(stale)


def _not_found(device_id: str) -> ServiceResult:
    return ServiceResult.fail(ErrorKind.NOT_FOUND, f"Device '{device_id}' not found")
