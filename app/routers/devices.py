"""Device management: create, inspect, activate/deactivate and delete simulated devices."""

from fastapi import APIRouter, Depends, status
from app.dependencies import get_device_service, unwrap
from app.schemas.device import DeviceCreate, DeviceOut, DeviceActionOut
from app.services.device_service import DeviceService

router = APIRouter()


@router.post("/devices", response_model=DeviceOut, status_code=status.HTTP_201_CREATED,
             summary="Register a new simulated device")
async def create_device(body: DeviceCreate, service: DeviceService = Depends(get_device_service)):
    """New devices start inactive. device_type must be one of the configured types."""
    return unwrap(await service.create_device(body.name, body.device_type, body.ip_address))


@router.get("/devices", response_model=list[DeviceOut], summary="List devices, newest first")
async def list_devices(service: DeviceService = Depends(get_device_service)):
    return unwrap(await service.list_devices())


@router.get("/devices/{device_id}", response_model=DeviceOut)
async def get_device(device_id: str, service: DeviceService = Depends(get_device_service)):
    return unwrap(await service.get_device(device_id))


@router.post("/devices/{device_id}/activate", response_model=DeviceActionOut,
             summary="Start generating transactions")
async def activate_device(device_id: str, service: DeviceService = Depends(get_device_service)):
    device = unwrap(await service.activate_device(device_id))
    return {"message": "Device activated successfully", "device": device}


@router.post("/devices/{device_id}/deactivate", response_model=DeviceActionOut,
             summary="Stop generating transactions")
async def deactivate_device(device_id: str, service: DeviceService = Depends(get_device_service)):
    device = unwrap(await service.deactivate_device(device_id))
    return {"message": "Device deactivated successfully", "device": device}


@router.delete("/devices/{device_id}", summary="Delete a device and all its transactions")
async def delete_device(device_id: str, service: DeviceService = Depends(get_device_service)):
    unwrap(await service.delete_device(device_id))
    return {"message": "Device deleted successfully"}
