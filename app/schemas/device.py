from pydantic import BaseModel
from datetime import datetime


class DeviceCreate(BaseModel):
    name: str
    device_type: str        # access_controller | face_reader | anpr
    ip_address: str


class DeviceOut(BaseModel):
    id: str
    name: str
    device_type: str
    ip_address: str
    status: str             # active | inactive
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeviceActionOut(BaseModel):
    message: str
    device: DeviceOut
