# app/models/device.py
"""
Simulated access-control devices.
A device generates transactions only while its status is "active".
Deleting a device cascades to all of its transactions.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base

DEVICE_STATUS_ACTIVE = "active"
DEVICE_STATUS_INACTIVE = "inactive"


def _utcnow():
    return datetime.now(timezone.utc)


class Device(Base):
    __tablename__ = "devices"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    device_type = Column(String(50), nullable=False)    # access_controller | face_reader | anpr
    ip_address = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default=DEVICE_STATUS_INACTIVE, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    transactions = relationship(
        "Transaction",
        back_populates="device",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Device {self.id} type={self.device_type} status={self.status}>"
