# app/models/transaction.py
"""
Access-event transactions generated by active devices.
Written only by the transaction scheduler, never updated afterwards.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.database import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    device_id = Column(
        String(36),
        ForeignKey("devices.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    username = Column(String(100), nullable=False)
    event_type = Column(String(50), nullable=False)     # access_granted | access_denied | face_match | ...
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    payload = Column(JSON)
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    device = relationship("Device", back_populates="transactions")

    def __repr__(self):
        return f"<Transaction {self.id} device={self.device_id} type={self.event_type}>"
