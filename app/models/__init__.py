# Access Device Simulator — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.device import Device             # noqa
from app.models.transaction import Transaction   # noqa
