"""
Shared test setup. Points the app at a throwaway SQLite database and makes
devices generate every few milliseconds, before any app module is imported.
"""

import os
import sys
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="device-sim-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'app.db')}")
os.environ.setdefault("LOG_DIR", os.path.join(_TMP_DIR, "logs"))
os.environ.setdefault("TRANSACTION_MIN_DELAY_MS", "5")
os.environ.setdefault("TRANSACTION_MAX_DELAY_MS", "20")
os.environ.setdefault("API_KEY", "")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
import pytest_asyncio

from app.database import build_engine, build_sessionmaker, create_tables, close_engine
from app.services.record_store import DeviceRepository, TransactionRepository


@pytest_asyncio.fixture
async def sqlite_store(tmp_path):
    """A fresh file-backed SQLite database per test, with both repositories."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await create_tables(bind=engine)
    sessionmaker = build_sessionmaker(engine)
    yield DeviceRepository(sessionmaker), TransactionRepository(sessionmaker)
    await close_engine(bind=engine)


@pytest.fixture
def device_types():
    return ["access_controller", "face_reader", "anpr"]
