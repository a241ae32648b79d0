# app/services/scheduler.py
"""
Transaction scheduler. Keeps one self-rescheduling timer chain per active device.

Each chain is a single armed loop.call_later() handle. When it fires, a task
writes one random transaction through the record store, then arms the next
fire with a fresh random delay. Everything runs on the one asyncio loop, so the
registry needs no lock.

Every chain carries a generation token captured at start(). A fire, and the
re-arm after its write, only proceed while the registry still holds that same
token for the device. stop() removes the entry and cancels the armed handle,
so a write that was already in flight may still land but never re-arms.
"""

import asyncio
import itertools
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from app.services.event_source import RandomEventSource
from app.utils.logger import get_logger

logger = get_logger(__name__)

PAYLOAD_SOURCE = "device_subprocess"


@dataclass
class _Chain:
    token: int
    handle: Optional[asyncio.TimerHandle] = None   # None while a write is in flight


class TransactionScheduler:
    def __init__(self, transactions, events: RandomEventSource):
        """
        transactions: anything with an async
            create(device_id, username, event_type, timestamp, payload)
        events: source of usernames, event types and delays
        """
        self._transactions = transactions
        self._events = events
        self._chains: dict[str, _Chain] = {}
        self._tokens = itertools.count(1)
        self._inflight: set[asyncio.Task] = set()

    # ── Public API ────────────────────────────────────────────────────────

    def start(self, device_id: str) -> None:
        """Begin generating transactions for a device. Must be called on the running loop."""
        if device_id in self._chains:
            logger.warning(f"Generation already running for device {device_id} — start ignored")
            return

        chain = _Chain(token=next(self._tokens))
        self._chains[device_id] = chain
        self._arm(device_id, chain)
        logger.info(f"▶️  Transaction generation started for device {device_id}")

    def stop(self, device_id: str) -> None:
        """Stop a device's chain. No-op if it is not running."""
        chain = self._chains.pop(device_id, None)
        if chain is None:
            return
        if chain.handle is not None:
            chain.handle.cancel()
        logger.info(f"⏹  Transaction generation stopped for device {device_id}")

    def stop_all(self) -> None:
        """Cancel every armed timer and clear the registry. Safe to call repeatedly."""
        if self._chains:
            logger.info(f"Stopping {len(self._chains)} active device chain(s)...")
        for chain in self._chains.values():
            if chain.handle is not None:
                chain.handle.cancel()
        self._chains.clear()

    async def drain(self) -> None:
        """Wait for writes that were already in flight when their chain stopped."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def is_running(self, device_id: str) -> bool:
        return device_id in self._chains

    def active_count(self) -> int:
        return len(self._chains)

    # ── Chain mechanics ───────────────────────────────────────────────────

    def _is_live(self, device_id: str, token: int) -> bool:
        chain = self._chains.get(device_id)
        return chain is not None and chain.token == token

    def _arm(self, device_id: str, chain: _Chain) -> None:
        delay_ms = self._events.next_delay()
        loop = asyncio.get_running_loop()
        chain.handle = loop.call_later(delay_ms / 1000, self._fire, device_id, chain.token)

    def _fire(self, device_id: str, token: int) -> None:
        if not self._is_live(device_id, token):
            return
        self._chains[device_id].handle = None
        task = asyncio.get_running_loop().create_task(
            self._generate(device_id, token), name=f"txn-{device_id}"
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _generate(self, device_id: str, token: int) -> None:
        now = datetime.now(timezone.utc)
        try:
            txn = await self._transactions.create(
                device_id=device_id,
                username=self._events.pick_username(),
                event_type=self._events.pick_event_type(),
                timestamp=now,
                payload={"source": PAYLOAD_SOURCE, "generated_at": now.isoformat()},
            )
            logger.debug(f"Transaction {getattr(txn, 'id', '?')} created for device {device_id}")
        except Exception as e:
            # One lost event; the chain keeps going
            logger.error(f"Error creating transaction for device {device_id}: {e}")

        # stop() (or stop + start) may have happened while the write was pending
        if not self._is_live(device_id, token):
            logger.debug(f"Chain for device {device_id} ended after in-flight write")
            return
        self._arm(device_id, self._chains[device_id])
