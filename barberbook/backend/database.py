"""
In-memory persistence provider.

Stands in for the hosted relational backend. Tables are plain dicts of
immutable pydantic records keyed by id. Writers go through
``transaction()``, which serialises them and restores the previous
table contents if anything inside the block fails, so multi-row
operations such as a week replacement are all-or-nothing.

Test hooks:
    db.available = False            # every call raises PersistenceFailed
    db.inject_fault(after_writes=3) # 4th row write of the next transaction fails
    db.latency = 0.05               # seconds awaited per round trip
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Hashable, Optional

from barberbook.errors import BarberbookError, PersistenceFailed

logger = logging.getLogger(__name__)

TABLES = ("businesses", "credentials", "services", "working_hours", "appointments")


@dataclass(frozen=True)
class Credential:
    """Password material for one owner account."""

    business_id: str
    password_hash: str


class InMemoryDatabase:
    """Transactional dict-backed tables shared by all repositories."""

    def __init__(self, latency: float = 0.0) -> None:
        self.businesses: dict[str, Any] = {}
        self.credentials: dict[str, Credential] = {}
        self.services: dict[str, Any] = {}
        self.working_hours: dict[tuple[str, int], Any] = {}
        self.appointments: dict[str, Any] = {}
        self.available = True
        self.latency = latency
        self._lock = asyncio.Lock()
        self._fault_after: Optional[int] = None
        self._writes = 0
        self._in_transaction = False

    # ------------------------------------------------------------------ #
    # Round trips
    # ------------------------------------------------------------------ #

    async def roundtrip(self) -> None:
        """Simulate one request to the backend."""
        if self.latency:
            await asyncio.sleep(self.latency)
        if not self.available:
            raise PersistenceFailed("Backend unavailable.")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["InMemoryDatabase"]:
        """Run a block of writes atomically.

        Raises:
            PersistenceFailed: The backend is down, a write failed, or the
                block raised something that is not a domain error.
        """
        async with self._lock:
            await self.roundtrip()
            snapshot = self._snapshot()
            self._writes = 0
            self._in_transaction = True
            try:
                yield self
            except BarberbookError:
                self._restore(snapshot)
                logger.warning("Transaction rolled back")
                raise
            except Exception as exc:
                self._restore(snapshot)
                logger.error("Transaction rolled back after unexpected error: %s", exc)
                raise PersistenceFailed(f"Backend error: {exc}") from exc
            finally:
                self._in_transaction = False
                self._fault_after = None

    # ------------------------------------------------------------------ #
    # Row writes (only valid inside a transaction)
    # ------------------------------------------------------------------ #

    def write(self, table: str, key: Hashable, value: Any) -> None:
        self._count_write()
        self._table(table)[key] = value

    def delete(self, table: str, key: Hashable) -> None:
        self._count_write()
        self._table(table).pop(key, None)

    def _count_write(self) -> None:
        if not self._in_transaction:
            raise RuntimeError("Writes must happen inside db.transaction()")
        self._writes += 1
        if self._fault_after is not None and self._writes > self._fault_after:
            raise PersistenceFailed(f"Write {self._writes} failed.")

    # ------------------------------------------------------------------ #
    # Housekeeping
    # ------------------------------------------------------------------ #

    def inject_fault(self, after_writes: int) -> None:
        """Make the next transaction fail once it has written ``after_writes`` rows."""
        self._fault_after = after_writes

    def reset(self) -> None:
        """Clear all tables and hooks. Used by test fixtures for isolation."""
        for name in TABLES:
            self._table(name).clear()
        self.available = True
        self.latency = 0.0
        self._fault_after = None

    def _table(self, name: str) -> dict:
        if name not in TABLES:
            raise KeyError(f"Unknown table '{name}'. Available: {list(TABLES)}")
        return getattr(self, name)

    def _snapshot(self) -> dict[str, dict]:
        return {name: dict(self._table(name)) for name in TABLES}

    def _restore(self, snapshot: dict[str, dict]) -> None:
        for name, rows in snapshot.items():
            table = self._table(name)
            table.clear()
            table.update(rows)
