from __future__ import annotations

"""In-process checkpoint store for local development and tests."""

import asyncio
import time
from typing import Callable

from .base import CheckpointStore, CheckpointStoreCapabilities


class InMemoryCheckpointStore(CheckpointStore):
    """Process-local backend with TTL semantics driven by an injectable monotonic clock."""

    capabilities = CheckpointStoreCapabilities(ttl=True, durable=False)

    def __init__(self, *, clock: Callable[[], float] = time.monotonic, **kwargs) -> None:
        super().__init__(**kwargs)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._values: dict[str, tuple[str, float]] = {}

    def _expired(self, deadline: float) -> bool:
        return self._clock() >= deadline

    def _purge_expired(self) -> None:
        for key in [k for k, (_, deadline) in self._values.items() if self._expired(deadline)]:
            del self._values[key]

    async def _write(self, key: str, payload: str, ttl_s: int) -> None:
        async with self._lock:
            self._values[key] = (payload, self._clock() + ttl_s)

    async def _read(self, key: str) -> str | None:
        async with self._lock:
            self._purge_expired()
            entry = self._values.get(key)
            return None if entry is None else entry[0]

    async def _remove(self, key: str) -> None:
        async with self._lock:
            self._values.pop(key, None)

    async def _contains(self, key: str) -> bool:
        async with self._lock:
            self._purge_expired()
            return key in self._values

    async def _keys(self, prefix: str) -> list[str]:
        async with self._lock:
            self._purge_expired()
            return [key for key in self._values if key.startswith(prefix)]

    def raw(self, run_id: str) -> str | None:
        """Return the stored payload without expiry checks (inspection helper for tests)."""
        entry = self._values.get(self.key_for(run_id))
        return None if entry is None else entry[0]

    def put_raw(self, run_id: str, payload: str) -> None:
        """Store a payload verbatim with the default expiry (inspection helper for tests)."""
        self._values[self.key_for(run_id)] = (payload, self._clock() + self.ttl_s)
