from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the Redis checkpoint backend.
"""

from redis.asyncio import Redis

from .base import CheckpointStore, CheckpointStoreCapabilities


class RedisCheckpointStore(CheckpointStore):
    """Redis-backed checkpoint store: one string key per run, written with `SET ... EX`."""

    capabilities = CheckpointStoreCapabilities(ttl=True, durable=True)

    def __init__(
        self,
        *,
        url: str | None = None,
        client: Redis | None = None,
        scan_count: int = 500,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        if url is None and client is None:
            raise ValueError("RedisCheckpointStore requires either `url` or `client`.")
        self.url = url
        self.scan_count = scan_count
        self._redis_client: Redis | None = client
        self._owns_client = client is None

    async def setup(self) -> None:
        if self._redis_client is None:
            self._redis_client = Redis.from_url(self.url, decode_responses=True)
        await self._redis_client.ping()
        await super().setup()

    async def close(self) -> None:
        if self._redis_client is not None and self._owns_client:
            await self._redis_client.aclose()
            self._redis_client = None
        await super().close()

    def _redis(self) -> Redis:
        if self._redis_client is None:
            raise RuntimeError(
                "RedisCheckpointStore is not initialized. Call setup() first."
            )
        return self._redis_client

    async def _write(self, key: str, payload: str, ttl_s: int) -> None:
        await self._redis().set(key, payload, ex=ttl_s)

    async def _read(self, key: str) -> str | None:
        value = await self._redis().get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def _remove(self, key: str) -> None:
        await self._redis().delete(key)

    async def _contains(self, key: str) -> bool:
        return bool(await self._redis().exists(key))

    async def _keys(self, prefix: str) -> list[str]:
        keys: list[str] = []
        async for key in self._redis().scan_iter(match=f"{prefix}*", count=self.scan_count):
            keys.append(key.decode("utf-8") if isinstance(key, bytes) else key)
        return keys
