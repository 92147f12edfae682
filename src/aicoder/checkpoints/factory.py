from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides factory functions for creating checkpoint store backends based on environment variables.
"""

import os

from .models import CHECKPOINT_KEY_PREFIX, CHECKPOINT_TTL_S
from .store.base import CheckpointStore
from .store.in_memory import InMemoryCheckpointStore


def redis_url_from_env() -> str:
    """Build the Redis URL from `AICODER_REDIS_URL` or its host/port/db/password parts."""
    url = os.getenv("AICODER_REDIS_URL")
    if url:
        return url
    host = os.getenv("AICODER_REDIS_HOST", "localhost")
    port = os.getenv("AICODER_REDIS_PORT", "6379")
    db = os.getenv("AICODER_REDIS_DB", "0")
    password = os.getenv("AICODER_REDIS_PASSWORD", "")
    return (
        f"redis://:{password}@{host}:{port}/{db}"
        if password
        else f"redis://{host}:{port}/{db}"
    )


def create_checkpoint_store_from_env() -> CheckpointStore:
    """Create a checkpoint store based on `AICODER_CHECKPOINT_BACKEND` and related environment settings."""
    backend = os.getenv("AICODER_CHECKPOINT_BACKEND", "redis").strip().lower()
    ttl_s = int(os.getenv("AICODER_CHECKPOINT_TTL_S", str(CHECKPOINT_TTL_S)))
    key_prefix = os.getenv("AICODER_CHECKPOINT_PREFIX", CHECKPOINT_KEY_PREFIX)

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryCheckpointStore(key_prefix=key_prefix, ttl_s=ttl_s)

    if backend in ("redis",):
        from .store.redis import RedisCheckpointStore

        return RedisCheckpointStore(url=redis_url_from_env(), key_prefix=key_prefix, ttl_s=ttl_s)

    raise ValueError(f"Unknown AICODER_CHECKPOINT_BACKEND: {backend}")
