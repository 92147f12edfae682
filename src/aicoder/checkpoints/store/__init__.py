from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides checkpoint store implementations and the base contract.
"""

from .base import CheckpointStore, CheckpointStoreCapabilities
from .in_memory import InMemoryCheckpointStore


def __getattr__(name: str):
    if name == "RedisCheckpointStore":
        from .redis import RedisCheckpointStore

        return RedisCheckpointStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "CheckpointStore",
    "CheckpointStoreCapabilities",
    "InMemoryCheckpointStore",
    "RedisCheckpointStore",
]
