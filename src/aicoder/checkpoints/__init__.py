from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the public API for the aicoder checkpoint subsystem.
"""

from .models import (
    CHECKPOINT_KEY_PREFIX,
    CHECKPOINT_SCHEMA_VERSION,
    CHECKPOINT_TTL_S,
    Checkpoint,
    CheckpointMetadata,
    CheckpointRecord,
    WorkspaceConfigRecord,
)
from .store import CheckpointStore, CheckpointStoreCapabilities, InMemoryCheckpointStore
from .factory import create_checkpoint_store_from_env


def __getattr__(name: str):
    if name == "RedisCheckpointStore":
        from .store.redis import RedisCheckpointStore

        return RedisCheckpointStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "CHECKPOINT_KEY_PREFIX",
    "CHECKPOINT_SCHEMA_VERSION",
    "CHECKPOINT_TTL_S",
    "Checkpoint",
    "CheckpointMetadata",
    "CheckpointRecord",
    "WorkspaceConfigRecord",
    "CheckpointStore",
    "CheckpointStoreCapabilities",
    "InMemoryCheckpointStore",
    "RedisCheckpointStore",
    "create_checkpoint_store_from_env",
]
