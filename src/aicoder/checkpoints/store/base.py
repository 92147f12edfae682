from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the checkpoint store contract shared by every backend.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import ValidationError

from ...agents.types import RunState
from ..models import (
    CHECKPOINT_KEY_PREFIX,
    CHECKPOINT_SCHEMA_VERSION,
    CHECKPOINT_TTL_S,
    Checkpoint,
    CheckpointMetadata,
    CheckpointRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckpointStoreCapabilities:
    """Describes optional backend features."""

    ttl: bool = True
    durable: bool = False


class CheckpointStore(ABC):
    """
    Base contract for checkpoint backends.

    Backends only implement raw keyed string storage with expiry. Serialization,
    schema version checks and failure isolation live here so every backend
    behaves the same:

    - `save` and `delete` never raise; failures are logged.
    - `load` returns `None` for absent, outdated or unreadable records.
    - `list_active` returns `[]` when the backend fails.
    """

    capabilities: CheckpointStoreCapabilities = CheckpointStoreCapabilities()

    def __init__(
        self,
        *,
        key_prefix: str = CHECKPOINT_KEY_PREFIX,
        ttl_s: int = CHECKPOINT_TTL_S,
    ) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be > 0")
        self.key_prefix = key_prefix
        self.ttl_s = ttl_s
        self._is_setup = False

    async def setup(self) -> None:
        """Initialize backend resources."""
        self._is_setup = True

    async def close(self) -> None:
        """Release backend resources."""
        self._is_setup = False

    async def __aenter__(self) -> "CheckpointStore":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_setup(self) -> None:
        if not self._is_setup:
            raise RuntimeError(
                "CheckpointStore is not initialized. Call setup() or use `async with`."
            )

    def key_for(self, run_id: str) -> str:
        return f"{self.key_prefix}{run_id}"

    def run_id_from_key(self, key: str) -> str:
        return key[len(self.key_prefix):] if key.startswith(self.key_prefix) else key

    @abstractmethod
    async def _write(self, key: str, payload: str, ttl_s: int) -> None:
        """Store `payload` under `key`, replacing any value and resetting expiry."""

    @abstractmethod
    async def _read(self, key: str) -> str | None:
        """Return stored payload for `key`, or `None` when absent or expired."""

    @abstractmethod
    async def _remove(self, key: str) -> None:
        """Remove `key`; no-op when absent."""

    @abstractmethod
    async def _contains(self, key: str) -> bool:
        """Return whether a non-expired value exists for `key`."""

    @abstractmethod
    async def _keys(self, prefix: str) -> list[str]:
        """Return every non-expired key starting with `prefix`."""

    async def save(self, run_id: str, state: RunState) -> None:
        """Persist a snapshot of `state`. Each write refreshes the expiry window."""
        try:
            self._ensure_setup()
            record = CheckpointRecord.from_state(state)
            await self._write(self.key_for(run_id), record.to_json(), self.ttl_s)
        except Exception:
            logger.exception("Failed to save checkpoint for run %s", run_id)
            return
        logger.debug(
            "Checkpoint saved for run %s (turns=%d, messages=%d)",
            run_id,
            state.turns_completed,
            len(state.messages),
        )

    async def load(self, run_id: str) -> Checkpoint | None:
        """Return the latest usable checkpoint for `run_id`, or `None`."""
        self._ensure_setup()
        try:
            raw = await self._read(self.key_for(run_id))
        except Exception:
            logger.exception("Failed to load checkpoint for run %s", run_id)
            return None
        if raw is None:
            logger.debug("No checkpoint found for run %s", run_id)
            return None

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Checkpoint for run %s is not valid JSON, ignoring", run_id)
            return None
        if not isinstance(payload, dict):
            logger.warning("Checkpoint for run %s is not an object, ignoring", run_id)
            return None

        version = payload.get("schemaVersion", payload.get("schema_version"))
        if version != CHECKPOINT_SCHEMA_VERSION:
            logger.warning(
                "Checkpoint version mismatch for run %s (stored=%r, current=%d), ignoring",
                run_id,
                version,
                CHECKPOINT_SCHEMA_VERSION,
            )
            return None

        try:
            record = CheckpointRecord.model_validate(payload)
            state = record.to_state()
        except (ValidationError, ValueError):
            logger.warning("Checkpoint for run %s failed validation, ignoring", run_id, exc_info=True)
            return None

        logger.info(
            "Checkpoint loaded for run %s (turns=%d, messages=%d, last_updated=%s)",
            run_id,
            state.turns_completed,
            len(state.messages),
            record.last_updated.isoformat(),
        )
        return Checkpoint(
            state=state,
            last_updated=record.last_updated,
            schema_version=record.schema_version,
        )

    async def delete(self, run_id: str) -> None:
        """Remove the checkpoint for `run_id`. Idempotent."""
        try:
            self._ensure_setup()
            await self._remove(self.key_for(run_id))
        except Exception:
            logger.exception("Failed to delete checkpoint for run %s", run_id)
            return
        logger.debug("Checkpoint deleted for run %s", run_id)

    async def exists(self, run_id: str) -> bool:
        self._ensure_setup()
        return await self._contains(self.key_for(run_id))

    async def list_active(self) -> list[str]:
        """Return run ids of every non-expired checkpoint."""
        self._ensure_setup()
        try:
            keys = await self._keys(self.key_prefix)
        except Exception:
            logger.exception("Failed to list checkpoints")
            return []
        return sorted(self.run_id_from_key(key) for key in keys)

    async def metadata(self, run_id: str) -> CheckpointMetadata | None:
        checkpoint = await self.load(run_id)
        if checkpoint is None:
            return None
        return CheckpointMetadata(
            turns_completed=checkpoint.turns_completed,
            last_updated=checkpoint.last_updated,
            can_resume=True,
        )
