from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the persisted checkpoint record and its conversion to and from run state.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..agents.types import RunState, WorkspaceConfig
from ..llms.types import message_from_dict, message_to_dict

CHECKPOINT_SCHEMA_VERSION = 1
CHECKPOINT_KEY_PREFIX = "agent:checkpoint:"
CHECKPOINT_TTL_S = 7 * 24 * 60 * 60


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WorkspaceConfigRecord(_CamelModel):
    owner: str
    repo: str
    default_branch: str


class CheckpointRecord(_CamelModel):
    """Wire shape of a stored checkpoint. Serialized with camelCase keys."""

    run_id: str
    workspace_id: Optional[str] = None
    task_description: str
    messages: list[dict[str, Any]] = Field(default_factory=list)
    turns_completed: int = Field(ge=0)
    max_turns: int = Field(gt=0)
    selected_model: Optional[str] = None
    workspace_config: WorkspaceConfigRecord
    last_updated: datetime
    schema_version: int

    @classmethod
    def from_state(
        cls,
        state: RunState,
        *,
        last_updated: datetime | None = None,
        schema_version: int = CHECKPOINT_SCHEMA_VERSION,
    ) -> "CheckpointRecord":
        return cls(
            run_id=state.run_id,
            workspace_id=state.workspace_id,
            task_description=state.task_description,
            messages=[message_to_dict(m) for m in state.messages],
            turns_completed=state.turns_completed,
            max_turns=state.max_turns,
            selected_model=state.selected_model,
            workspace_config=WorkspaceConfigRecord(
                owner=state.workspace_config.owner,
                repo=state.workspace_config.repo,
                default_branch=state.workspace_config.default_branch,
            ),
            last_updated=last_updated or utc_now(),
            schema_version=schema_version,
        )

    def to_state(self) -> RunState:
        return RunState(
            run_id=self.run_id,
            task_description=self.task_description,
            workspace_config=WorkspaceConfig(
                owner=self.workspace_config.owner,
                repo=self.workspace_config.repo,
                default_branch=self.workspace_config.default_branch,
            ),
            messages=[message_from_dict(m) for m in self.messages],
            turns_completed=self.turns_completed,
            max_turns=self.max_turns,
            selected_model=self.selected_model,
            workspace_id=self.workspace_id,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """A loaded snapshot: run state plus store-managed fields."""

    state: RunState
    last_updated: datetime
    schema_version: int

    @property
    def run_id(self) -> str:
        return self.state.run_id

    @property
    def turns_completed(self) -> int:
        return self.state.turns_completed

    @property
    def message_count(self) -> int:
        return len(self.state.messages)


@dataclass(frozen=True, slots=True)
class CheckpointMetadata:
    turns_completed: int
    last_updated: datetime
    can_resume: bool = True


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
