"""
Run state and result types for the agent turn loop.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal

from ..llms.types import Message

RunStatus = Literal["queued", "active", "completed", "failed", "unknown"]
LoopState = Literal[
    "awaiting_llm",
    "processing_tool_use",
    "retrying",
    "done_success",
    "done_exhausted",
    "done_fatal",
]

MAX_TURNS_EXCEEDED = "MAX_TURNS_EXCEEDED"
LLM_RETRIES_EXHAUSTED = "LLM_RETRIES_EXHAUSTED"
LLM_ERROR = "LLM_ERROR"
UNEXPECTED_STOP_REASON = "UNEXPECTED_STOP_REASON"


def new_id(prefix: str = "run") -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


@dataclass(frozen=True, slots=True)
class WorkspaceConfig:
    """Target repository of a run."""

    owner: str
    repo: str
    default_branch: str = "main"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(slots=True)
class RunState:
    """
    Conversation and progress of one run.

    Mutated only by the agent loop while the run is active; persisted solely
    through checkpoints.

    Attributes:
        run_id: Run identifier, also the checkpoint key.
        task_description: Task text as submitted.
        messages: Ordered conversation history.
        turns_completed: Accepted LLM responses so far.
        max_turns: Turn budget of the run.
        selected_model: Model chosen for the run, if any.
        workspace_config: Target repository coordinates.
        workspace_id: Sandbox workspace identifier, when one exists.
    """

    run_id: str
    task_description: str
    workspace_config: WorkspaceConfig
    messages: list[Message] = field(default_factory=list)
    turns_completed: int = 0
    max_turns: int = 100
    selected_model: str | None = None
    workspace_id: str | None = None

    def copy(self, *, run_id: str | None = None) -> "RunState":
        return RunState(
            run_id=run_id or self.run_id,
            task_description=self.task_description,
            workspace_config=self.workspace_config,
            messages=list(self.messages),
            turns_completed=self.turns_completed,
            max_turns=self.max_turns,
            selected_model=self.selected_model,
            workspace_id=self.workspace_id,
        )


@dataclass(frozen=True, slots=True)
class TaskResult:
    """
    Terminal outcome of a run.

    `turns` counts accepted LLM responses, never raw provider calls. A turn
    whose LLM call fails for good is not counted. A response that arrives
    with an unexpected stop reason (`max_tokens`, `stop_sequence`) was
    accepted, so it is counted even though the run then ends with
    `UNEXPECTED_STOP_REASON`.
    """

    success: bool
    summary: str
    turns: int
    pull_request_url: str | None = None
    error: str | None = None
    error_code: str | None = None
