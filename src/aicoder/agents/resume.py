"""
Resume eligibility and checkpoint management for interrupted runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from .errors import (
    AlreadyCompletedError,
    AlreadyRunningError,
    CheckpointNotFoundError,
    WorkspaceMismatchError,
)
from .types import RunState, RunStatus, WorkspaceConfig

if TYPE_CHECKING:
    from ..checkpoints.store.base import CheckpointStore

logger = logging.getLogger(__name__)

RESUMABLE_STATUSES: tuple[RunStatus, ...] = ("failed", "unknown")
RUNNING_STATUSES: tuple[RunStatus, ...] = ("queued", "active")


class RunStatusLookup(Protocol):
    """Reports the externally tracked status of a run."""

    async def get_status(self, run_id: str) -> RunStatus:
        ...


@dataclass(slots=True)
class InMemoryRunStatusLookup:
    """Dict-backed status lookup. Unknown run ids report `unknown`."""

    statuses: dict[str, RunStatus] = field(default_factory=dict)

    def set_status(self, run_id: str, status: RunStatus) -> None:
        self.statuses[run_id] = status

    async def get_status(self, run_id: str) -> RunStatus:
        return self.statuses.get(run_id, "unknown")


@dataclass(frozen=True, slots=True)
class ResumePlan:
    """
    Validated input for continuing a run from its checkpoint.

    Attributes:
        prior_state: State restored from the checkpoint.
        turns_completed: Turns already spent by the interrupted run.
        message_count: Length of the restored conversation.
        last_updated: When the checkpoint was written.
    """

    prior_state: RunState
    turns_completed: int
    message_count: int
    last_updated: datetime

    def seed_state(self, new_run_id: str | None = None) -> RunState:
        """Return a copy of the prior state to hand to the loop, optionally under a new run id."""
        return self.prior_state.copy(run_id=new_run_id)


@dataclass(frozen=True, slots=True)
class ResumeEligibility:
    run_id: str
    has_checkpoint: bool
    status: RunStatus
    can_resume: bool


@dataclass(frozen=True, slots=True)
class CheckpointOverview:
    run_id: str
    turns_completed: int
    message_count: int
    last_updated: datetime
    status: RunStatus
    can_resume: bool


class ResumeController:
    """
    Decides whether a run may continue from its checkpoint.

    The controller only reads checkpoints, apart from `discard`, which is the
    explicit operator cleanup path.
    """

    def __init__(self, checkpoint_store: CheckpointStore, status_lookup: RunStatusLookup) -> None:
        self.checkpoint_store = checkpoint_store
        self.status_lookup = status_lookup

    async def prepare_resume(
        self,
        run_id: str,
        *,
        expected_workspace: WorkspaceConfig | None = None,
    ) -> ResumePlan:
        """
        Validate that `run_id` can resume and return its plan.

        Raises:
            CheckpointNotFoundError: No usable checkpoint exists.
            AlreadyRunningError: The run is queued or active.
            AlreadyCompletedError: The run already completed.
            WorkspaceMismatchError: The checkpoint targets another repository.
        """
        checkpoint = await self.checkpoint_store.load(run_id)
        if checkpoint is None:
            raise CheckpointNotFoundError(run_id)

        status = await self.status_lookup.get_status(run_id)
        if status in RUNNING_STATUSES:
            raise AlreadyRunningError(run_id, status)
        if status == "completed":
            raise AlreadyCompletedError(run_id)

        state = checkpoint.state
        if expected_workspace is not None and state.workspace_config != expected_workspace:
            raise WorkspaceMismatchError(
                run_id,
                f"Checkpoint for run {run_id} targets {state.workspace_config.full_name}, "
                f"not {expected_workspace.full_name}. Cannot resume.",
            )

        logger.info(
            "Run %s can resume from turn %d (%d messages, status=%s)",
            run_id,
            checkpoint.turns_completed,
            checkpoint.message_count,
            status,
        )
        return ResumePlan(
            prior_state=state,
            turns_completed=checkpoint.turns_completed,
            message_count=checkpoint.message_count,
            last_updated=checkpoint.last_updated,
        )

    async def can_resume(self, run_id: str) -> ResumeEligibility:
        has_checkpoint = await self.checkpoint_store.exists(run_id)
        status = await self.status_lookup.get_status(run_id)
        return ResumeEligibility(
            run_id=run_id,
            has_checkpoint=has_checkpoint,
            status=status,
            can_resume=has_checkpoint and status in RESUMABLE_STATUSES,
        )

    async def discard(self, run_id: str) -> None:
        if not await self.checkpoint_store.exists(run_id):
            raise CheckpointNotFoundError(run_id)
        await self.checkpoint_store.delete(run_id)
        logger.info("Checkpoint for run %s discarded", run_id)

    async def overview(self) -> list[CheckpointOverview]:
        """List every active checkpoint with its metadata and run status."""
        rows: list[CheckpointOverview] = []
        for run_id in await self.checkpoint_store.list_active():
            checkpoint = await self.checkpoint_store.load(run_id)
            if checkpoint is None:
                continue
            status = await self.status_lookup.get_status(run_id)
            rows.append(
                CheckpointOverview(
                    run_id=run_id,
                    turns_completed=checkpoint.turns_completed,
                    message_count=checkpoint.message_count,
                    last_updated=checkpoint.last_updated,
                    status=status,
                    can_resume=status in RESUMABLE_STATUSES,
                )
            )
        return rows
