"""
Agent-layer error taxonomy.
"""

from __future__ import annotations


class AgentError(Exception):
    """Base exception for all agent-runtime failures."""
    pass


class AgentConfigurationError(AgentError):
    """
    Raised when loop inputs or configuration are invalid.

    Typical cases:
    - non-positive turn budget
    - empty initial conversation
    - malformed environment values
    """
    pass


class AgentExecutionError(AgentError):
    """Raised for runtime execution failures not tied to configuration."""

    def __init__(self, message: str, *, turn: int | None = None, cause: str | None = None) -> None:
        super().__init__(message)
        self.turn = turn
        self.cause = cause


class AgentLLMError(AgentExecutionError):
    """Raised when the LLM gateway fails with a non-retryable error."""
    pass


class AgentRetryExhaustedError(AgentLLMError):
    """Raised when every retry attempt for a turn failed."""

    def __init__(
        self,
        message: str,
        *,
        turn: int | None = None,
        cause: str | None = None,
        attempts: int = 0,
    ) -> None:
        super().__init__(message, turn=turn, cause=cause)
        self.attempts = attempts


class NotResumableError(AgentError):
    """Base class for resume precondition failures."""

    def __init__(self, run_id: str, message: str) -> None:
        super().__init__(message)
        self.run_id = run_id


class CheckpointNotFoundError(NotResumableError):
    """Raised when no checkpoint exists for the requested run."""

    def __init__(self, run_id: str) -> None:
        super().__init__(run_id, f"No checkpoint exists for run {run_id}. Cannot resume.")


class AlreadyRunningError(NotResumableError):
    """Raised when the run is still queued or active."""

    def __init__(self, run_id: str, status: str) -> None:
        super().__init__(run_id, f"Run {run_id} is currently {status}. Cannot resume.")
        self.status = status


class AlreadyCompletedError(NotResumableError):
    """Raised when the run already finished successfully."""

    def __init__(self, run_id: str) -> None:
        super().__init__(run_id, f"Run {run_id} has already completed successfully. Cannot resume.")


class WorkspaceMismatchError(NotResumableError):
    """Raised when the checkpoint targets a different repository or branch than expected."""
    pass
