"""
Agent turn loop, run state types and resume control.
"""

from .config import AgentConfig
from .errors import (
    AgentConfigurationError,
    AgentError,
    AgentExecutionError,
    AgentLLMError,
    AgentRetryExhaustedError,
    AlreadyCompletedError,
    AlreadyRunningError,
    CheckpointNotFoundError,
    NotResumableError,
    WorkspaceMismatchError,
)
from .loop import AgentLoop, run_agent
from .prompts import build_system_prompt, initial_messages, new_run_state
from .resume import (
    CheckpointOverview,
    InMemoryRunStatusLookup,
    ResumeController,
    ResumeEligibility,
    ResumePlan,
    RunStatusLookup,
)
from .task_analyzer import (
    ModelSelection,
    analyze_task_complexity,
    complexity_reason,
    select_model,
)
from .types import (
    LLM_ERROR,
    LLM_RETRIES_EXHAUSTED,
    MAX_TURNS_EXCEEDED,
    UNEXPECTED_STOP_REASON,
    RunState,
    RunStatus,
    TaskResult,
    WorkspaceConfig,
)

__all__ = [
    "AgentConfig",
    "AgentConfigurationError",
    "AgentError",
    "AgentExecutionError",
    "AgentLLMError",
    "AgentRetryExhaustedError",
    "AlreadyCompletedError",
    "AlreadyRunningError",
    "CheckpointNotFoundError",
    "NotResumableError",
    "WorkspaceMismatchError",
    "AgentLoop",
    "run_agent",
    "build_system_prompt",
    "initial_messages",
    "new_run_state",
    "CheckpointOverview",
    "InMemoryRunStatusLookup",
    "ResumeController",
    "ResumeEligibility",
    "ResumePlan",
    "RunStatusLookup",
    "ModelSelection",
    "analyze_task_complexity",
    "complexity_reason",
    "select_model",
    "LLM_ERROR",
    "LLM_RETRIES_EXHAUSTED",
    "MAX_TURNS_EXCEEDED",
    "UNEXPECTED_STOP_REASON",
    "RunState",
    "RunStatus",
    "TaskResult",
    "WorkspaceConfig",
]
