from __future__ import annotations

"""
Built-in tools every agent run carries.
"""

from pydantic import BaseModel, Field

from .base import TaskCompletion, Tool
from .decorator import tool

TASK_COMPLETE_TOOL = "task_complete"


class TaskCompleteArgs(BaseModel):
    summary: str = Field(..., min_length=1, description="What was accomplished")
    pull_request_url: str | None = Field(
        default=None, description="URL of the pull request opened for the change, if any"
    )


def build_task_complete_tool() -> Tool[TaskCompleteArgs]:
    @tool(
        args_model=TaskCompleteArgs,
        name=TASK_COMPLETE_TOOL,
        description="Signal that the task is finished. Call this once, after the pull request is open.",
    )
    def task_complete(args: TaskCompleteArgs) -> TaskCompletion:
        return TaskCompletion(summary=args.summary, pull_request_url=args.pull_request_url)

    return task_complete
