from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the tool execution contract consumed by the agent loop.
"""

from typing import Any, Mapping, Protocol, Sequence

from ..llms.types import ToolDefinition
from .base import TaskCompletion, ToolOutput


class ToolExecutionGateway(Protocol):
    """
    Runs a named tool against the run's isolated workspace.

    `execute` returns model-visible text or a `TaskCompletion`; any exception it
    raises is reported back to the model as an error tool result.
    """

    def definitions(self) -> Sequence[ToolDefinition]:
        ...

    async def execute(self, tool_name: str, tool_input: Mapping[str, Any]) -> ToolOutput:
        ...


def is_task_completion(output: Any) -> bool:
    """Accept the marker dataclass or an equivalent `{"complete": True, ...}` mapping."""
    if isinstance(output, TaskCompletion):
        return output.complete
    if isinstance(output, Mapping):
        return output.get("complete") is True
    return False


def as_task_completion(output: Any) -> TaskCompletion:
    if isinstance(output, TaskCompletion):
        return output
    return TaskCompletion(
        summary=str(output.get("summary") or "Task completed."),
        pull_request_url=output.get("pull_request_url") or output.get("pullRequestUrl"),
    )
