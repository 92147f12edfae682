from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the public API for the aicoder tools package.
"""

from .base import TaskCompletion, Tool, ToolContext, ToolOutput, ToolSpec
from .decorator import tool
from .errors import (
    ToolAlreadyRegisteredError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
    ToolValidationError,
)
from .gateway import ToolExecutionGateway, as_task_completion, is_task_completion
from .prebuilts import TASK_COMPLETE_TOOL, TaskCompleteArgs, build_task_complete_tool
from .registry import ToolCallRecord, ToolRegistry

__all__ = [
    "TaskCompletion",
    "Tool",
    "ToolContext",
    "ToolOutput",
    "ToolSpec",
    "tool",
    "ToolAlreadyRegisteredError",
    "ToolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolTimeoutError",
    "ToolValidationError",
    "ToolExecutionGateway",
    "as_task_completion",
    "is_task_completion",
    "TASK_COMPLETE_TOOL",
    "TaskCompleteArgs",
    "build_task_complete_tool",
    "ToolCallRecord",
    "ToolRegistry",
]
