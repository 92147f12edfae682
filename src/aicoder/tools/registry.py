from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the tool registry, the default tool execution gateway of the agent loop.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Iterable, List, Mapping

from ..llms.types import ToolDefinition
from .base import Tool, ToolContext, ToolOutput, ToolSpec
from .errors import ToolAlreadyRegisteredError, ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolCallRecord:
    tool_name: str
    started_at_s: float
    ended_at_s: float
    ok: bool
    error: str | None = None


class ToolRegistry:
    """
    Name-indexed tools bound to one run's `ToolContext`.

    Implements the `ToolExecutionGateway` protocol: `definitions()` lists the
    tools for the model and `execute()` runs one call, raising on failure so
    the loop can report the error back as a tool result. A tool's own timeout
    wins over the registry default.
    """

    def __init__(
        self,
        tools: Iterable[Tool[Any]] | None = None,
        *,
        context: ToolContext | None = None,
        default_timeout: float | None = None,
        max_records: int = 1_000,
    ) -> None:
        self._tools: Dict[str, Tool[Any]] = {}
        self._context = context or ToolContext()
        self._default_timeout = default_timeout
        self._records: Deque[ToolCallRecord] = deque(maxlen=max_records)
        for t in tools or ():
            self.register(t)

    def register(self, tool: Tool[Any], *, overwrite: bool = False) -> None:
        if tool.spec.name in self._tools and not overwrite:
            raise ToolAlreadyRegisteredError(f"Tool already registered: {tool.spec.name}")
        self._tools[tool.spec.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool[Any]:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Unknown tool: {name}")
        return tool

    def has(self, name: str) -> bool:
        return name in self._tools

    def names(self) -> List[str]:
        return list(self._tools)

    def with_context(self, context: ToolContext) -> "ToolRegistry":
        """Same tools, bound to another run (e.g. a resumed run with a fresh workspace)."""
        clone = ToolRegistry(
            self._tools.values(),
            context=context,
            default_timeout=self._default_timeout,
            max_records=self._records.maxlen or 1_000,
        )
        return clone

    async def execute(self, tool_name: str, tool_input: Mapping[str, Any]) -> ToolOutput:
        """
        Run one tool call.

        Raises:
            ToolNotFoundError: Unknown tool name.
            ToolValidationError: Input does not match the tool's args model.
            ToolExecutionError: The handler raised.
            ToolTimeoutError: The handler exceeded its timeout.
        """
        tool = self.get(tool_name)
        timeout = self._default_timeout if tool.default_timeout is None else tool.default_timeout
        started = time.time()
        try:
            output = await tool.call(dict(tool_input), ctx=self._context, timeout=timeout)
        except Exception as e:
            logger.debug("Tool %s failed after %.3fs: %s", tool_name, time.time() - started, e)
            self._records.append(ToolCallRecord(tool_name, started, time.time(), ok=False, error=str(e)))
            raise
        self._records.append(ToolCallRecord(tool_name, started, time.time(), ok=True))
        return output

    def recent_calls(self, limit: int = 100) -> List[ToolCallRecord]:
        return list(self._records)[-limit:]

    def specs(self) -> List[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def definitions(self) -> List[ToolDefinition]:
        return [
            {
                "name": spec.name,
                "description": spec.description,
                "input_schema": spec.parameters_schema,
            }
            for spec in self.specs()
        ]
