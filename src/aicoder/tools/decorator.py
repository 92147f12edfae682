from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the `@tool` decorator.
"""

import inspect
from typing import Callable, Type, TypeVar

from pydantic import BaseModel

from .base import Tool, ToolFn, ToolSpec

ArgsT = TypeVar("ArgsT", bound=BaseModel)


def tool(
    *,
    args_model: Type[ArgsT],
    name: str | None = None,
    description: str | None = None,
    timeout: float | None = None,
) -> Callable[[ToolFn], Tool[ArgsT]]:
    """
    Turn a handler into a `Tool`.

    The handler may be sync or async and takes `(args)`, `(args, ctx)` or
    `(ctx, args)`. It returns text for the model, any JSON-serializable
    value, or a `TaskCompletion` to finish the run. Without an explicit
    description, the first docstring line is used.
    """

    def wrap(fn: ToolFn) -> Tool[ArgsT]:
        tool_name = name or fn.__name__
        summary = (inspect.getdoc(fn) or "").strip().splitlines()
        return Tool(
            spec=ToolSpec(
                name=tool_name,
                description=description or (summary[0] if summary else tool_name),
                parameters_schema=args_model.model_json_schema(),
            ),
            fn=fn,
            args_model=args_model,
            default_timeout=timeout,
        )

    return wrap
