from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the tool object the registry executes on behalf of the agent loop.
"""

import asyncio
import functools
import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import ToolError, ToolExecutionError, ToolTimeoutError, ToolValidationError

ArgsT = TypeVar("ArgsT", bound=BaseModel)
ToolFn = Callable[..., Union[Any, Awaitable[Any]]]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Name, description and argument JSON schema shown to the model."""

    name: str
    description: str
    parameters_schema: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class ToolContext:
    """Run-scoped values handed to tools that ask for them (workspace, run id)."""

    run_id: str | None = None
    workspace_id: str | None = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class TaskCompletion:
    """
    Returned by a tool to end the run successfully.

    `summary` becomes the run summary and `pull_request_url` is reported as-is.
    """

    summary: str
    pull_request_url: str | None = None
    complete: bool = True


ToolOutput = Union[str, TaskCompletion]


def render_output(output: Any) -> ToolOutput:
    """Turn a handler's return value into tool-result text, passing completions through."""
    if output is None:
        return ""
    if isinstance(output, (str, TaskCompletion)):
        return output
    if isinstance(output, BaseModel):
        return output.model_dump_json()
    try:
        return json.dumps(output, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(output)


def _is_context_param(param: inspect.Parameter) -> bool:
    return param.name == "ctx" or param.annotation in (ToolContext, "ToolContext")


def _context_position(fn: Callable[..., Any]) -> int | None:
    """
    Where the handler expects its `ToolContext`, if anywhere.

    Handlers take the args model alone, or the args model plus a context
    (named `ctx` or annotated `ToolContext`) in either order.
    """
    name = getattr(fn, "__name__", "tool")
    params = list(inspect.signature(fn).parameters.values())
    if any(p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD) for p in params):
        raise ToolValidationError(f"Tool function '{name}' cannot take *args or **kwargs.")
    if len(params) == 1:
        return None
    if len(params) == 2:
        for position, param in enumerate(params):
            if _is_context_param(param):
                return position
        raise ToolValidationError(
            f"Tool function '{name}' takes two parameters but none of them is the ToolContext ('ctx')."
        )
    raise ToolValidationError(
        f"Tool function '{name}' must take (args), (args, ctx) or (ctx, args); got {len(params)} parameters."
    )


class Tool(Generic[ArgsT]):
    """
    A named capability the model may invoke.

    `call` validates raw arguments against `args_model`, runs the handler
    (sync handlers in a worker thread) and raises a `ToolError` subclass on
    failure. The handler's own exception message is kept verbatim so the
    model sees exactly what went wrong.
    """

    def __init__(
        self,
        *,
        spec: ToolSpec,
        fn: ToolFn,
        args_model: Type[ArgsT],
        default_timeout: Optional[float] = None,
    ) -> None:
        self.spec = spec
        self.fn = fn
        self.args_model = args_model
        self.default_timeout = default_timeout
        self._ctx_position = _context_position(fn)
        self._is_async = inspect.iscoroutinefunction(fn)

    def validate(self, raw_args: Dict[str, Any]) -> ArgsT:
        try:
            return self.args_model.model_validate(raw_args)
        except ValidationError as e:
            raise ToolValidationError(f"Invalid arguments for tool '{self.spec.name}': {e}") from e

    async def _invoke(self, args: ArgsT, ctx: ToolContext) -> Any:
        positional: tuple[Any, ...]
        if self._ctx_position is None:
            positional = (args,)
        elif self._ctx_position == 0:
            positional = (ctx, args)
        else:
            positional = (args, ctx)
        if self._is_async:
            return await self.fn(*positional)
        return await asyncio.to_thread(functools.partial(self.fn, *positional))

    async def call(
        self,
        raw_args: Dict[str, Any],
        *,
        ctx: Optional[ToolContext] = None,
        timeout: Optional[float] = None,
    ) -> ToolOutput:
        args = self.validate(raw_args)
        limit = self.default_timeout if timeout is None else timeout
        try:
            output = await asyncio.wait_for(self._invoke(args, ctx or ToolContext()), timeout=limit)
        except asyncio.TimeoutError as e:
            raise ToolTimeoutError(f"Tool '{self.spec.name}' timed out after {limit} seconds.") from e
        except ToolError:
            raise
        except Exception as e:
            raise ToolExecutionError(str(e)) from e
        return render_output(output)
