"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Agent turn loop.

One run alternates between LLM calls and sequential tool execution until the
model finishes, the turn budget is spent, or the LLM fails for good. The
conversation is checkpointed after every accepted response and after every
tool phase, so an interrupted run can continue from its last checkpoint.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..core.telemetry import NullTelemetrySink, TelemetrySink
from ..llms.gateway import LLMGateway
from ..llms.types import (
    ContentBlock,
    LLMResponse,
    Message,
    ToolDefinition,
    ToolUseBlock,
    tool_result_block,
)
from ..llms.utils import backoff_delay, error_message, is_retryable_error
from ..tools.base import render_output
from ..tools.gateway import ToolExecutionGateway, as_task_completion, is_task_completion
from .config import AgentConfig
from .errors import AgentConfigurationError, AgentLLMError, AgentRetryExhaustedError
from .prompts import CONTINUE_PROMPT, build_system_prompt
from .types import (
    LLM_ERROR,
    LLM_RETRIES_EXHAUSTED,
    MAX_TURNS_EXCEEDED,
    UNEXPECTED_STOP_REASON,
    LoopState,
    RunState,
    TaskResult,
)

if TYPE_CHECKING:
    from ..checkpoints.store.base import CheckpointStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Any]
SleepFn = Callable[[float], Awaitable[Any]]


class AgentLoop:
    """
    Drives a single run to a `TaskResult`.

    The instance owns `state` for the duration of `run()` and mutates it in
    place. `phase` tracks the loop state machine and ends in one of the
    `done_*` phases.
    """

    def __init__(
        self,
        state: RunState,
        *,
        max_turns: int,
        llm: LLMGateway,
        tools: ToolExecutionGateway,
        checkpoint_store: CheckpointStore,
        on_progress: ProgressCallback | None = None,
        config: AgentConfig | None = None,
        system_prompt: str | None = None,
        telemetry: TelemetrySink | None = None,
        sleep: SleepFn | None = None,
    ) -> None:
        if max_turns <= 0:
            raise AgentConfigurationError("max_turns must be > 0")
        if not state.messages:
            raise AgentConfigurationError("initial_state.messages must not be empty")

        self.state = state
        self.max_turns = max_turns
        self.llm = llm
        self.tools = tools
        self.checkpoint_store = checkpoint_store
        self.on_progress = on_progress
        self.config = config or AgentConfig()
        self.system_prompt = system_prompt or build_system_prompt(state.workspace_config)
        self.telemetry: TelemetrySink = telemetry or NullTelemetrySink()
        self.sleep: SleepFn = sleep or asyncio.sleep
        self.phase: LoopState = "awaiting_llm"
        self._tool_definitions: list[ToolDefinition] = list(tools.definitions())
        self._background: set[asyncio.Future[Any]] = set()

        self.state.max_turns = max_turns

    async def run(self) -> TaskResult:
        span = self.telemetry.start_span(
            "agent.run",
            attributes={"run_id": self.state.run_id, "max_turns": self.max_turns},
        )
        try:
            result = await self._run()
        except BaseException as e:
            self.telemetry.end_span(span, status="error", error=str(e))
            raise
        self.telemetry.end_span(
            span,
            status="ok" if result.success else "error",
            error=result.error,
            attributes={"turns": result.turns, "error_code": result.error_code},
        )
        return result

    async def _run(self) -> TaskResult:
        state = self.state
        logger.info(
            "Starting agent loop for run %s (turns_completed=%d, max_turns=%d, messages=%d)",
            state.run_id,
            state.turns_completed,
            self.max_turns,
            len(state.messages),
        )

        result = await self._reconcile_conversation()
        if result is not None:
            return result

        while state.turns_completed < self.max_turns:
            turn = state.turns_completed + 1
            self._report_progress(turn)
            if self.config.turn_delay_s > 0:
                await self.sleep(self.config.turn_delay_s)

            self._enter("awaiting_llm")
            try:
                response = await self._request_with_retries(turn)
            except AgentLLMError as e:
                return self._fail(e)

            result = await self._process_response(response)
            if result is not None:
                return result

        return self._exhausted()

    async def _reconcile_conversation(self) -> TaskResult | None:
        """
        Make a resumed conversation ready for the next LLM call.

        A trailing assistant message with unanswered tool calls gets its tool
        phase finished without counting a new turn. A trailing assistant
        message without tool calls gets a continue prompt.
        """
        last = self.state.messages[-1]
        if last.role != "assistant":
            return None
        pending = last.tool_uses()
        if pending:
            logger.info(
                "Run %s resumes with %d pending tool call(s) from turn %d",
                self.state.run_id,
                len(pending),
                self.state.turns_completed,
            )
            return await self._run_tool_phase(pending)
        self.state.messages.append(Message(role="user", content=CONTINUE_PROMPT))
        return None

    async def _process_response(self, response: LLMResponse) -> TaskResult | None:
        """Apply one accepted LLM response. Returns a result when the run ends."""
        state = self.state
        state.messages.append(
            Message(
                role="assistant",
                content=list(response.content),
                reasoning_content=response.reasoning_content,
            )
        )
        state.turns_completed += 1
        self.telemetry.increment_counter("agent.turns.total")
        await self._checkpoint()
        logger.debug(
            "Run %s turn %d/%d accepted (stop_reason=%s)",
            state.run_id,
            state.turns_completed,
            self.max_turns,
            response.stop_reason,
        )

        if response.stop_reason == "end_turn":
            return await self._succeed(response.text or "Task completed.")
        if response.stop_reason == "tool_use":
            return await self._run_tool_phase(response.tool_calls)

        logger.warning(
            "Run %s stopped on turn %d with unexpected stop reason %r",
            state.run_id,
            state.turns_completed,
            response.stop_reason,
        )
        self._enter("done_fatal")
        detail = f"Unexpected stop reason: {response.stop_reason}"
        return TaskResult(
            success=False,
            summary=f"Agent stopped on turn {state.turns_completed}. {detail}",
            turns=state.turns_completed,
            error=detail,
            error_code=UNEXPECTED_STOP_REASON,
        )

    async def _run_tool_phase(self, calls: list[ToolUseBlock]) -> TaskResult | None:
        self._enter("processing_tool_use")
        results: list[ContentBlock] = []
        for call in calls:
            name = call["name"]
            self.telemetry.increment_counter("agent.tool_calls.total", attributes={"tool": name})
            try:
                output = await self.tools.execute(name, call.get("input") or {})
            except Exception as e:
                message = error_message(e)
                logger.warning("Tool %s failed on run %s: %s", name, self.state.run_id, message)
                self.telemetry.increment_counter("agent.tool_errors.total", attributes={"tool": name})
                results.append(tool_result_block(call["id"], f"Error: {message}", is_error=True))
                continue

            if is_task_completion(output):
                completion = as_task_completion(output)
                logger.info("Run %s signalled completion through %s", self.state.run_id, name)
                return await self._succeed(
                    completion.summary,
                    pull_request_url=completion.pull_request_url,
                )

            rendered = output if isinstance(output, str) else render_output(output)
            results.append(tool_result_block(call["id"], str(rendered)))

        if results:
            self.state.messages.append(Message(role="user", content=results))
        else:
            self.state.messages.append(Message(role="user", content=CONTINUE_PROMPT))
        await self._checkpoint()
        return None

    async def _request_with_retries(self, turn: int) -> LLMResponse:
        """
        Call the LLM for `turn`, retrying retryable failures with exponential backoff.

        Raises `AgentLLMError` for a non-retryable failure and
        `AgentRetryExhaustedError` when every retry failed.
        """
        codes = self.config.retryable_status_codes
        try:
            return await self._chat()
        except Exception as e:
            if not is_retryable_error(e, codes):
                message = error_message(e)
                logger.error("LLM call failed on turn %d: %s", turn, message)
                raise AgentLLMError(
                    f"Agent failed on turn {turn}: {message}", turn=turn, cause=message
                ) from e
            last_error: Exception = e

        self._enter("retrying")
        max_retries = self.config.max_retries
        for attempt in range(1, max_retries + 1):
            delay = backoff_delay(attempt, self.config.initial_retry_delay_s)
            logger.warning(
                "Retryable LLM error on turn %d, retry %d/%d in %.1fs: %s",
                turn,
                attempt,
                max_retries,
                delay,
                error_message(last_error),
            )
            self.telemetry.increment_counter("agent.llm.retries.total")
            await self.sleep(delay)
            try:
                response = await self._chat()
            except Exception as e:
                last_error = e
                if not is_retryable_error(e, codes):
                    message = error_message(e)
                    logger.error("LLM call failed on turn %d retry %d: %s", turn, attempt, message)
                    raise AgentLLMError(
                        f"Agent failed on turn {turn} after {attempt} retries: {message}",
                        turn=turn,
                        cause=message,
                    ) from e
                continue
            logger.info("LLM retry %d succeeded on turn %d", attempt, turn)
            return response

        message = error_message(last_error)
        logger.error("All %d retries exhausted on turn %d: %s", max_retries, turn, message)
        raise AgentRetryExhaustedError(
            f"Agent failed on turn {turn} after {max_retries} retries: {message}",
            turn=turn,
            cause=message,
            attempts=max_retries,
        ) from last_error

    async def _chat(self) -> LLMResponse:
        started = time.monotonic()
        try:
            return await self.llm.chat(
                self.system_prompt,
                list(self.state.messages),
                self._tool_definitions,
            )
        finally:
            self.telemetry.record_histogram(
                "agent.llm.latency_ms", (time.monotonic() - started) * 1000.0
            )

    async def _succeed(self, summary: str, *, pull_request_url: str | None = None) -> TaskResult:
        self._enter("done_success")
        await self._discard_checkpoint()
        logger.info(
            "Run %s completed in %d turn(s)", self.state.run_id, self.state.turns_completed
        )
        return TaskResult(
            success=True,
            summary=summary,
            turns=self.state.turns_completed,
            pull_request_url=pull_request_url,
        )

    def _fail(self, error: AgentLLMError) -> TaskResult:
        self._enter("done_fatal")
        code = LLM_RETRIES_EXHAUSTED if isinstance(error, AgentRetryExhaustedError) else LLM_ERROR
        return TaskResult(
            success=False,
            summary=str(error),
            turns=self.state.turns_completed,
            error=str(error),
            error_code=code,
        )

    def _exhausted(self) -> TaskResult:
        self._enter("done_exhausted")
        logger.warning(
            "Run %s reached maximum turns (%d) without completing", self.state.run_id, self.max_turns
        )
        return TaskResult(
            success=False,
            summary=f"Agent reached maximum turns ({self.max_turns}) without completing the task.",
            turns=self.state.turns_completed,
            error=MAX_TURNS_EXCEEDED,
            error_code=MAX_TURNS_EXCEEDED,
        )

    async def _checkpoint(self) -> None:
        try:
            await self.checkpoint_store.save(self.state.run_id, self.state)
        except Exception:
            logger.exception("Checkpoint save failed for run %s", self.state.run_id)

    async def _discard_checkpoint(self) -> None:
        try:
            await self.checkpoint_store.delete(self.state.run_id)
        except Exception:
            logger.exception("Checkpoint delete failed for run %s", self.state.run_id)

    def _enter(self, phase: LoopState) -> None:
        if phase != self.phase:
            logger.debug("Run %s: %s -> %s", self.state.run_id, self.phase, phase)
        self.phase = phase

    def _report_progress(self, turn: int) -> None:
        if self.on_progress is None:
            return
        try:
            outcome = self.on_progress(turn, self.max_turns)
        except Exception:
            logger.warning("Progress callback failed on turn %d", turn, exc_info=True)
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._background.add(task)
            task.add_done_callback(self._forget_background)

    def _forget_background(self, task: asyncio.Future[Any]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Progress callback failed", exc_info=error)


async def run_agent(
    initial_state: RunState,
    max_turns: int,
    llm: LLMGateway,
    tools: ToolExecutionGateway,
    checkpoint_store: CheckpointStore,
    on_progress: ProgressCallback | None = None,
    *,
    config: AgentConfig | None = None,
    system_prompt: str | None = None,
    telemetry: TelemetrySink | None = None,
    sleep: SleepFn | None = None,
) -> TaskResult:
    """
    Run the agent loop for one task and return its terminal result.

    `initial_state` is either a fresh state or one seeded from a checkpoint;
    it is mutated in place. LLM and budget failures come back as an
    unsuccessful `TaskResult`; only invalid inputs raise.

    Args:
        initial_state: Conversation and counters to start from.
        max_turns: Turn budget, counted in accepted LLM responses.
        llm: Gateway used for every model call.
        tools: Gateway that executes tool calls and lists tool definitions.
        checkpoint_store: Initialized store receiving checkpoints.
        on_progress: Optional `(turn, max_turns)` callback, fire-and-forget.
        config: Retry and pacing settings. Defaults to `AgentConfig()`.
        system_prompt: Overrides the prompt built from the workspace config.
        telemetry: Telemetry sink. Defaults to a no-op sink.
        sleep: Awaitable sleep used for backoff and pacing.
    """
    loop = AgentLoop(
        initial_state,
        max_turns=max_turns,
        llm=llm,
        tools=tools,
        checkpoint_store=checkpoint_store,
        on_progress=on_progress,
        config=config,
        system_prompt=system_prompt,
        telemetry=telemetry,
        sleep=sleep,
    )
    return await loop.run()
