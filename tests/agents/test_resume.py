from __future__ import annotations

import asyncio

import pytest

from aicoder.agents import run_agent
from aicoder.agents.errors import (
    AlreadyCompletedError,
    AlreadyRunningError,
    CheckpointNotFoundError,
    NotResumableError,
    WorkspaceMismatchError,
)
from aicoder.agents.prompts import initial_messages
from aicoder.agents.resume import InMemoryRunStatusLookup, ResumeController
from aicoder.agents.types import RunState, WorkspaceConfig
from aicoder.checkpoints import InMemoryCheckpointStore
from aicoder.llms import LLMResponse, Message, text_block, tool_use_block


def run_async(coro):
    return asyncio.run(coro)


def checkpointed_state(run_id: str = "run_1", turns: int = 2) -> RunState:
    task = "Add pagination to the orders endpoint"
    messages = initial_messages(task)
    for i in range(turns):
        messages.append(Message(role="assistant", content=[tool_use_block(f"t{i}", "noop")]))
        messages.append(
            Message(
                role="user",
                content=[{"type": "tool_result", "tool_use_id": f"t{i}", "content": "ok"}],
            )
        )
    return RunState(
        run_id=run_id,
        task_description=task,
        workspace_config=WorkspaceConfig(owner="acme", repo="shop", default_branch="develop"),
        messages=messages,
        turns_completed=turns,
        max_turns=10,
    )


def make_controller(statuses: dict | None = None, states: list[RunState] | None = None):
    store = InMemoryCheckpointStore()
    lookup = InMemoryRunStatusLookup(dict(statuses or {}))

    async def prepare():
        await store.setup()
        for state in states or []:
            await store.save(state.run_id, state)

    run_async(prepare())
    return ResumeController(store, lookup), store


def test_completed_run_cannot_resume():
    controller, store = make_controller({"run_1": "completed"}, [checkpointed_state()])

    with pytest.raises(AlreadyCompletedError) as exc:
        run_async(controller.prepare_resume("run_1"))

    assert str(exc.value) == "Run run_1 has already completed successfully. Cannot resume."
    assert isinstance(exc.value, NotResumableError)
    assert store.raw("run_1") is not None


def test_missing_checkpoint_is_reported_first():
    controller, _ = make_controller({"run_1": "completed"})

    with pytest.raises(CheckpointNotFoundError, match="No checkpoint exists for run run_1"):
        run_async(controller.prepare_resume("run_1"))


@pytest.mark.parametrize("status", ["queued", "active"])
def test_running_run_cannot_resume(status):
    controller, _ = make_controller({"run_1": status}, [checkpointed_state()])

    with pytest.raises(AlreadyRunningError) as exc:
        run_async(controller.prepare_resume("run_1"))

    assert exc.value.status == status
    assert f"currently {status}" in str(exc.value)


@pytest.mark.parametrize("status", ["failed", "unknown"])
def test_failed_or_unknown_run_resumes_from_checkpoint(status):
    controller, store = make_controller({"run_1": status}, [checkpointed_state(turns=2)])

    plan = run_async(controller.prepare_resume("run_1"))

    assert plan.turns_completed == 2
    assert plan.message_count == 5
    assert plan.prior_state.workspace_config.default_branch == "develop"
    assert plan.last_updated.tzinfo is not None
    assert store.raw("run_1") is not None


def test_seed_state_copies_prior_state_under_new_run_id():
    controller, _ = make_controller({"run_1": "failed"}, [checkpointed_state()])
    plan = run_async(controller.prepare_resume("run_1"))

    seeded = plan.seed_state("run_2")
    seeded.messages.append(Message(role="user", content="extra"))

    assert seeded.run_id == "run_2"
    assert seeded.turns_completed == plan.turns_completed
    assert len(plan.prior_state.messages) == plan.message_count
    assert plan.seed_state().run_id == "run_1"


def test_workspace_mismatch_is_rejected_when_expected_workspace_given():
    controller, _ = make_controller({"run_1": "failed"}, [checkpointed_state()])

    with pytest.raises(WorkspaceMismatchError, match="acme/shop"):
        run_async(
            controller.prepare_resume("run_1", expected_workspace=WorkspaceConfig("acme", "billing"))
        )

    plan = run_async(
        controller.prepare_resume(
            "run_1", expected_workspace=WorkspaceConfig("acme", "shop", "develop")
        )
    )
    assert plan.turns_completed == 2


def test_can_resume_requires_checkpoint_and_resumable_status():
    controller, _ = make_controller(
        {"run_1": "failed", "run_2": "active", "run_3": "failed"},
        [checkpointed_state("run_1"), checkpointed_state("run_2")],
    )

    first = run_async(controller.can_resume("run_1"))
    assert first.can_resume is True
    assert first.has_checkpoint is True
    assert first.status == "failed"

    assert run_async(controller.can_resume("run_2")).can_resume is False

    third = run_async(controller.can_resume("run_3"))
    assert third.has_checkpoint is False
    assert third.can_resume is False

    assert run_async(controller.can_resume("run_4")).status == "unknown"


def test_discard_deletes_checkpoint_and_rejects_missing_one():
    controller, store = make_controller({}, [checkpointed_state()])

    run_async(controller.discard("run_1"))
    assert store.raw("run_1") is None

    with pytest.raises(CheckpointNotFoundError):
        run_async(controller.discard("run_1"))


def test_overview_lists_active_checkpoints_with_status():
    controller, _ = make_controller(
        {"run_a": "failed", "run_b": "active"},
        [checkpointed_state("run_b", turns=1), checkpointed_state("run_a", turns=3)],
    )

    rows = run_async(controller.overview())

    assert [r.run_id for r in rows] == ["run_a", "run_b"]
    assert rows[0].turns_completed == 3
    assert rows[0].can_resume is True
    assert rows[1].status == "active"
    assert rows[1].can_resume is False


def test_resumed_run_continues_turn_count_from_checkpoint():
    controller, store = make_controller({"run_1": "failed"}, [checkpointed_state(turns=2)])
    plan = run_async(controller.prepare_resume("run_1"))
    seen_lengths: list[int] = []

    class FinishingLLM:
        async def chat(self, system_prompt, messages, tools):
            seen_lengths.append(len(messages))
            return LLMResponse(content=[text_block("Pagination added")], stop_reason="end_turn")

    class NoTools:
        def definitions(self):
            return []

        async def execute(self, tool_name, tool_input):
            raise AssertionError("no tool calls expected")

    async def sleep(_):
        return None

    result = run_async(
        run_agent(plan.seed_state(), 10, FinishingLLM(), NoTools(), store, sleep=sleep)
    )

    assert result.success is True
    assert result.turns == 3
    assert seen_lengths == [5]
    assert store.raw("run_1") is None
