from __future__ import annotations

import asyncio
import json

from aicoder.agents.resume import InMemoryRunStatusLookup
from aicoder.agents.types import RunState, WorkspaceConfig
from aicoder.checkpoints import InMemoryCheckpointStore
from aicoder.cli import main
from aicoder.llms import Message


def seeded_store(*run_ids: str) -> InMemoryCheckpointStore:
    store = InMemoryCheckpointStore()

    async def seed():
        async with store:
            for run_id in run_ids:
                await store.save(
                    run_id,
                    RunState(
                        run_id=run_id,
                        task_description="Tidy logging",
                        workspace_config=WorkspaceConfig("acme", "shop"),
                        messages=[
                            Message(role="user", content="Please complete the following task:\n\nTidy logging"),
                            Message(role="assistant", content="Looking at the logger setup"),
                        ],
                        turns_completed=1,
                        max_turns=30,
                    ),
                )

    asyncio.run(seed())
    return store


def test_list_json(capsys):
    store = seeded_store("run_2", "run_1")

    assert main(["--json", "list"], store=store) == 0

    rows = json.loads(capsys.readouterr().out)
    assert [r["run_id"] for r in rows] == ["run_1", "run_2"]
    assert rows[0]["status"] == "unknown"
    assert rows[0]["can_resume"] is True


def test_list_uses_supplied_status_lookup(capsys):
    store = seeded_store("run_1", "run_2")
    lookup = InMemoryRunStatusLookup({"run_1": "active", "run_2": "failed"})

    assert main(["--json", "list"], store=store, status_lookup=lookup) == 0

    rows = {r["run_id"]: r for r in json.loads(capsys.readouterr().out)}
    assert rows["run_1"]["status"] == "active"
    assert rows["run_1"]["can_resume"] is False
    assert rows["run_2"]["can_resume"] is True

    assert main(["--json", "can-resume", "run_1", "--status", "failed"], store=store, status_lookup=lookup) == 0
    assert json.loads(capsys.readouterr().out)["status"] == "failed"


def test_list_empty(capsys):
    assert main(["list"], store=InMemoryCheckpointStore()) == 0
    assert "No active checkpoints." in capsys.readouterr().out


def test_inspect_verbose_includes_messages(capsys):
    store = seeded_store("run_1")

    assert main(["--json", "inspect", "run_1", "--verbose"], store=store) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["repository"] == "acme/shop"
    assert payload["turns_completed"] == 1
    assert payload["message_count"] == 2
    assert payload["messages"][1]["role"] == "assistant"


def test_inspect_missing_run(capsys):
    assert main(["inspect", "ghost"], store=InMemoryCheckpointStore()) == 1
    assert "ghost" in capsys.readouterr().err


def test_can_resume_honours_status(capsys):
    store = seeded_store("run_1")

    assert main(["--json", "can-resume", "run_1"], store=store) == 0
    assert json.loads(capsys.readouterr().out)["can_resume"] is True

    assert main(["--json", "can-resume", "run_1", "--status", "active"], store=store) == 1
    assert json.loads(capsys.readouterr().out)["status"] == "active"


def test_delete(capsys):
    store = seeded_store("run_1")

    assert main(["delete", "run_1"], store=store) == 0
    assert store.raw("run_1") is None
    capsys.readouterr()

    assert main(["delete", "run_1"], store=store) == 1
    assert "No checkpoint exists for run run_1" in capsys.readouterr().err
