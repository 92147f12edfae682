"""
Operator commands for inspecting and cleaning up run checkpoints.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Sequence

from .agents.errors import NotResumableError
from .agents.resume import InMemoryRunStatusLookup, ResumeController, RunStatusLookup
from .checkpoints.factory import create_checkpoint_store_from_env
from .checkpoints.store.base import CheckpointStore
from .llms.types import message_to_dict

logger = logging.getLogger(__name__)

RUN_STATUSES = ("queued", "active", "completed", "failed", "unknown")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aicoder-checkpoints",
        description="Inspect, check and delete agent run checkpoints.",
    )
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON output.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING).")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser(
        "list",
        help="List every active checkpoint. Without a status source every run reports unknown and counts as resumable.",
    )

    inspect_cmd = sub.add_parser("inspect", help="Show the checkpoint of one run.")
    inspect_cmd.add_argument("run_id")
    inspect_cmd.add_argument("--verbose", action="store_true", help="Include the full conversation.")

    delete_cmd = sub.add_parser("delete", help="Delete the checkpoint of one run.")
    delete_cmd.add_argument("run_id")

    can_resume_cmd = sub.add_parser("can-resume", help="Report whether a run can resume.")
    can_resume_cmd.add_argument("run_id")
    can_resume_cmd.add_argument(
        "--status",
        choices=RUN_STATUSES,
        default=None,
        help="Known run status. Without it, and without a status source, the run is treated as unknown.",
    )
    return parser


def _emit(payload: dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2, default=str))
        return
    for key, value in payload.items():
        print(f"{key}: {value}")


async def _list(controller: ResumeController, as_json: bool) -> int:
    rows = await controller.overview()
    if as_json:
        print(
            json.dumps(
                [
                    {
                        "run_id": row.run_id,
                        "turns_completed": row.turns_completed,
                        "message_count": row.message_count,
                        "last_updated": row.last_updated.isoformat(),
                        "status": row.status,
                        "can_resume": row.can_resume,
                    }
                    for row in rows
                ],
                indent=2,
            )
        )
        return 0
    if not rows:
        print("No active checkpoints.")
        return 0
    for row in rows:
        print(
            f"{row.run_id}  turns={row.turns_completed}  messages={row.message_count}  "
            f"updated={row.last_updated.isoformat()}  status={row.status}"
        )
    return 0


async def _inspect(store: CheckpointStore, run_id: str, verbose: bool, as_json: bool) -> int:
    checkpoint = await store.load(run_id)
    if checkpoint is None:
        print(f"No checkpoint exists for run {run_id}.", file=sys.stderr)
        return 1
    state = checkpoint.state
    payload: dict[str, Any] = {
        "run_id": state.run_id,
        "task_description": state.task_description,
        "repository": state.workspace_config.full_name,
        "turns_completed": state.turns_completed,
        "max_turns": state.max_turns,
        "message_count": checkpoint.message_count,
        "selected_model": state.selected_model,
        "last_updated": checkpoint.last_updated.isoformat(),
        "schema_version": checkpoint.schema_version,
    }
    if verbose:
        payload["messages"] = [message_to_dict(m) for m in state.messages]
    _emit(payload, as_json)
    return 0


async def _run(args: argparse.Namespace, store: CheckpointStore, lookup: RunStatusLookup) -> int:
    if getattr(args, "status", None):
        lookup = InMemoryRunStatusLookup({args.run_id: args.status})

    async with store:
        controller = ResumeController(store, lookup)
        if args.command == "list":
            return await _list(controller, args.json)
        if args.command == "inspect":
            return await _inspect(store, args.run_id, args.verbose, args.json)
        if args.command == "delete":
            try:
                await controller.discard(args.run_id)
            except NotResumableError as e:
                print(str(e), file=sys.stderr)
                return 1
            _emit({"run_id": args.run_id, "deleted": True}, args.json)
            return 0
        if args.command == "can-resume":
            eligibility = await controller.can_resume(args.run_id)
            _emit(
                {
                    "run_id": eligibility.run_id,
                    "has_checkpoint": eligibility.has_checkpoint,
                    "status": eligibility.status,
                    "can_resume": eligibility.can_resume,
                },
                args.json,
            )
            return 0 if eligibility.can_resume else 1
    raise ValueError(f"Unknown command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    store: CheckpointStore | None = None,
    status_lookup: RunStatusLookup | None = None,
) -> int:
    """
    Run one operator command and return its exit code.

    `status_lookup` supplies run statuses for `list` and `can-resume`; an
    explicit `--status` flag takes precedence for the named run.
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(
        _run(args, store or create_checkpoint_store_from_env(), status_lookup or InMemoryRunStatusLookup())
    )


if __name__ == "__main__":
    raise SystemExit(main())
