"""
System prompt and conversation seed messages.
"""

from __future__ import annotations

import logging

from ..llms.types import Message
from .config import AgentConfig
from .task_analyzer import select_model
from .types import RunState, WorkspaceConfig, new_id

logger = logging.getLogger(__name__)

CONTINUE_PROMPT = "Please continue working on the task."


def build_system_prompt(workspace: WorkspaceConfig) -> str:
    return "\n".join(
        [
            "You are an expert software developer completing a coding task in a GitHub repository.",
            "",
            "## Repository Information",
            f"- Owner: {workspace.owner}",
            f"- Repository: {workspace.repo}",
            f"- Default Branch: {workspace.default_branch}",
            "",
            "Explore the code before changing it, follow the existing conventions,",
            "commit your work on a new branch, open a pull request, and call",
            "task_complete with a summary when you are done.",
        ]
    )


def task_message(task_description: str) -> Message:
    return Message(
        role="user",
        content=f"Please complete the following task:\n\n{task_description}",
    )


def initial_messages(task_description: str) -> list[Message]:
    """Return the conversation a fresh run starts from."""
    return [task_message(task_description)]


def new_run_state(
    task_description: str,
    workspace_config: WorkspaceConfig,
    *,
    config: AgentConfig | None = None,
    run_id: str | None = None,
    workspace_id: str | None = None,
) -> RunState:
    """
    Build the state a fresh run starts from.

    The turn budget and model come from `config`; the model choice is logged
    together with the complexity classification behind it.
    """
    cfg = config or AgentConfig()
    selection = select_model(task_description, cfg)
    logger.info(
        "Model selection for task: complexity=%s model=%s (%s)",
        selection.complexity,
        selection.model,
        selection.reason,
    )
    return RunState(
        run_id=run_id or new_id("run"),
        task_description=task_description,
        workspace_config=workspace_config,
        messages=initial_messages(task_description),
        max_turns=cfg.max_turns,
        selected_model=selection.model,
        workspace_id=workspace_id,
    )
