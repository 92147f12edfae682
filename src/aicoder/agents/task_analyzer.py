"""
Task complexity heuristics used to pick a model for a run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .config import AgentConfig

TaskComplexity = Literal["simple", "complex"]

COMPLEX_TASK_INDICATORS: tuple[str, ...] = (
    # features and architecture
    "implement", "create feature", "add feature", "new feature",
    "architecture", "refactor", "redesign", "rewrite",
    # debugging
    "fix bug", "debug", "investigate", "find issue", "solve",
    "troubleshoot", "diagnose",
    # broad changes
    "optimize", "performance", "improve", "enhance",
    "migrate", "upgrade", "integrate", "connect",
    # multi-step phrasing
    "and", "then", "also", "additionally",
    # verification
    "test", "validate", "verify", "ensure",
    # sensitive areas
    "security", "authentication", "authorization", "permission",
    "database", "api", "endpoint", "service",
)

SIMPLE_TASK_INDICATORS: tuple[str, ...] = (
    "typo", "fix typo", "correct typo",
    "update comment", "add comment", "fix comment",
    "update doc", "fix doc", "update readme",
    "rename", "move file",
    "delete", "remove unused",
    "format", "lint", "style",
    "update version", "bump version",
)


@dataclass(frozen=True, slots=True)
class ModelSelection:
    model: str | None
    complexity: TaskComplexity
    reason: str
    is_dynamic: bool


def analyze_task_complexity(task_description: str) -> TaskComplexity:
    """
    Classify a task description.

    Simple indicators take priority over complex ones; anything unmatched is
    treated as complex.
    """
    lowered = task_description.lower()
    if any(indicator in lowered for indicator in SIMPLE_TASK_INDICATORS):
        return "simple"
    return "complex"


def complexity_reason(task_description: str, complexity: TaskComplexity) -> str:
    lowered = task_description.lower()
    if complexity == "simple":
        indicator = next((i for i in SIMPLE_TASK_INDICATORS if i in lowered), None)
        return (
            f'Task appears simple (contains: "{indicator}")'
            if indicator
            else "Task classified as simple"
        )
    indicator = next((i for i in COMPLEX_TASK_INDICATORS if i in lowered), None)
    return (
        f'Task requires complex reasoning (contains: "{indicator}")'
        if indicator
        else "Task classified as complex (default for safety)"
    )


def select_model(task_description: str, config: AgentConfig) -> ModelSelection:
    """
    Pick the model for a run.

    With dynamic selection disabled the configured default model is used and
    the complexity is reported for logging only.
    """
    complexity = analyze_task_complexity(task_description)
    reason = complexity_reason(task_description, complexity)
    if not config.dynamic_model_selection:
        return ModelSelection(
            model=config.default_model,
            complexity=complexity,
            reason="Dynamic model selection disabled",
            is_dynamic=False,
        )
    preferred = config.simple_model if complexity == "simple" else config.complex_model
    return ModelSelection(
        model=preferred or config.default_model,
        complexity=complexity,
        reason=reason,
        is_dynamic=True,
    )
