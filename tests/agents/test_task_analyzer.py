from __future__ import annotations

import pytest

from aicoder.agents.config import AgentConfig
from aicoder.agents.task_analyzer import (
    analyze_task_complexity,
    complexity_reason,
    select_model,
)


@pytest.mark.parametrize(
    "task",
    [
        "Fix typo in README",
        "Update comment on the parser",
        "Bump version to 2.1.0",
        "Remove unused imports",
        "Rename helper to load_config",
    ],
)
def test_simple_tasks(task):
    assert analyze_task_complexity(task) == "simple"


@pytest.mark.parametrize(
    "task",
    [
        "Implement OAuth login",
        "Refactor the billing module",
        "Investigate flaky checkout",
        "Migrate the database schema",
    ],
)
def test_complex_tasks(task):
    assert analyze_task_complexity(task) == "complex"


def test_simple_indicator_wins_over_complex_one():
    # "and" and "api" are complex indicators, "typo" is simple
    assert analyze_task_complexity("Fix typo in api docs and changelog") == "simple"


def test_unmatched_task_defaults_to_complex():
    assert analyze_task_complexity("Do the thing") == "complex"
    assert complexity_reason("Do the thing", "complex") == "Task classified as complex (default for safety)"


def test_reason_names_matched_indicator():
    assert complexity_reason("Fix typo", "simple") == 'Task appears simple (contains: "typo")'
    assert (
        complexity_reason("Refactor payments", "complex")
        == 'Task requires complex reasoning (contains: "refactor")'
    )


def test_select_model_uses_default_when_dynamic_selection_disabled():
    config = AgentConfig(default_model="model-default", simple_model="model-small")

    selection = select_model("Fix typo", config)

    assert selection.model == "model-default"
    assert selection.is_dynamic is False
    assert selection.complexity == "simple"


def test_select_model_picks_by_complexity_when_enabled():
    config = AgentConfig(
        default_model="model-default",
        dynamic_model_selection=True,
        simple_model="model-small",
        complex_model="model-large",
    )

    assert select_model("Fix typo", config).model == "model-small"
    assert select_model("Implement search", config).model == "model-large"


def test_select_model_falls_back_to_default_model():
    config = AgentConfig(default_model="model-default", dynamic_model_selection=True)

    selection = select_model("Implement search", config)

    assert selection.model == "model-default"
    assert selection.is_dynamic is True
