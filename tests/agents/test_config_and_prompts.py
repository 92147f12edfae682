from __future__ import annotations

import pytest

from aicoder.agents.config import AgentConfig
from aicoder.agents.errors import AgentConfigurationError
from aicoder.agents.prompts import build_system_prompt, initial_messages, new_run_state
from aicoder.agents.types import WorkspaceConfig
from aicoder.llms import RETRYABLE_STATUS_CODES


def test_defaults():
    config = AgentConfig()

    assert config.max_turns == 100
    assert config.max_retries == 5
    assert config.initial_retry_delay_s == 10.0
    assert config.retryable_status_codes == RETRYABLE_STATUS_CODES
    assert config.turn_delay_s == 0.0


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("AICODER_MAX_AGENT_TURNS", "25")
    monkeypatch.setenv("AICODER_LLM_MAX_RETRIES", "3")
    monkeypatch.setenv("AICODER_LLM_INITIAL_RETRY_DELAY_S", "1.5")
    monkeypatch.setenv("AICODER_LLM_RETRYABLE_STATUS", "429, 503")
    monkeypatch.setenv("AICODER_DYNAMIC_MODEL", "true")
    monkeypatch.setenv("AICODER_SIMPLE_MODEL", "small")

    config = AgentConfig.from_env()

    assert config.max_turns == 25
    assert config.max_retries == 3
    assert config.initial_retry_delay_s == 1.5
    assert config.retryable_status_codes == (429, 503)
    assert config.dynamic_model_selection is True
    assert config.simple_model == "small"


def test_from_env_rejects_malformed_values(monkeypatch):
    monkeypatch.setenv("AICODER_MAX_AGENT_TURNS", "many")

    with pytest.raises(AgentConfigurationError):
        AgentConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"max_turns": 0}, {"max_retries": -1}, {"initial_retry_delay_s": -1.0}],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(AgentConfigurationError):
        AgentConfig(**kwargs)


def test_initial_messages_wrap_task():
    messages = initial_messages("Add a health check")

    assert len(messages) == 1
    assert messages[0].role == "user"
    assert messages[0].content == "Please complete the following task:\n\nAdd a health check"


def test_system_prompt_names_repository():
    prompt = build_system_prompt(WorkspaceConfig("acme", "shop", "trunk"))

    assert "- Owner: acme" in prompt
    assert "- Repository: shop" in prompt
    assert "- Default Branch: trunk" in prompt


def test_new_run_state_applies_config_and_model_selection():
    config = AgentConfig(
        max_turns=40,
        dynamic_model_selection=True,
        simple_model="small",
        complex_model="large",
    )

    state = new_run_state(
        "Fix typo in footer",
        WorkspaceConfig("acme", "shop"),
        config=config,
        run_id="run_42",
    )

    assert state.run_id == "run_42"
    assert state.max_turns == 40
    assert state.turns_completed == 0
    assert state.selected_model == "small"
    assert len(state.messages) == 1


def test_new_run_state_generates_run_id():
    state = new_run_state("Implement search", WorkspaceConfig("acme", "shop"))

    assert state.run_id.startswith("run_")
