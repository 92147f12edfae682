from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

"""
import os
from dataclasses import dataclass

from ..llms.utils import RETRYABLE_STATUS_CODES
from .errors import AgentConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable with common truthy values."""
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_status_codes(name: str) -> tuple[int, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return RETRYABLE_STATUS_CODES
    try:
        return tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise AgentConfigurationError(f"{name} must be a comma-separated list of integers") from e


@dataclass(frozen=True, slots=True)
class AgentConfig:
    # Budget
    max_turns: int = 100

    # Reliability
    max_retries: int = 5
    initial_retry_delay_s: float = 10.0
    retryable_status_codes: tuple[int, ...] = RETRYABLE_STATUS_CODES
    turn_delay_s: float = 0.0

    # Model selection
    default_model: str | None = None
    dynamic_model_selection: bool = False
    simple_model: str | None = None
    complex_model: str | None = None

    def __post_init__(self) -> None:
        if self.max_turns <= 0:
            raise AgentConfigurationError("max_turns must be > 0")
        if self.max_retries < 0:
            raise AgentConfigurationError("max_retries must be >= 0")
        if self.initial_retry_delay_s < 0 or self.turn_delay_s < 0:
            raise AgentConfigurationError("delays must be >= 0")

    @staticmethod
    def from_env() -> "AgentConfig":
        try:
            return AgentConfig(
                max_turns=int(os.getenv("AICODER_MAX_AGENT_TURNS", "100")),
                max_retries=int(os.getenv("AICODER_LLM_MAX_RETRIES", "5")),
                initial_retry_delay_s=float(os.getenv("AICODER_LLM_INITIAL_RETRY_DELAY_S", "10")),
                retryable_status_codes=_env_status_codes("AICODER_LLM_RETRYABLE_STATUS"),
                turn_delay_s=float(os.getenv("AICODER_TURN_DELAY_S", "0")),
                default_model=os.getenv("AICODER_DEFAULT_MODEL"),
                dynamic_model_selection=_env_bool("AICODER_DYNAMIC_MODEL", False),
                simple_model=os.getenv("AICODER_SIMPLE_MODEL"),
                complex_model=os.getenv("AICODER_COMPLEX_MODEL"),
            )
        except ValueError as e:
            raise AgentConfigurationError(f"Invalid agent configuration: {e}") from e
