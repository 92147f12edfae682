from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the LLM gateway contract consumed by the agent loop.
"""

from typing import Protocol, Sequence

from .types import LLMResponse, Message, ToolDefinition


class LLMGateway(Protocol):
    """
    Vendor adapter seen by the agent loop.

    Implementations translate the provider-agnostic conversation into a vendor
    request and back. Failures are raised as exceptions whose message carries an
    HTTP-style status (for example "503 Service Unavailable") so the loop can
    classify them for retry.
    """

    async def chat(
        self,
        system_prompt: str,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> LLMResponse:
        ...
