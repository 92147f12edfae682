from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the public API for the aicoder llms package.
"""

from .errors import LLMError, LLMRetryableError
from .gateway import LLMGateway
from .types import (
    ContentBlock,
    LLMResponse,
    Message,
    StopReason,
    TextBlock,
    ToolDefinition,
    ToolResultBlock,
    ToolUseBlock,
    message_from_dict,
    message_to_dict,
    text_block,
    tool_result_block,
    tool_use_block,
)
from .utils import RETRYABLE_STATUS_CODES, backoff_delay, classify_error, is_retryable_error

__all__ = [
    "LLMError",
    "LLMRetryableError",
    "LLMGateway",
    "ContentBlock",
    "LLMResponse",
    "Message",
    "StopReason",
    "TextBlock",
    "ToolDefinition",
    "ToolResultBlock",
    "ToolUseBlock",
    "message_from_dict",
    "message_to_dict",
    "text_block",
    "tool_result_block",
    "tool_use_block",
    "RETRYABLE_STATUS_CODES",
    "backoff_delay",
    "classify_error",
    "is_retryable_error",
]
