from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines custom exceptions for error handling in the llms package.
"""


class LLMError(Exception):
    """Base exception for all LLM gateway failures."""

    pass


class LLMRetryableError(LLMError):
    """
    Transient failures: rate limits, overloaded or unavailable providers, gateway errors.
    These errors may be retried with backoff.
    """

    pass
