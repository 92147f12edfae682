from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Utility functions for LLM interactions: error classification and backoff.
"""

from typing import Iterable

from .errors import LLMError, LLMRetryableError

RETRYABLE_STATUS_CODES: tuple[int, ...] = (429, 500, 502, 503, 504, 529)


def error_message(error: BaseException) -> str:
    try:
        return str(error) or repr(error)
    except Exception:
        return repr(error)


def is_retryable_error(
    error: BaseException,
    status_codes: Iterable[int] = RETRYABLE_STATUS_CODES,
) -> bool:
    """
    Return `True` when the error message carries one of the retryable status markers.

    Classification is purely textual so every vendor adapter can participate by
    putting the HTTP status in its exception message.
    """
    if isinstance(error, LLMRetryableError):
        return True
    message = error_message(error)
    return any(str(code) in message for code in status_codes)


def classify_error(
    error: BaseException,
    status_codes: Iterable[int] = RETRYABLE_STATUS_CODES,
) -> LLMError:
    """Map an arbitrary exception into retryable vs non-retryable LLM errors."""
    if is_retryable_error(error, status_codes):
        return error if isinstance(error, LLMRetryableError) else LLMRetryableError(error_message(error))
    return error if isinstance(error, LLMError) else LLMError(error_message(error))


def backoff_delay(attempt: int, initial_delay_s: float) -> float:
    """
    Exponential backoff without jitter.
    attempt=1 => initial, attempt=2 => 2*initial, attempt=3 => 4*initial, etc.
    """
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    return initial_delay_s * (2 ** (attempt - 1))
