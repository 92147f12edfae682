from __future__ import annotations

import pytest

from aicoder.llms import (
    LLMError,
    LLMResponse,
    LLMRetryableError,
    Message,
    backoff_delay,
    classify_error,
    is_retryable_error,
    message_from_dict,
    message_to_dict,
    text_block,
    tool_result_block,
    tool_use_block,
)


@pytest.mark.parametrize(
    "message",
    [
        "Error 429: Too Many Requests",
        "529 overloaded_error",
        "upstream returned 502",
        "HTTP 503 Service Unavailable",
    ],
)
def test_retryable_status_in_message(message):
    assert is_retryable_error(RuntimeError(message)) is True


@pytest.mark.parametrize("message", ["400 bad request", "401 unauthorized", "invalid tool schema"])
def test_other_errors_are_not_retryable(message):
    assert is_retryable_error(RuntimeError(message)) is False


def test_retryable_error_type_is_always_retryable():
    assert is_retryable_error(LLMRetryableError("connection reset")) is True


def test_custom_status_codes():
    assert is_retryable_error(RuntimeError("418"), (418,)) is True
    assert is_retryable_error(RuntimeError("503"), (418,)) is False


def test_classify_error():
    retryable = classify_error(RuntimeError("503 unavailable"))
    assert isinstance(retryable, LLMRetryableError)
    assert str(retryable) == "503 unavailable"

    fatal = classify_error(ValueError("bad input"))
    assert type(fatal) is LLMError

    original = LLMError("already wrapped")
    assert classify_error(original) is original


def test_backoff_doubles_per_attempt():
    assert [backoff_delay(a, 10.0) for a in range(1, 6)] == [10.0, 20.0, 40.0, 80.0, 160.0]
    with pytest.raises(ValueError):
        backoff_delay(0, 10.0)


def test_response_text_and_tool_calls():
    response = LLMResponse(
        content=[text_block("one"), tool_use_block("t1", "grep", {"q": "x"}), text_block("two")],
        stop_reason="tool_use",
    )

    assert response.text == "one\ntwo"
    assert [c["id"] for c in response.tool_calls] == ["t1"]


def test_tool_result_block_only_marks_errors():
    assert "is_error" not in tool_result_block("t1", "ok")
    assert tool_result_block("t1", "Error: boom", is_error=True)["is_error"] is True


def test_message_dict_conversion_keeps_reasoning():
    message = Message(
        role="assistant",
        content=[tool_use_block("t1", "ls")],
        reasoning_content="checking files",
    )

    payload = message_to_dict(message)

    assert payload["reasoning_content"] == "checking files"
    assert message_from_dict(payload) == message
    assert "reasoning_content" not in message_to_dict(Message(role="user", content="hi"))


@pytest.mark.parametrize(
    "payload",
    [
        {"role": "system", "content": "x"},
        {"role": "user", "content": [{"type": "image"}]},
        {"role": "user", "content": 42},
        {"role": "assistant", "content": [{"type": "tool_use"}]},
        {"role": "assistant", "content": [{"type": "tool_use", "id": "t1", "name": "ls", "input": "[]"}]},
        {"role": "assistant", "content": [{"type": "text"}]},
        {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t1", "content": None}]},
    ],
)
def test_message_from_dict_rejects_bad_shapes(payload):
    with pytest.raises(ValueError):
        message_from_dict(payload)
