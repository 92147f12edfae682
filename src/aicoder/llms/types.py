from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the provider-agnostic conversation types exchanged with the LLM gateway.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, NotRequired, TypeAlias, TypedDict, cast

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

Role = Literal["user", "assistant"]
StopReason = Literal["end_turn", "tool_use", "max_tokens", "stop_sequence"]


class TextBlock(TypedDict):
    type: Literal["text"]
    text: str


class ToolUseBlock(TypedDict):
    type: Literal["tool_use"]
    id: str
    name: str
    input: JSONObject


class ToolResultBlock(TypedDict):
    type: Literal["tool_result"]
    tool_use_id: str
    content: str
    is_error: NotRequired[bool]


ContentBlock: TypeAlias = TextBlock | ToolUseBlock | ToolResultBlock
MessageContent: TypeAlias = str | list[ContentBlock]


class ToolDefinition(TypedDict):
    name: str
    input_schema: JSONObject
    description: NotRequired[str]


@dataclass(frozen=True, slots=True)
class Message:
    """One conversation entry. `reasoning_content` is kept verbatim and never parsed."""

    role: Role
    content: MessageContent
    reasoning_content: str | None = None

    def blocks(self) -> list[ContentBlock]:
        if isinstance(self.content, str):
            return [text_block(self.content)]
        return list(self.content)

    def tool_uses(self) -> list[ToolUseBlock]:
        if isinstance(self.content, str):
            return []
        return [cast(ToolUseBlock, b) for b in self.content if b.get("type") == "tool_use"]

    def tool_results(self) -> list[ToolResultBlock]:
        if isinstance(self.content, str):
            return []
        return [cast(ToolResultBlock, b) for b in self.content if b.get("type") == "tool_result"]


@dataclass(frozen=True, slots=True)
class LLMResponse:
    content: list[ContentBlock] = field(default_factory=list)
    stop_reason: str = "end_turn"
    reasoning_content: str | None = None
    model: str | None = None

    @property
    def tool_calls(self) -> list[ToolUseBlock]:
        return [cast(ToolUseBlock, b) for b in self.content if b.get("type") == "tool_use"]

    @property
    def text(self) -> str:
        return "\n".join(
            cast(TextBlock, b)["text"] for b in self.content if b.get("type") == "text"
        )


def text_block(text: str) -> TextBlock:
    return {"type": "text", "text": text}


def tool_use_block(id: str, name: str, input: JSONObject | None = None) -> ToolUseBlock:
    return {"type": "tool_use", "id": id, "name": name, "input": dict(input or {})}


def tool_result_block(tool_use_id: str, content: str, *, is_error: bool = False) -> ToolResultBlock:
    block: ToolResultBlock = {"type": "tool_result", "tool_use_id": tool_use_id, "content": content}
    if is_error:
        block["is_error"] = True
    return block


def message_to_dict(message: Message) -> dict[str, Any]:
    """Serialize a message into its JSON-friendly wire shape."""
    payload: dict[str, Any] = {
        "role": message.role,
        "content": message.content if isinstance(message.content, str) else [dict(b) for b in message.content],
    }
    if message.reasoning_content is not None:
        payload["reasoning_content"] = message.reasoning_content
    return payload


_BLOCK_FIELDS: dict[str, tuple[tuple[str, type], ...]] = {
    "text": (("text", str),),
    "tool_use": (("id", str), ("name", str), ("input", dict)),
    "tool_result": (("tool_use_id", str), ("content", str)),
}


def message_from_dict(payload: dict[str, Any]) -> Message:
    """
    Deserialize one wire-shape message.

    Raises:
        ValueError: If role or content have an unexpected shape.
    """
    role = payload.get("role")
    if role not in ("user", "assistant"):
        raise ValueError(f"Invalid message role: {role!r}")
    content = payload.get("content")
    if isinstance(content, str):
        parsed: MessageContent = content
    elif isinstance(content, list):
        blocks: list[ContentBlock] = []
        for block in content:
            if not isinstance(block, dict) or block.get("type") not in _BLOCK_FIELDS:
                raise ValueError(f"Invalid content block: {block!r}")
            for name, kind in _BLOCK_FIELDS[block["type"]]:
                if not isinstance(block.get(name), kind):
                    raise ValueError(f"Content block of type {block['type']!r} needs {kind.__name__} field {name!r}")
            blocks.append(cast(ContentBlock, dict(block)))
        parsed = blocks
    else:
        raise ValueError("Message content must be a string or a list of blocks")
    reasoning = payload.get("reasoning_content")
    return Message(
        role=role,
        content=parsed,
        reasoning_content=reasoning if isinstance(reasoning, str) else None,
    )
