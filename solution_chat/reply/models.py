"""Conversation and reply data types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single conversation turn."""

    role: Role
    content: str

    @classmethod
    def from_dict(cls, data: Any) -> Message:
        """Validate one inbound ``{role, content}`` item. Raises ValueError."""
        if not isinstance(data, dict):
            msg = "message must be an object"
            raise ValueError(msg)
        try:
            role = Role(data.get("role"))
        except ValueError:
            msg = f"unsupported role: {data.get('role')!r}"
            raise ValueError(msg) from None
        content = data.get("content")
        if not isinstance(content, str):
            msg = "message content must be a string"
            raise ValueError(msg)
        return cls(role=role, content=content)

    def to_api(self) -> dict[str, str]:
        """Format for the chat completions API."""
        return {"role": str(self.role), "content": self.content}


@dataclass(frozen=True)
class FormattedReply:
    """Shaped reply handed back to the UI."""

    text: str
    cta_requested: bool = False

    def to_payload(self) -> dict[str, str]:
        return {"reply": self.text}


def parse_history(payload: Any) -> list[Message]:
    """Parse a ``{"messages": [...]}`` request body. Raises ValueError."""
    if not isinstance(payload, dict):
        msg = "request body must be an object"
        raise ValueError(msg)
    items = payload.get("messages")
    if not isinstance(items, list):
        msg = "'messages' must be a list"
        raise ValueError(msg)
    return [Message.from_dict(item) for item in items]


def last_user_utterance(history: list[Message]) -> str:
    """Content of the most recent user turn, or an empty string."""
    for message in reversed(history):
        if message.role == Role.USER:
            return message.content
    return ""
