"""Kinds of chat: personal, group and channel."""

from __future__ import annotations

from enum import IntEnum


class ChatEnum(IntEnum):
    """Chat (contact) type."""

    PERSON = 1
    GROUP = 2
    CHANNEL = 3


def to_chat_enum(n: int) -> ChatEnum:
    """Convert an integer to a chat type, raising ValueError if it is not one."""
    try:
        return ChatEnum(n)
    except ValueError:
        raise ValueError(f"invalid chat type: {n!r}") from None


def chat_enum_name(value: int) -> str:
    """Return the lower-case name of a chat type, or an empty string."""
    try:
        return ChatEnum(value).name.lower()
    except ValueError:
        return ""