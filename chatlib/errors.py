"""Error codes and the exception raised throughout the chat library."""

from __future__ import annotations

from enum import IntEnum


class Errc(IntEnum):
    """Chat library error conditions."""

    SUCCESS = 0
    CONTACT_NOT_FOUND = 1
    GROUP_NOT_FOUND = 2
    CHAT_NOT_FOUND = 3
    MESSAGE_NOT_FOUND = 4
    FILE_NOT_FOUND = 5
    UNSUITABLE_GROUP_MEMBER = 6
    UNSUITABLE_GROUP_CREATOR = 7
    GROUP_CREATOR_ALREADY_SET = 8
    ATTACHMENT_FAILURE = 9
    BAD_CONVERSATION_TYPE = 10
    BAD_PACKET_TYPE = 11
    BAD_EMOJI_SHORTCODE = 12
    INCONSISTENT_DATA = 13
    FILESYSTEM_ERROR = 14
    STORAGE_ERROR = 15
    JSON_ERROR = 16


_MESSAGES = {
    Errc.SUCCESS: "no error",
    Errc.CONTACT_NOT_FOUND: "contact not found",
    Errc.GROUP_NOT_FOUND: "group not found",
    Errc.CHAT_NOT_FOUND: "chat not found",
    Errc.MESSAGE_NOT_FOUND: "message not found",
    Errc.FILE_NOT_FOUND: "file not found",
    Errc.UNSUITABLE_GROUP_MEMBER: "unsuitable member",
    Errc.UNSUITABLE_GROUP_CREATOR: "unsuitable group creator",
    Errc.GROUP_CREATOR_ALREADY_SET: "group creator already set",
    Errc.ATTACHMENT_FAILURE: "attachment failure",
    Errc.BAD_CONVERSATION_TYPE: "bad conversation type",
    Errc.BAD_PACKET_TYPE: "bad packet type",
    Errc.BAD_EMOJI_SHORTCODE: "bad Emoji shortcode",
    Errc.INCONSISTENT_DATA: "inconsistent data",
    Errc.FILESYSTEM_ERROR: "filesystem_error",
    Errc.STORAGE_ERROR: "storage error",
    Errc.JSON_ERROR: "JSON backend error",
}

_UNKNOWN = "unknown chat error"


def message_for(code: int) -> str:
    """Return the human-readable description of an error code."""
    try:
        return _MESSAGES[Errc(code)]
    except ValueError:
        return _UNKNOWN


class ChatError(Exception):
    """Exception carrying an error code and optional detail strings."""

    def __init__(self, code: int, *args: str) -> None:
        try:
            self.code: int = Errc(code)
        except ValueError:
            self.code = int(code)
        self.details: tuple[str, ...] = tuple(str(a) for a in args)
        text = ": ".join((message_for(code), *(d for d in self.details if d)))
        super().__init__(text)