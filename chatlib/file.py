"""File attachment credentials and MIME type detection."""

from __future__ import annotations

import uuid
from collections.abc import Hashable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from os import PathLike
from pathlib import Path

from chatlib.errors import ChatError, Errc

MAX_FILE_SIZE = 2**31 - 1
"""Largest file size, in bytes, that may be attached."""

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class MimeEnum(IntEnum):
    """MIME types known to the chat library."""

    UNKNOWN = 0
    APPLICATION_OCTET_STREAM = 1
    APPLICATION_JSON = 2
    APPLICATION_PDF = 3
    APPLICATION_SDP = 4
    APPLICATION_ZIP = 5
    AUDIO_MPEG = 6
    AUDIO_OGG = 7
    AUDIO_WAV = 8
    IMAGE_GIF = 9
    IMAGE_JPEG = 10
    IMAGE_PNG = 11
    IMAGE_SVG = 12
    TEXT_CSV = 13
    TEXT_HTML = 14
    TEXT_PLAIN = 15
    TEXT_XML = 16
    VIDEO_MP4 = 17
    VIDEO_WEBM = 18


_BY_EXTENSION = {
    ".bin": MimeEnum.APPLICATION_OCTET_STREAM,
    ".json": MimeEnum.APPLICATION_JSON,
    ".pdf": MimeEnum.APPLICATION_PDF,
    ".sdp": MimeEnum.APPLICATION_SDP,
    ".zip": MimeEnum.APPLICATION_ZIP,
    ".mp3": MimeEnum.AUDIO_MPEG,
    ".ogg": MimeEnum.AUDIO_OGG,
    ".oga": MimeEnum.AUDIO_OGG,
    ".wav": MimeEnum.AUDIO_WAV,
    ".gif": MimeEnum.IMAGE_GIF,
    ".jpg": MimeEnum.IMAGE_JPEG,
    ".jpeg": MimeEnum.IMAGE_JPEG,
    ".png": MimeEnum.IMAGE_PNG,
    ".svg": MimeEnum.IMAGE_SVG,
    ".csv": MimeEnum.TEXT_CSV,
    ".htm": MimeEnum.TEXT_HTML,
    ".html": MimeEnum.TEXT_HTML,
    ".txt": MimeEnum.TEXT_PLAIN,
    ".xml": MimeEnum.TEXT_XML,
    ".mp4": MimeEnum.VIDEO_MP4,
    ".webm": MimeEnum.VIDEO_WEBM,
}


def mime_by_extension(path: str | PathLike) -> MimeEnum:
    """MIME type guessed from the file extension, octet-stream if unknown."""
    suffix = Path(path).suffix.lower()
    return _BY_EXTENSION.get(suffix, MimeEnum.APPLICATION_OCTET_STREAM)


@dataclass
class FileCredentials:
    """Everything known about an attached or cached file."""

    file_id: Hashable | None = None
    author_id: Hashable | None = None
    chat_id: Hashable | None = None
    message_id: Hashable | None = None
    attachment_index: int = -1
    abspath: str = ""
    name: str = ""
    size: int = 0
    mime: MimeEnum = MimeEnum.UNKNOWN
    modtime: datetime = field(default=_EPOCH)


def _new_file_id() -> uuid.UUID:
    return uuid.uuid4()


def _check_size(size: int, where: str) -> None:
    if size < 0 or size > MAX_FILE_SIZE:
        raise ChatError(
            Errc.ATTACHMENT_FAILURE,
            where,
            f"maximum file size limit ({MAX_FILE_SIZE} bytes) exceeded: {size} bytes"
            ", use another way to transfer file or data",
        )


@dataclass(frozen=True)
class _LocalFile:
    abspath: str
    name: str
    size: int
    modtime: datetime


def _inspect(path: str | PathLike) -> _LocalFile:
    p = Path(path)
    abspath = str(p if p.is_absolute() else p.absolute())

    if not p.exists():
        raise ChatError(Errc.FILE_NOT_FOUND, abspath)

    if not p.is_file():
        raise ChatError(
            Errc.ATTACHMENT_FAILURE, abspath, "attachment must be a regular file"
        )

    try:
        st = p.stat()
    except OSError as exc:
        raise ChatError(Errc.FILESYSTEM_ERROR, abspath, exc.strerror or str(exc)) from exc

    _check_size(st.st_size, abspath)
    modtime = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    return _LocalFile(abspath, p.name, st.st_size, modtime)


def credentials_from_path(
    author_id, chat_id, message_id, attachment_index: int, path: str | PathLike
) -> FileCredentials:
    """Credentials for a local file to be attached to a message."""
    local = _inspect(path)
    return FileCredentials(
        file_id=_new_file_id(),
        author_id=author_id,
        chat_id=chat_id,
        message_id=message_id,
        attachment_index=attachment_index,
        abspath=local.abspath,
        name=local.name,
        size=local.size,
        mime=mime_by_extension(local.abspath),
        modtime=local.modtime,
    )


def credentials_from_uri(
    author_id,
    chat_id,
    message_id,
    attachment_index: int,
    uri: str,
    display_name: str,
    size: int,
    modtime: datetime,
) -> FileCredentials:
    """Credentials for a file known only by URI, name, size and time."""
    _check_size(size, uri)
    return FileCredentials(
        file_id=_new_file_id(),
        author_id=author_id,
        chat_id=chat_id,
        message_id=message_id,
        attachment_index=attachment_index,
        abspath=uri,
        name=display_name,
        size=size,
        mime=mime_by_extension(display_name),
        modtime=modtime,
    )


def credentials_from_record(
    file_id,
    author_id,
    chat_id,
    message_id,
    attachment_index: int,
    name: str,
    size: int,
    mime: MimeEnum,
) -> FileCredentials:
    """Credentials rebuilt from a stored record, without a local path."""
    _check_size(size, name)
    return FileCredentials(
        file_id=file_id,
        author_id=author_id,
        chat_id=chat_id,
        message_id=message_id,
        attachment_index=attachment_index,
        abspath="",
        name=name,
        size=size,
        mime=MimeEnum(mime),
        modtime=_EPOCH,
    )


def credentials_for_file(
    file_id, path: str | PathLike, no_mime: bool = False
) -> FileCredentials:
    """Credentials for a local file under a known identifier."""
    local = _inspect(path)
    return FileCredentials(
        file_id=file_id,
        abspath=local.abspath,
        name=local.name,
        size=local.size,
        mime=MimeEnum.UNKNOWN if no_mime else mime_by_extension(local.abspath),
        modtime=local.modtime,
    )