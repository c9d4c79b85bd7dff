"""Message content: a JSON array of text, HTML and attachment items."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any

from chatlib.errors import ChatError, Errc
from chatlib.file import FileCredentials, MimeEnum

ATT_KEY = "att"
MIME_KEY = "mime"
TEXT_KEY = "text"
ID_KEY = "id"
SIZE_KEY = "size"

AU_WAV_KEY = "au-wav"
AU_DURATION_KEY = "duration"
AU_NUM_CHAN_KEY = "num-chan"
AU_MAX_FRAME_KEY = "max-frame"
AU_MIN_FRAME_KEY = "min-frame"
AU_SPECTRUM = "spectrum"


@dataclass(frozen=True)
class ContentCredentials:
    """One content item: attachment flag, MIME type and text."""

    attachment: bool = False
    mime: MimeEnum = MimeEnum.UNKNOWN
    text: str = ""


@dataclass(frozen=True)
class AttachmentCredentials:
    """Attachment reference stored in message content."""

    file_id: uuid.UUID | None = None
    name: str = ""
    size: int = 0


@dataclass
class AudioWavCredentials:
    """Summary of an attached WAV recording."""

    num_channels: int = 0
    duration: int = 0
    min_frame: tuple[float, float] = (0.0, 0.0)
    max_frame: tuple[float, float] = (0.0, 0.0)
    data: list[tuple[float, float]] = field(default_factory=list)


@dataclass(frozen=True)
class LiveVideoCredentials:
    """Session description of a live video stream."""

    description: str = ""


_MISSING = object()


def _lookup(node: Any, key: Any) -> Any:
    try:
        return node[key]
    except (KeyError, IndexError, TypeError):
        return _MISSING


def _get(node: Any, key: Any, kind: type, default: Any) -> Any:
    value = _lookup(node, key)
    if value is _MISSING:
        return default
    if kind is bool:
        return value if isinstance(value, bool) else default
    if isinstance(value, bool):
        return default
    if kind is int:
        return value if isinstance(value, int) else default
    if kind is float:
        return float(value) if isinstance(value, (int, float)) else default
    return value if isinstance(value, kind) else default


def _mime_of(elem: Any) -> MimeEnum | None:
    try:
        return MimeEnum(_get(elem, MIME_KEY, int, int(MimeEnum.UNKNOWN)))
    except ValueError:
        return None


def _is_valid(mime: MimeEnum | None) -> bool:
    return mime is not None and mime != MimeEnum.UNKNOWN


def _parse_file_id(text: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(text)
    except ValueError:
        return None


class Content:
    """Ordered message content items, serialised as a JSON array."""

    def __init__(self, source: str = "") -> None:
        try:
            data = json.loads(source or "[]")
        except json.JSONDecodeError as exc:
            raise ChatError(Errc.JSON_ERROR, str(exc)) from exc
        if not isinstance(data, list):
            raise ChatError(Errc.JSON_ERROR, "expected array")
        self._d: list = data

    def count(self) -> int:
        """Number of content items."""
        return len(self._d)

    def __len__(self) -> int:
        return len(self._d)

    def _element(self, index: int) -> Any:
        if 0 <= index < len(self._d):
            return self._d[index]
        return _MISSING

    def at(self, index: int) -> ContentCredentials:
        """Item at the given position, or an empty item if absent or invalid."""
        elem = self._element(index)
        if elem is not _MISSING:
            att = _get(elem, ATT_KEY, bool, False)
            mime = _mime_of(elem)
            if _is_valid(mime):
                return ContentCredentials(att, mime, _get(elem, TEXT_KEY, str, ""))
        return ContentCredentials()

    def attachment(self, index: int) -> AttachmentCredentials:
        """Attachment at the given position, or empty credentials."""
        elem = self._element(index)
        if elem is not _MISSING:
            att = _get(elem, ATT_KEY, bool, False)
            mime = _mime_of(elem)
            if att and _is_valid(mime):
                return AttachmentCredentials(
                    file_id=_parse_file_id(_get(elem, ID_KEY, str, "")),
                    name=_get(elem, TEXT_KEY, str, ""),
                    size=_get(elem, SIZE_KEY, int, 0),
                )
        return AttachmentCredentials()

    def audio_wav(self, index: int) -> AudioWavCredentials:
        """WAV summary at the given position, or empty credentials."""
        elem = self._element(index)
        if elem is not _MISSING:
            att = _get(elem, ATT_KEY, bool, False)
            if att and _mime_of(elem) == MimeEnum.AUDIO_WAV:
                wav = _lookup(elem, AU_WAV_KEY)
                min_frame = _lookup(wav, AU_MIN_FRAME_KEY)
                max_frame = _lookup(wav, AU_MAX_FRAME_KEY)
                spectrum = _lookup(wav, AU_SPECTRUM)
                data = []
                if isinstance(spectrum, list):
                    data = [
                        (_get(ref, 0, float, 0.0), _get(ref, 1, float, 0.0))
                        for ref in spectrum
                    ]
                return AudioWavCredentials(
                    num_channels=_get(wav, AU_NUM_CHAN_KEY, int, 0),
                    duration=_get(wav, AU_DURATION_KEY, int, 0),
                    min_frame=(_get(min_frame, 0, float, 0.0), _get(min_frame, 1, float, 0.0)),
                    max_frame=(_get(max_frame, 0, float, 0.0), _get(max_frame, 1, float, 0.0)),
                    data=data,
                )
        return AudioWavCredentials()

    def live_video(self, index: int) -> LiveVideoCredentials:
        """Live video description at the given position, or empty credentials."""
        elem = self._element(index)
        if elem is not _MISSING and _mime_of(elem) == MimeEnum.APPLICATION_SDP:
            return LiveVideoCredentials(_get(elem, TEXT_KEY, str, ""))
        return LiveVideoCredentials()

    def add_text(self, text: str) -> None:
        """Append a plain text item."""
        self._d.append({ATT_KEY: False, MIME_KEY: int(MimeEnum.TEXT_PLAIN), TEXT_KEY: text})

    def add_html(self, text: str) -> None:
        """Append an HTML item."""
        self._d.append({ATT_KEY: False, MIME_KEY: int(MimeEnum.TEXT_HTML), TEXT_KEY: text})

    @staticmethod
    def _attachment_element(fc: FileCredentials) -> dict:
        return {
            ATT_KEY: True,
            MIME_KEY: int(fc.mime),
            ID_KEY: "" if fc.file_id is None else str(fc.file_id),
            TEXT_KEY: fc.name,
            SIZE_KEY: fc.size,
        }

    def add_audio_wav(self, wav: AudioWavCredentials, fc: FileCredentials) -> None:
        """Append a WAV attachment with its summary, if it is a valid WAV."""
        elem = self._attachment_element(fc)
        if fc.mime == MimeEnum.AUDIO_WAV and 0 < wav.num_channels <= 2:
            stereo = wav.num_channels == 2
            width = 2 if stereo else 1
            elem[AU_WAV_KEY] = {
                AU_DURATION_KEY: wav.duration,
                AU_NUM_CHAN_KEY: wav.num_channels,
                AU_MIN_FRAME_KEY: list(wav.min_frame[:width]),
                AU_MAX_FRAME_KEY: list(wav.max_frame[:width]),
            }
            if wav.data:
                elem[AU_WAV_KEY][AU_SPECTRUM] = [list(pair[:width]) for pair in wav.data]
        self._d.append(elem)

    def add_live_video(self, lvc: LiveVideoCredentials) -> None:
        """Append a live video session description."""
        self._d.append(
            {ATT_KEY: False, MIME_KEY: int(MimeEnum.APPLICATION_SDP), TEXT_KEY: lvc.description}
        )

    def attach(self, fc: FileCredentials) -> None:
        """Append a file attachment."""
        self._d.append(self._attachment_element(fc))

    def clear(self) -> None:
        """Remove every item."""
        self._d = []

    def to_string(self) -> str:
        """Compact JSON text of the content."""
        return json.dumps(self._d, ensure_ascii=False, separators=(",", ":"))