"""Binary wire format of the messenger protocol packets.

Every packet starts with a one-byte packet type followed by its fields in
network (big-endian) byte order. Identifiers take 16 bytes, strings are a
32-bit length followed by UTF-8 bytes, and times are signed 64-bit counts of
milliseconds since the Unix epoch (UTC). The all-zero identifier stands for
"no identifier" and is read back as None.
"""

from __future__ import annotations

import struct
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import ClassVar

from chatlib.chat_enum import ChatEnum
from chatlib.contact import Contact
from chatlib.content import Content
from chatlib.errors import ChatError, Errc

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)
_MAX_U32 = 2**32 - 1

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_CROCKFORD_VALUES = {ch: i for i, ch in enumerate(_CROCKFORD)}
_CROCKFORD_VALUES.update({"I": 1, "L": 1, "O": 0})


class PacketEnum(IntEnum):
    """Type tag written before every packet."""

    CONTACT_CREDENTIALS = 1
    GROUP_MEMBERS = 2
    REGULAR_MESSAGE = 3
    DELIVERY_NOTIFICATION = 4
    READ_NOTIFICATION = 5
    FILE_REQUEST = 6
    FILE_ERROR = 7


def parse_ulid(text: str) -> uuid.UUID:
    """Decode a 26-character ULID in Crockford base32 into a UUID."""
    if len(text) != 26:
        raise ValueError(f"ULID must be 26 characters long: {text!r}")
    value = 0
    for ch in text.upper():
        digit = _CROCKFORD_VALUES.get(ch)
        if digit is None:
            raise ValueError(f"invalid ULID character {ch!r} in {text!r}")
        value = (value << 5) | digit
    if value >= 1 << 128:
        raise ValueError(f"ULID out of range: {text!r}")
    return uuid.UUID(int=value)


def _id_int(value) -> int:
    if value is None:
        return 0
    if isinstance(value, uuid.UUID):
        return value.int
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value < 1 << 128:
            return value
        raise ChatError(Errc.INCONSISTENT_DATA, f"identifier out of range: {value}")
    if isinstance(value, str):
        try:
            return parse_ulid(value).int
        except ValueError:
            pass
        try:
            return uuid.UUID(value).int
        except ValueError:
            pass
    raise ChatError(Errc.INCONSISTENT_DATA, f"bad identifier: {value!r}")


def _to_millis(time: datetime | None) -> int:
    if time is None:
        return 0
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    return (time - _EPOCH) // _MILLISECOND


class _Writer:
    def __init__(self) -> None:
        self._parts: list[bytes] = []

    def u8(self, value: int) -> None:
        self._parts.append(struct.pack(">B", value))

    def u32(self, value: int) -> None:
        if not 0 <= value <= _MAX_U32:
            raise ChatError(Errc.INCONSISTENT_DATA, f"value does not fit in 32 bits: {value}")
        self._parts.append(struct.pack(">I", value))

    def i64(self, value: int) -> None:
        self._parts.append(struct.pack(">q", value))

    def ident(self, value) -> None:
        self._parts.append(_id_int(value).to_bytes(16, "big"))

    def text(self, value: str) -> None:
        raw = value.encode("utf-8")
        self.u32(len(raw))
        self._parts.append(raw)

    def time(self, value: datetime | None) -> None:
        self.i64(_to_millis(value))

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    def _take(self, n: int) -> memoryview:
        end = self._pos + n
        if end > len(self._data):
            raise ChatError(Errc.INCONSISTENT_DATA, "unexpected end of packet data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def u8(self) -> int:
        return self._take(1)[0]

    def u32(self) -> int:
        return struct.unpack(">I", self._take(4))[0]

    def i64(self) -> int:
        return struct.unpack(">q", self._take(8))[0]

    def ident(self) -> uuid.UUID | None:
        value = int.from_bytes(self._take(16), "big")
        return uuid.UUID(int=value) if value else None

    def text(self) -> str:
        size = self.u32()
        try:
            return bytes(self._take(size)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ChatError(Errc.INCONSISTENT_DATA, str(exc)) from exc

    def time(self) -> datetime:
        return _EPOCH + timedelta(milliseconds=self.i64())


@dataclass
class ContactCredentialsPacket:
    """Contact information sent to a peer."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.CONTACT_CREDENTIALS

    contact: Contact = field(default_factory=Contact)

    def _write(self, w: _Writer) -> None:
        c = self.contact
        w.ident(c.contact_id)
        w.ident(c.creator_id)
        w.text(c.alias)
        w.text(c.avatar)
        w.text(c.description)
        w.text(c.extra)
        w.u8(int(c.type))

    @classmethod
    def _read(cls, r: _Reader) -> ContactCredentialsPacket:
        contact_id = r.ident()
        creator_id = r.ident()
        alias = r.text()
        avatar = r.text()
        description = r.text()
        extra = r.text()
        raw_type = r.u8()
        try:
            chat_type = ChatEnum(raw_type)
        except ValueError:
            raise ChatError(
                Errc.INCONSISTENT_DATA, f"bad contact type: {raw_type}"
            ) from None
        return cls(
            Contact(
                contact_id=contact_id,
                alias=alias,
                avatar=avatar,
                description=description,
                extra=extra,
                creator_id=creator_id,
                type=chat_type,
            )
        )


@dataclass
class GroupMembers:
    """Full member list of a group."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.GROUP_MEMBERS

    group_id: uuid.UUID | None = None
    members: list = field(default_factory=list)

    def _write(self, w: _Writer) -> None:
        w.ident(self.group_id)
        w.u32(len(self.members))
        for member in self.members:
            w.ident(member)

    @classmethod
    def _read(cls, r: _Reader) -> GroupMembers:
        group_id = r.ident()
        count = r.u32()
        return cls(group_id, [r.ident() for _ in range(count)])


@dataclass
class RegularMessage:
    """A chat message with its content."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.REGULAR_MESSAGE

    message_id: uuid.UUID | None = None
    author_id: uuid.UUID | None = None
    chat_id: uuid.UUID | None = None
    mod_time: datetime = _EPOCH
    content: Content = field(default_factory=Content)

    def _write(self, w: _Writer) -> None:
        w.ident(self.message_id)
        w.ident(self.author_id)
        w.ident(self.chat_id)
        w.time(self.mod_time)
        w.text(self.content.to_string())

    @classmethod
    def _read(cls, r: _Reader) -> RegularMessage:
        message_id = r.ident()
        author_id = r.ident()
        chat_id = r.ident()
        mod_time = r.time()
        content = Content(r.text())
        return cls(message_id, author_id, chat_id, mod_time, content)


@dataclass
class DeliveryNotification:
    """Notice that a message was delivered."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.DELIVERY_NOTIFICATION

    message_id: uuid.UUID | None = None
    chat_id: uuid.UUID | None = None
    delivered_time: datetime = _EPOCH

    def _write(self, w: _Writer) -> None:
        w.ident(self.message_id)
        w.ident(self.chat_id)
        w.time(self.delivered_time)

    @classmethod
    def _read(cls, r: _Reader) -> DeliveryNotification:
        return cls(r.ident(), r.ident(), r.time())


@dataclass
class ReadNotification:
    """Notice that a message was read."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.READ_NOTIFICATION

    message_id: uuid.UUID | None = None
    chat_id: uuid.UUID | None = None
    read_time: datetime = _EPOCH

    def _write(self, w: _Writer) -> None:
        w.ident(self.message_id)
        w.ident(self.chat_id)
        w.time(self.read_time)

    @classmethod
    def _read(cls, r: _Reader) -> ReadNotification:
        return cls(r.ident(), r.ident(), r.time())


@dataclass
class FileRequest:
    """Request for the contents of a file."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.FILE_REQUEST

    file_id: uuid.UUID | None = None

    def _write(self, w: _Writer) -> None:
        w.ident(self.file_id)

    @classmethod
    def _read(cls, r: _Reader) -> FileRequest:
        return cls(r.ident())


@dataclass
class FileError:
    """Report that a requested file could not be supplied."""

    PACKET_TYPE: ClassVar[PacketEnum] = PacketEnum.FILE_ERROR

    file_id: uuid.UUID | None = None

    def _write(self, w: _Writer) -> None:
        w.ident(self.file_id)

    @classmethod
    def _read(cls, r: _Reader) -> FileError:
        return cls(r.ident())


_PACKETS = {
    cls.PACKET_TYPE: cls
    for cls in (
        ContactCredentialsPacket,
        GroupMembers,
        RegularMessage,
        DeliveryNotification,
        ReadNotification,
        FileRequest,
        FileError,
    )
}


def pack(packet) -> bytes:
    """Serialise a packet, type tag first."""
    cls = _PACKETS.get(getattr(type(packet), "PACKET_TYPE", None))
    if cls is not type(packet):
        raise TypeError(f"not a protocol packet: {type(packet).__name__}")
    w = _Writer()
    w.u8(int(cls.PACKET_TYPE))
    packet._write(w)
    return w.getvalue()


def unpack(data: bytes):
    """Deserialise one packet, choosing its class by the leading type tag."""
    r = _Reader(data)
    tag = r.u8()
    try:
        cls = _PACKETS[PacketEnum(tag)]
    except ValueError:
        raise ChatError(Errc.BAD_PACKET_TYPE, f"unknown packet type: {tag}") from None
    return cls._read(r)