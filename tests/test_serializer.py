import uuid
from datetime import datetime, timezone

import pytest

from chatlib.chat_enum import ChatEnum
from chatlib.contact import Contact
from chatlib.content import Content
from chatlib.errors import ChatError, Errc
from chatlib.serializer import (
    ContactCredentialsPacket,
    DeliveryNotification,
    FileError,
    FileRequest,
    GroupMembers,
    PacketEnum,
    ReadNotification,
    RegularMessage,
    pack,
    parse_ulid,
    unpack,
)

TEST_CONTENT = "Lorem ipsum dolor sit amet, consectetuer adipiscing elit"

ID1 = parse_ulid("01FV1KFY7WCBKDQZ5B4T5ZJMSA")
ID2 = parse_ulid("01FV1KFY7WWS3WSBV4BFYF7ZC9")
ID3 = parse_ulid("01G2HFKWF1MMBBXWHF4VWJGGTN")


def test_parse_ulid_pinned_values():
    assert parse_ulid("00000000000000000000000001") == uuid.UUID(int=1)
    assert parse_ulid("7ZZZZZZZZZZZZZZZZZZZZZZZZZ") == uuid.UUID(int=2**128 - 1)


def test_parse_ulid_case_insensitive():
    assert parse_ulid("01fv1kfy7wcbkdqz5b4t5zjmsa") == ID1


@pytest.mark.parametrize("text", ["", "01FV1KFY7W", "8ZZZZZZZZZZZZZZZZZZZZZZZZZ", "01FV1KFY7WCBKDQZ5B4T5ZJMS!"])
def test_parse_ulid_rejects_bad_text(text):
    with pytest.raises(ValueError):
        parse_ulid(text)


def test_regular_message_roundtrip_from_source():
    content = Content()
    content.add_text(TEST_CONTENT)
    mod_time = datetime(2022, 3, 19, 12, 30, 15, 123000, tzinfo=timezone.utc)
    m = RegularMessage(message_id=ID1, author_id=ID2, mod_time=mod_time, content=content)

    data = pack(m)
    assert data[0] == PacketEnum.REGULAR_MESSAGE

    m1 = unpack(data)
    assert isinstance(m1, RegularMessage)
    assert m1.PACKET_TYPE == PacketEnum.REGULAR_MESSAGE
    assert m1.message_id == ID1
    assert m1.author_id == ID2
    assert m1.chat_id is None
    assert m1.mod_time == mod_time
    assert m1.content.to_string() == content.to_string()
    assert m1.content.at(0).text == TEST_CONTENT


def test_time_is_truncated_to_milliseconds():
    t = datetime(2021, 1, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)
    got = unpack(pack(ReadNotification(ID1, ID2, t)))
    assert got.read_time == datetime(2021, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)


def test_contact_credentials_roundtrip():
    contact = Contact(
        contact_id=ID1,
        alias="Алиса",
        avatar="avatar.png",
        description="desc",
        extra="{}",
        creator_id=ID2,
        type=ChatEnum.GROUP,
    )
    got = unpack(pack(ContactCredentialsPacket(contact)))
    assert got == ContactCredentialsPacket(contact)


def test_group_members_roundtrip():
    packet = GroupMembers(ID1, [ID2, ID3])
    got = unpack(pack(packet))
    assert got.group_id == ID1
    assert got.members == [ID2, ID3]


def test_group_members_empty():
    assert unpack(pack(GroupMembers(ID1, []))).members == []


def test_notifications_roundtrip():
    t = datetime(1972, 4, 29, 9, 0, tzinfo=timezone.utc)
    assert unpack(pack(DeliveryNotification(ID1, ID2, t))) == DeliveryNotification(ID1, ID2, t)
    assert unpack(pack(ReadNotification(ID2, ID3, t))) == ReadNotification(ID2, ID3, t)


def test_file_packets_roundtrip():
    assert unpack(pack(FileRequest(ID3))) == FileRequest(ID3)
    assert unpack(pack(FileError(ID1))) == FileError(ID1)


def test_file_request_layout():
    data = pack(FileRequest(uuid.UUID(int=1)))
    assert data == bytes([PacketEnum.FILE_REQUEST]) + (1).to_bytes(16, "big")


def test_string_ids_are_accepted():
    got = unpack(pack(FileRequest("01FV1KFY7WCBKDQZ5B4T5ZJMSA")))
    assert got.file_id == ID1


def test_unknown_packet_type():
    with pytest.raises(ChatError) as info:
        unpack(bytes([200]))
    assert info.value.code == Errc.BAD_PACKET_TYPE


def test_empty_data():
    with pytest.raises(ChatError) as info:
        unpack(b"")
    assert info.value.code == Errc.INCONSISTENT_DATA


def test_truncated_data():
    data = pack(DeliveryNotification(ID1, ID2, datetime(2020, 1, 1, tzinfo=timezone.utc)))
    with pytest.raises(ChatError) as info:
        unpack(data[:-3])
    assert info.value.code == Errc.INCONSISTENT_DATA


def test_bad_contact_type():
    data = bytearray(pack(ContactCredentialsPacket(Contact(contact_id=ID1))))
    data[-1] = 99
    with pytest.raises(ChatError) as info:
        unpack(bytes(data))
    assert info.value.code == Errc.INCONSISTENT_DATA


def test_pack_rejects_non_packet():
    with pytest.raises(TypeError):
        pack("not a packet")