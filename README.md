# chatlib

Building blocks for a chat application, written in plain Python with no
third-party dependencies. The SQLite storage uses the standard library's
`sqlite3` module.

## Modules

- `chatlib.errors`: the `Errc` error codes, `message_for(code)`, which gives
  the text for a code, and `ChatError`. A `ChatError` carries `code` and
  `details`. Its message is the code's text followed by the details, joined
  with `": "`.
- `chatlib.chat_enum`: `ChatEnum` (`PERSON`, `GROUP`, `CHANNEL`).
  `to_chat_enum(n)` raises `ValueError` for an integer that is not a chat
  type. `chat_enum_name(value)` returns `"person"`, `"group"` or `"channel"`,
  or `""` for anything else.
- `chatlib.emoji_db`: `has_emoji(shortcode)` checks a shortcode such as
  `":winking_face:"`. `emoticon_shortcode(emoticon)` maps emoticons such as
  `"LOL"` or `":)"` to a shortcode, and returns `None` for unknown ones.
- `chatlib.member_difference`: `member_difference(old_members, new_members)`
  returns a `MemberDifference` with sorted `added` and `removed` lists.
- `chatlib.contact`: the `Contact` dataclass and `is_valid(contact)`, which
  is true when `contact_id` is set. `ContactList` is an in-memory list that
  keeps insertion order. It has `add`, `count(chat_type=None)`, `get(id)`,
  `at(index)`, `for_each`, `for_each_until`, `len()` and iteration. `get` and
  `at` return an empty, invalid `Contact` when nothing matches.
- `chatlib.file`: `MimeEnum` and `mime_by_extension(path)`, which falls back
  to `APPLICATION_OCTET_STREAM` for unknown extensions. `FileCredentials`
  comes from four builders:
  - `credentials_from_path` and `credentials_for_file` read a local file.
  - `credentials_from_uri` takes a URI, a display name, a size and a time.
  - `credentials_from_record` takes stored values.

  Missing files raise `ChatError` with `Errc.FILE_NOT_FOUND`. Non-regular
  files raise `Errc.ATTACHMENT_FAILURE`. So do sizes above `MAX_FILE_SIZE`
  (2**31 - 1 bytes).
- `chatlib.content`: `Content`, the body of a message, stored as a JSON
  array.
  - Add items with `add_text`, `add_html`, `attach`, `add_audio_wav` and
    `add_live_video`.
  - Read them back with `at`, `attachment`, `audio_wav` and `live_video`.
    These return empty credentials when the index is out of range or the
    item does not match.
  - `to_string()` gives compact JSON. `Content(text)` parses it again, and
    raises `ChatError` with `Errc.JSON_ERROR` for bad JSON or a non-array.
- `chatlib.activity`: `ActivityManager(db)` keeps two tables in an
  `sqlite3.Connection`: a log of `ContactActivity.ONLINE` and `OFFLINE`
  events, and a brief of each contact's last times. Times are stored to the
  millisecond and returned as UTC datetimes. Contact identifiers are stored
  and returned as strings. Database failures raise `ChatError` with
  `Errc.STORAGE_ERROR`.
- `chatlib.serializer`: `pack(packet)` and `unpack(data)` handle the binary
  packets `ContactCredentialsPacket`, `GroupMembers`, `RegularMessage`,
  `DeliveryNotification`, `ReadNotification`, `FileRequest` and `FileError`.
  `parse_ulid(text)` decodes a 26-character ULID into a `uuid.UUID`.

## Wire format

Each packet starts with a one-byte `PacketEnum` tag. The fields follow in
big-endian order:

- identifiers are 16 bytes; all zeros means none and is read back as `None`;
- strings are a 32-bit length followed by UTF-8 bytes;
- times are signed 64-bit milliseconds since the Unix epoch.

An unknown tag raises `ChatError` with `Errc.BAD_PACKET_TYPE`. Truncated data
raises `Errc.INCONSISTENT_DATA`.

## Examples

```python
from chatlib.content import Content
from chatlib.member_difference import member_difference

content = Content()
content.add_text("Hello")
content.add_html("<b>World</b>")
print(content.at(0).text)        # Hello
restored = Content(content.to_string())
print(len(restored))             # 2

diff = member_difference(["a", "b"], ["b", "c"])
print(diff.removed, diff.added)  # ['a'] ['c']
```

```python
import sqlite3
from datetime import datetime, timezone
from chatlib.activity import ActivityManager, ContactActivity

db = sqlite3.connect(":memory:")
manager = ActivityManager(db)
now = datetime.now(timezone.utc)
manager.log_activity("01FV1KFY7WCBKDQZ5B4T5ZJMSA", ContactActivity.ONLINE, now)
print(manager.last_activity("01FV1KFY7WCBKDQZ5B4T5ZJMSA", ContactActivity.ONLINE))
```

```python
from chatlib.serializer import RegularMessage, pack, unpack, parse_ulid

message = RegularMessage(message_id=parse_ulid("01FV1KFY7WCBKDQZ5B4T5ZJMSA"))
message.content.add_text("Lorem ipsum")
back = unpack(pack(message))
print(back.message_id == message.message_id, back.content.at(0).text)
```

## What it does not do

This is a library only. It has no command, no user interface and no network
transport: `pack` produces bytes, and sending them is up to you. Persistent
storage covers contact activity only. There is no stored contact manager or
group membership store, no message store or message editor, and no file
cache. `ContactList` lives in memory.

## Running the tests

```
pip install -e ".[test]"
pytest
```