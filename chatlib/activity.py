"""Contact activity log and brief, kept in an SQLite database."""

from __future__ import annotations

import sqlite3
from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import IntEnum

from chatlib.errors import ChatError, Errc

DEFAULT_LOG_TABLE_NAME = "activity_log"
DEFAULT_BRIEF_TABLE_NAME = "activity_brief"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)


class ContactActivity(IntEnum):
    """Whether a contact went offline or came online."""

    OFFLINE = 0
    ONLINE = 1


@dataclass(frozen=True)
class ActivityEntry:
    """Last known offline and online times of a contact."""

    offline_utc_time: datetime | None = None
    online_utc_time: datetime | None = None


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _to_millis(time: datetime) -> int:
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    return (time - _EPOCH) // _MILLISECOND


def _from_millis(millis: int | None) -> datetime | None:
    if millis is None:
        return None
    return _EPOCH + timedelta(milliseconds=millis)


def _key(contact_id: Hashable) -> str:
    return str(contact_id)


def _time_column(activity: ContactActivity) -> str:
    if ContactActivity(activity) == ContactActivity.ONLINE:
        return "online_utc_time"
    return "offline_utc_time"


def _activity(value: int | None) -> ContactActivity | None:
    if value is None:
        return None
    try:
        return ContactActivity(value)
    except ValueError:
        return None


class ActivityManager:
    """Records when contacts come online and go offline.

    Contact identifiers are stored as text and returned as strings; times are
    stored with millisecond precision and returned as UTC datetimes.
    """

    def __init__(
        self,
        db: sqlite3.Connection,
        log_table_name: str = DEFAULT_LOG_TABLE_NAME,
        brief_table_name: str = DEFAULT_BRIEF_TABLE_NAME,
    ) -> None:
        self._db = db
        self._log = _quote(log_table_name)
        self._brief = _quote(brief_table_name)
        index = _quote(brief_table_name + "_index")

        statements = (
            f"CREATE TABLE IF NOT EXISTS {self._log} ("
            "contact_id TEXT NOT NULL, "
            "contact_activity INTEGER NOT NULL, "
            "utc_time INTEGER NOT NULL)",
            f"CREATE TABLE IF NOT EXISTS {self._brief} ("
            "contact_id TEXT NOT NULL PRIMARY KEY UNIQUE, "
            "online_utc_time INTEGER NULL, "
            "offline_utc_time INTEGER NULL) WITHOUT ROWID",
            f"CREATE INDEX IF NOT EXISTS {index} ON {self._brief} (contact_id)",
        )

        try:
            with self._db:
                for sql in statements:
                    self._db.execute(sql)
        except sqlite3.Error as exc:
            raise ChatError(
                Errc.STORAGE_ERROR, "create activity manager failure", str(exc)
            ) from exc

    def _run(self, *statements: tuple[str, tuple]) -> None:
        try:
            with self._db:
                for sql, params in statements:
                    self._db.execute(sql, params)
        except sqlite3.Error as exc:
            raise ChatError(Errc.STORAGE_ERROR, str(exc)) from exc

    def _fetch(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            return self._db.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise ChatError(Errc.STORAGE_ERROR, str(exc)) from exc

    def clear(self) -> None:
        """Remove every logged activity and every brief record."""
        self._run((f"DELETE FROM {self._log}", ()), (f"DELETE FROM {self._brief}", ()))

    def log_activity(
        self,
        contact_id: Hashable,
        activity: ContactActivity,
        time: datetime,
        brief_only: bool = False,
    ) -> None:
        """Record an activity; with brief_only only the brief is updated."""
        key = _key(contact_id)
        millis = _to_millis(time)
        column = _time_column(activity)
        statements = []

        if not brief_only:
            statements.append(
                (
                    f"INSERT INTO {self._log} (contact_id, contact_activity, utc_time)"
                    " VALUES (?, ?, ?)",
                    (key, int(activity), millis),
                )
            )

        statements.append(
            (
                f"INSERT INTO {self._brief} (contact_id, {column}) VALUES (?, ?)"
                f" ON CONFLICT(contact_id) DO UPDATE SET {column}=excluded.{column}",
                (key, millis),
            )
        )
        self._run(*statements)

    def last_activity(
        self, contact_id: Hashable, activity: ContactActivity
    ) -> datetime | None:
        """Last time the contact showed the given activity, or None."""
        column = _time_column(activity)
        rows = self._fetch(
            f"SELECT {column} FROM {self._brief} WHERE contact_id=?", (_key(contact_id),)
        )
        return _from_millis(rows[0][0]) if rows else None

    def last_activity_entry(self, contact_id: Hashable) -> ActivityEntry:
        """Last offline and online times of the contact; empty if unknown."""
        try:
            row = self._db.execute(
                f"SELECT offline_utc_time, online_utc_time FROM {self._brief}"
                " WHERE contact_id=?",
                (_key(contact_id),),
            ).fetchone()
        except sqlite3.Error:
            return ActivityEntry()
        if row is None:
            return ActivityEntry()
        return ActivityEntry(_from_millis(row[0]), _from_millis(row[1]))

    def clear_activities(self, contact_id: Hashable) -> None:
        """Remove the log and brief records of one contact."""
        key = (_key(contact_id),)
        self._run(
            (f"DELETE FROM {self._log} WHERE contact_id = ?", key),
            (f"DELETE FROM {self._brief} WHERE contact_id = ?", key),
        )

    def clear_all_activities(self) -> None:
        """Remove the log and brief records of every contact."""
        self._run((f"DELETE FROM {self._log}", ()), (f"DELETE FROM {self._brief}", ()))

    def activities(self, contact_id: Hashable) -> list[tuple[ContactActivity, datetime]]:
        """Logged activities of one contact, oldest first."""
        rows = self._fetch(
            f"SELECT contact_activity, utc_time FROM {self._log}"
            " WHERE contact_id=? ORDER BY utc_time ASC",
            (_key(contact_id),),
        )
        result = []
        for raw_activity, millis in rows:
            activity = _activity(raw_activity)
            if activity is not None and millis is not None:
                result.append((activity, _from_millis(millis)))
        return result

    def all_activities(self) -> list[tuple[str, ContactActivity, datetime]]:
        """Logged activities of every contact, oldest first."""
        rows = self._fetch(
            f"SELECT contact_id, contact_activity, utc_time FROM {self._log}"
            " ORDER BY utc_time ASC"
        )
        result = []
        for contact_id, raw_activity, millis in rows:
            activity = _activity(raw_activity)
            if contact_id is not None and activity is not None and millis is not None:
                result.append((contact_id, activity, _from_millis(millis)))
        return result

    def activity_briefs(
        self,
    ) -> list[tuple[str, datetime | None, datetime | None]]:
        """Brief of every contact: (contact id, last online, last offline)."""
        rows = self._fetch(
            f"SELECT contact_id, online_utc_time, offline_utc_time FROM {self._brief}"
        )
        return [
            (contact_id, _from_millis(online), _from_millis(offline))
            for contact_id, online, offline in rows
            if contact_id is not None
        ]