import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from chatlib.activity import ActivityEntry, ActivityManager, ContactActivity
from chatlib.errors import ChatError, Errc

CONTACT_IDS = [
    "01FV1KFY7WCBKDQZ5B4T5ZJMSA",
    "01FV1KFY7WWS3WSBV4BFYF7ZC9",
    "01G2HFKWF1MMBBXWHF4VWJGGTN",
]
NEW_CONTACT = "01FWR2WRYT8W8QT8Z9QRJ5ZTGY"
BASE_TIME = datetime(1972, 4, 29, 11, 0, tzinfo=timezone(timedelta(hours=2)))
ACTIVITIES = [ContactActivity.OFFLINE, ContactActivity.ONLINE]


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def manager(db):
    return ActivityManager(db)


def populate(manager):
    counter = 0
    minutes = 0
    while minutes < 60 * 12:
        time = BASE_TIME + timedelta(minutes=minutes)
        for contact_id in CONTACT_IDS:
            manager.log_activity(contact_id, ACTIVITIES[counter % 2], time, False)
        minutes += 15
        counter += 1


def test_activity_scenario(manager):
    populate(manager)

    now = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
    manager.log_activity(CONTACT_IDS[0], ContactActivity.ONLINE, now, True)
    last_online = manager.last_activity(CONTACT_IDS[0], ContactActivity.ONLINE)
    assert last_online == now.replace(microsecond=123000)

    manager.log_activity(CONTACT_IDS[1], ContactActivity.OFFLINE, now, True)
    last_offline = manager.last_activity(CONTACT_IDS[1], ContactActivity.OFFLINE)
    assert last_offline == now.replace(microsecond=123000)

    assert manager.last_activity(NEW_CONTACT, ContactActivity.ONLINE) is None
    assert manager.last_activity(NEW_CONTACT, ContactActivity.OFFLINE) is None

    entry = manager.last_activity_entry(NEW_CONTACT)
    assert entry.online_utc_time is None
    assert entry.offline_utc_time is None

    assert len(manager.activities(CONTACT_IDS[0])) == 48

    manager.clear_activities(CONTACT_IDS[0])
    assert len(manager.activities(CONTACT_IDS[0])) == 0
    assert len(manager.all_activities()) == 96

    manager.clear_all_activities()
    assert manager.all_activities() == []


def test_last_activity_after_log(manager):
    populate(manager)
    assert manager.last_activity(CONTACT_IDS[2], ContactActivity.OFFLINE) == (
        BASE_TIME + timedelta(minutes=690)
    )
    assert manager.last_activity(CONTACT_IDS[2], ContactActivity.ONLINE) == (
        BASE_TIME + timedelta(minutes=705)
    )
    entry = manager.last_activity_entry(CONTACT_IDS[2])
    assert entry == ActivityEntry(
        BASE_TIME + timedelta(minutes=690), BASE_TIME + timedelta(minutes=705)
    )


def test_activities_ordered_and_alternating(manager):
    populate(manager)
    records = manager.activities(CONTACT_IDS[1])
    times = [t for _, t in records]
    assert times == sorted(times)
    assert records[0] == (ContactActivity.OFFLINE, BASE_TIME)
    assert records[1] == (ContactActivity.ONLINE, BASE_TIME + timedelta(minutes=15))


def test_brief_only_does_not_log(manager):
    time = datetime(2020, 1, 1, tzinfo=timezone.utc)
    manager.log_activity("a", ContactActivity.ONLINE, time, True)
    assert manager.activities("a") == []
    assert manager.last_activity("a", ContactActivity.ONLINE) == time
    assert manager.last_activity("a", ContactActivity.OFFLINE) is None


def test_activity_briefs(manager):
    t1 = datetime(2021, 3, 1, tzinfo=timezone.utc)
    t2 = datetime(2021, 3, 2, tzinfo=timezone.utc)
    manager.log_activity("a", ContactActivity.ONLINE, t1)
    manager.log_activity("a", ContactActivity.OFFLINE, t2)
    manager.log_activity("b", ContactActivity.OFFLINE, t1)
    briefs = sorted(manager.activity_briefs())
    assert briefs == [("a", t1, t2), ("b", None, t1)]


def test_all_activities_contents(manager):
    t1 = datetime(2021, 3, 1, tzinfo=timezone.utc)
    t2 = datetime(2021, 3, 2, tzinfo=timezone.utc)
    manager.log_activity("b", ContactActivity.OFFLINE, t2)
    manager.log_activity("a", ContactActivity.ONLINE, t1)
    assert manager.all_activities() == [
        ("a", ContactActivity.ONLINE, t1),
        ("b", ContactActivity.OFFLINE, t2),
    ]


def test_naive_time_treated_as_utc(manager):
    manager.log_activity("a", ContactActivity.ONLINE, datetime(2022, 6, 1, 8, 0))
    assert manager.last_activity("a", ContactActivity.ONLINE) == datetime(
        2022, 6, 1, 8, 0, tzinfo=timezone.utc
    )


def test_clear(manager):
    populate(manager)
    manager.clear()
    assert manager.all_activities() == []
    assert manager.activity_briefs() == []


def test_persistence_across_instances(tmp_path):
    path = tmp_path / "activity.db"
    time = datetime(2023, 4, 11, tzinfo=timezone.utc)
    with sqlite3.connect(path) as conn:
        ActivityManager(conn).log_activity("a", ContactActivity.ONLINE, time)
    conn.close()
    conn = sqlite3.connect(path)
    try:
        assert ActivityManager(conn).last_activity("a", ContactActivity.ONLINE) == time
    finally:
        conn.close()


def test_custom_table_names(db):
    manager = ActivityManager(db, "log_x", "brief_x")
    manager.log_activity("a", ContactActivity.ONLINE, BASE_TIME)
    names = {row[0] for row in db.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"log_x", "brief_x"} <= names


def test_storage_error_on_closed_db():
    conn = sqlite3.connect(":memory:")
    manager = ActivityManager(conn)
    conn.close()
    with pytest.raises(ChatError) as info:
        manager.log_activity("a", ContactActivity.ONLINE, BASE_TIME)
    assert info.value.code == Errc.STORAGE_ERROR
    with pytest.raises(ChatError):
        manager.activities("a")
    assert manager.last_activity_entry("a") == ActivityEntry()


def test_create_failure_on_closed_db():
    conn = sqlite3.connect(":memory:")
    conn.close()
    with pytest.raises(ChatError) as info:
        ActivityManager(conn)
    assert info.value.code == Errc.STORAGE_ERROR
    assert "create activity manager failure" in str(info.value)