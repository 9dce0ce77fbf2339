from datetime import date, datetime, timedelta, timezone

from bson import ObjectId

from flintt.services.streaks import StreakRepository, derive_streaks, to_day, update_streak
from conftest import make_post

DAY1 = datetime(2025, 3, 1, 9, 0)


def test_first_activity_starts_streak():
    store = update_streak({}, 'u1', DAY1)
    assert store == {'u1': {'streak': 1, 'last_active': date(2025, 3, 1)}}


def test_consecutive_days_then_gap_resets():
    store = update_streak({}, 'u1', DAY1)
    store = update_streak(store, 'u1', DAY1 + timedelta(days=1, hours=10))
    assert store['u1']['streak'] == 2
    store = update_streak(store, 'u1', DAY1 + timedelta(days=3))
    assert store['u1'] == {'streak': 1, 'last_active': date(2025, 3, 4)}


def test_same_day_repeat_is_a_no_op():
    store = update_streak({}, 'u1', DAY1)
    again = update_streak(store, 'u1', DAY1.replace(hour=23, minute=59))
    assert again == store


def test_older_event_does_not_rewind():
    store = {'u1': {'streak': 4, 'last_active': date(2025, 3, 10)}}
    assert update_streak(store, 'u1', DAY1) == store


def test_update_does_not_mutate_input_store():
    store = {'u1': {'streak': 1, 'last_active': date(2025, 2, 28)}}
    updated = update_streak(store, 'u1', DAY1)
    assert store['u1']['streak'] == 1
    assert updated['u1']['streak'] == 2


def test_users_are_tracked_independently():
    store = update_streak({}, 'u1', DAY1)
    store = update_streak(store, 'u2', DAY1 + timedelta(days=1))
    assert store['u1']['streak'] == 1
    assert store['u2']['streak'] == 1


def test_to_day_accepts_iso_strings():
    assert to_day('2025-03-01') == date(2025, 3, 1)
    assert to_day('2025-03-01T23:30:00Z') == date(2025, 3, 1)
    assert to_day(None) is None


def test_to_day_cuts_days_at_utc_midnight():
    # 23:30 in New York is already the next day in UTC
    assert to_day('2025-03-01T23:30:00-05:00') == date(2025, 3, 2)
    evening = datetime(2025, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    store = update_streak({}, 'u1', datetime(2025, 3, 1, 12, 0))
    assert update_streak(store, 'u1', evening)['u1']['streak'] == 2


def test_derive_streaks_sorts_post_history():
    posts = [
        make_post('u1', 'g', created_at=DAY1 + timedelta(days=2)),
        make_post('u1', 'g', created_at=DAY1),
        make_post('u1', 'g', created_at=DAY1 + timedelta(days=1)),
        make_post('u2', 'g', created_at=DAY1)
    ]
    store = derive_streaks(posts)
    assert store['u1'] == {'streak': 3, 'last_active': date(2025, 3, 3)}
    assert store['u2']['streak'] == 1


def test_repository_persists_activity(db):
    repo = StreakRepository(db)
    uid = ObjectId()

    assert repo.get(uid) == {'streak': 0, 'last_active': None}

    repo.record_activity(uid, DAY1)
    repo.record_activity(uid, DAY1 + timedelta(days=1))
    record = repo.record_activity(uid, DAY1 + timedelta(days=1, hours=2))

    assert record == {'streak': 2, 'last_active': date(2025, 3, 2)}
    stored = db.find_one('user_streaks', {'user_id': uid})
    assert stored['streak'] == 2
    assert stored['last_active'] == '2025-03-02'
    assert db.count('user_streaks') == 1
