"""
Daily posting streaks.

A streak store maps a user id to ``{'streak': int, 'last_active': date}``.
``update_streak`` never mutates the store it is given; it returns a new one.
"""
import logging
from datetime import date, datetime
from typing import Dict, Iterable, Optional

from bson import ObjectId

from flintt.models import UserStreak
from flintt.services.stats import author_id, to_datetime

logger = logging.getLogger(__name__)


def to_day(value) -> Optional[date]:
    """Calendar day of a datetime, date or ISO string.

    Days are cut at UTC midnight: datetimes are normalized to naive UTC before
    taking the date, so a late-evening post can count toward the
    poster's next local day, or an early-morning one toward the previous day.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_datetime(value).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) == 10:
        return date.fromisoformat(value)
    return to_datetime(value).date()


def update_streak(store: Dict[str, Dict], user_id, activity_at) -> Dict[str, Dict]:
    """Apply one post-creation event to the streak store.

    Same-day repeats and events older than the recorded day leave the record
    unchanged.
    """
    uid = str(user_id)
    day = to_day(activity_at)
    updated = dict(store)
    record = store.get(uid)

    if record is None or record.get('last_active') is None:
        updated[uid] = {'streak': 1, 'last_active': day}
        return updated

    last_active = to_day(record['last_active'])
    gap = (day - last_active).days

    if gap <= 0:
        return updated
    if gap == 1:
        updated[uid] = {'streak': record.get('streak', 0) + 1, 'last_active': day}
    else:
        updated[uid] = {'streak': 1, 'last_active': day}
    return updated


def derive_streaks(posts: Iterable[Dict]) -> Dict[str, Dict]:
    """Rebuild a streak store from post history"""
    events = []
    for post in posts:
        uid = author_id(post)
        created = to_datetime(post.get('created_at'))
        if uid is not None and created is not None:
            events.append((created, uid))

    store = {}
    for created, uid in sorted(events, key=lambda event: event[0]):
        store = update_streak(store, uid, created)
    return store


class StreakRepository:
    """Loads and saves streak records in the ``user_streaks`` collection"""

    COLLECTION = 'user_streaks'

    def __init__(self, db):
        self.db = db

    def load(self, user_ids: Iterable) -> Dict[str, Dict]:
        ids = [ObjectId(str(uid)) for uid in user_ids]
        if not ids:
            return {}
        store = {}
        for doc in self.db.find(self.COLLECTION, {'user_id': {'$in': ids}}):
            store[str(doc['user_id'])] = {
                'streak': doc.get('streak', 0),
                'last_active': to_day(doc.get('last_active'))
            }
        return store

    def get(self, user_id) -> Dict:
        return self.load([user_id]).get(str(user_id), {'streak': 0, 'last_active': None})

    def save(self, user_id, record: Dict) -> bool:
        """Upsert one user's record"""
        last_active = record.get('last_active')
        fields = {
            'streak': record.get('streak', 0),
            'last_active': last_active.isoformat() if last_active else None,
            'updated_at': datetime.utcnow()
        }
        uid = ObjectId(str(user_id))
        if self.db.find_one(self.COLLECTION, {'user_id': uid}):
            return self.db.update_one(self.COLLECTION, {'user_id': uid}, fields)

        doc = UserStreak.create_user_streak_doc(str(uid), fields['streak'], fields['last_active'])
        return self.db.insert_one(self.COLLECTION, doc) is not None

    def record_activity(self, user_id, activity_at) -> Dict:
        """Update and persist a user's streak for a new post"""
        uid = str(user_id)
        current = self.load([uid])
        updated = update_streak(current, uid, activity_at)
        record = updated[uid]
        if record != current.get(uid):
            self.save(uid, record)
            logger.info('Streak for user %s is now %d', uid, record['streak'])
        return record
