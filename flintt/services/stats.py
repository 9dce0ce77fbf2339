"""
Group statistics.

Every function here is a pure fold over post documents that were already
loaded by the caller. Posts look like the documents built by
``Post.create_post_doc``; ids may be ``ObjectId`` or ``str`` and are compared
as strings. Nothing is cached: each call recomputes from the posts it is given.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

WINDOWS = ('all', 'month', 'week')
LEADERBOARD_SIZE = 5
REPLY_DEPTH = 1
WEEK = timedelta(days=7)

COUNTERS = ('uploads', 'likes', 'hearts', 'dislikes', 'comments')


def to_datetime(value) -> Optional[datetime]:
    """Coerce a stored timestamp to a naive UTC datetime.

    pymongo hands back naive UTC datetimes; serialized posts carry ISO-8601
    strings ending in ``Z``. Aware values are converted to UTC.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def author_id(doc: Dict) -> Optional[str]:
    """Id of the user who wrote a post or comment"""
    if doc.get('user_id') is not None:
        return str(doc['user_id'])
    user = doc.get('user') or {}
    if user.get('id') is not None:
        return str(user['id'])
    return None


def in_window(created_at, window: str, now: datetime) -> bool:
    if window == 'all':
        return True
    created = to_datetime(created_at)
    if created is None:
        return False
    if window == 'month':
        return created.year == now.year and created.month == now.month
    return created >= now - WEEK


def filter_posts(posts: Iterable[Dict], group_id, window: str = 'all',
                 now: Optional[datetime] = None) -> List[Dict]:
    """Posts of one group whose creation time falls in the window, in input order.

    ``month`` means the calendar month of ``now``; ``week`` means the trailing
    seven days, not a calendar week.
    """
    if window not in WINDOWS:
        raise ValueError(f'Invalid window: {window}')
    now = to_datetime(now) if now is not None else datetime.utcnow()
    gid = str(group_id)
    return [
        post for post in posts
        if str(post.get('group_id')) == gid and in_window(post.get('created_at'), window, now)
    ]


def iter_comments(comments: Optional[List[Dict]], reply_depth: Optional[int] = REPLY_DEPTH) -> Iterator[Dict]:
    """Yield comments and their replies down to ``reply_depth`` levels.

    ``0`` yields top-level comments only, ``None`` walks every level.
    """
    for comment in comments or []:
        yield comment
        if reply_depth is None:
            yield from iter_comments(comment.get('replies'), None)
        elif reply_depth > 0:
            yield from iter_comments(comment.get('replies'), reply_depth - 1)


def _bump(counter: Dict[str, int], key: Optional[str], amount: int = 1):
    if key is None:
        return
    counter[key] = counter.get(key, 0) + amount


def count_by_user(posts: Iterable[Dict], reply_depth: Optional[int] = REPLY_DEPTH) -> Dict[str, Dict[str, int]]:
    """Fold posts into per-user counters.

    ``uploads``, ``likes``, ``hearts`` and ``dislikes`` are credited to the post
    author (reactions received); ``comments`` is credited to each comment
    author. Keys keep the order in which users were first seen.
    """
    counts = {name: {} for name in COUNTERS}
    for post in posts:
        uid = author_id(post)
        _bump(counts['uploads'], uid)
        _bump(counts['likes'], uid, len(post.get('likes') or []))
        _bump(counts['hearts'], uid, len(post.get('hearts') or []))
        _bump(counts['dislikes'], uid, len(post.get('dislikes') or []))
        for comment in iter_comments(post.get('comments'), reply_depth):
            _bump(counts['comments'], author_id(comment))
    return counts


def group_members(roster: Iterable[Dict], group_id) -> Dict[str, Dict]:
    """Map user id -> membership document for one group"""
    gid = str(group_id)
    members = {}
    for member in roster:
        if str(member.get('group_id')) != gid:
            continue
        uid = author_id(member)
        if uid is not None and uid not in members:
            members[uid] = member
    return members


def member_profile(user_id: str, member: Dict) -> Dict:
    profile = dict(member.get('user') or {})
    profile['id'] = user_id
    profile.setdefault('role', member.get('role', 'member'))
    return profile


def rank_leaderboard(counts: Dict[str, int], members: Dict[str, Dict],
                     limit: int = LEADERBOARD_SIZE, include_zero: bool = True) -> List[Dict]:
    """Top ``limit`` members by count, highest first.

    Users without a membership record are dropped. Equal counts keep the
    order of ``counts``.
    """
    entries = [
        {'user': member_profile(uid, members[uid]), 'count': count}
        for uid, count in counts.items()
        if uid in members and (include_zero or count > 0)
    ]
    entries.sort(key=lambda entry: entry['count'], reverse=True)
    return entries[:limit]


def rank_saved_posts(posts: Iterable[Dict], limit: int = LEADERBOARD_SIZE,
                     include_zero: bool = True) -> List[Dict]:
    """Posts with the most hearts, paired with their heart count"""
    entries = []
    for post in posts:
        count = len(post.get('hearts') or [])
        if include_zero or count > 0:
            entries.append({'post': post, 'count': count})
    entries.sort(key=lambda entry: entry['count'], reverse=True)
    return entries[:limit]


def compute_group_stats(group_id, window: str, posts: Iterable[Dict], roster: Iterable[Dict],
                        now: Optional[datetime] = None, streaks: Optional[Dict[str, Dict]] = None,
                        limit: int = LEADERBOARD_SIZE, include_zero: bool = True,
                        reply_depth: Optional[int] = REPLY_DEPTH) -> Optional[Dict]:
    """Leaderboards for a group, or ``None`` when the roster has no such group.

    When a streak store is given a ``most_streaks`` board is added, listing
    members with a positive streak.
    """
    members = group_members(roster, group_id)
    if not members:
        return None

    scoped = filter_posts(posts, group_id, window, now)
    counts = count_by_user(scoped, reply_depth)

    stats = {
        'group_id': str(group_id),
        'window': window,
        'post_count': len(scoped),
        'most_uploads': rank_leaderboard(counts['uploads'], members, limit, include_zero),
        'most_liked': rank_leaderboard(counts['likes'], members, limit, include_zero),
        'most_hearted': rank_leaderboard(counts['hearts'], members, limit, include_zero),
        'most_disliked': rank_leaderboard(counts['dislikes'], members, limit, include_zero),
        'most_commented': rank_leaderboard(counts['comments'], members, limit, include_zero),
        'most_saved_posts': rank_saved_posts(scoped, limit, include_zero)
    }

    if streaks is not None:
        streak_counts = {
            uid: record.get('streak', 0)
            for uid, record in streaks.items()
            if record.get('streak', 0) > 0
        }
        stats['most_streaks'] = rank_leaderboard(streak_counts, members, limit, include_zero=False)

    logger.debug('Computed %s stats for group %s over %d posts', window, group_id, len(scoped))
    return stats


def compute_user_stats(user_id, group_id, window: str, posts: Iterable[Dict],
                       now: Optional[datetime] = None,
                       reply_depth: Optional[int] = REPLY_DEPTH) -> Dict:
    """Activity of one user in a group: uploads plus reactions and comments given"""
    uid = str(user_id)
    scoped = filter_posts(posts, group_id, window, now)

    stats = {
        'uploads': 0,
        'likes_given': 0,
        'hearts_given': 0,
        'dislikes_given': 0,
        'comment_count': 0
    }
    for post in scoped:
        if author_id(post) == uid:
            stats['uploads'] += 1
        if uid in [str(x) for x in post.get('likes') or []]:
            stats['likes_given'] += 1
        if uid in [str(x) for x in post.get('hearts') or []]:
            stats['hearts_given'] += 1
        if uid in [str(x) for x in post.get('dislikes') or []]:
            stats['dislikes_given'] += 1
        stats['comment_count'] += sum(
            1 for comment in iter_comments(post.get('comments'), reply_depth)
            if author_id(comment) == uid
        )
    return stats


def compute_weekly_stats(group_id, posts: Iterable[Dict], roster: Iterable[Dict],
                         now: Optional[datetime] = None, limit: int = LEADERBOARD_SIZE,
                         include_zero: bool = True) -> Optional[Dict]:
    """Trailing seven day summary: top posters, most liked, most active reactors"""
    members = group_members(roster, group_id)
    if not members:
        return None

    now = to_datetime(now) if now is not None else datetime.utcnow()
    scoped = filter_posts(posts, group_id, 'week', now)
    counts = count_by_user(scoped, reply_depth=0)

    reactions_given = {}
    for post in scoped:
        for key in ('likes', 'dislikes', 'hearts'):
            for uid in post.get(key) or []:
                _bump(reactions_given, str(uid))

    return {
        'group_id': str(group_id),
        'start_date': (now - WEEK).date().isoformat(),
        'end_date': now.date().isoformat(),
        'most_posts': rank_leaderboard(counts['uploads'], members, limit, include_zero),
        'most_likes': rank_leaderboard(counts['likes'], members, limit, include_zero),
        'most_reactions': rank_leaderboard(reactions_given, members, limit, include_zero)
    }
