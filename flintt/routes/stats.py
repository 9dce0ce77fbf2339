from flask import Blueprint, request, g, current_app

from flintt.utils import success_response, error_response, serialize_document, with_media_url
from flintt.utils.decorators import require_auth, require_group_member
from flintt.services import Database
from flintt.services.stats import compute_group_stats, compute_user_stats, compute_weekly_stats
from flintt.services.streaks import StreakRepository

stats_bp = Blueprint('stats', __name__, url_prefix='/api/groups')


def _load_group_data(db, group):
    posts = db.find('posts', {'group_id': group['_id']}, sort=('created_at', 1))
    roster = db.find('group_members', {'group_id': group['_id']}, sort=('joined_at', 1))
    return posts, roster


@stats_bp.route('/<group_id>/stats', methods=['GET'])
@require_auth
@require_group_member
def get_group_stats(group_id):
    """Group leaderboards for window=all|month|week"""
    window = request.args.get('window', 'all')
    config = current_app.config

    db = Database()
    posts, roster = _load_group_data(db, g.group)
    streaks = StreakRepository(db).load(m['user_id'] for m in roster)

    try:
        stats = compute_group_stats(
            g.group['_id'], window, posts, roster,
            streaks=streaks,
            limit=config['STATS_LEADERBOARD_SIZE'],
            include_zero=config['STATS_INCLUDE_ZERO_COUNTS'],
            reply_depth=config['STATS_REPLY_DEPTH']
        )
    except ValueError as e:
        return error_response(str(e), 400)

    if stats is None:
        return error_response('Group not found', 404)

    stats['most_saved_posts'] = [
        dict(entry, post=with_media_url(entry['post'])) for entry in stats['most_saved_posts']
    ]
    return success_response(serialize_document(stats), 'Stats retrieved', 200)


@stats_bp.route('/<group_id>/stats/me', methods=['GET'])
@require_auth
@require_group_member
def get_my_stats(group_id):
    """Caller's own activity in the group"""
    window = request.args.get('window', 'all')

    db = Database()
    posts, _ = _load_group_data(db, g.group)

    try:
        stats = compute_user_stats(g.user_id, g.group['_id'], window, posts,
                                   reply_depth=current_app.config['STATS_REPLY_DEPTH'])
    except ValueError as e:
        return error_response(str(e), 400)

    stats['streak'] = StreakRepository(db).get(g.user_id).get('streak', 0)
    return success_response(stats, 'Stats retrieved', 200)


@stats_bp.route('/<group_id>/stats/weekly', methods=['GET'])
@require_auth
@require_group_member
def get_weekly_stats(group_id):
    """Trailing seven day summary"""
    config = current_app.config

    db = Database()
    posts, roster = _load_group_data(db, g.group)

    stats = compute_weekly_stats(g.group['_id'], posts, roster,
                                 limit=config['STATS_LEADERBOARD_SIZE'],
                                 include_zero=config['STATS_INCLUDE_ZERO_COUNTS'])
    if stats is None:
        return error_response('Group not found', 404)

    return success_response(serialize_document(stats), 'Weekly stats retrieved', 200)
