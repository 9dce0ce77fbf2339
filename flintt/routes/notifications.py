"""
Notifications API Routes
"""
from flask import Blueprint, request, g
from datetime import datetime

from flintt.services import Database
from flintt.utils import success_response, error_response, serialize_document, to_object_id
from flintt.utils.decorators import require_auth

notifications_bp = Blueprint('notifications', __name__, url_prefix='/api/notifications')


@notifications_bp.route('', methods=['GET'])
@require_auth
def get_notifications():
    """Get user's notifications, newest first"""
    uid = to_object_id(g.user_id)
    if uid is None:
        return error_response('Invalid token', 401)

    limit = min(request.args.get('limit', 50, type=int), 100)

    db = Database()
    notifications = db.find('notifications', {'user_id': uid}, limit=limit, sort=('created_at', -1))
    unread_count = db.count('notifications', {'user_id': uid, 'is_read': False})

    return success_response({
        'notifications': [serialize_document(n) for n in notifications],
        'unread_count': unread_count
    }, 'Notifications retrieved', 200)


@notifications_bp.route('/<notification_id>/read', methods=['POST'])
@require_auth
def mark_as_read(notification_id):
    """Mark a notification as read"""
    nid = to_object_id(notification_id)
    if nid is None:
        return error_response('Invalid notification id', 400)

    db = Database()
    query = {'_id': nid, 'user_id': to_object_id(g.user_id)}
    if not db.find_one('notifications', query):
        return error_response('Notification not found', 404)

    db.update_one('notifications', query, {'is_read': True, 'read_at': datetime.utcnow()})
    return success_response({'id': notification_id}, 'Notification marked as read', 200)


@notifications_bp.route('/read-all', methods=['POST'])
@require_auth
def mark_all_as_read():
    """Mark all notifications as read"""
    db = Database()
    updated = db.update_many(
        'notifications',
        {'user_id': to_object_id(g.user_id), 'is_read': False},
        {'is_read': True, 'read_at': datetime.utcnow()}
    )
    return success_response({'updated': updated}, 'All notifications marked as read', 200)
