import logging
from typing import Dict, Optional

from flask import current_app

from flintt.models import Notification
from flintt.utils.helpers import serialize_document

logger = logging.getLogger(__name__)


def emit(event: str, payload: Dict, room: str):
    """Push an event to a Socket.IO room if the app has a socketio attached"""
    socketio = getattr(current_app, 'socketio', None)
    if socketio is None:
        return
    socketio.emit(event, serialize_document(payload), to=room)


def notify_user(db, user_id, notification_type: str, content: str,
                actor_id=None, post_id=None, group_id=None) -> Optional[Dict]:
    """Store a notification and push it to the user's room"""
    doc = Notification.create_notification_doc(
        str(user_id), notification_type, content,
        actor_id=str(actor_id) if actor_id else None,
        related_post_id=str(post_id) if post_id else None,
        related_group_id=str(group_id) if group_id else None
    )
    if db.insert_one('notifications', doc) is None:
        logger.warning('Could not store %s notification for user %s', notification_type, user_id)
        return None
    emit('notification', doc, f'user_{user_id}')
    return doc


def notify_post_author(db, post: Dict, actor_id, notification_type: str, content: str) -> Optional[Dict]:
    """Notify the author of `post`, unless they are the actor"""
    author = post.get('user_id')
    if author is None or str(author) == str(actor_id):
        return None
    return notify_user(db, author, notification_type, content,
                       actor_id=actor_id, post_id=post.get('_id'), group_id=post.get('group_id'))


def notify_group(db, group: Dict, post: Dict, actor_id, content: str) -> int:
    """Send a new_post notification to every other member of the group"""
    members = db.find('group_members', {'group_id': group['_id']})
    sent = 0
    for member in members:
        if str(member['user_id']) == str(actor_id):
            continue
        if notify_user(db, member['user_id'], 'new_post', content,
                       actor_id=actor_id, post_id=post['_id'], group_id=group['_id']):
            sent += 1
    return sent
