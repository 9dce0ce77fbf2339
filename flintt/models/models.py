from datetime import datetime
from bson import ObjectId
from typing import Dict, List, Optional
import secrets
import string

class User:
    """User model for MongoDB"""

    @staticmethod
    def create_user_doc(email: str, username: str, password_hash: str,
                       name: str = '', avatar_url: str = '') -> Dict:
        """Create a new user document"""
        return {
            '_id': ObjectId(),
            'email': email,
            'username': username,
            'name': name or username,
            'password_hash': password_hash,
            'avatar_url': avatar_url or f'https://api.dicebear.com/7.x/avataaars/svg?seed={email}',
            'created_at': datetime.utcnow(),
            'updated_at': datetime.utcnow(),
            'last_login': None
        }

    @staticmethod
    def public_profile(user_doc: Dict) -> Dict:
        """Profile fields safe to embed in other documents"""
        return {
            'id': str(user_doc['_id']),
            'name': user_doc.get('name') or user_doc.get('username', ''),
            'username': user_doc.get('username', ''),
            'avatar': user_doc.get('avatar_url', '')
        }

class Group:
    """Group model for MongoDB"""

    INVITE_CODE_LENGTH = 8

    @staticmethod
    def generate_invite_code() -> str:
        alphabet = string.ascii_uppercase + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(Group.INVITE_CODE_LENGTH))

    @staticmethod
    def create_group_doc(name: str, created_by: str, description: str = '',
                        icon: str = '') -> Dict:
        """Create a new group document"""
        return {
            '_id': ObjectId(),
            'name': name,
            'description': description,
            'icon': icon or f'https://api.dicebear.com/7.x/shapes/svg?seed={name}',
            'invite_code': Group.generate_invite_code(),
            'created_by': ObjectId(created_by),
            'created_at': datetime.utcnow(),
            'updated_at': datetime.utcnow()
        }

class GroupMember:
    """Membership of a user in a group"""

    VALID_ROLES = ('admin', 'member')

    @staticmethod
    def create_member_doc(group_id: str, user_id: str, role: str = 'member',
                         user: Optional[Dict] = None) -> Dict:
        """Create a membership document; `user` is an embedded public profile"""
        if role not in GroupMember.VALID_ROLES:
            raise ValueError('Invalid role')

        return {
            '_id': ObjectId(),
            'group_id': ObjectId(group_id),
            'user_id': ObjectId(user_id),
            'role': role,
            'user': user or {},
            'joined_at': datetime.utcnow()
        }

class Comment:
    """Comment embedded in a post; replies nest the same shape"""

    @staticmethod
    def create_comment_doc(user_id: str, content: str,
                          user: Optional[Dict] = None) -> Dict:
        return {
            '_id': ObjectId(),
            'user_id': ObjectId(user_id),
            'user': user or {},
            'content': content,
            'created_at': datetime.utcnow(),
            'replies': []
        }

class Post:
    """Image or video post shared in a group"""

    VALID_MEDIA_TYPES = ('image', 'video')

    @staticmethod
    def create_post_doc(user_id: str, group_id: str, media_url: str,
                       media_type: str = 'image', caption: str = '',
                       user: Optional[Dict] = None, media_path: Optional[str] = None) -> Dict:
        """Create a new post document with empty reaction sets.

        Uploaded media keeps its MinIO object name in ``media_path``; ``media_url``
        is then presigned each time the post is read.
        """
        if media_type not in Post.VALID_MEDIA_TYPES:
            raise ValueError('Invalid media_type')

        return {
            '_id': ObjectId(),
            'user_id': ObjectId(user_id),
            'user': user or {},
            'group_id': ObjectId(group_id),
            'caption': caption,
            'media_url': media_url,
            'media_path': media_path,
            'media_type': media_type,
            'likes': [],     # user id strings
            'dislikes': [],
            'hearts': [],
            'comments': [],
            'is_pinned': False,
            'created_at': datetime.utcnow()
        }

class UserStreak:
    """Daily posting streak for a user"""

    @staticmethod
    def create_user_streak_doc(user_id: str, streak: int = 0,
                              last_active: Optional[str] = None) -> Dict:
        """Create a new user streak document"""
        return {
            '_id': ObjectId(),
            'user_id': ObjectId(user_id),
            'streak': streak,
            'last_active': last_active,  # ISO date string YYYY-MM-DD
            'created_at': datetime.utcnow(),
            'updated_at': datetime.utcnow()
        }

class Notification:
    """Notification model"""

    VALID_TYPES = ('reaction', 'comment', 'new_post')

    @staticmethod
    def create_notification_doc(user_id: str, notification_type: str,
                               content: str, actor_id: Optional[str] = None,
                               related_post_id: Optional[str] = None,
                               related_group_id: Optional[str] = None) -> Dict:
        """Create a new notification"""
        if notification_type not in Notification.VALID_TYPES:
            raise ValueError('Invalid notification_type')

        return {
            '_id': ObjectId(),
            'user_id': ObjectId(user_id),
            'type': notification_type,
            'content': content,
            'actor_id': ObjectId(actor_id) if actor_id else None,
            'related_post_id': ObjectId(related_post_id) if related_post_id else None,
            'related_group_id': ObjectId(related_group_id) if related_group_id else None,
            'is_read': False,
            'created_at': datetime.utcnow()
        }
