# Models module
from .models import (
    User, Group, GroupMember, Comment, Post, UserStreak, Notification
)

__all__ = [
    'User', 'Group', 'GroupMember', 'Comment', 'Post', 'UserStreak', 'Notification'
]
