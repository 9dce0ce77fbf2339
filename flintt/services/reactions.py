"""
Reaction toggles and comment insertion on post documents.

Each function returns an updated copy of the post; the input is left alone.
Reaction lists hold user ids as strings.
"""
import copy
from typing import Dict, List, Optional

from flintt.models import Comment

REACTIONS = ('like', 'dislike', 'heart')


def _without(ids: List, user_id: str) -> List[str]:
    return [str(x) for x in ids if str(x) != user_id]


def _has(ids: List, user_id: str) -> bool:
    return user_id in [str(x) for x in ids]


def toggle_like(post: Dict, user_id) -> Dict:
    """Add or remove a like; adding a like clears the user's dislike"""
    uid = str(user_id)
    updated = dict(post)
    likes = post.get('likes') or []
    if _has(likes, uid):
        updated['likes'] = _without(likes, uid)
    else:
        updated['likes'] = [str(x) for x in likes] + [uid]
        updated['dislikes'] = _without(post.get('dislikes') or [], uid)
    return updated


def toggle_dislike(post: Dict, user_id) -> Dict:
    """Add or remove a dislike; adding a dislike clears the user's like"""
    uid = str(user_id)
    updated = dict(post)
    dislikes = post.get('dislikes') or []
    if _has(dislikes, uid):
        updated['dislikes'] = _without(dislikes, uid)
    else:
        updated['dislikes'] = [str(x) for x in dislikes] + [uid]
        updated['likes'] = _without(post.get('likes') or [], uid)
    return updated


def toggle_heart(post: Dict, user_id) -> Dict:
    uid = str(user_id)
    updated = dict(post)
    hearts = post.get('hearts') or []
    if _has(hearts, uid):
        updated['hearts'] = _without(hearts, uid)
    else:
        updated['hearts'] = [str(x) for x in hearts] + [uid]
    return updated


def react(post: Dict, user_id, reaction: str) -> Dict:
    """Dispatch to the toggle for ``reaction``"""
    if reaction == 'like':
        return toggle_like(post, user_id)
    if reaction == 'dislike':
        return toggle_dislike(post, user_id)
    if reaction == 'heart':
        return toggle_heart(post, user_id)
    raise ValueError(f'Invalid reaction: {reaction}')


def _append_reply(comments: List[Dict], parent_id: str, reply: Dict) -> bool:
    for comment in comments:
        if str(comment.get('_id')) == parent_id:
            comment.setdefault('replies', []).append(reply)
            return True
        if _append_reply(comment.get('replies') or [], parent_id, reply):
            return True
    return False


def add_comment(post: Dict, user_id, content: str, parent_comment_id: Optional[str] = None,
                user: Optional[Dict] = None) -> Dict:
    """Append a comment, or a reply when ``parent_comment_id`` is given.

    Raises ValueError for blank content and LookupError for an unknown parent.
    """
    content = (content or '').strip()
    if not content:
        raise ValueError('Comment content is required')

    comment = Comment.create_comment_doc(str(user_id), content, user)
    updated = dict(post)
    comments = copy.deepcopy(post.get('comments') or [])

    if parent_comment_id:
        if not _append_reply(comments, str(parent_comment_id), comment):
            raise LookupError(f'Comment {parent_comment_id} not found')
    else:
        comments.append(comment)

    updated['comments'] = comments
    return updated
