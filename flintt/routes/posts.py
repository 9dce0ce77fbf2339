from flask import Blueprint, request, g, current_app
import logging

from flintt.utils import (
    success_response, error_response, serialize_document,
    to_object_id, parse_flag, paginate, MinioClient, with_media_url
)
from flintt.utils.decorators import require_auth, require_group_member
from flintt.services import Database
from flintt.services.notifications import emit, notify_group, notify_post_author
from flintt.services.reactions import REACTIONS, react, add_comment
from flintt.services.search import search_posts
from flintt.services.streaks import StreakRepository
from flintt.models import Post, User

logger = logging.getLogger(__name__)

posts_bp = Blueprint('posts', __name__, url_prefix='/api')


def _load_post_for_member(db, post_id):
    """Return (post, error_response) for a post the caller can see"""
    pid = to_object_id(post_id)
    if pid is None:
        return None, error_response('Invalid post id', 400)

    post = db.find_one('posts', {'_id': pid})
    if not post:
        return None, error_response('Post not found', 404)

    membership = db.find_one('group_members', {
        'group_id': post['group_id'],
        'user_id': to_object_id(g.user_id)
    })
    if not membership:
        return None, error_response('You are not a member of this group', 403)

    g.membership = membership
    return post, None


@posts_bp.route('/groups/<group_id>/posts', methods=['GET'])
@require_auth
@require_group_member
def get_group_posts(group_id):
    """Group feed, newest first, with optional caption search and filters"""
    db = Database()
    posts = db.find('posts', {'group_id': g.group['_id']}, sort=[('is_pinned', -1), ('created_at', -1)])

    posts = search_posts(
        posts,
        query=request.args.get('q', ''),
        only_images=parse_flag(request.args.get('images')),
        only_videos=parse_flag(request.args.get('videos')),
        only_liked=parse_flag(request.args.get('liked')),
        only_saved=parse_flag(request.args.get('saved')),
        user_id=g.user_id
    )

    page = request.args.get('page', 1, type=int)
    per_page = min(request.args.get('per_page', 20, type=int), 100)
    skip, limit = paginate(page, per_page)

    return success_response({
        'posts': [serialize_document(with_media_url(p)) for p in posts[skip:skip + limit]],
        'total': len(posts),
        'page': page,
        'per_page': per_page
    }, 'Posts retrieved successfully', 200)


@posts_bp.route('/groups/<group_id>/posts', methods=['POST'])
@require_auth
@require_group_member
def create_post(group_id):
    """Share an image or video in a group.

    Takes either ``media_path`` (the ``object_name`` returned by
    ``/posts/upload``) or an external ``media_url``.
    """
    data = request.get_json() or {}
    media_path = (data.get('media_path') or '').strip() or None
    media_url = (data.get('media_url') or '').strip()
    media_type = data.get('media_type', 'image')
    caption = (data.get('caption') or '').strip()
    gid = g.group['_id']

    if media_path:
        if not MinioClient.is_media_object_of(media_path, str(gid), g.user_id):
            return error_response('media_path does not refer to your upload for this group', 400)
        media_url = ''
    elif not media_url:
        return error_response('media_url or media_path is required', 400)
    if media_type not in Post.VALID_MEDIA_TYPES:
        return error_response('media_type must be image or video', 400)

    db = Database()
    user = db.find_one('users', {'_id': to_object_id(g.user_id)})
    profile = User.public_profile(user) if user else {'id': g.user_id}

    post = Post.create_post_doc(g.user_id, str(gid), media_url, media_type, caption, profile, media_path)
    if not db.insert_one('posts', post):
        return error_response('Failed to create post', 500)

    streak = StreakRepository(db).record_activity(g.user_id, post['created_at'])

    name = profile.get('name') or 'Someone'
    notify_group(db, g.group, post, g.user_id, f'{name} posted in "{g.group.get("name", "")}"')
    post = with_media_url(post)
    emit('post_created', post, f'group_{gid}')

    logger.info('User %s posted %s in group %s', g.user_id, post['_id'], gid)
    return success_response({'post': serialize_document(post), 'streak': serialize_document(streak)},
                            'Post created successfully', 201)


@posts_bp.route('/posts/upload', methods=['POST'])
@require_auth
def upload_media():
    """Store a media file in MinIO.

    The returned ``media_path`` goes into the create-post payload. ``preview_url``
    is a short-lived link for showing the file before the post exists.
    """
    file = request.files.get('file')
    group_id = request.form.get('group_id')
    if not file or not file.filename:
        return error_response('No file provided', 400)

    gid = to_object_id(group_id)
    if gid is None:
        return error_response('Invalid group id', 400)

    allowed = current_app.config['ALLOWED_MEDIA_TYPES']
    media_type = next((kind for kind, mimes in allowed.items() if file.mimetype in mimes), None)
    if media_type is None:
        return error_response('Unsupported media type', 400)

    db = Database()
    if not db.find_one('group_members', {'group_id': gid, 'user_id': to_object_id(g.user_id)}):
        return error_response('You are not a member of this group', 403)

    storage = MinioClient()
    object_name = MinioClient.media_object_name(str(gid), g.user_id, file.filename)
    file.stream.seek(0, 2)
    length = file.stream.tell()
    file.stream.seek(0)
    if not storage.upload_stream(file.stream, object_name, length, file.mimetype):
        return error_response('Upload failed', 500)

    return success_response({
        'media_path': object_name,
        'preview_url': storage.get_presigned_url(object_name),
        'media_type': media_type
    }, 'Media uploaded', 201)


@posts_bp.route('/posts/<post_id>', methods=['DELETE'])
@require_auth
def delete_post(post_id):
    """Delete a post; allowed for its author and group admins"""
    db = Database()
    post, error = _load_post_for_member(db, post_id)
    if error:
        return error

    is_author = str(post['user_id']) == g.user_id
    if not is_author and g.membership.get('role') != 'admin':
        return error_response('Only the author or a group admin can delete this post', 403)

    if not db.delete_one('posts', {'_id': post['_id']}):
        return error_response('Failed to delete post', 500)

    if post.get('media_path'):
        MinioClient().delete_file(post['media_path'])

    emit('post_deleted', {'post_id': post['_id']}, f"group_{post['group_id']}")
    return success_response({'post_id': str(post['_id'])}, 'Post deleted successfully', 200)


@posts_bp.route('/posts/<post_id>/react', methods=['POST'])
@require_auth
def react_to_post(post_id):
    """Toggle a like, dislike or heart"""
    data = request.get_json() or {}
    reaction = data.get('reaction')
    if reaction not in REACTIONS:
        return error_response('reaction must be one of: ' + ', '.join(REACTIONS), 400)

    db = Database()
    post, error = _load_post_for_member(db, post_id)
    if error:
        return error

    updated = react(post, g.user_id, reaction)
    fields = {key: updated[key] for key in ('likes', 'dislikes', 'hearts')}
    db.update_one('posts', {'_id': post['_id']}, fields)

    reaction_list = {'like': 'likes', 'dislike': 'dislikes', 'heart': 'hearts'}[reaction]
    added = g.user_id in updated[reaction_list] and g.user_id not in [str(x) for x in post.get(reaction_list) or []]
    if added and reaction in ('like', 'heart'):
        verb = 'liked' if reaction == 'like' else 'saved'
        notify_post_author(db, post, g.user_id, 'reaction', f'Someone {verb} your post')

    updated = with_media_url(updated)
    emit('post_updated', updated, f"group_{post['group_id']}")
    return success_response({'post': serialize_document(updated)}, 'Reaction updated', 200)


@posts_bp.route('/posts/<post_id>/comments', methods=['POST'])
@require_auth
def comment_on_post(post_id):
    """Add a comment, or a reply when parent_comment_id is given"""
    data = request.get_json() or {}

    db = Database()
    post, error = _load_post_for_member(db, post_id)
    if error:
        return error

    user = db.find_one('users', {'_id': to_object_id(g.user_id)})
    profile = User.public_profile(user) if user else {'id': g.user_id}

    try:
        updated = add_comment(post, g.user_id, data.get('content', ''),
                              data.get('parent_comment_id'), profile)
    except ValueError as e:
        return error_response(str(e), 400)
    except LookupError as e:
        return error_response(str(e), 404)

    db.update_one('posts', {'_id': post['_id']}, {'comments': updated['comments']})
    notify_post_author(db, post, g.user_id, 'comment',
                       f"{profile.get('name') or 'Someone'} commented on your post")

    updated = with_media_url(updated)
    emit('post_updated', updated, f"group_{post['group_id']}")
    return success_response({'post': serialize_document(updated)}, 'Comment added', 201)


@posts_bp.route('/posts/saved', methods=['GET'])
@require_auth
def get_saved_posts():
    """Posts the caller has hearted"""
    db = Database()
    posts = db.find('posts', {'hearts': g.user_id}, sort=('created_at', -1))
    return success_response({'posts': [serialize_document(with_media_url(p)) for p in posts]},
                            'Saved posts retrieved', 200)
