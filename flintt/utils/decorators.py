from functools import wraps
from flask import request, g, current_app
import jwt
from flintt.utils.helpers import error_response, to_object_id
from flintt.services import Database

def require_auth(f):
    """Decorator to require authentication"""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header or not auth_header.startswith('Bearer '):
            return error_response('Missing or invalid authorization', 401)

        token = auth_header.split(' ')[1]

        try:
            payload = jwt.decode(
                token,
                current_app.config['JWT_SECRET_KEY'],
                algorithms=[current_app.config['JWT_ALGORITHM']]
            )
            g.user_id = payload['user_id']
        except jwt.ExpiredSignatureError:
            return error_response('Token expired', 401)
        except (jwt.InvalidTokenError, KeyError):
            return error_response('Invalid token', 401)

        return f(*args, **kwargs)

    return decorated

def require_group_member(f):
    """Decorator for `<group_id>` routes: the caller must belong to the group.

    Must be applied below `require_auth`. Sets `g.group` and `g.membership`.
    """
    @wraps(f)
    def decorated(group_id, *args, **kwargs):
        gid = to_object_id(group_id)
        uid = to_object_id(g.user_id)
        if gid is None or uid is None:
            return error_response('Invalid group id', 400)

        db = Database()
        group = db.find_one('groups', {'_id': gid})
        if not group:
            return error_response('Group not found', 404)

        membership = db.find_one('group_members', {'group_id': gid, 'user_id': uid})
        if not membership:
            return error_response('You are not a member of this group', 403)

        g.group = group
        g.membership = membership
        return f(group_id, *args, **kwargs)

    return decorated
