from flask import Blueprint

from flintt.utils import success_response, error_response, serialize_document, to_object_id
from flintt.utils.decorators import require_auth
from flintt.services import Database
from flintt.services.streaks import StreakRepository

streaks_bp = Blueprint('streaks', __name__, url_prefix='/api/users')

@streaks_bp.route('/<user_id>/streak', methods=['GET'])
@require_auth
def get_user_streak(user_id):
    uid = to_object_id(user_id)
    if uid is None:
        return error_response('Invalid user id', 400)

    db = Database()
    if not db.find_one('users', {'_id': uid}):
        return error_response('User not found', 404)

    record = StreakRepository(db).get(uid)
    return success_response(serialize_document({
        'user_id': uid,
        'streak': record.get('streak', 0),
        'last_active': record.get('last_active')
    }), 'Streak retrieved', 200)
