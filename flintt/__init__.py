from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO, emit, join_room, leave_room
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from config.config import config
from flintt.services import Database
from datetime import datetime
import logging
import threading

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[]
)

def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    CORS(app, resources={r"/api/*": {"origins": "*"}})
    socketio = SocketIO(app, cors_allowed_origins=app.config['SOCKETIO_CORS_ALLOWED_ORIGINS'])
    app.socketio = socketio

    app.config.setdefault('RATELIMIT_DEFAULT', app.config['DEFAULT_RATE_LIMITS'])
    app.config.setdefault('RATELIMIT_STORAGE_URI', app.config['LIMITER_STORAGE_URI'])
    limiter.init_app(app)

    from flintt.routes.auth import auth_bp
    from flintt.routes.groups import groups_bp
    from flintt.routes.posts import posts_bp
    from flintt.routes.stats import stats_bp
    from flintt.routes.streaks import streaks_bp
    from flintt.routes.notifications import notifications_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(groups_bp)
    app.register_blueprint(posts_bp)
    app.register_blueprint(stats_bp)
    app.register_blueprint(streaks_bp)
    app.register_blueprint(notifications_bp)

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'status': 'error', 'message': 'Not found'}), 404

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'status': 'error', 'message': 'Too many requests'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled error: {error}")
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500

    # Health check endpoint
    @app.route('/health', methods=['GET'])
    def health_check():
        return jsonify({'status': 'healthy', 'timestamp': datetime.utcnow().isoformat()}), 200

    # Socket.IO: clients join group_<id> for feed updates and user_<id> for notifications.
    # Connection tracking: user_id -> set(sids) and sid -> user_id
    connected_users = {}
    sid_to_user = {}
    connected_users_lock = threading.Lock()

    app.connected_users = connected_users
    app.sid_to_user = sid_to_user
    app._connected_users_lock = connected_users_lock

    from flintt.utils.auth import verify_token
    from flintt.utils.helpers import to_object_id

    def _authenticate(data):
        payload = verify_token((data or {}).get('token', ''))
        if 'error' in payload or 'user_id' not in payload:
            return None
        return payload['user_id']

    @socketio.on('connect')
    def handle_connect():
        emit('connect_response', {'data': 'Connected'})

    @socketio.on('join_user')
    def on_join_user(data):
        """Subscribe the connection to the caller's notification room"""
        user_id = _authenticate(data)
        if not user_id:
            emit('error', {'message': 'Invalid token'})
            return

        join_room(f'user_{user_id}')
        with connected_users_lock:
            connected_users.setdefault(user_id, set()).add(request.sid)
            sid_to_user[request.sid] = user_id

    @socketio.on('join_group')
    def on_join_group(data):
        """Subscribe to a group's feed; members only"""
        user_id = _authenticate(data)
        gid = to_object_id((data or {}).get('group_id'))
        if not user_id or gid is None:
            emit('error', {'message': 'Invalid token or group id'})
            return

        db = Database()
        if not db.find_one('group_members', {'group_id': gid, 'user_id': to_object_id(user_id)}):
            emit('error', {'message': 'You are not a member of this group'})
            return

        join_room(f'group_{gid}')
        emit('joined_group', {'group_id': str(gid)})

    @socketio.on('leave_group')
    def on_leave_group(data):
        group_id = (data or {}).get('group_id')
        if group_id:
            leave_room(f'group_{group_id}')

    @socketio.on('disconnect')
    def handle_disconnect():
        with connected_users_lock:
            uid = sid_to_user.pop(request.sid, None)
            if uid:
                sids = connected_users.get(uid)
                if sids:
                    sids.discard(request.sid)
                    if not sids:
                        del connected_users[uid]
        logger.debug(f'Client disconnected: {request.sid}')

    return app, socketio
