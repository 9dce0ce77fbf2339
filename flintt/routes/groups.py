from flask import Blueprint, request, g
from datetime import datetime
import logging

from flintt.utils import (
    success_response, error_response, serialize_document, to_object_id
)
from flintt.utils.decorators import require_auth, require_group_member
from flintt.services import Database
from flintt.models import Group, GroupMember, User

logger = logging.getLogger(__name__)

groups_bp = Blueprint('groups', __name__, url_prefix='/api/groups')


def _profile_for(db, user_id):
    user = db.find_one('users', {'_id': user_id})
    return User.public_profile(user) if user else {'id': str(user_id)}


@groups_bp.route('', methods=['GET'])
@require_auth
def get_my_groups():
    """Groups the caller belongs to"""
    uid = to_object_id(g.user_id)
    if uid is None:
        return error_response('Invalid token', 401)

    db = Database()
    memberships = db.find('group_members', {'user_id': uid})
    roles = {m['group_id']: m.get('role', 'member') for m in memberships}
    if not roles:
        return success_response({'groups': []}, 'Groups retrieved successfully', 200)

    groups = db.find('groups', {'_id': {'$in': list(roles.keys())}}, sort=('created_at', 1))
    for group in groups:
        group['id'] = str(group['_id'])
        group['role'] = roles.get(group['_id'])
        group['member_count'] = db.count('group_members', {'group_id': group['_id']})

    return success_response({'groups': [serialize_document(grp) for grp in groups]}, 'Groups retrieved successfully', 200)


@groups_bp.route('', methods=['POST'])
@require_auth
def create_group():
    """Create a group; the creator joins as admin"""
    data = request.get_json()

    if not data or 'name' not in data:
        return error_response('Group name is required', 400)

    name = data.get('name', '').strip()
    description = data.get('description', '').strip()
    icon = data.get('icon', '')

    if len(name) < 3:
        return error_response('Group name must be at least 3 characters', 400)

    uid = to_object_id(g.user_id)
    if uid is None:
        return error_response('Invalid token', 401)

    db = Database()
    group_doc = Group.create_group_doc(name, str(uid), description, icon)
    # Invite codes are random; retry on the rare collision with the unique index
    while db.find_one('groups', {'invite_code': group_doc['invite_code']}):
        group_doc['invite_code'] = Group.generate_invite_code()

    if not db.insert_one('groups', group_doc):
        return error_response('Failed to create group', 500)

    member_doc = GroupMember.create_member_doc(str(group_doc['_id']), str(uid), 'admin', _profile_for(db, uid))
    if not db.insert_one('group_members', member_doc):
        db.delete_one('groups', {'_id': group_doc['_id']})
        return error_response('Failed to add creator to group', 500)

    logger.info('User %s created group %s', uid, group_doc['_id'])
    group_doc['id'] = str(group_doc['_id'])
    group_doc['role'] = 'admin'
    group_doc['member_count'] = 1
    return success_response(serialize_document(group_doc), 'Group created successfully', 201)


@groups_bp.route('/join', methods=['POST'])
@require_auth
def join_group():
    """Join a group by invite code; joining twice is a no-op"""
    data = request.get_json() or {}
    invite_code = data.get('invite_code', '').strip().upper()
    if not invite_code:
        return error_response('Invite code is required', 400)

    uid = to_object_id(g.user_id)
    if uid is None:
        return error_response('Invalid token', 401)

    db = Database()
    group = db.find_one('groups', {'invite_code': invite_code})
    if not group:
        return error_response('Invalid invite code', 404)

    existing = db.find_one('group_members', {'group_id': group['_id'], 'user_id': uid})
    if existing:
        return success_response(serialize_document(group), 'Already a member', 200)

    member_doc = GroupMember.create_member_doc(str(group['_id']), str(uid), 'member', _profile_for(db, uid))
    if not db.insert_one('group_members', member_doc):
        return error_response('Failed to join group', 500)

    db.update_one('groups', {'_id': group['_id']}, {'updated_at': datetime.utcnow()})
    logger.info('User %s joined group %s', uid, group['_id'])
    return success_response(serialize_document(group), 'Joined group successfully', 200)


@groups_bp.route('/<group_id>/members', methods=['GET'])
@require_auth
@require_group_member
def get_group_members(group_id):
    """Member roster of a group"""
    db = Database()
    members = db.find('group_members', {'group_id': g.group['_id']}, sort=('joined_at', 1))
    return success_response({'members': [serialize_document(m) for m in members]}, 'Members retrieved successfully', 200)
