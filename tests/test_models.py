import pytest

from flintt.models import Group, GroupMember, Notification, Post, User, UserStreak

USER_ID = '605c72a7a0f1b2b4c3d4e5f6'
GROUP_ID = '605c72a7a0f1b2b4c3d4e5f7'


def test_create_post_doc_starts_with_empty_reactions():
    doc = Post.create_post_doc(USER_ID, GROUP_ID, 'media/a.jpg', 'video', 'hello')
    assert doc['media_type'] == 'video'
    assert doc['likes'] == [] and doc['dislikes'] == [] and doc['hearts'] == []
    assert doc['comments'] == []
    assert str(doc['group_id']) == GROUP_ID
    assert 'created_at' in doc


def test_create_post_invalid_media_type():
    with pytest.raises(ValueError):
        Post.create_post_doc(USER_ID, GROUP_ID, 'media/a.gif', 'gif')


def test_create_member_doc_roles():
    doc = GroupMember.create_member_doc(GROUP_ID, USER_ID, 'admin', {'name': 'Ann'})
    assert doc['role'] == 'admin'
    assert doc['user'] == {'name': 'Ann'}
    with pytest.raises(ValueError):
        GroupMember.create_member_doc(GROUP_ID, USER_ID, 'owner')


def test_group_invite_code_format():
    doc = Group.create_group_doc('Hikers', USER_ID)
    assert len(doc['invite_code']) == Group.INVITE_CODE_LENGTH
    assert doc['invite_code'].isalnum()
    assert doc['invite_code'] == doc['invite_code'].upper()


def test_create_user_streak_doc_defaults():
    doc = UserStreak.create_user_streak_doc(USER_ID)
    assert doc['streak'] == 0
    assert doc['last_active'] is None


def test_create_notification_invalid_type():
    with pytest.raises(ValueError):
        Notification.create_notification_doc(USER_ID, 'poke', 'hi')


def test_public_profile_hides_private_fields():
    user = User.create_user_doc('a@example.com', 'ann', 'hash', name='Ann')
    profile = User.public_profile(user)
    assert profile['name'] == 'Ann'
    assert 'email' not in profile and 'password_hash' not in profile
