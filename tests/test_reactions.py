import pytest
from bson import ObjectId

from flintt.services.reactions import add_comment, react, toggle_dislike, toggle_heart, toggle_like
from conftest import make_post

U1, U2, U3 = (str(ObjectId()) for _ in range(3))


def test_like_toggles_on_and_off():
    post = make_post('author', 'g')
    liked = toggle_like(post, U1)
    assert liked['likes'] == [U1]
    assert toggle_like(liked, U1)['likes'] == []
    assert post['likes'] == []


def test_like_and_dislike_are_mutually_exclusive():
    post = make_post('author', 'g', dislikes=[U1, U2])
    liked = toggle_like(post, U1)
    assert liked['likes'] == [U1]
    assert liked['dislikes'] == [U2]

    disliked = toggle_dislike(liked, U1)
    assert disliked['likes'] == []
    assert disliked['dislikes'] == [U2, U1]


def test_heart_is_independent_of_like():
    post = make_post('author', 'g', likes=[U1])
    hearted = toggle_heart(post, U1)
    assert hearted['hearts'] == [U1]
    assert hearted['likes'] == [U1]


def test_react_rejects_unknown_reaction():
    with pytest.raises(ValueError):
        react(make_post('author', 'g'), U1, 'laugh')


def test_add_comment_and_reply():
    post = add_comment(make_post('author', 'g'), U1, '  first!  ')
    assert post['comments'][0]['content'] == 'first!'

    parent_id = str(post['comments'][0]['_id'])
    replied = add_comment(post, U2, 'welcome', parent_comment_id=parent_id)
    assert len(replied['comments']) == 1
    assert replied['comments'][0]['replies'][0]['content'] == 'welcome'
    assert post['comments'][0]['replies'] == []


def test_reply_to_a_reply_is_found():
    post = add_comment(make_post('author', 'g'), U1, 'top')
    post = add_comment(post, U2, 'reply', str(post['comments'][0]['_id']))
    reply_id = str(post['comments'][0]['replies'][0]['_id'])
    post = add_comment(post, U3, 'deeper', reply_id)
    assert post['comments'][0]['replies'][0]['replies'][0]['content'] == 'deeper'


def test_add_comment_errors():
    post = make_post('author', 'g')
    with pytest.raises(ValueError):
        add_comment(post, U1, '   ')
    with pytest.raises(LookupError):
        add_comment(post, U1, 'hello', parent_comment_id='507f1f77bcf86cd799439011')
