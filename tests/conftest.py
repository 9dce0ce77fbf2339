import copy
from datetime import datetime

import pytest
from bson import ObjectId

from flintt import create_app
from flintt.services import Database
from flintt.utils.auth import generate_token
from flintt.utils.storage import MinioClient


def _matches(doc, query):
    for key, cond in query.items():
        value = doc.get(key)
        if isinstance(cond, dict) and any(k.startswith('$') for k in cond):
            for op, arg in cond.items():
                if op == '$in':
                    ok = any(v in arg for v in value) if isinstance(value, list) else value in arg
                else:
                    raise NotImplementedError(op)
                if not ok:
                    return False
        elif isinstance(value, list) and not isinstance(cond, list):
            if cond not in value:
                return False
        elif value != cond:
            return False
    return True


class InMemoryDatabase:
    """Stand-in for Database that keeps collections in dicts"""

    def __init__(self):
        self.collections = {}

    def _coll(self, name):
        return self.collections.setdefault(name, [])

    def insert_one(self, collection_name, document):
        document.setdefault('_id', ObjectId())
        self._coll(collection_name).append(copy.deepcopy(document))
        return str(document['_id'])

    def find_one(self, collection_name, query):
        for doc in self._coll(collection_name):
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, collection_name, query, skip=0, limit=0, sort=None):
        docs = [copy.deepcopy(d) for d in self._coll(collection_name) if _matches(d, query)]
        if sort:
            keys = sort if isinstance(sort, list) else [sort]
            for field, direction in reversed(keys):
                docs.sort(
                    key=lambda d: (d.get(field) is not None, d.get(field) if d.get(field) is not None else 0),
                    reverse=direction < 0
                )
        docs = docs[skip:]
        return docs[:limit] if limit else docs

    def update_one(self, collection_name, query, update, raw=False):
        fields = update.get('$set', update)
        for doc in self._coll(collection_name):
            if _matches(doc, query):
                doc.update(copy.deepcopy(fields))
                return True
        return False

    def update_many(self, collection_name, query, update):
        count = 0
        for doc in self._coll(collection_name):
            if _matches(doc, query):
                doc.update(copy.deepcopy(update))
                count += 1
        return count

    def delete_one(self, collection_name, query):
        coll = self._coll(collection_name)
        for i, doc in enumerate(coll):
            if _matches(doc, query):
                del coll[i]
                return True
        return False

    def count(self, collection_name, query=None):
        return len([d for d in self._coll(collection_name) if _matches(d, query or {})])


class InMemoryStorage:
    """Stand-in for MinioClient; presigned links carry a counter so each read differs"""

    def __init__(self):
        self.objects = {}
        self.signed = 0

    def upload_stream(self, data, object_name, length, content_type='application/octet-stream'):
        self.objects[object_name] = data.read()
        return True

    def delete_file(self, object_name):
        return self.objects.pop(object_name, None) is not None

    def get_presigned_url(self, object_name, expires=3600):
        self.signed += 1
        return f'https://minio.test/{object_name}?sig={self.signed}'


@pytest.fixture
def db(monkeypatch):
    fake = InMemoryDatabase()
    monkeypatch.setattr(Database, '_instance', fake)
    return fake


@pytest.fixture
def storage(monkeypatch):
    fake = InMemoryStorage()
    monkeypatch.setattr(MinioClient, '_instance', fake)
    return fake


@pytest.fixture
def app(db):
    app, _ = create_app('testing')
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def make(user_id):
        with app.app_context():
            token = generate_token(str(user_id))
        return {'Authorization': f'Bearer {token}'}
    return make


def make_post(author, group, created_at=None, likes=(), dislikes=(), hearts=(),
              comments=(), caption='', media_type='image'):
    """Post document shaped like Post.create_post_doc output"""
    return {
        '_id': ObjectId(),
        'user_id': author,
        'group_id': group,
        'caption': caption,
        'media_url': 'media/x.jpg',
        'media_type': media_type,
        'likes': list(likes),
        'dislikes': list(dislikes),
        'hearts': list(hearts),
        'comments': list(comments),
        'created_at': created_at or datetime(2025, 6, 15, 12, 0, 0)
    }


def make_comment(author, replies=()):
    return {
        '_id': ObjectId(),
        'user_id': author,
        'content': 'nice',
        'created_at': datetime(2025, 6, 15, 12, 30, 0),
        'replies': list(replies)
    }


def make_member(group, user, role='member', name=''):
    return {
        '_id': ObjectId(),
        'group_id': group,
        'user_id': user,
        'role': role,
        'user': {'name': name or user}
    }
