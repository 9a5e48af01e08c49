import copy
import itertools
from datetime import datetime, timezone

import pytest
from firebase_admin import firestore

from main import create_app
from services.notification_service import NotificationService
from utils.config import Config

_ids = itertools.count(1)


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, db, collection, doc_id):
        self.db = db
        self.collection = collection
        self.id = doc_id

    def _docs(self):
        return self.db.data.setdefault(self.collection, {})

    def get(self):
        if (self.collection, self.id) in self.db.unreadable:
            raise RuntimeError(f"permission denied on {self.collection}/{self.id}")
        return FakeSnapshot(self.id, self._docs().get(self.id))

    def set(self, data, merge=False):
        docs = self._docs()
        if merge and self.id in docs:
            docs[self.id].update(copy.deepcopy(data))
        else:
            docs[self.id] = copy.deepcopy(data)

    def update(self, data):
        doc = self._docs()[self.id]
        for field, value in data.items():
            if isinstance(value, firestore.Increment):
                doc[field] = doc.get(field, 0) + value.value
            else:
                doc[field] = copy.deepcopy(value)

    def delete(self):
        self._docs().pop(self.id, None)


class FakeQuery:
    def __init__(self, db, collection, filters=(), limit=None):
        self.db = db
        self.collection = collection
        self.filters = list(filters)
        self._limit = limit

    def where(self, field, op, value):
        assert op == '=='
        return FakeQuery(self.db, self.collection, self.filters + [(field, value)], self._limit)

    def limit(self, count):
        return FakeQuery(self.db, self.collection, self.filters, count)

    def stream(self):
        if self.collection in self.db.unstreamable:
            raise RuntimeError(f"cannot list {self.collection}")
        results = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self.db.data.get(self.collection, {}).items()
            if all(data.get(field) == value for field, value in self.filters)
        ]
        if self._limit is not None:
            results = results[:self._limit]
        return iter(results)


class FakeCollection(FakeQuery):
    def document(self, doc_id=None):
        return FakeDocument(self.db, self.collection, doc_id or f"doc{next(_ids)}")

    def add(self, data):
        if self.collection in self.db.failing_adds:
            raise RuntimeError(f"write to {self.collection} rejected")
        ref = self.document()
        ref.set(data)
        return None, ref


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.writes = []

    def set(self, ref, data):
        self.writes.append((ref, copy.deepcopy(data)))

    def commit(self):
        self.db.commits += 1
        staged = copy.deepcopy(self.db.data)
        for index, (ref, data) in enumerate(self.writes):
            if self.db.fail_batch_at == index:
                raise RuntimeError("batch aborted")
            staged.setdefault(ref.collection, {})[ref.id] = data
        self.db.data = staged


class FakeFirestore:
    """In-memory stand-in for the Firestore client used by the app."""

    def __init__(self):
        self.data = {}
        self.commits = 0
        self.fail_batch_at = None
        self.failing_adds = set()
        self.unreadable = set()
        self.unstreamable = set()

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        return FakeBatch(self)

    def docs(self, collection):
        return self.data.get(collection, {})

    def notifications(self, **filters):
        return [
            data for data in self.docs('notifications').values()
            if all(data.get(field) == value for field, value in filters.items())
        ]


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    def upload_from_file(self, stream, content_type=None):
        if self.bucket.fail:
            raise RuntimeError("upload failed")
        self.bucket.uploads[self.name] = (stream.read(), content_type)

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/test-bucket/{self.name}"


class FakeBucket:
    def __init__(self):
        self.uploads = {}
        self.fail = False

    def blob(self, name):
        return FakeBlob(self, name)


class FakeMailer:
    def __init__(self, result=True):
        self.sent = []
        self.result = result

    def send(self, to_email, subject, body):
        self.sent.append((to_email, subject, body))
        return self.result


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def service(db):
    return NotificationService(db)


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def config(tmp_path):
    return Config(
        passes_dir=str(tmp_path / 'passes'),
        pass_base_url='http://localhost:3001/passes',
        pass_model_dir=str(tmp_path / 'model'),
        pass_certificate=str(tmp_path / 'certs' / 'certificate.pem'),
        pass_key=str(tmp_path / 'certs' / 'key.pem'),
        pass_wwdr_certificate=str(tmp_path / 'certs' / 'wwdr.pem'),
        firebase_storage_bucket=None
    )


@pytest.fixture
def app(config, db, bucket):
    app = create_app(config, db=db, receipt_bucket=bucket)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in(monkeypatch):
    """Accept any bearer token as the given uid."""
    def sign_in(uid, email='user@example.com'):
        monkeypatch.setattr(
            'firebase_admin.auth.verify_id_token',
            lambda token: {'uid': uid, 'email': email}
        )
        return {'Authorization': 'Bearer test-token'}
    return sign_in


@pytest.fixture
def add_users(db):
    def add(*users):
        for user_id, username in users:
            db.collection('users').document(user_id).set({
                'username': username,
                'email': f"{username or user_id}@example.com",
                'createdAt': datetime(2024, 1, 1, tzinfo=timezone.utc)
            })
    return add
