import json
from types import SimpleNamespace

import pytest
from backend.app import create_app, db
from backend.services.notifications import NotificationDispatcher


class RecordingSender:
    """Stand-in for the email/SMS senders that remembers what it was given."""

    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, *args):
        if self.fail:
            raise RuntimeError('delivery failed')
        self.sent.append(args)
        return True


def profile_payload(email, /, **overrides):
    payload = {
        'fullName': 'Test Player',
        'email': email,
        'password': 'Password123',
        'age': 28,
        'phoneNumber': '+216 55 123 456',
        'country': 'Tunisia',
    }
    payload.update(overrides)
    return payload


def register(client, email, **overrides):
    res = client.post('/api/register', json=profile_payload(email, **overrides))
    assert res.status_code == 201, res.data
    return json.loads(res.data)


def login_headers(client, email, password='Password123'):
    res = client.post('/api/login', json={'email': email, 'password': password})
    assert res.status_code == 200, res.data
    token = json.loads(res.data)['token']
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions['chatpadel']['store']


@pytest.fixture
def outbox(app):
    """Swap in recording senders so notifications can be inspected."""
    email, sms = RecordingSender(), RecordingSender()
    app.extensions['chatpadel']['notifications'] = NotificationDispatcher(email, sms)
    return SimpleNamespace(email=email, sms=sms)


@pytest.fixture
def admin_headers(app, client):
    """Register a user, flag it as admin directly in the DB and log in."""
    from backend.models import User
    register(client, 'admin@example.com', fullName='Admin Player')
    user = User.query.filter_by(email='admin@example.com').first()
    user.is_admin = True
    db.session.commit()
    return login_headers(client, 'admin@example.com')


@pytest.fixture
def user_headers(client):
    register(client, 'player@example.com')
    return login_headers(client, 'player@example.com')
