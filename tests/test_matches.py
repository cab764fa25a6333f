"""Tests for match listing and joining over HTTP."""
import json

import pytest

from backend.app import db
from backend.errors import MatchFull
from backend.models import Match, UserMatch
from backend.services.match_store import DuplicateMembership, SqlMatchStore
from backend.services.notifications import NotificationDispatcher
from tests.conftest import RecordingSender, register


def _create_match(store, **overrides):
    fields = {
        'location': 'Padel Club Central', 'date': 'Tomorrow', 'time': '18:00',
        'level': 'intermediate', 'current_players': 1, 'max_players': 4,
    }
    fields.update(overrides)
    return store.create_match(**fields)


def _join(client, match_id, token):
    return client.post('/api/matches/join', json={'matchId': match_id, 'sessionId': token})


def test_list_matches_returns_all_in_creation_order(client, store):
    first = _create_match(store, location='Padel Club Central')
    second = _create_match(store, location='Main Arena', current_players=4)

    res = client.get('/api/matches')
    assert res.status_code == 200
    data = json.loads(res.data)
    assert [m['id'] for m in data] == [first.id, second.id]
    assert data[1]['currentPlayers'] == 4
    assert data[1]['maxPlayers'] == 4
    assert data[0]['location'] == 'Padel Club Central'


def test_join_increments_occupancy(client, store, outbox):
    match = _create_match(store, current_players=1)

    res = _join(client, match.id, 'guest@example.com')
    assert res.status_code == 200
    assert json.loads(res.data)['success'] is True

    listed = json.loads(client.get('/api/matches').data)
    assert listed[0]['currentPlayers'] == 2


def test_rejoin_same_identity_counts_once(client, store, outbox):
    match = _create_match(store, current_players=1)

    assert _join(client, match.id, '42').status_code == 200
    res = _join(client, match.id, '42')
    assert res.status_code == 200
    assert json.loads(res.data)['success'] is True

    assert db.session.get(Match, match.id).current_players == 2
    assert UserMatch.query.filter_by(match_id=match.id).count() == 1


def test_join_full_match_fails(client, store):
    match = _create_match(store, current_players=4, max_players=4)

    res = _join(client, match.id, 'late@example.com')
    assert res.status_code == 400
    data = json.loads(res.data)
    assert data['success'] is False
    assert 'full' in data['message']
    assert db.session.get(Match, match.id).current_players == 4
    assert UserMatch.query.count() == 0


def test_join_unknown_match_fails(client, store):
    res = _join(client, 12345, 'guest@example.com')
    assert res.status_code == 400
    assert json.loads(res.data)['success'] is False
    assert UserMatch.query.count() == 0


def test_join_rejects_malformed_body(client, store):
    match = _create_match(store)
    assert client.post('/api/matches/join', json={'sessionId': 'x'}).status_code == 400
    assert client.post('/api/matches/join', json={'matchId': 'abc', 'sessionId': 'x'}).status_code == 400
    assert client.post('/api/matches/join', json={'matchId': match.id}).status_code == 400
    assert client.post('/api/matches/join', json={'matchId': match.id, 'sessionId': '  '}).status_code == 400


def test_join_rejects_overlong_identity_token(client, store):
    match = _create_match(store)

    res = _join(client, match.id, 'a' * 256)
    assert res.status_code == 400
    assert json.loads(res.data)['success'] is False
    assert UserMatch.query.count() == 0

    assert _join(client, match.id, 'a' * 255).status_code == 200


def test_join_with_out_of_range_match_id_fails_cleanly(client, store):
    res = _join(client, 99999999999999999999, 'guest@example.com')
    assert res.status_code == 400
    assert json.loads(res.data)['success'] is False


def test_huge_numeric_token_joins_and_stays_visible_to_admins(client, store, outbox, admin_headers):
    match = _create_match(store, current_players=1)

    res = _join(client, match.id, '99999999999999999999')
    assert res.status_code == 200
    assert json.loads(res.data)['success'] is True
    assert db.session.get(Match, match.id).current_players == 2
    assert outbox.sms.sent == []

    res = client.get('/api/admin/user-matches', headers=admin_headers)
    assert res.status_code == 200
    [join] = json.loads(res.data)
    assert join['id'] == match.id
    assert join['user'] is None


def test_join_notifies_registered_user_once(client, store, outbox):
    user = register(client, 'ana@example.com', fullName='Ana Player', phoneNumber='+216 11 222 333')
    match = _create_match(store, location='Olympic Court', date='Saturday', time='16:00')

    _join(client, match.id, str(user['id']))
    _join(client, match.id, str(user['id']))

    confirmations = [sent for sent in outbox.email.sent if sent[1].startswith('Match Confirmation')]
    assert len(confirmations) == 1
    to, subject, body = confirmations[0]
    assert to == 'ana@example.com'
    assert 'Olympic Court' in subject
    assert 'Saturday' in body and '16:00' in body
    assert len(outbox.sms.sent) == 1
    assert outbox.sms.sent[0][0] == '+216 11 222 333'


def test_join_by_email_token_notifies_user(client, store, outbox):
    register(client, 'ben@example.com', fullName='Ben Player')
    match = _create_match(store)

    _join(client, match.id, 'ben@example.com')

    assert [sent[0] for sent in outbox.sms.sent] == ['+216 55 123 456']


def test_unknown_identity_joins_without_notification(client, store, outbox):
    match = _create_match(store)

    res = _join(client, match.id, 'guest-session-xyz')

    assert res.status_code == 200
    assert db.session.get(Match, match.id).current_players == 2
    assert outbox.sms.sent == []


def test_notification_failure_does_not_undo_join(app, client, store):
    user = register(client, 'cara@example.com')
    app.extensions['chatpadel']['notifications'] = NotificationDispatcher(
        RecordingSender(fail=True), RecordingSender(fail=True),
    )
    match = _create_match(store, current_players=1)

    res = _join(client, match.id, str(user['id']))

    assert res.status_code == 200
    assert json.loads(res.data)['success'] is True
    assert db.session.get(Match, match.id).current_players == 2


def test_sql_store_refuses_to_overfill(app):
    store = SqlMatchStore()
    match = _create_match(store, current_players=3, max_players=4)

    store.add_membership(match.id, 'a@example.com')

    with pytest.raises(MatchFull):
        store.add_membership(match.id, 'b@example.com')
    assert store.get_match(match.id).current_players == 4
    assert [m.identity_token for m in store.list_memberships()] == ['a@example.com']


def test_sql_store_reports_duplicate_seat(app):
    store = SqlMatchStore()
    match = _create_match(store, current_players=1)

    store.add_membership(match.id, '9')
    with pytest.raises(DuplicateMembership):
        store.add_membership(match.id, '9')
    assert store.get_match(match.id).current_players == 2
