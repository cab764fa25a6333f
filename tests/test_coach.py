"""Tests for the coach chat endpoint."""
import json
from types import SimpleNamespace

from backend.services.coach import MATCH_FINDER_MARKER, CoachService, keyword_reply


class _FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _fake_client(**kwargs):
    completions = _FakeCompletions(**kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def _use_coach(app, client_obj):
    app.extensions['chatpadel']['coach'] = CoachService(client=client_obj, model='test-model')


def test_keyword_reply_intents():
    assert MATCH_FINDER_MARKER in keyword_reply('Can I join a match tomorrow?')
    assert 'ChatPadel Pro' in keyword_reply('hi')
    assert 'ChatPadel Pro' in keyword_reply('Hey coach')
    assert 'split step' in keyword_reply('any tips for my volley')
    assert MATCH_FINDER_MARKER not in keyword_reply('what is the weather like')


def test_chat_attaches_matches_on_match_intent(client, store):
    store.create_match(location='Main Arena', date='Friday', time='10:00', level='beginner')

    res = client.post('/api/ai-coach/chat', json={'message': 'I want to play tomorrow'})
    assert res.status_code == 200
    data = json.loads(res.data)
    assert MATCH_FINDER_MARKER in data['message']
    assert data['sessionId']
    assert [m['location'] for m in data['matches']] == ['Main Arena']


def test_chat_keeps_conversation_id_and_omits_matches(client):
    res = client.post('/api/ai-coach/chat', json={'message': 'hello', 'sessionId': 'abc123'})
    data = json.loads(res.data)
    assert data['sessionId'] == 'abc123'
    assert 'matches' not in data


def test_chat_requires_message(client):
    res = client.post('/api/ai-coach/chat', json={'message': '   '})
    assert res.status_code == 400


def test_chat_uses_language_model_reply(app, client, store):
    fake, completions = _fake_client(content=f'Great, here you go {MATCH_FINDER_MARKER}')
    _use_coach(app, fake)
    store.create_match(location='Olympic Court', date='Saturday', time='16:00', level='advanced')

    res = client.post('/api/ai-coach/chat', json={'message': 'find me a game'})
    data = json.loads(res.data)
    assert data['message'].startswith('Great')
    assert [m['location'] for m in data['matches']] == ['Olympic Court']
    call = completions.calls[0]
    assert call['model'] == 'test-model'
    assert call['messages'][0]['role'] == 'system'
    assert MATCH_FINDER_MARKER in call['messages'][0]['content']
    assert call['messages'][1] == {'role': 'user', 'content': 'find me a game'}


def test_chat_falls_back_when_model_returns_nothing(app, client):
    fake, _ = _fake_client(content=None)
    _use_coach(app, fake)

    data = json.loads(client.post('/api/ai-coach/chat', json={'message': 'hi'}).data)
    assert 'forehand volley' in data['message']


def test_chat_hides_model_errors(app, client):
    fake, _ = _fake_client(error=RuntimeError('upstream exploded'))
    _use_coach(app, fake)

    res = client.post('/api/ai-coach/chat', json={'message': 'hi'})
    assert res.status_code == 500
    body = json.loads(res.data)
    assert body == {'error': 'Failed to reach the AI Coach'}
