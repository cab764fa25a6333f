"""Padel coach replies for the chat assistant.

Uses an OpenAI chat completion when an API key is configured and a small
keyword matcher otherwise. A reply containing ``MATCH_FINDER_MARKER`` asks
the caller to attach the currently available matches.
"""
import logging

from openai import OpenAI

logger = logging.getLogger(__name__)

MATCH_FINDER_MARKER = '[MATCH_FINDER]'

SYSTEM_PROMPT = f"""You are an elite Padel Coach AI named "ChatPadel Pro".
Your personality is sophisticated, encouraging, and extremely knowledgeable.
Your primary expertise is Padel strategy, rules, and technique, but you answer
any question with professional grace and relate it back to Padel when natural.

Matchmaking rules:
If the user wants to find a match, join a session, play soon, or shows any
intent related to finding a game, you MUST:
1. Respond enthusiastically.
2. Include the EXACT keyword "{MATCH_FINDER_MARKER}" in your response.

Example: "I'd love to help you find a match! Here are some sessions available: {MATCH_FINDER_MARKER}"
"""

EMPTY_REPLY = "I couldn't generate a response. Let's try a forehand volley instead!"

_MATCH_WORDS = ('match', 'session', 'join', 'play')
_GREETING_WORDS = ('hello', 'hi ', 'hey')
_TIP_WORDS = ('tactic', 'help', 'tip', 'improve')

_MATCH_REPLY = (
    "I've found some excellent matches for you! As your coach, I recommend "
    "joining one of these to keep your momentum going. " + MATCH_FINDER_MARKER
)
_GREETING_REPLY = (
    "Hello! I'm ChatPadel Pro, your elite Padel coach. I'm here to help you "
    "master the court, whether it's perfecting your bandeja or finding your "
    "next match. How can I assist you today?"
)
_TIP_REPLY = (
    "Improving your game is all about consistency. My top tip for today: focus "
    "on your split step just before your opponent hits the ball. It improves "
    "your reaction time significantly. Would you like more specific tactical advice?"
)
_DEFAULT_REPLY = (
    "That's a great question. As a coach, I always say the mental game is just "
    "as important as the physical one. I can help you find a match or give you "
    "some quick tactical tips! What are you looking to achieve today?"
)


def keyword_reply(message):
    text = str(message or '').lower()
    if any(word in text for word in _MATCH_WORDS):
        return _MATCH_REPLY
    if text.strip() == 'hi' or any(word in text for word in _GREETING_WORDS):
        return _GREETING_REPLY
    if any(word in text for word in _TIP_WORDS):
        return _TIP_REPLY
    return _DEFAULT_REPLY


def wants_matches(reply):
    return MATCH_FINDER_MARKER in (reply or '')


class CoachService:
    def __init__(self, api_key='', base_url='', model='gpt-4o-mini', client=None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key, base_url=base_url or None)
        if self.client is None:
            logger.warning('OPENAI_API_KEY not configured, coach uses keyword replies')

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('OPENAI_API_KEY', ''),
            base_url=config.get('OPENAI_BASE_URL', ''),
            model=config.get('OPENAI_MODEL', 'gpt-4o-mini'),
        )

    def reply(self, message):
        if self.client is None:
            return keyword_reply(message)

        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=500,
            messages=[
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': message},
            ],
        )
        content = response.choices[0].message.content if response.choices else None
        return content or EMPTY_REPLY
