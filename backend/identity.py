"""Identity tokens supplied by clients when joining a match.

A token is either a stringified numeric account id or an email address.
It is parsed once at the request boundary; the raw string is what gets
stored on the membership row.
"""
from dataclasses import dataclass

MAX_TOKEN_LENGTH = 255

# Largest id a signed 64-bit SQL integer column can hold.
MAX_SQL_INTEGER = 2 ** 63 - 1


@dataclass(frozen=True)
class AccountId:
    raw: str
    user_id: int


@dataclass(frozen=True)
class EmailIdentity:
    raw: str
    email: str


def _looks_numeric(raw):
    digits = raw[1:] if raw.startswith('-') else raw
    return raw.isascii() and digits.isdigit()


def parse_identity_token(raw_token):
    """Parse a raw token, trying the numeric account id form first.

    Only plain ASCII digits with an optional leading minus count as an
    account id; ``'1_0'``, ``'+7'`` or non-ASCII digits are email-form tokens.
    """
    raw = str(raw_token if raw_token is not None else '').strip()
    if _looks_numeric(raw):
        return AccountId(raw=raw, user_id=int(raw))
    return EmailIdentity(raw=raw, email=raw.lower())
