"""Match and membership storage.

Two stores share one interface: ``InMemoryMatchStore`` keeps everything in
process memory and ``SqlMatchStore`` persists through Flask-SQLAlchemy.
Both hand out ``MatchRecord`` snapshots so callers never hold live rows.
"""
import itertools
import threading
from dataclasses import dataclass, replace
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from backend.app import db
from backend.errors import MatchFull
from backend.models import Match, UserMatch
from backend.time_utils import isoformat_or_none, utcnow_naive

DEFAULT_MAX_PLAYERS = 4

SEED_MATCHES = (
    {'location': 'Padel Club Central', 'date': 'Tomorrow', 'time': '18:00',
     'level': 'intermediate', 'current_players': 3, 'max_players': 4},
    {'location': 'Main Arena', 'date': 'Friday', 'time': '10:00',
     'level': 'beginner', 'current_players': 2, 'max_players': 4},
    {'location': 'Olympic Court', 'date': 'Saturday', 'time': '16:00',
     'level': 'advanced', 'current_players': 1, 'max_players': 4},
)


class DuplicateMembership(Exception):
    """Raised by a store when the (match, token) seat already exists."""


@dataclass(frozen=True)
class MatchRecord:
    id: int
    location: str
    date: str
    time: str
    level: str
    current_players: int
    max_players: int
    created_at: datetime = None

    @property
    def is_full(self):
        return self.current_players >= self.max_players

    @classmethod
    def from_model(cls, match):
        return cls(
            id=match.id, location=match.location, date=match.date,
            time=match.time, level=match.level,
            current_players=match.current_players,
            max_players=match.max_players, created_at=match.created_at,
        )

    def to_dict(self):
        return {
            'id': self.id, 'location': self.location, 'date': self.date,
            'time': self.time, 'level': self.level,
            'currentPlayers': self.current_players,
            'maxPlayers': self.max_players,
            'createdAt': isoformat_or_none(self.created_at),
        }


@dataclass(frozen=True)
class MembershipRecord:
    match_id: int
    identity_token: str
    joined_at: datetime = None


class InMemoryMatchStore:
    """Process-local store with deterministic, monotonically assigned ids."""

    def __init__(self):
        self._lock = threading.RLock()
        self._ids = itertools.count(1)
        self._matches = {}
        self._memberships = []
        self._seats = set()

    @classmethod
    def seeded(cls):
        store = cls()
        for row in SEED_MATCHES:
            store.create_match(**row)
        return store

    def create_match(self, location, date, time, level,
                     current_players=1, max_players=DEFAULT_MAX_PLAYERS):
        with self._lock:
            record = MatchRecord(
                id=next(self._ids), location=location, date=date, time=time,
                level=level, current_players=current_players,
                max_players=max_players, created_at=utcnow_naive(),
            )
            self._matches[record.id] = record
            return record

    def get_match(self, match_id):
        with self._lock:
            return self._matches.get(match_id)

    def list_matches(self):
        with self._lock:
            return list(self._matches.values())

    def has_membership(self, match_id, identity_token):
        with self._lock:
            return (match_id, identity_token) in self._seats

    def add_membership(self, match_id, identity_token):
        """Record the seat and bump occupancy as a single step."""
        with self._lock:
            if (match_id, identity_token) in self._seats:
                raise DuplicateMembership(identity_token)
            match = self._matches[match_id]
            if match.is_full:
                raise MatchFull()
            self._seats.add((match_id, identity_token))
            self._memberships.append(MembershipRecord(
                match_id=match_id, identity_token=identity_token,
                joined_at=utcnow_naive(),
            ))
            updated = replace(match, current_players=match.current_players + 1)
            self._matches[match_id] = updated
            return updated

    def list_memberships(self):
        with self._lock:
            return list(self._memberships)


class SqlMatchStore:
    """Store backed by the ``match`` and ``user_match`` tables."""

    def create_match(self, location, date, time, level,
                     current_players=1, max_players=DEFAULT_MAX_PLAYERS):
        match = Match(
            location=location, date=date, time=time, level=level,
            current_players=current_players, max_players=max_players,
        )
        db.session.add(match)
        db.session.commit()
        return MatchRecord.from_model(match)

    def get_match(self, match_id):
        match = db.session.get(Match, match_id, populate_existing=True)
        return MatchRecord.from_model(match) if match else None

    def list_matches(self):
        return [MatchRecord.from_model(m) for m in Match.query.order_by(Match.id.asc()).all()]

    def has_membership(self, match_id, identity_token):
        return UserMatch.query.filter_by(
            match_id=match_id, identity_token=identity_token,
        ).first() is not None

    def add_membership(self, match_id, identity_token):
        """Insert the seat and increment occupancy in one transaction.

        The increment only applies while a seat is free, so a writer that
        slipped past the in-process lock still cannot overfill the match.
        """
        db.session.add(UserMatch(match_id=match_id, identity_token=identity_token))
        try:
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateMembership(identity_token)

        result = db.session.execute(
            update(Match)
            .where(Match.id == match_id, Match.current_players < Match.max_players)
            .values(current_players=Match.current_players + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            db.session.rollback()
            raise MatchFull()
        db.session.commit()
        return self.get_match(match_id)

    def list_memberships(self):
        rows = UserMatch.query.order_by(UserMatch.id.asc()).all()
        return [
            MembershipRecord(
                match_id=row.match_id, identity_token=row.identity_token,
                joined_at=row.joined_at,
            )
            for row in rows
        ]
