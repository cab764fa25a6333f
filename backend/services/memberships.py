"""Seat coordination: the only writer of match occupancy and memberships."""
import logging
import threading
from dataclasses import dataclass

from backend.errors import MatchFull, NotFound
from backend.services.match_store import DuplicateMembership, MatchRecord

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Lazily created lock per key (one per existing match id)."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def __len__(self):
        with self._guard:
            return len(self._locks)

    def for_key(self, key):
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


@dataclass(frozen=True)
class JoinResult:
    match: MatchRecord
    created: bool


class MembershipCoordinator:
    def __init__(self, store, locks=None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLocks()

    def join_session(self, match_id, identity):
        """Occupy one seat of ``match_id`` for ``identity``.

        Re-joining with the same token succeeds without taking another
        seat. Raises ``NotFound`` for an unknown match and ``MatchFull``
        when a first-time join finds no free seat.
        """
        token = identity.raw
        if self.store.get_match(match_id) is None:
            raise NotFound()

        with self.locks.for_key(match_id):
            match = self.store.get_match(match_id)

            if self.store.has_membership(match_id, token):
                return JoinResult(match=match, created=False)

            if match.is_full:
                logger.info('Join rejected, match %s is full (%s/%s)',
                            match_id, match.current_players, match.max_players)
                raise MatchFull()

            try:
                updated = self.store.add_membership(match_id, token)
            except DuplicateMembership:
                return JoinResult(match=self.store.get_match(match_id), created=False)

        logger.info('Seat taken in match %s (%s/%s)',
                    match_id, updated.current_players, updated.max_players)
        return JoinResult(match=updated, created=True)
