"""Read-only views over matches and memberships."""
from backend.identity import parse_identity_token


class MatchQueries:
    def __init__(self, store, directory):
        self.store = store
        self.directory = directory

    def list_available_sessions(self):
        """All matches in creation order, full ones included."""
        return self.store.list_matches()

    def list_all_memberships_with_users(self):
        """Pair every membership with its match and resolved user (or None)."""
        matches = {match.id: match for match in self.store.list_matches()}
        joins = []
        for membership in self.store.list_memberships():
            match = matches.get(membership.match_id)
            if match is None:
                continue
            user = self.directory.resolve_identity(
                parse_identity_token(membership.identity_token)
            )
            joins.append((match, user))
        return joins
