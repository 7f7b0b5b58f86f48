"""Record store interface shared by the Firestore and in-memory backends.

Records are plain dicts; every record read from a store carries its
identifier under ``id``. Filters follow the Firestore ``where`` shape:
a sequence of ``(field, op, value)`` tuples.
"""
import operator

from flask import current_app

CHALLENGES = 'challenges'
USER_CHALLENGES = 'userChallenges'
TIPS = 'tips'
EVENTS = 'events'

COLLECTIONS = (CHALLENGES, USER_CHALLENGES, TIPS, EVENTS)

_OPERATORS = {
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    'in': lambda value, options: value in options,
}


def matches_filters(doc, filters):
    for field, op, expected in filters:
        value = doc.get(field)
        if value is None and op != '==':
            return False
        try:
            if not _OPERATORS[op](value, expected):
                return False
        except TypeError:
            return False
    return True


class UpdateResult:
    def __init__(self, matched_count, modified_count):
        self.matched_count = matched_count
        self.modified_count = modified_count


class RecordStore:
    """Abstract document store holding the four EcoTrack collections."""

    def connect(self):
        return self

    def close(self):
        pass

    def __enter__(self):
        return self.connect()

    def __exit__(self, *exc):
        self.close()

    # Plain document operations

    def insert(self, collection, data):
        raise NotImplementedError

    def get(self, collection, record_id):
        raise NotImplementedError

    def get_many(self, collection, record_ids):
        """Return {id: record} for the ids that exist"""
        raise NotImplementedError

    def find(self, collection, filters=(), order_by=None, descending=False, limit=None):
        raise NotImplementedError

    def count(self, collection, filters=()):
        return len(self.find(collection, filters))

    def update(self, collection, record_id, updates):
        """Set fields on one record; returns an UpdateResult"""
        raise NotImplementedError

    def delete(self, collection, record_id):
        raise NotImplementedError

    def delete_many(self, collection, filters):
        raise NotImplementedError

    # Challenge listing and aggregates

    def challenge_candidates(self, query):
        """Documents that may satisfy ``query``; the caller re-checks them"""
        return self.find(CHALLENGES)

    def query_challenges(self, query):
        return query.apply(self.challenge_candidates(query))

    def challenge_totals(self):
        """Return (challenge count, participants sum, estimatedImpactValue sum)"""
        total = participants = impact = 0
        for doc in self.find(CHALLENGES):
            total += 1
            participants += _number(doc.get('participants'))
            impact += _number(doc.get('estimatedImpactValue'))
        return total, participants, impact

    # Membership operations; each must be atomic against concurrent callers

    def add_membership(self, challenge_id, record):
        """Insert ``record`` for (userId, challengeId) and increment the counter.

        Raises NotFoundError when the challenge is missing and ConflictError
        when the pair already exists. Returns the new record id.
        """
        raise NotImplementedError

    def remove_membership(self, user_challenge_id):
        """Delete one membership and decrement its challenge counter.

        Raises NotFoundError when missing. Returns the removed record.
        """
        raise NotImplementedError

    def delete_challenge(self, challenge_id):
        """Delete a challenge, then every membership referencing it.

        Raises NotFoundError when missing. Returns the number of
        memberships removed.
        """
        raise NotImplementedError


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def get_store():
    return current_app.extensions['record_store']
