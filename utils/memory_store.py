import copy
import logging
import threading

from utils.exceptions import ConflictError, NotFoundError
from utils.identifiers import new_record_id
from utils.store import (
    RecordStore, UpdateResult, matches_filters, COLLECTIONS, CHALLENGES, USER_CHALLENGES,
)

logger = logging.getLogger(__name__)


class MemoryStore(RecordStore):
    """In-process store used by the test suite and for local runs.

    A single re-entrant lock serialises every operation, which makes the
    membership operations atomic.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._collections = {name: {} for name in COLLECTIONS}

    def connect(self):
        logger.info("Using in-memory record store")
        return self

    def close(self):
        with self._lock:
            for docs in self._collections.values():
                docs.clear()

    def _docs(self, collection):
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _out(record_id, doc):
        data = copy.deepcopy(doc)
        data['id'] = record_id
        return data

    def insert(self, collection, data):
        with self._lock:
            record_id = new_record_id()
            doc = copy.deepcopy(data)
            doc.pop('id', None)
            self._docs(collection)[record_id] = doc
            return record_id

    def get(self, collection, record_id):
        with self._lock:
            doc = self._docs(collection).get(record_id)
            return None if doc is None else self._out(record_id, doc)

    def get_many(self, collection, record_ids):
        with self._lock:
            docs = self._docs(collection)
            return {rid: self._out(rid, docs[rid]) for rid in set(record_ids) if rid in docs}

    def find(self, collection, filters=(), order_by=None, descending=False, limit=None):
        with self._lock:
            results = [
                self._out(rid, doc)
                for rid, doc in self._docs(collection).items()
                if matches_filters(doc, filters)
            ]
        if order_by:
            results = [r for r in results if r.get(order_by) is not None]
            results.sort(key=lambda r: r[order_by], reverse=descending)
        if limit is not None:
            results = results[:limit]
        return results

    def update(self, collection, record_id, updates):
        with self._lock:
            doc = self._docs(collection).get(record_id)
            if doc is None:
                return UpdateResult(0, 0)
            changed = any(doc.get(k, object()) != v for k, v in updates.items())
            doc.update(copy.deepcopy(updates))
            return UpdateResult(1, 1 if changed else 0)

    def delete(self, collection, record_id):
        with self._lock:
            return 1 if self._docs(collection).pop(record_id, None) is not None else 0

    def delete_many(self, collection, filters):
        with self._lock:
            docs = self._docs(collection)
            doomed = [rid for rid, doc in docs.items() if matches_filters(doc, filters)]
            for rid in doomed:
                del docs[rid]
            return len(doomed)

    def add_membership(self, challenge_id, record):
        with self._lock:
            challenge = self._docs(CHALLENGES).get(challenge_id)
            if challenge is None:
                raise NotFoundError("Challenge not found")
            pair = [('userId', '==', record['userId']), ('challengeId', '==', challenge_id)]
            if any(matches_filters(doc, pair) for doc in self._docs(USER_CHALLENGES).values()):
                raise ConflictError("User already joined")
            record_id = self.insert(USER_CHALLENGES, record)
            challenge['participants'] = challenge.get('participants', 0) + 1
            return record_id

    def remove_membership(self, user_challenge_id):
        with self._lock:
            doc = self._docs(USER_CHALLENGES).pop(user_challenge_id, None)
            if doc is None:
                raise NotFoundError("User challenge not found")
            challenge = self._docs(CHALLENGES).get(doc.get('challengeId'))
            if challenge is not None:
                challenge['participants'] = max(0, challenge.get('participants', 0) - 1)
            return self._out(user_challenge_id, doc)

    def delete_challenge(self, challenge_id):
        with self._lock:
            if self._docs(CHALLENGES).pop(challenge_id, None) is None:
                raise NotFoundError("Challenge not found")
            return self.delete_many(USER_CHALLENGES, [('challengeId', '==', challenge_id)])
