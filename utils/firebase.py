import logging
import os
from pathlib import Path

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from utils.exceptions import ConflictError, NotFoundError
from utils.identifiers import RecordId
from utils.store import RecordStore, UpdateResult, CHALLENGES, USER_CHALLENGES

logger = logging.getLogger(__name__)

# Firestore accepts at most 30 values in an "in" filter
MAX_IN_VALUES = 30
BATCH_SIZE = 500


def build_credentials(cred_path=None):
    """Pick Firebase credentials: JSON file first, then FIREBASE_* variables,
    then application default credentials."""
    cred_path = cred_path or os.getenv("FIREBASE_CREDENTIALS_PATH", "serviceAccountKey.json")
    if Path(cred_path).exists():
        return credentials.Certificate(cred_path)

    private_key = os.environ.get("FIREBASE_PRIVATE_KEY")
    if private_key:
        firebase_config = {
            "type": os.environ.get("FIREBASE_TYPE", "service_account"),
            "project_id": os.environ.get("FIREBASE_PROJECT_ID"),
            "private_key_id": os.environ.get("FIREBASE_PRIVATE_KEY_ID"),
            "private_key": private_key.replace('\\n', '\n'),
            "client_email": os.environ.get("FIREBASE_CLIENT_EMAIL"),
            "client_id": os.environ.get("FIREBASE_CLIENT_ID"),
            "auth_uri": os.environ.get("FIREBASE_AUTH_URI"),
            "token_uri": os.environ.get("FIREBASE_TOKEN_URI"),
            "auth_provider_x509_cert_url": os.environ.get("FIREBASE_AUTH_PROVIDER_CERT_URL"),
            "client_x509_cert_url": os.environ.get("FIREBASE_CLIENT_CERT_URL")
        }
        return credentials.Certificate(firebase_config)

    if os.environ.get("FIREBASE_PROJECT_ID"):
        return credentials.ApplicationDefault()
    raise ValueError("No Firebase credentials found (FIREBASE_CREDENTIALS_PATH or FIREBASE_PRIVATE_KEY)")


def _with_id(snapshot):
    data = snapshot.to_dict() or {}
    data['id'] = snapshot.id
    return data


def _where(query, filters):
    for field, op, value in filters:
        query = query.where(filter=FieldFilter(field, op, value))
    return query


@firestore.transactional
def _add_membership_txn(transaction, challenge_ref, pair_query, member_ref, record):
    # All reads happen before the writes, as Firestore transactions require
    challenge = challenge_ref.get(transaction=transaction)
    if not challenge.exists:
        raise NotFoundError("Challenge not found")
    if any(True for _ in pair_query.limit(1).stream(transaction=transaction)):
        raise ConflictError("User already joined")
    transaction.create(member_ref, record)
    transaction.update(challenge_ref, {"participants": firestore.Increment(1)})


@firestore.transactional
def _remove_membership_txn(transaction, member_ref, challenges):
    member = member_ref.get(transaction=transaction)
    if not member.exists:
        raise NotFoundError("User challenge not found")
    record = _with_id(member)

    challenge_ref = None
    challenge = None
    if RecordId.is_valid(record.get('challengeId')):
        challenge_ref = challenges.document(record['challengeId'])
        challenge = challenge_ref.get(transaction=transaction)

    transaction.delete(member_ref)
    if challenge is not None and challenge.exists:
        current = (challenge.to_dict() or {}).get('participants') or 0
        transaction.update(challenge_ref, {"participants": max(0, current - 1)})
    return record


class FirestoreStore(RecordStore):
    """Record store backed by Cloud Firestore through firebase-admin."""

    def __init__(self, cred_path=None, project_id=None, app_name="ecotrack"):
        self.cred_path = cred_path
        self.project_id = project_id
        self.app_name = app_name
        self._app = None
        self._db = None

    def connect(self):
        if self._db is None:
            try:
                options = {"projectId": self.project_id} if self.project_id else None
                self._app = firebase_admin.initialize_app(
                    build_credentials(self.cred_path), options, name=self.app_name)
                self._db = firestore.client(self._app)
                logger.info("Connected to Firestore (app %s)", self.app_name)
            except Exception:
                logger.exception("Error initializing Firebase")
                raise
        return self

    def close(self):
        self._db = None
        if self._app is not None:
            firebase_admin.delete_app(self._app)
            self._app = None

    @property
    def db(self):
        if self._db is None:
            raise RuntimeError("FirestoreStore is not connected")
        return self._db

    def _col(self, collection):
        return self.db.collection(collection)

    def insert(self, collection, data):
        data = dict(data)
        data.pop('id', None)
        _, doc_ref = self._col(collection).add(data)
        return doc_ref.id

    def get(self, collection, record_id):
        doc = self._col(collection).document(record_id).get()
        return _with_id(doc) if doc.exists else None

    def get_many(self, collection, record_ids):
        refs = [self._col(collection).document(rid) for rid in set(record_ids)]
        if not refs:
            return {}
        return {snap.id: _with_id(snap) for snap in self.db.get_all(refs) if snap.exists}

    def find(self, collection, filters=(), order_by=None, descending=False, limit=None):
        query = _where(self._col(collection), filters)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return [_with_id(doc) for doc in query.stream()]

    def count(self, collection, filters=()):
        query = _where(self._col(collection), filters)
        return query.count().get()[0][0].value

    def update(self, collection, record_id, updates):
        doc_ref = self._col(collection).document(record_id)
        doc = doc_ref.get()
        if not doc.exists:
            return UpdateResult(0, 0)
        current = doc.to_dict() or {}
        changed = any(current.get(k, object()) != v for k, v in updates.items())
        if updates:
            doc_ref.update(updates)
        return UpdateResult(1, 1 if changed else 0)

    def delete(self, collection, record_id):
        doc_ref = self._col(collection).document(record_id)
        if not doc_ref.get().exists:
            return 0
        doc_ref.delete()
        return 1

    def delete_many(self, collection, filters):
        query = _where(self._col(collection), filters)
        deleted = 0
        batch = self.db.batch()
        pending = 0
        for doc in query.stream():
            batch.delete(doc.reference)
            pending += 1
            deleted += 1
            if pending == BATCH_SIZE:
                batch.commit()
                batch = self.db.batch()
                pending = 0
        if pending:
            batch.commit()
        return deleted

    def challenge_candidates(self, query):
        col = self._col(CHALLENGES)
        if query.unsatisfiable:
            return []
        if query.categories is not None and len(query.categories) <= MAX_IN_VALUES:
            col = col.where(filter=FieldFilter('category', 'in', list(query.categories)))
        return [_with_id(doc) for doc in col.stream()]

    def challenge_totals(self):
        aggregate = self._col(CHALLENGES).count(alias="total") \
            .sum("participants", alias="participants") \
            .sum("estimatedImpactValue", alias="impact")
        values = {result.alias: result.value for result in aggregate.get()[0]}
        return (
            values.get("total") or 0,
            values.get("participants") or 0,
            values.get("impact") or 0,
        )

    def add_membership(self, challenge_id, record):
        challenge_ref = self._col(CHALLENGES).document(challenge_id)
        pair_query = _where(self._col(USER_CHALLENGES), [
            ('userId', '==', record['userId']),
            ('challengeId', '==', challenge_id),
        ])
        member_ref = self._col(USER_CHALLENGES).document()
        _add_membership_txn(self.db.transaction(), challenge_ref, pair_query, member_ref, record)
        return member_ref.id

    def remove_membership(self, user_challenge_id):
        member_ref = self._col(USER_CHALLENGES).document(user_challenge_id)
        return _remove_membership_txn(self.db.transaction(), member_ref, self._col(CHALLENGES))

    def delete_challenge(self, challenge_id):
        challenge_ref = self._col(CHALLENGES).document(challenge_id)
        if not challenge_ref.get().exists:
            raise NotFoundError("Challenge not found")
        challenge_ref.delete()
        # Best effort; reconcile-participants removes anything left behind
        return self.delete_many(USER_CHALLENGES, [('challengeId', '==', challenge_id)])
