"""Participation: the user/challenge join read path and the writes that keep
``Challenge.participants`` equal to the number of memberships."""
import logging

from models.UserChallenge import UserChallenge, PROTECTED_FIELDS, resolved_view
from utils.exceptions import NotFoundError, ValidationError
from utils.identifiers import RecordId
from utils.store import CHALLENGES, USER_CHALLENGES
from utils.validators import parse_float, utcnow

logger = logging.getLogger(__name__)

ORPHAN_DROP = "drop"
ORPHAN_QUARANTINE = "quarantine"
ORPHAN_POLICIES = (ORPHAN_DROP, ORPHAN_QUARANTINE)


def _resolve(store, records):
    """Pair each membership with its challenge.

    Returns (resolved, malformed): memberships whose challenge is gone are
    in neither list.
    """
    malformed = []
    keyed = []
    for record in records:
        try:
            keyed.append((record, RecordId(record.get('challengeId'))))
        except ValueError:
            malformed.append(record)

    challenges = store.get_many(CHALLENGES, [str(cid) for _, cid in keyed])
    resolved = [
        resolved_view(record, challenges[str(cid)])
        for record, cid in keyed
        if str(cid) in challenges
    ]
    return resolved, malformed


def get_user_challenges(store, user_id, orphan_policy=ORPHAN_DROP):
    if not user_id:
        raise ValidationError("userId query required")

    records = store.find(USER_CHALLENGES, [('userId', '==', user_id)])
    resolved, malformed = _resolve(store, records)

    result = {"data": resolved}
    if malformed:
        logger.warning("User %s has %d membership(s) with a malformed challengeId",
                       user_id, len(malformed))
        if orphan_policy == ORPHAN_QUARANTINE:
            result["quarantined"] = malformed
    return result


def get_user_challenge(store, user_challenge_id):
    record = store.get(USER_CHALLENGES, user_challenge_id)
    if record is None:
        raise NotFoundError("Activity not found")
    resolved, _ = _resolve(store, [record])
    if not resolved:
        raise NotFoundError("Activity not found")
    return resolved[0]


def join_challenge(store, challenge_id, user_id):
    if not user_id:
        raise ValidationError("userId is required in body")
    RecordId.parse(challenge_id, "Invalid challenge ID")

    record = UserChallenge(user_id, challenge_id)
    record_id = store.add_membership(challenge_id, record.to_dict())
    logger.info("User %s joined challenge %s (%s)", user_id, challenge_id, record_id)
    return record_id


def leave_challenge(store, user_challenge_id):
    record = store.remove_membership(user_challenge_id)
    logger.info("User %s left challenge %s", record.get('userId'), record.get('challengeId'))
    return record


def delete_challenge(store, challenge_id):
    removed = store.delete_challenge(challenge_id)
    logger.info("Deleted challenge %s and %d membership(s)", challenge_id, removed)
    return 1


def update_user_challenge(store, user_challenge_id, data):
    """Progress/status edit; returns the modified count"""
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    updates = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
    if updates.get('progress') is not None:
        updates['progress'] = parse_float(updates['progress'], 'progress')
    updates['updatedAt'] = utcnow()

    result = store.update(USER_CHALLENGES, user_challenge_id, updates)
    if result.matched_count == 0:
        raise NotFoundError("User challenge not found")
    return result.modified_count
