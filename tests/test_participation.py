"""
Tests for the join resolver and the participant counter.
"""

import threading

import pytest

from functions import participation_functions as pf
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.store import CHALLENGES, USER_CHALLENGES


def participants(store, challenge_id):
    return store.get(CHALLENGES, challenge_id)['participants']


class TestJoin:
    """Joining a challenge."""

    def test_join_creates_record_and_increments(self, store, make_challenge):
        challenge_id = make_challenge()

        record_id = pf.join_challenge(store, challenge_id, 'u1')

        record = store.get(USER_CHALLENGES, record_id)
        assert record['userId'] == 'u1'
        assert record['challengeId'] == challenge_id
        assert record['status'] == 'Not Started'
        assert record['progress'] == 0
        assert participants(store, challenge_id) == 1

    def test_second_join_conflicts(self, store, make_challenge):
        challenge_id = make_challenge()
        pf.join_challenge(store, challenge_id, 'u1')

        with pytest.raises(ConflictError) as exc:
            pf.join_challenge(store, challenge_id, 'u1')

        assert exc.value.message == 'User already joined'
        assert store.count(USER_CHALLENGES, [('userId', '==', 'u1')]) == 1
        assert participants(store, challenge_id) == 1

    def test_missing_user_id(self, store, make_challenge):
        with pytest.raises(ValidationError) as exc:
            pf.join_challenge(store, make_challenge(), '')

        assert exc.value.message == 'userId is required in body'

    def test_invalid_challenge_id(self, store):
        with pytest.raises(ValidationError) as exc:
            pf.join_challenge(store, 'not-an-id', 'u1')

        assert exc.value.message == 'Invalid challenge ID'

    def test_unknown_challenge(self, store):
        with pytest.raises(NotFoundError):
            pf.join_challenge(store, 'A' * 20, 'u1')

        assert store.find(USER_CHALLENGES) == []

    def test_concurrent_joins_of_same_pair(self, store, make_challenge):
        challenge_id = make_challenge()
        outcomes = []

        def join():
            try:
                pf.join_challenge(store, challenge_id, 'u1')
                outcomes.append('joined')
            except ConflictError:
                outcomes.append('conflict')

        threads = [threading.Thread(target=join) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count('joined') == 1
        assert participants(store, challenge_id) == 1


class TestCounterInvariant:
    """participants == joins - leaves."""

    def test_joins_and_leaves(self, store, make_challenge):
        challenge_id = make_challenge()
        records = [pf.join_challenge(store, challenge_id, f'u{n}') for n in range(5)]

        for record_id in records[:2]:
            pf.leave_challenge(store, record_id)

        assert participants(store, challenge_id) == 3
        assert store.count(USER_CHALLENGES, [('challengeId', '==', challenge_id)]) == 3

    def test_leave_unknown_record(self, store):
        with pytest.raises(NotFoundError):
            pf.leave_challenge(store, 'B' * 20)

    def test_leave_never_goes_negative(self, store, make_challenge):
        challenge_id = make_challenge()
        record_id = pf.join_challenge(store, challenge_id, 'u1')
        store.update(CHALLENGES, challenge_id, {'participants': 0})

        pf.leave_challenge(store, record_id)

        assert participants(store, challenge_id) == 0

    def test_leave_after_parent_deleted_by_hand(self, store, make_challenge):
        challenge_id = make_challenge()
        record_id = pf.join_challenge(store, challenge_id, 'u1')
        store.delete(CHALLENGES, challenge_id)

        removed = pf.leave_challenge(store, record_id)

        assert removed['id'] == record_id
        assert store.get(USER_CHALLENGES, record_id) is None


class TestDeleteChallenge:
    """Cascading delete."""

    def test_cascade_removes_memberships(self, store, make_challenge):
        challenge_id = make_challenge()
        other_id = make_challenge()
        for n in range(3):
            pf.join_challenge(store, challenge_id, f'u{n}')
        pf.join_challenge(store, other_id, 'u0')

        assert pf.delete_challenge(store, challenge_id) == 1

        assert store.get(CHALLENGES, challenge_id) is None
        assert store.count(USER_CHALLENGES, [('challengeId', '==', challenge_id)]) == 0
        assert store.count(USER_CHALLENGES, [('challengeId', '==', other_id)]) == 1

    def test_delete_unknown(self, store):
        with pytest.raises(NotFoundError):
            pf.delete_challenge(store, 'C' * 20)


class TestJoinResolver:
    """UserChallenge joined with its Challenge."""

    def test_by_user(self, store, make_challenge):
        first = make_challenge(title='First')
        second = make_challenge(title='Second')
        pf.join_challenge(store, first, 'u1')
        pf.join_challenge(store, second, 'u1')
        pf.join_challenge(store, first, 'u2')

        result = pf.get_user_challenges(store, 'u1')

        assert [item['challengeDetails']['title'] for item in result['data']] == ['First', 'Second']
        assert set(result['data'][0]) == {
            'id', 'userId', 'challengeId', 'status', 'progress', 'joinDate', 'challengeDetails'
        }
        assert 'quarantined' not in result

    def test_requires_user_id(self, store):
        with pytest.raises(ValidationError):
            pf.get_user_challenges(store, None)

    def test_deleted_parent_is_excluded(self, store, make_challenge):
        challenge_id = make_challenge()
        record_id = pf.join_challenge(store, challenge_id, 'u1')
        store.delete(CHALLENGES, challenge_id)

        assert pf.get_user_challenges(store, 'u1')['data'] == []
        with pytest.raises(NotFoundError) as exc:
            pf.get_user_challenge(store, record_id)
        assert exc.value.message == 'Activity not found'

    def test_malformed_challenge_id_is_dropped(self, store, make_challenge):
        pf.join_challenge(store, make_challenge(), 'u1')
        store.insert(USER_CHALLENGES, {'userId': 'u1', 'challengeId': 'legacy-id', 'status': 'Not Started'})

        result = pf.get_user_challenges(store, 'u1')

        assert len(result['data']) == 1
        assert 'quarantined' not in result

    def test_malformed_challenge_id_is_quarantined(self, store, make_challenge):
        pf.join_challenge(store, make_challenge(), 'u1')
        store.insert(USER_CHALLENGES, {'userId': 'u1', 'challengeId': 'legacy-id', 'status': 'Not Started'})

        result = pf.get_user_challenges(store, 'u1', orphan_policy=pf.ORPHAN_QUARANTINE)

        assert len(result['data']) == 1
        assert [r['challengeId'] for r in result['quarantined']] == ['legacy-id']

    def test_by_id(self, store, make_challenge):
        challenge_id = make_challenge(title='Solo')
        record_id = pf.join_challenge(store, challenge_id, 'u1')

        item = pf.get_user_challenge(store, record_id)

        assert item['id'] == record_id
        assert item['challengeDetails']['id'] == challenge_id
        assert item['challengeDetails']['title'] == 'Solo'

    def test_by_id_unknown(self, store):
        with pytest.raises(NotFoundError):
            pf.get_user_challenge(store, 'D' * 20)


class TestUpdateUserChallenge:
    """Progress and status edits."""

    def test_progress_and_status(self, store, make_challenge):
        record_id = pf.join_challenge(store, make_challenge(), 'u1')

        modified = pf.update_user_challenge(store, record_id, {'progress': '42.5', 'status': 'In Progress'})

        record = store.get(USER_CHALLENGES, record_id)
        assert modified == 1
        assert record['progress'] == 42.5
        assert record['status'] == 'In Progress'

    def test_membership_keys_are_protected(self, store, make_challenge):
        challenge_id = make_challenge()
        record_id = pf.join_challenge(store, challenge_id, 'u1')

        pf.update_user_challenge(store, record_id, {'challengeId': 'E' * 20, 'userId': 'u9'})

        record = store.get(USER_CHALLENGES, record_id)
        assert record['challengeId'] == challenge_id
        assert record['userId'] == 'u1'

    def test_bad_progress(self, store, make_challenge):
        record_id = pf.join_challenge(store, make_challenge(), 'u1')

        with pytest.raises(ValidationError):
            pf.update_user_challenge(store, record_id, {'progress': 'lots'})

    def test_unknown_record(self, store):
        with pytest.raises(NotFoundError):
            pf.update_user_challenge(store, 'F' * 20, {'progress': 10})
