"""
Tests for the participant counter reconciliation job.
"""

from functions import participation_functions as pf
from services.reconciliation_service import reconcile_participants, reconcile_participants_command
from utils.store import CHALLENGES, USER_CHALLENGES


class TestReconcileParticipants:

    def test_repairs_drifted_counter(self, store, make_challenge):
        challenge_id = make_challenge()
        pf.join_challenge(store, challenge_id, 'u1')
        pf.join_challenge(store, challenge_id, 'u2')
        store.update(CHALLENGES, challenge_id, {'participants': 7})

        summary = reconcile_participants(store)

        assert summary == {'challenges': 1, 'corrected': 1, 'orphansRemoved': 0, 'malformed': 0}
        assert store.get(CHALLENGES, challenge_id)['participants'] == 2

    def test_removes_orphaned_memberships(self, store, make_challenge):
        challenge_id = make_challenge()
        store.insert(USER_CHALLENGES, {'userId': 'u1', 'challengeId': 'G' * 20})
        pf.join_challenge(store, challenge_id, 'u1')

        summary = reconcile_participants(store)

        assert summary['orphansRemoved'] == 1
        assert [m['challengeId'] for m in store.find(USER_CHALLENGES)] == [challenge_id]

    def test_keeps_malformed_memberships(self, store, make_challenge):
        challenge_id = make_challenge()
        kept = store.insert(USER_CHALLENGES, {'userId': 'u1', 'challengeId': 'malformed'})
        pf.join_challenge(store, challenge_id, 'u1')

        summary = reconcile_participants(store)

        assert summary['orphansRemoved'] == 0
        assert summary['malformed'] == 1
        assert store.get(USER_CHALLENGES, kept) is not None
        assert store.get(CHALLENGES, challenge_id)['participants'] == 1

        quarantined = pf.get_user_challenges(store, 'u1', pf.ORPHAN_QUARANTINE)['quarantined']
        assert [m['id'] for m in quarantined] == [kept]

    def test_is_idempotent(self, store, make_challenge):
        challenge_id = make_challenge(participants=3)

        reconcile_participants(store)
        second = reconcile_participants(store)

        assert second == {'challenges': 1, 'corrected': 0, 'orphansRemoved': 0, 'malformed': 0}
        assert store.get(CHALLENGES, challenge_id)['participants'] == 0

    def test_cli_command(self, app, store, make_challenge):
        make_challenge(participants=4)

        result = app.test_cli_runner().invoke(reconcile_participants_command)

        assert result.exit_code == 0
        assert 'corrected 1' in result.output
