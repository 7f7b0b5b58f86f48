import logging
from collections import Counter

import click
from flask.cli import with_appcontext

from utils.identifiers import RecordId
from utils.store import CHALLENGES, USER_CHALLENGES, get_store

logger = logging.getLogger(__name__)


def reconcile_participants(store):
    """Recompute every challenge's participant counter from its memberships.

    Memberships pointing at a well-formed id whose challenge no longer exists
    (an interrupted cascade delete) are removed first. Memberships with a
    malformed challengeId are kept for the quarantine listing and only
    counted. Running it twice changes nothing the second time. Returns a
    summary dict.
    """
    challenges = {c['id']: c for c in store.find(CHALLENGES)}

    orphans = 0
    malformed = 0
    counts = Counter()
    for member in store.find(USER_CHALLENGES):
        challenge_id = member.get('challengeId')
        if challenge_id in challenges:
            counts[challenge_id] += 1
        elif RecordId.is_valid(challenge_id):
            orphans += store.delete(USER_CHALLENGES, member['id'])
        else:
            logger.warning("Membership %s has malformed challengeId %r; left in place",
                           member['id'], challenge_id)
            malformed += 1

    corrected = 0
    for challenge_id, challenge in challenges.items():
        expected = counts.get(challenge_id, 0)
        if challenge.get('participants') != expected:
            logger.warning("Challenge %s participants %s -> %d",
                           challenge_id, challenge.get('participants'), expected)
            store.update(CHALLENGES, challenge_id, {"participants": expected})
            corrected += 1

    summary = {
        "challenges": len(challenges),
        "corrected": corrected,
        "orphansRemoved": orphans,
        "malformed": malformed
    }
    logger.info("Reconciled participant counters: %s", summary)
    return summary


@click.command('reconcile-participants')
@with_appcontext
def reconcile_participants_command():
    """Rebuild participant counters from membership records."""
    summary = reconcile_participants(get_store())
    click.echo(
        f"Checked {summary['challenges']} challenge(s), corrected {summary['corrected']}, "
        f"removed {summary['orphansRemoved']} orphaned membership(s), "
        f"kept {summary['malformed']} with a malformed challengeId"
    )


def init_app(app):
    app.cli.add_command(reconcile_participants_command)
