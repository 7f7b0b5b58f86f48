import logging

from models.Challenge import Challenge
from models.ChallengeQuery import ChallengeQuery, DEFAULT_PAGE, DEFAULT_PER_PAGE
from utils.exceptions import NotFoundError, ValidationError
from utils.store import CHALLENGES
from utils.validators import (
    leading_int, parse_int, parse_datetime, parse_int_or_default, try_parse_datetime, utcnow,
)

logger = logging.getLogger(__name__)

# Fields a patch may not write; the counter is owned by participation_functions
READ_ONLY_FIELDS = ("id", "participants", "createdAt")


def _int_bound(value):
    """Returns (bound, ok); an absent value is (None, True)"""
    if value in (None, ''):
        return None, True
    parsed = leading_int(value)
    return parsed, parsed is not None


def _date_bound(value):
    if value in (None, ''):
        return None, True
    parsed = try_parse_datetime(value)
    return parsed, parsed is not None


def build_challenge_query(args, default_per_page=DEFAULT_PER_PAGE):
    """Translate listing parameters into a ChallengeQuery.

    Nothing here raises: bad paging values fall back to the defaults and a
    malformed date or participant bound yields a query that matches nothing.
    """
    categories = None
    if args.get('category'):
        categories = [c.strip() for c in args['category'].split(',')]

    start_from, ok_from = _date_bound(args.get('startDateFrom'))
    start_to, ok_to = _date_bound(args.get('startDateTo'))
    min_participants, ok_min = _int_bound(args.get('minParticipants'))
    max_participants, ok_max = _int_bound(args.get('maxParticipants'))

    return ChallengeQuery(
        categories=categories,
        start_from=start_from,
        start_to=start_to,
        min_participants=min_participants,
        max_participants=max_participants,
        search=args.get('search') or None,
        page=parse_int_or_default(args.get('page'), DEFAULT_PAGE),
        per_page=parse_int_or_default(args.get('limit'), default_per_page),
        sort_by=args.get('sortBy'),
        unsatisfiable=not (ok_from and ok_to and ok_min and ok_max),
    )


def list_challenges(store, args, default_per_page=DEFAULT_PER_PAGE):
    query = build_challenge_query(args, default_per_page)
    total, data = store.query_challenges(query)
    return {
        "total": total,
        "page": query.page,
        "perPage": query.per_page,
        "data": data
    }


def get_challenge(store, challenge_id):
    challenge = store.get(CHALLENGES, challenge_id)
    if challenge is None:
        raise NotFoundError("Challenge not found")
    return challenge


def create_challenge(store, data):
    challenge = Challenge.from_payload(data or {})
    challenge_id = store.insert(CHALLENGES, challenge.to_dict())
    logger.info("Created challenge %s (%s)", challenge_id, challenge.title)
    return challenge_id


def update_challenge(store, challenge_id, data):
    """Partial update; returns the modified count"""
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    updates = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS}
    if 'startDate' in updates:
        updates['startDate'] = parse_datetime(updates['startDate'], 'startDate')
    if 'endDate' in updates:
        updates['endDate'] = parse_datetime(updates['endDate'], 'endDate')
    if 'duration' in updates:
        updates['duration'] = parse_int(updates['duration'], 'duration')
    updates['updatedAt'] = utcnow()

    result = store.update(CHALLENGES, challenge_id, updates)
    if result.matched_count == 0:
        raise NotFoundError("Challenge not found")
    return result.modified_count


def get_community_stats(store):
    total_challenges, total_participants, total_impact = store.challenge_totals()
    return {
        "totalChallenges": total_challenges,
        "totalParticipants": total_participants,
        "totalImpact": total_impact
    }
