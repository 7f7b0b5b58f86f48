from models.Event import Event
from models.Tip import Tip
from utils.exceptions import NotFoundError, ValidationError
from utils.store import TIPS, EVENTS
from utils.validators import parse_datetime, parse_int_or_default, utcnow


def _patch(store, collection, record_id, updates, not_found):
    result = store.update(collection, record_id, updates)
    if result.matched_count == 0:
        raise NotFoundError(not_found)
    return result.modified_count


def _remove(store, collection, record_id, not_found):
    deleted = store.delete(collection, record_id)
    if deleted == 0:
        raise NotFoundError(not_found)
    return deleted


def _writable(data):
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    return {k: v for k, v in data.items() if k != 'id'}


# Tips

def list_tips(store, limit, default_limit=50):
    limit = parse_int_or_default(limit, default_limit)
    return store.find(TIPS, order_by='createdAt', descending=True, limit=limit)


def get_tip(store, tip_id):
    tip = store.get(TIPS, tip_id)
    if tip is None:
        raise NotFoundError("Tip not found")
    return tip


def create_tip(store, data):
    return store.insert(TIPS, Tip.from_payload(data or {}).to_dict())


def update_tip(store, tip_id, data):
    return _patch(store, TIPS, tip_id, _writable(data), "Tip not found")


def delete_tip(store, tip_id):
    return _remove(store, TIPS, tip_id, "Tip not found")


# Events

def list_upcoming_events(store, limit, default_limit=20):
    """Events dated from now on, soonest first"""
    limit = parse_int_or_default(limit, default_limit)
    return store.find(EVENTS, [('date', '>=', utcnow())], order_by='date', limit=limit)


def get_event(store, event_id):
    event = store.get(EVENTS, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def create_event(store, data):
    return store.insert(EVENTS, Event.from_payload(data or {}).to_dict())


def update_event(store, event_id, data):
    updates = _writable(data)
    if updates.get('date'):
        updates['date'] = parse_datetime(updates['date'], 'date')
    updates['updatedAt'] = utcnow()
    return _patch(store, EVENTS, event_id, updates, "Event not found")


def delete_event(store, event_id):
    return _remove(store, EVENTS, event_id, "Event not found")
