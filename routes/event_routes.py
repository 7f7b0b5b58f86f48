from flask import Blueprint, request, jsonify, current_app
from functions import content_functions
from utils.decorators import valid_id_required, store_errors
from utils.store import get_store

event_bp = Blueprint('events', __name__)


@event_bp.route('', methods=['GET'])
@store_errors("Could not fetch events")
def get_events():
    events = content_functions.list_upcoming_events(
        get_store(), request.args.get('limit'), current_app.config['EVENTS_DEFAULT_LIMIT'])
    return jsonify({"ok": True, "data": events}), 200


@event_bp.route('/<record_id>', methods=['GET'])
@valid_id_required()
@store_errors("Could not fetch event")
def get_event(record_id):
    return jsonify({"ok": True, "data": content_functions.get_event(get_store(), record_id)}), 200


@event_bp.route('', methods=['POST'])
@store_errors("Could not create event")
def create_event():
    event_id = content_functions.create_event(get_store(), request.get_json(silent=True))
    return jsonify({"ok": True, "insertedId": event_id}), 200


@event_bp.route('/<record_id>', methods=['PATCH'])
@valid_id_required()
@store_errors("Could not update event")
def update_event(record_id):
    modified = content_functions.update_event(get_store(), record_id, request.get_json(silent=True))
    return jsonify({"ok": True, "modifiedCount": modified}), 200


@event_bp.route('/<record_id>', methods=['DELETE'])
@valid_id_required()
@store_errors("Could not delete event")
def delete_event(record_id):
    deleted = content_functions.delete_event(get_store(), record_id)
    return jsonify({"ok": True, "deletedCount": deleted}), 200
