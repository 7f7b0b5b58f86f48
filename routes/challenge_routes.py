from flask import Blueprint, request, jsonify, current_app
from functions import challenge_functions, participation_functions
from utils.decorators import valid_id_required, store_errors
from utils.store import get_store

challenge_bp = Blueprint('challenges', __name__)


@challenge_bp.route('', methods=['GET'])
@store_errors("Server error fetching challenges")
def get_challenges():
    result = challenge_functions.list_challenges(
        get_store(), request.args, current_app.config['DEFAULT_PAGE_SIZE'])
    return jsonify({"ok": True, **result}), 200


@challenge_bp.route('/<record_id>', methods=['GET'])
@valid_id_required()
@store_errors("Server error")
def get_challenge(record_id):
    challenge = challenge_functions.get_challenge(get_store(), record_id)
    return jsonify({"ok": True, "data": challenge}), 200


@challenge_bp.route('', methods=['POST'])
@store_errors("Could not create challenge")
def create_challenge():
    data = request.get_json(silent=True)
    challenge_id = challenge_functions.create_challenge(get_store(), data)
    return jsonify({"ok": True, "insertedId": challenge_id}), 200


@challenge_bp.route('/<record_id>', methods=['PATCH'])
@valid_id_required()
@store_errors("Could not update challenge")
def update_challenge(record_id):
    data = request.get_json(silent=True)
    modified = challenge_functions.update_challenge(get_store(), record_id, data)
    return jsonify({"ok": True, "modifiedCount": modified}), 200


@challenge_bp.route('/<record_id>', methods=['DELETE'])
@valid_id_required()
@store_errors("Could not delete challenge")
def delete_challenge(record_id):
    deleted = participation_functions.delete_challenge(get_store(), record_id)
    return jsonify({"ok": True, "deletedCount": deleted}), 200


@challenge_bp.route('/join/<challenge_id>', methods=['POST'])
@store_errors("Could not join challenge")
def join_challenge(challenge_id):
    data = request.get_json(silent=True) or {}
    participation_functions.join_challenge(get_store(), challenge_id, data.get('userId'))
    return jsonify({"ok": True, "message": "Joined challenge"}), 200
