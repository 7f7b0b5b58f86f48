from flask import Blueprint, request, jsonify, current_app
from functions import participation_functions
from utils.decorators import valid_id_required, store_errors
from utils.store import get_store

participation_bp = Blueprint('user_challenges', __name__)


@participation_bp.route('', methods=['GET'])
@store_errors("Could not fetch user challenges")
def get_user_challenges():
    result = participation_functions.get_user_challenges(
        get_store(),
        request.args.get('userId'),
        current_app.config['ORPHAN_MEMBERSHIP_POLICY'],
    )
    return jsonify({"ok": True, **result}), 200


@participation_bp.route('/<record_id>', methods=['GET'])
@valid_id_required()
@store_errors("Could not fetch user challenge details")
def get_user_challenge(record_id):
    item = participation_functions.get_user_challenge(get_store(), record_id)
    return jsonify({"ok": True, "data": item}), 200


@participation_bp.route('/<record_id>', methods=['PATCH'])
@valid_id_required()
@store_errors("Could not update user challenge")
def update_user_challenge(record_id):
    data = request.get_json(silent=True)
    modified = participation_functions.update_user_challenge(get_store(), record_id, data)
    return jsonify({"ok": True, "modifiedCount": modified}), 200


@participation_bp.route('/<record_id>', methods=['DELETE'])
@valid_id_required()
@store_errors("Could not delete user challenge")
def leave_challenge(record_id):
    participation_functions.leave_challenge(get_store(), record_id)
    return jsonify({"ok": True, "message": "Deleted"}), 200
