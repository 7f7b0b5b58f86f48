from flask import Blueprint, request, jsonify, current_app
from functions import content_functions
from utils.decorators import valid_id_required, store_errors
from utils.store import get_store

tip_bp = Blueprint('tips', __name__)


@tip_bp.route('', methods=['GET'])
@store_errors("Could not fetch tips")
def get_tips():
    tips = content_functions.list_tips(
        get_store(), request.args.get('limit'), current_app.config['TIPS_DEFAULT_LIMIT'])
    return jsonify({"ok": True, "data": tips}), 200


@tip_bp.route('/<record_id>', methods=['GET'])
@valid_id_required()
@store_errors("Could not fetch tip")
def get_tip(record_id):
    return jsonify({"ok": True, "data": content_functions.get_tip(get_store(), record_id)}), 200


@tip_bp.route('', methods=['POST'])
@store_errors("Could not create tip")
def create_tip():
    tip_id = content_functions.create_tip(get_store(), request.get_json(silent=True))
    return jsonify({"ok": True, "insertedId": tip_id}), 200


@tip_bp.route('/<record_id>', methods=['PATCH'])
@valid_id_required()
@store_errors("Could not update tip")
def update_tip(record_id):
    modified = content_functions.update_tip(get_store(), record_id, request.get_json(silent=True))
    return jsonify({"ok": True, "modifiedCount": modified}), 200


@tip_bp.route('/<record_id>', methods=['DELETE'])
@valid_id_required()
@store_errors("Could not delete tip")
def delete_tip(record_id):
    deleted = content_functions.delete_tip(get_store(), record_id)
    return jsonify({"ok": True, "deletedCount": deleted}), 200
