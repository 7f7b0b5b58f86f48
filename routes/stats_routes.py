from flask import Blueprint, jsonify
from functions import challenge_functions
from utils.decorators import store_errors
from utils.store import get_store

stats_bp = Blueprint('stats', __name__)


@stats_bp.route('/community', methods=['GET'])
@store_errors("Could not compute stats")
def get_community_stats():
    stats = challenge_functions.get_community_stats(get_store())
    return jsonify({"ok": True, **stats}), 200
