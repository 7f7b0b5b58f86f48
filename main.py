import atexit
import logging
import os
from datetime import date, datetime

from flask import Flask, jsonify, request
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from config import config
from routes.challenge_routes import challenge_bp
from routes.participation_routes import participation_bp
from routes.tip_routes import tip_bp
from routes.event_routes import event_bp
from routes.stats_routes import stats_bp
from services import reconciliation_service
from functions.participation_functions import ORPHAN_POLICIES
from utils.exceptions import handle_error, EcoTrackError

logger = logging.getLogger(__name__)


class EcoTrackJSONProvider(DefaultJSONProvider):
    """Render datetimes as ISO-8601 instead of the HTTP date format"""

    @staticmethod
    def default(o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def build_store(app):
    backend = app.config['RECORD_STORE']
    if backend == 'memory':
        from utils.memory_store import MemoryStore
        return MemoryStore()
    if backend == 'firestore':
        from utils.firebase import FirestoreStore
        return FirestoreStore(
            cred_path=app.config.get('FIREBASE_CREDENTIALS_PATH'),
            project_id=app.config.get('FIREBASE_PROJECT_ID'),
        )
    raise ValueError(f"Unknown RECORD_STORE: {backend}")


def create_app(config_name=None, store=None):
    app = Flask(__name__)
    app.json = EcoTrackJSONProvider(app)
    app.config.from_object(config[config_name or os.getenv('APP_ENV', 'default')])

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if app.config['ORPHAN_MEMBERSHIP_POLICY'] not in ORPHAN_POLICIES:
        raise ValueError(f"Unknown ORPHAN_MEMBERSHIP_POLICY: {app.config['ORPHAN_MEMBERSHIP_POLICY']}")

    CORS(app, resources={r"/*": {"origins": app.config['CORS_ORIGINS']}})

    # The store handle lives on the app; views reach it through utils.store.get_store.
    # A store passed in is closed by its owner.
    if store is None:
        store = build_store(app)
        atexit.register(store.close)
    app.extensions['record_store'] = store.connect()

    app.register_blueprint(challenge_bp, url_prefix='/api/challenges')
    app.register_blueprint(participation_bp, url_prefix='/api/user-challenges')
    app.register_blueprint(tip_bp, url_prefix='/api/tips')
    app.register_blueprint(event_bp, url_prefix='/api/events')
    app.register_blueprint(stats_bp, url_prefix='/api/stats')

    reconciliation_service.init_app(app)

    @app.route('/')
    def index():
        return jsonify({"message": "EcoTrack API is running"})

    @app.errorhandler(EcoTrackError)
    def handle_ecotrack_error(e):
        return handle_error(e, conflict_status=app.config['JOIN_CONFLICT_STATUS'])

    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def handle_unmatched_route(e):
        if request.path.startswith('/api'):
            return jsonify({"ok": False, "message": "API route not found"}), 404
        return e

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        return handle_error(e)

    logger.info("EcoTrack API ready (store: %s)", type(store).__name__)
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 3000)), debug=app.config.get('DEBUG', False))
