import logging

from flask import Flask, request, jsonify, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from backend.config import config

db = SQLAlchemy()
socketio = SocketIO()

logger = logging.getLogger(__name__)

_LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def _parse_allowed_origins(raw_origins):
    if not raw_origins:
        return '*'

    if isinstance(raw_origins, (list, tuple, set)):
        cleaned = [origin for origin in raw_origins if origin]
        return cleaned or '*'

    raw_text = str(raw_origins).strip()
    if not raw_text or raw_text == '*':
        return '*'

    origins = [origin.strip() for origin in raw_text.split(',') if origin.strip()]
    return origins or '*'


def _configure_logging(app):
    level = str(app.config.get('LOG_LEVEL') or 'INFO').upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger('backend').setLevel(level)


def _init_services(app):
    from backend.services.coach import CoachService
    from backend.services.match_queries import MatchQueries
    from backend.services.match_store import InMemoryMatchStore, SqlMatchStore
    from backend.services.memberships import MembershipCoordinator
    from backend.services.notifications import NotificationDispatcher
    from backend.services.user_directory import UserDirectory

    if app.config.get('MATCH_STORE') == 'memory':
        store = InMemoryMatchStore.seeded() if app.config.get('SEED_MATCHES') else InMemoryMatchStore()
    else:
        store = SqlMatchStore()
    directory = UserDirectory()
    spawn = None if app.config.get('NOTIFICATIONS_INLINE') else socketio.start_background_task

    app.extensions['chatpadel'] = {
        'store': store,
        'directory': directory,
        'memberships': MembershipCoordinator(store),
        'queries': MatchQueries(store, directory),
        'notifications': NotificationDispatcher.from_config(app.config, spawn=spawn),
        'coach': CoachService.from_config(app.config),
    }


def get_service(name):
    """Look up one of the services wired by ``create_app``."""
    return current_app.extensions['chatpadel'][name]


def create_app(config_name='development'):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    _configure_logging(app)

    allowed_origins = _parse_allowed_origins(app.config.get('CORS_ALLOWED_ORIGINS', '*'))
    if str(config_name).strip().lower() == 'production':
        secret_key = str(app.config.get('SECRET_KEY') or '').strip()
        if not secret_key or secret_key == 'dev-secret-key-change-in-prod':
            raise RuntimeError('SECRET_KEY must be set to a non-default value in production')
        if allowed_origins == '*':
            raise RuntimeError('CORS_ALLOWED_ORIGINS must be explicitly set in production')

    db.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=allowed_origins,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE', 'threading'),
    )
    CORS(app, resources={r'/api/*': {'origins': allowed_origins}})

    @app.before_request
    def _enforce_origin_for_mutating_api_requests():
        if request.method in {'GET', 'HEAD', 'OPTIONS'}:
            return None
        if not request.path.startswith('/api/'):
            return None

        origin = str(request.headers.get('Origin') or '').strip()
        if not origin:
            return None

        configured_origins = _parse_allowed_origins(
            app.config.get('CORS_ALLOWED_ORIGINS', '*')
        )
        if configured_origins != '*' and origin not in configured_origins:
            return jsonify({'error': 'Invalid request origin'}), 403
        return None

    from backend.errors import AppError

    @app.errorhandler(AppError)
    def _handle_app_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(Exception)
    def _handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        db.session.rollback()
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        return jsonify({'error': 'Internal server error'}), 500

    from backend.routes.auth import auth_bp
    from backend.routes.matches import matches_bp
    from backend.routes.admin import admin_bp
    from backend.routes.waitlist import waitlist_bp
    from backend.routes.coach import coach_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(matches_bp, url_prefix='/api/matches')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(waitlist_bp, url_prefix='/api/waitlist')
    app.register_blueprint(coach_bp, url_prefix='/api/ai-coach')

    _init_services(app)

    with app.app_context():
        from backend import models  # noqa: F401
        db.create_all()
        if app.config.get('SEED_MATCHES') and app.config.get('MATCH_STORE') != 'memory':
            from backend.services.seeder import seed_matches
            count = seed_matches()
            if count:
                logger.info('Seeded %s demo matches', count)
        from backend.services.seeder import seed_admin_user
        seed_admin_user()

    return app
