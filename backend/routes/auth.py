import hashlib
import logging
import secrets
from datetime import timedelta

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import IntegrityError

from backend.app import db, get_service
from backend.auth_utils import generate_token
from backend.errors import Conflict, ValidationError
from backend.models import User
from backend.services.user_directory import normalize_email, password_error, validate_profile
from backend.time_utils import utcnow_naive

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)

_RESET_REQUESTED_MESSAGE = 'If an account exists with this email, a reset link has been sent.'


def _configured_admin_emails():
    raw_value = current_app.config.get('ADMIN_EMAILS', '')
    return {
        item.strip().lower()
        for item in str(raw_value).split(',')
        if item and item.strip()
    }


def _maybe_grant_admin_from_config(user):
    if not user or user.is_admin:
        return False
    if normalize_email(user.email) not in _configured_admin_emails():
        return False
    user.is_admin = True
    logger.info('Granted admin to configured user %s', user.id)
    return True


def _password_reset_ttl_minutes():
    raw_value = current_app.config.get('PASSWORD_RESET_TOKEN_TTL_MINUTES', 30)
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        parsed = 30
    return max(1, parsed)


def _hash_reset_token(raw_token):
    return hashlib.sha256(str(raw_token or '').encode('utf-8')).hexdigest()


@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    try:
        profile = validate_profile(data)
        user = get_service('directory').create_user(profile)
    except (ValidationError, Conflict) as exc:
        return jsonify({'error': exc.message}), 400
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'User already exists with this email'}), 400

    get_service('notifications').welcome(user)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict) or not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email and password are required'}), 400

    user = get_service('directory').authenticate(data['email'], data['password'])
    if not user:
        return jsonify({'error': 'Invalid email or password'}), 401

    if _maybe_grant_admin_from_config(user):
        db.session.commit()

    payload = user.to_dict()
    payload['token'] = generate_token(user.id)
    return jsonify(payload)


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400

    response_payload = {'success': True, 'message': _RESET_REQUESTED_MESSAGE}
    user = get_service('directory').find_by_email(data.get('email'))
    if not user:
        return jsonify(response_payload)

    reset_token = secrets.token_urlsafe(32)
    user.password_reset_token_hash = _hash_reset_token(reset_token)
    user.password_reset_token_expires_at = utcnow_naive() + timedelta(
        minutes=_password_reset_ttl_minutes(),
    )
    db.session.commit()

    base_url = str(current_app.config.get('PUBLIC_APP_URL') or request.host_url).rstrip('/')
    get_service('notifications').password_reset(
        user.email, f'{base_url}/reset-password?token={reset_token}',
    )

    if current_app.config.get('TESTING'):
        response_payload['reset_token'] = reset_token
    return jsonify(response_payload)


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400

    raw_token = str(data.get('token') or '').strip()
    if not raw_token:
        return jsonify({'error': 'Reset token is required'}), 400

    error = password_error(data.get('password'))
    if error:
        return jsonify({'error': error}), 400

    user = User.query.filter_by(password_reset_token_hash=_hash_reset_token(raw_token)).first()
    if (
        not user
        or not user.password_reset_token_expires_at
        or user.password_reset_token_expires_at < utcnow_naive()
    ):
        return jsonify({'error': 'Invalid or expired reset token'}), 400

    get_service('directory').set_password(user, str(data['password']))
    user.password_reset_token_hash = None
    user.password_reset_token_expires_at = None
    db.session.commit()
    return jsonify({'success': True, 'message': 'Password has been reset'})
