import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import request, current_app

from backend.app import db
from backend.errors import Forbidden, Unauthorized
from backend.models import User

logger = logging.getLogger(__name__)


def generate_token(user_id):
    """Generate a JWT token for a user."""
    payload = {
        'user_id': user_id,
        'exp': datetime.now(timezone.utc) + timedelta(
            hours=current_app.config.get('JWT_EXPIRATION_HOURS', 24)
        ),
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')


def _normalize_bearer_token(raw_token):
    token = str(raw_token or '').strip()
    if token.startswith('Bearer '):
        token = token.split(' ', 1)[1].strip()
    return token


def _decode_user_from_token(token):
    normalized = _normalize_bearer_token(token)
    if not normalized:
        return None, 'Authentication required'
    try:
        payload = jwt.decode(
            normalized, current_app.config['SECRET_KEY'], algorithms=['HS256']
        )
        user = db.session.get(User, payload['user_id'])
        if not user:
            return None, 'User not found'
        return user, None
    except jwt.ExpiredSignatureError:
        return None, 'Token expired'
    except (jwt.InvalidTokenError, KeyError):
        return None, 'Invalid token'


def login_required(f):
    """Decorator to require authentication on a route."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user, error = _decode_user_from_token(request.headers.get('Authorization', ''))
        if error:
            raise Unauthorized(error)
        request.current_user = user
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Decorator to require an authenticated admin user on a route."""
    @wraps(f)
    @login_required
    def decorated(*args, **kwargs):
        if not getattr(request.current_user, 'is_admin', False):
            logger.warning('Admin access denied for user %s on %s',
                           request.current_user.id, request.path)
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated
