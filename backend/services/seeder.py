"""Seed demo matches and the configured admin account."""
import logging

from flask import current_app
from werkzeug.security import generate_password_hash

from backend.app import db
from backend.models import Match, User
from backend.services.match_store import SEED_MATCHES
from backend.services.user_directory import normalize_email

logger = logging.getLogger(__name__)


def seed_matches():
    """Insert the demo matches only when the table is empty."""
    if Match.query.first():
        return 0

    try:
        for row in SEED_MATCHES:
            db.session.add(Match(**row))
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return len(SEED_MATCHES)


def seed_admin_user():
    """Create the ADMIN_EMAIL account, or promote it if it already exists."""
    email = normalize_email(current_app.config.get('ADMIN_EMAIL'))
    password = str(current_app.config.get('ADMIN_PASSWORD') or '')
    if not email or not password:
        return None

    user = User.query.filter_by(email=email).first()
    if user:
        if not user.is_admin:
            user.is_admin = True
            db.session.commit()
            logger.info('Promoted configured admin %s', email)
        return user

    user = User(
        full_name='Admin',
        email=email,
        password_hash=generate_password_hash(password),
        age=30,
        phone_number='000000',
        country='-',
        is_admin=True,
    )
    db.session.add(user)
    db.session.commit()
    logger.info('Created configured admin %s', email)
    return user
