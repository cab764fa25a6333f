"""User accounts: registration, lookups and identity-token resolution."""
import logging
import re

from werkzeug.security import check_password_hash, generate_password_hash

from backend.app import db
from backend.errors import Conflict, ValidationError
from backend.identity import MAX_SQL_INTEGER, AccountId, EmailIdentity
from backend.models import User

logger = logging.getLogger(__name__)

_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
_MIN_AGE = 5
_MAX_AGE = 100


def normalize_email(raw_email):
    return str(raw_email or '').strip().lower()


def is_valid_email(email):
    return bool(_EMAIL_PATTERN.match(email or ''))


def password_error(raw_password):
    password = str(raw_password or '')
    if len(password) < 8:
        return 'Password must be at least 8 characters long'
    if not re.search(r'[A-Z]', password):
        return 'Password must contain at least one uppercase letter'
    if not re.search(r'\d', password):
        return 'Password must contain at least one number'
    return None


def validate_profile(data):
    """Return a cleaned profile dict or raise ``ValidationError``."""
    if not isinstance(data, dict):
        raise ValidationError('Invalid JSON payload')

    full_name = str(data.get('fullName') or '').strip()
    if not full_name:
        raise ValidationError('Full name is required')

    email = normalize_email(data.get('email'))
    if not is_valid_email(email):
        raise ValidationError('Invalid email')

    error = password_error(data.get('password'))
    if error:
        raise ValidationError(error)

    age = data.get('age')
    if isinstance(age, bool) or not isinstance(age, int):
        raise ValidationError('Age must be a number')
    if age < _MIN_AGE:
        raise ValidationError(f'You must be at least {_MIN_AGE} years old')
    if age > _MAX_AGE:
        raise ValidationError(f'Age must be at most {_MAX_AGE}')

    phone_number = str(data.get('phoneNumber') or '').strip()
    if len(phone_number) < 6:
        raise ValidationError('Invalid phone number')

    country = str(data.get('country') or '').strip()
    if not country:
        raise ValidationError('Country is required')

    return {
        'full_name': full_name[:120],
        'email': email,
        'password': str(data['password']),
        'age': age,
        'phone_number': phone_number[:30],
        'country': country[:80],
    }


class UserDirectory:
    """Owner of user records; everything else reads through it."""

    def create_user(self, profile):
        email = normalize_email(profile['email'])
        if self.find_by_email(email):
            raise Conflict('User already exists with this email')

        user = User(
            full_name=profile['full_name'],
            email=email,
            password_hash=generate_password_hash(profile['password']),
            age=profile['age'],
            phone_number=profile['phone_number'],
            country=profile['country'],
            is_admin=False,
        )
        db.session.add(user)
        db.session.commit()
        logger.info('Registered user %s', user.id)
        return user

    def find_by_email(self, email):
        normalized = normalize_email(email)
        if not normalized:
            return None
        return User.query.filter_by(email=normalized).first()

    def find_by_id(self, user_id):
        if not -MAX_SQL_INTEGER - 1 <= user_id <= MAX_SQL_INTEGER:
            return None
        return db.session.get(User, user_id)

    def list_all(self):
        return User.query.order_by(User.id.asc()).all()

    def resolve_identity(self, identity):
        if isinstance(identity, AccountId):
            return self.find_by_id(identity.user_id)
        if isinstance(identity, EmailIdentity):
            return self.find_by_email(identity.email)
        return None

    def authenticate(self, email, password):
        user = self.find_by_email(email)
        if not user or not check_password_hash(user.password_hash, str(password or '')):
            return None
        return user

    def set_password(self, user, new_password):
        user.password_hash = generate_password_hash(new_password)
