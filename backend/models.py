from backend.app import db
from backend.time_utils import isoformat_or_none, utcnow_naive

SKILL_LEVELS = ('beginner', 'intermediate', 'advanced', 'pro')


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    phone_number = db.Column(db.String(30), nullable=False)
    country = db.Column(db.String(80), nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    password_reset_token_hash = db.Column(db.String(128), nullable=True, index=True)
    password_reset_token_expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'fullName': self.full_name, 'email': self.email,
            'age': self.age, 'phoneNumber': self.phone_number,
            'country': self.country, 'isAdmin': bool(self.is_admin),
            'createdAt': isoformat_or_none(self.created_at),
        }


class Match(db.Model):
    """A scheduled match with a fixed number of seats."""
    __table_args__ = (
        db.CheckConstraint(
            'current_players >= 0 AND current_players <= max_players',
            name='ck_match_occupancy',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    location = db.Column(db.String(200), nullable=False)
    date = db.Column(db.String(50), nullable=False)
    time = db.Column(db.String(50), nullable=False)
    level = db.Column(db.String(20), nullable=False)  # beginner, intermediate, advanced, pro
    current_players = db.Column(db.Integer, nullable=False, default=1)
    max_players = db.Column(db.Integer, nullable=False, default=4)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())


class UserMatch(db.Model):
    """One occupied seat: an identity token that joined a match."""
    __table_args__ = (
        db.UniqueConstraint('match_id', 'identity_token', name='uq_user_match_match_token'),
    )

    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey('match.id'), nullable=False)
    identity_token = db.Column(db.String(255), nullable=False)
    joined_at = db.Column(db.DateTime, default=lambda: utcnow_naive())


class WaitlistEntry(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    skill_level = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: utcnow_naive())

    def to_dict(self):
        return {
            'id': self.id, 'email': self.email, 'name': self.name,
            'skillLevel': self.skill_level,
            'createdAt': isoformat_or_none(self.created_at),
        }
