from flask import Blueprint, request, jsonify
from sqlalchemy.exc import IntegrityError

from backend.app import db
from backend.models import SKILL_LEVELS, WaitlistEntry
from backend.services.user_directory import is_valid_email, normalize_email

waitlist_bp = Blueprint('waitlist', __name__)


@waitlist_bp.route('', methods=['POST'])
def join_waitlist():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400

    email = normalize_email(data.get('email'))
    if not is_valid_email(email):
        return jsonify({'error': 'Invalid email'}), 400
    name = str(data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Name is required'}), 400
    skill_level = str(data.get('skillLevel') or '').strip().lower()
    if skill_level not in SKILL_LEVELS:
        return jsonify({'error': f'Skill level must be one of: {", ".join(SKILL_LEVELS)}'}), 400

    if WaitlistEntry.query.filter_by(email=email).first():
        return jsonify({'error': 'Email already in waitlist'}), 409

    db.session.add(WaitlistEntry(email=email, name=name[:120], skill_level=skill_level))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Email already in waitlist'}), 409

    return jsonify({'success': True, 'message': 'Successfully joined waitlist!'}), 201
