"""Admin back-office listings."""
from flask import Blueprint, jsonify

from backend.app import get_service
from backend.auth_utils import admin_required
from backend.models import WaitlistEntry

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    users = get_service('directory').list_all()
    return jsonify([u.to_dict() for u in users])


@admin_bp.route('/user-matches', methods=['GET'])
@admin_required
def list_user_matches():
    """Every seat taken, as the match fields plus the resolved ``user``."""
    joins = []
    for match, user in get_service('queries').list_all_memberships_with_users():
        row = match.to_dict()
        row['user'] = user.to_dict() if user else None
        joins.append(row)
    return jsonify(joins)


@admin_bp.route('/waitlist', methods=['GET'])
@admin_required
def list_waitlist():
    entries = WaitlistEntry.query.order_by(WaitlistEntry.id.asc()).all()
    return jsonify([e.to_dict() for e in entries])
