"""Match listing and seat booking."""
import logging

from flask import Blueprint, request, jsonify

from backend.app import get_service, socketio
from backend.errors import MatchFull, NotFound
from backend.identity import MAX_SQL_INTEGER, MAX_TOKEN_LENGTH, parse_identity_token

matches_bp = Blueprint('matches', __name__)
logger = logging.getLogger(__name__)


def _failure(message):
    return jsonify({'success': False, 'message': message}), 400


@matches_bp.route('', methods=['GET'])
def list_matches():
    """List every match, full ones included, in creation order."""
    matches = get_service('queries').list_available_sessions()
    return jsonify([m.to_dict() for m in matches])


@matches_bp.route('/join', methods=['POST'])
def join_match():
    """Take a seat in a match for the identity given as ``sessionId``."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return _failure('Invalid JSON payload')

    try:
        match_id = int(data.get('matchId'))
    except (TypeError, ValueError):
        return _failure('A valid matchId is required')
    if not 0 < match_id <= MAX_SQL_INTEGER:
        return _failure('Failed to join match. It does not exist.')

    raw_token = data.get('sessionId')
    if raw_token is None or not str(raw_token).strip():
        return _failure('sessionId is required')
    if len(str(raw_token).strip()) > MAX_TOKEN_LENGTH:
        return _failure(f'sessionId must be at most {MAX_TOKEN_LENGTH} characters')
    identity = parse_identity_token(raw_token)

    try:
        result = get_service('memberships').join_session(match_id, identity)
    except NotFound:
        return _failure('Failed to join match. It does not exist.')
    except MatchFull:
        return _failure('Failed to join match. It might be full.')

    if not result.created:
        return jsonify({'success': True, 'message': 'You have already joined this match.'})

    socketio.emit('match_update', result.match.to_dict())

    user = get_service('directory').resolve_identity(identity)
    if user:
        get_service('notifications').match_joined(user, result.match)
    else:
        logger.info('Seat in match %s taken by an unknown identity, no notification sent',
                    match_id)

    return jsonify({'success': True, 'message': 'Joined match successfully! Notifications sent.'})
