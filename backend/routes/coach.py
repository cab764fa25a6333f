"""Chat endpoint for the padel coach assistant."""
import logging
import secrets

from flask import Blueprint, request, jsonify

from backend.app import get_service
from backend.services.coach import wants_matches

coach_bp = Blueprint('coach', __name__)
logger = logging.getLogger(__name__)


@coach_bp.route('/chat', methods=['POST'])
def chat():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid JSON payload'}), 400

    message = str(data.get('message') or '').strip()
    if not message:
        return jsonify({'error': 'Message is required'}), 400
    conversation_id = str(data.get('sessionId') or '').strip() or secrets.token_hex(4)

    try:
        reply = get_service('coach').reply(message[:4000])
    except Exception:
        logger.exception('Coach reply failed')
        return jsonify({'error': 'Failed to reach the AI Coach'}), 500

    payload = {'message': reply, 'sessionId': conversation_id}
    if wants_matches(reply):
        matches = get_service('queries').list_available_sessions()
        payload['matches'] = [m.to_dict() for m in matches]
    return jsonify(payload)
