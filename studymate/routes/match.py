"""
Match Routes

FLOW OVERVIEW
- /api/match [POST]
  • Matching profile → ranked partners and discussion topics.
- /api/match [GET]
  • ?userId= → stored matches for the user.
- /api/match [PUT]
  • matchId + status (query or body) → lifecycle update by a participant.
"""

import logging
from flask import Blueprint, jsonify, session

from ..services.matching import matching_service
from ..utils.api_utils import request_validator, rate_limiter
from ..utils.error_handlers import NotFoundError

logger = logging.getLogger(__name__)

match_bp = Blueprint('match', __name__)


@match_bp.route('/match', methods=['POST'])
@rate_limiter.rate_limited('match')
def find_matches():
    """Find compatible study partners"""
    data = request_validator.get_json_body()
    if data.get('userId') is None and session.get('user_id') is not None:
        data['userId'] = session['user_id']

    logger.info(f"API Request POST /api/match user={data.get('userId')}")
    result = matching_service.find_matches(data)
    return jsonify(result), 200


@match_bp.route('/match', methods=['GET'])
def get_matches():
    """Stored matches for a user"""
    user = request_validator.resolve_user()
    return jsonify({'matches': matching_service.get_user_matches(user.id)}), 200


@match_bp.route('/match', methods=['PUT'])
def update_match():
    """Accept, reject or activate a match"""
    data = request_validator.get_json_body(required=False)
    match_id = request_validator.get_param('matchId', data)
    status = request_validator.get_param('status', data)
    user = request_validator.resolve_user(data)

    match = matching_service.update_match_status(match_id, status, user.id)
    if not match:
        raise NotFoundError('Match')
    return jsonify({'success': True, 'status': match.status, 'match': match.to_dict()}), 200
