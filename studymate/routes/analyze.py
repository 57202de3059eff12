"""
Analyze Routes

FLOW OVERVIEW
- /api/analyze [POST]
  • Validate content → AI blind spot analysis → {blindSpots, analysis}.
- /api/analyze [GET]
  • ?blindSpotId= → one owned blind spot, else all of the user's blind spots.
- /api/analyze [DELETE]
  • ?blindSpotId= (required) → delete an owned blind spot.
- /api/analyze/history [GET]
  • Past analysis sessions, newest first.
"""

import logging
from flask import Blueprint, jsonify, request

from ..constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..services.analyze import analyze_service
from ..utils.api_utils import request_validator, rate_limiter
from ..utils.error_handlers import NotFoundError, ValidationError
from ..utils.validators import InputValidator, require

logger = logging.getLogger(__name__)

analyze_bp = Blueprint('analyze', __name__)


def _blind_spot_id(required=True):
    value = request.args.get('blindSpotId')
    if value is None and not required:
        return None
    return require(InputValidator.validate_id(value, 'Blind spot ID is required',
                                              'Invalid blind spot ID'), 'blindSpotId')


@analyze_bp.route('/analyze', methods=['POST'])
@rate_limiter.rate_limited('analyze')
def analyze_content():
    """Analyze learning content for knowledge blind spots"""
    data = request_validator.get_json_body()
    user = request_validator.resolve_user(data)

    logger.info(f"API Request POST /api/analyze user={user.id}")
    result = analyze_service.analyze_content(data.get('content'), user.id,
                                             data.get('userAssessment'))
    return jsonify(result), 200


@analyze_bp.route('/analyze', methods=['GET'])
def get_blind_spots():
    """List the user's blind spots, or fetch one by id"""
    user = request_validator.resolve_user()
    blind_spot_id = _blind_spot_id(required=False)

    if blind_spot_id is not None:
        blind_spot = analyze_service.get_blind_spot(blind_spot_id, user.id)
        if not blind_spot:
            raise NotFoundError('Blind spot')
        return jsonify({'blindSpot': blind_spot.to_dict()}), 200

    blind_spots = analyze_service.get_user_blind_spots(user.id)
    return jsonify({'blindSpots': [b.to_dict() for b in blind_spots]}), 200


@analyze_bp.route('/analyze', methods=['DELETE'])
def delete_blind_spot():
    """Delete one of the user's blind spots"""
    user = request_validator.resolve_user()
    blind_spot_id = _blind_spot_id()

    if not analyze_service.delete_blind_spot(blind_spot_id, user.id):
        raise NotFoundError('Blind spot')
    return jsonify({'success': True}), 200


@analyze_bp.route('/analyze/history', methods=['GET'])
def analysis_history():
    """Past analysis sessions with their blind spot counts"""
    user = request_validator.resolve_user()
    limit = request.args.get('limit', str(DEFAULT_HISTORY_LIMIT)).strip()
    if not limit.isdecimal() or not 1 <= int(limit) <= MAX_HISTORY_LIMIT:
        raise ValidationError(f'Limit must be between 1 and {MAX_HISTORY_LIMIT}', 'limit')
    limit = int(limit)

    return jsonify({'history': analyze_service.get_analysis_history(user.id, limit)}), 200
