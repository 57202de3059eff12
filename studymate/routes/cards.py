"""
Flashcard Routes

FLOW OVERVIEW
- /api/generate-cards [POST]
  • {topics, difficulty?} or {fromBlindSpots: true, difficulty?} → {cards}.
- /api/generate-cards [GET]
  • ?cardId= → one owned card, else the user's cards filtered by ?topic=.
- /api/generate-cards [DELETE]
  • ?cardId= (required) → delete an owned card.
- /api/generate-cards/export [GET]
  • Anki CSV download.
- /api/generate-cards/stats [GET]
  • Card counts overall, per topic and for the last week.
"""

import io
import logging
from flask import Blueprint, jsonify, request, send_file

from ..constants import DEFAULT_DIFFICULTY
from ..services.cards import cards_service
from ..utils.api_utils import request_validator, rate_limiter
from ..utils.error_handlers import NotFoundError
from ..utils.validators import InputValidator, require, sanitize_input

logger = logging.getLogger(__name__)

cards_bp = Blueprint('cards', __name__)


def _card_id(required=True):
    value = request.args.get('cardId')
    if value is None and not required:
        return None
    return require(InputValidator.validate_id(value, 'Card ID is required', 'Invalid card ID'),
                   'cardId')


@cards_bp.route('/generate-cards', methods=['POST'])
@rate_limiter.rate_limited('cards')
def generate_cards():
    """Generate flashcards for the given topics or the user's blind spots"""
    data = request_validator.get_json_body()
    user = request_validator.resolve_user(data)
    difficulty = data.get('difficulty') or DEFAULT_DIFFICULTY

    if data.get('fromBlindSpots') is True:
        logger.info(f"API Request POST /api/generate-cards user={user.id} fromBlindSpots")
        result = cards_service.generate_cards_from_blind_spots(user.id, difficulty)
    else:
        logger.info(f"API Request POST /api/generate-cards user={user.id}")
        result = cards_service.generate_cards(data.get('topics'), user.id, difficulty)
    return jsonify(result), 200


@cards_bp.route('/generate-cards', methods=['GET'])
def get_cards():
    """List the user's cards, or fetch one by id"""
    user = request_validator.resolve_user()
    card_id = _card_id(required=False)

    if card_id is not None:
        card = cards_service.get_card(card_id, user.id)
        if not card:
            raise NotFoundError('Card')
        return jsonify({'card': card.to_dict()}), 200

    cards = cards_service.get_user_cards(user.id, request.args.get('topic') or None)
    return jsonify({'cards': [card.to_dict() for card in cards]}), 200


@cards_bp.route('/generate-cards', methods=['DELETE'])
def delete_card():
    """Delete one of the user's cards"""
    user = request_validator.resolve_user()
    card_id = _card_id()

    if not cards_service.delete_card(card_id, user.id):
        raise NotFoundError('Card')
    return jsonify({'success': True}), 200


@cards_bp.route('/generate-cards/export', methods=['GET'])
def export_cards():
    """Download the user's cards as an Anki import file"""
    user = request_validator.resolve_user()
    topic = request.args.get('topic') or None

    csv_content = cards_service.export_to_anki(user.id, topic)
    filename_topic = sanitize_input(topic, max_length=100).replace('\n', ' ') if topic else 'all'
    # send_file adds the RFC 2231 filename* form for non-ASCII topics
    return send_file(
        io.BytesIO(csv_content.encode('utf-8')),
        mimetype='text/csv',
        as_attachment=True,
        download_name=f'anki-cards-{filename_topic}.csv',
    )


@cards_bp.route('/generate-cards/stats', methods=['GET'])
def card_stats():
    """Card counts for the user"""
    user = request_validator.resolve_user()
    return jsonify(cards_service.get_card_stats(user.id)), 200
