"""
Flashcard generation, storage and Anki export.
"""

import io
import csv
import time
import logging
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
from sqlalchemy import func

from ..constants import DEFAULT_DIFFICULTY, MAX_TOPICS_PER_REQUEST
from ..models import db, Flashcard, BlindSpot
from ..utils.ai_client import ai_client
from ..utils.request_logger import request_logger
from ..utils.validators import validate_topics, validate_difficulty, require, sanitize_input

ANKI_HEADER = ('Front', 'Back', 'Tags')
RECENT_DAYS = 7


class CardsService:
    """Flashcards generated by the AI client and owned by a user."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def generate_cards(self, topics: Any, user_id: int,
                       difficulty: str = DEFAULT_DIFFICULTY) -> Dict[str, List[Dict[str, Any]]]:
        """
        Generate flashcards for `topics` and store them for `user_id`.

        Cards the model returns without a question or answer are skipped; a
        card without a topic is filed under the first requested topic.

        Returns:
            {"cards": [...]} holding only the newly created cards
        """
        topics = require(validate_topics(topics), 'topics')
        difficulty = require(validate_difficulty(difficulty), 'difficulty')

        start_time = time.time()
        self.logger.info(f"Generating {difficulty} cards for user {user_id}: {topics}")

        ai_result = ai_client.generate_cards(topics, difficulty)

        cards = []
        for item in ai_result['cards']:
            if not isinstance(item, dict):
                continue
            question = str(item.get('question') or '').strip()
            answer = str(item.get('answer') or '').strip()
            if not question or not answer:
                continue
            topic = sanitize_input(item.get('topic'), max_length=255) or topics[0]
            cards.append(Flashcard(user_id=user_id, question=question,
                                   answer=answer, related_topic=topic))

        if cards:
            db.session.add_all(cards)
            db.session.commit()
            request_logger.database_operation('insert', 'flashcards',
                                              duration_ms=int((time.time() - start_time) * 1000))

        self.logger.info(f"Stored {len(cards)} cards for user {user_id}")
        return {'cards': [card.to_dict() for card in cards]}

    def generate_cards_from_blind_spots(self, user_id: int,
                                        difficulty: str = DEFAULT_DIFFICULTY) -> Dict[str, List[Dict[str, Any]]]:
        """Generate cards for the user's stored blind spot topics."""
        rows = (BlindSpot.query
                .filter_by(user_id=user_id)
                .order_by(BlindSpot.confidence, BlindSpot.created_at)
                .all())
        topics = []
        seen = set()
        for blind_spot in rows:
            key = blind_spot.topic.lower()
            if key not in seen:
                seen.add(key)
                topics.append(blind_spot.topic)

        if not topics:
            self.logger.info(f"No blind spots stored for user {user_id}; nothing to generate")
            return {'cards': []}
        return self.generate_cards(topics[:MAX_TOPICS_PER_REQUEST], user_id, difficulty)

    def get_user_cards(self, user_id: int, topic: Optional[str] = None) -> List[Flashcard]:
        query = Flashcard.query.filter_by(user_id=user_id)
        if topic:
            query = query.filter_by(related_topic=topic)
        cards = query.order_by(Flashcard.created_at.desc(), Flashcard.id.desc()).all()
        request_logger.database_operation('select', 'flashcards')
        return cards

    def get_card(self, card_id: int, user_id: int) -> Optional[Flashcard]:
        return Flashcard.query.filter_by(id=card_id, user_id=user_id).first()

    def delete_card(self, card_id: int, user_id: int) -> bool:
        card = self.get_card(card_id, user_id)
        if not card:
            return False
        db.session.delete(card)
        db.session.commit()
        request_logger.database_operation('delete', 'flashcards')
        return True

    def export_to_anki(self, user_id: int, topic: Optional[str] = None) -> str:
        """Render the user's cards as an Anki import CSV (every field quoted)."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(ANKI_HEADER)
        for card in self.get_user_cards(user_id, topic):
            writer.writerow((card.question, card.answer, card.related_topic))
        return buffer.getvalue()

    def get_card_stats(self, user_id: int) -> Dict[str, Any]:
        total = Flashcard.query.filter_by(user_id=user_id).count()
        by_topic = (db.session.query(Flashcard.related_topic, func.count(Flashcard.id))
                    .filter(Flashcard.user_id == user_id)
                    .group_by(Flashcard.related_topic)
                    .all())
        since = datetime.utcnow() - timedelta(days=RECENT_DAYS)
        recent = (Flashcard.query
                  .filter(Flashcard.user_id == user_id, Flashcard.created_at >= since)
                  .count())
        request_logger.database_operation('select', 'flashcards')
        return {
            'totalCards': total,
            'cardsByTopic': {topic: count for topic, count in by_topic},
            'recentCards': recent,
        }


cards_service = CardsService()
