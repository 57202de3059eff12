"""
Knowledge blind spot analysis.

FLOW OVERVIEW
- analyze_content(content, user_id, user_assessment)
  • Validate content and self-assessment, store a LearningSession, ask the AI
    client for topics, persist the low-confidence topics as BlindSpots.
- get_user_blind_spots / get_blind_spot / delete_blind_spot
  • Owner-scoped reads and deletes.
- get_analysis_history(user_id, limit)
  • Past sessions, newest first, with the number of blind spots each produced.
"""

import time
import logging
from typing import Dict, Any, List, Optional
from flask import current_app
from sqlalchemy import func

from ..models import db, LearningSession, BlindSpot
from ..utils.ai_client import ai_client
from ..utils.request_logger import request_logger
from ..utils.error_handlers import ValidationError
from ..utils.validators import validate_content, validate_confidence, require, sanitize_input


def topic_recommendations(topic: str, confidence: float) -> List[str]:
    """Next steps for a single topic, graded by confidence."""
    if confidence < 0.3:
        return [f'Start with basic concepts of {topic}',
                f'Find beginner-friendly resources for {topic}']
    if confidence < 0.6:
        return [f'Practice more exercises on {topic}',
                f'Review intermediate concepts of {topic}']
    return [f'Focus on advanced applications of {topic}',
            f'Teach others about {topic} to reinforce learning']


def overall_recommendations(topics: List[Dict[str, Any]]) -> List[str]:
    blind_spots = [t['topic'] for t in topics if t['isBlindSpot']]
    strengths = [t['topic'] for t in topics if not t['isBlindSpot'] and t['confidence'] > 0.7]

    recommendations = []
    if blind_spots:
        recommendations.append(f"Focus on these areas: {', '.join(blind_spots)}")
    if strengths:
        recommendations.append(f"Build on your strengths in: {', '.join(strengths)}")
    if len(blind_spots) > 3:
        recommendations.append('Consider breaking down complex topics into smaller, manageable parts')
    return recommendations


def normalize_topics(raw_topics: List[Any], threshold: float) -> List[Dict[str, Any]]:
    """Clamp model confidences into [0, 1] and settle each topic's blind spot flag.

    The model's own isBlindSpot flag wins when it is a boolean; otherwise a
    topic is a blind spot when its confidence is below `threshold`. Entries
    without a usable topic name or confidence are dropped.
    """
    topics = []
    for item in raw_topics:
        if not isinstance(item, dict):
            continue
        name = sanitize_input(item.get('topic'), max_length=255)
        try:
            confidence = float(item.get('confidence'))
        except (TypeError, ValueError):
            continue
        if not name or confidence != confidence:
            continue
        confidence = min(1.0, max(0.0, confidence))
        flag = item.get('isBlindSpot')
        is_blind_spot = flag if isinstance(flag, bool) else confidence < threshold
        topics.append({'topic': name, 'confidence': confidence, 'isBlindSpot': is_blind_spot})
    return topics


class AnalyzeService:
    """Blind spot analysis backed by the AI client."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def analyze_content(self, content: Any, user_id: int,
                        user_assessment: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        start_time = time.time()
        max_length = current_app.config.get('MAX_CONTENT_LENGTH_CHARS', 10000)
        content = require(validate_content(content, max_length), 'content')
        assessment = self._validate_assessment(user_assessment)

        self.logger.info(f"Starting content analysis for user {user_id} ({len(content)} chars)")

        session = LearningSession(user_id=user_id, content=content)
        db.session.add(session)
        db.session.commit()
        request_logger.database_operation('insert', 'learning_sessions',
                                          duration_ms=int((time.time() - start_time) * 1000))

        ai_result = ai_client.analyze_content(content, assessment)

        threshold = current_app.config.get('BLIND_SPOT_THRESHOLD', 0.5)
        topics = normalize_topics(ai_result['topics'], threshold)
        analysis_text = str(ai_result.get('analysis') or '')

        blind_spots = [
            BlindSpot(
                user_id=user_id,
                session_id=session.id,
                topic=t['topic'],
                confidence=t['confidence'],
                ai_analysis={
                    'topics': topics,
                    'analysis': analysis_text,
                    'recommendations': topic_recommendations(t['topic'], t['confidence']),
                },
            )
            for t in topics if t['isBlindSpot']
        ]
        if blind_spots:
            db.session.add_all(blind_spots)
            db.session.commit()
            request_logger.database_operation('insert', 'blind_spots',
                                              duration_ms=int((time.time() - start_time) * 1000))

        self.logger.info(
            f"Content analysis completed for user {user_id}: {len(blind_spots)} blind spots "
            f"in {int((time.time() - start_time) * 1000)}ms"
        )

        return {
            'blindSpots': [b.to_dict() for b in blind_spots],
            'analysis': {
                'topics': topics,
                'analysis': analysis_text,
                'recommendations': overall_recommendations(topics),
            },
        }

    def get_user_blind_spots(self, user_id: int) -> List[BlindSpot]:
        blind_spots = (BlindSpot.query
                       .filter_by(user_id=user_id)
                       .order_by(BlindSpot.created_at, BlindSpot.id)
                       .all())
        request_logger.database_operation('select', 'blind_spots')
        return blind_spots

    def get_blind_spot(self, blind_spot_id: int, user_id: int) -> Optional[BlindSpot]:
        return BlindSpot.query.filter_by(id=blind_spot_id, user_id=user_id).first()

    def delete_blind_spot(self, blind_spot_id: int, user_id: int) -> bool:
        blind_spot = self.get_blind_spot(blind_spot_id, user_id)
        if not blind_spot:
            return False
        db.session.delete(blind_spot)
        db.session.commit()
        request_logger.database_operation('delete', 'blind_spots')
        return True

    def get_analysis_history(self, user_id: int, limit: int = 10) -> List[Dict[str, Any]]:
        rows = (db.session.query(LearningSession, func.count(BlindSpot.id))
                .outerjoin(BlindSpot, BlindSpot.session_id == LearningSession.id)
                .filter(LearningSession.user_id == user_id)
                .group_by(LearningSession.id)
                .order_by(LearningSession.created_at.desc(), LearningSession.id.desc())
                .limit(limit)
                .all())
        request_logger.database_operation('select', 'learning_sessions')
        history = []
        for session, count in rows:
            entry = session.to_dict()
            entry['blindSpotsCount'] = count
            history.append(entry)
        return history

    @staticmethod
    def _validate_assessment(user_assessment: Any) -> Optional[Dict[str, float]]:
        if user_assessment is None:
            return None
        if not isinstance(user_assessment, dict):
            raise ValidationError('User assessment must be an object of topic confidences',
                                  'userAssessment')
        return {
            sanitize_input(topic, max_length=255): require(validate_confidence(value), 'userAssessment')
            for topic, value in user_assessment.items()
        }


analyze_service = AnalyzeService()
