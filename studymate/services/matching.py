"""
Study buddy matching.

FLOW OVERVIEW
- find_matches(profile)
  • Validate the posted profile, load every other user with their blind spots,
    rank them with the compatibility scorer, attach suggested activities,
    upsert BuddyMatch rows and add AI discussion topics.
- get_user_matches(user_id)
  • Stored matches on either side of the pair, best score first.
- update_match_status(match_id, status, user_id)
  • Lifecycle transition by either participant; None when the match does not
    exist or the user is not part of it.
"""

import time
import logging
from collections import defaultdict
from typing import Dict, Any, List, Optional
from flask import current_app
from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from ..constants import MAX_ACTIVITIES_PER_MATCH, MATCH_STATUS_PENDING
from ..models import db, User, BlindSpot, BuddyMatch
from ..utils.ai_client import ai_client
from ..utils.error_handlers import AIServiceError, NotFoundError, ValidationError
from ..utils.request_logger import request_logger
from ..utils.validators import (
    validate_confidence, validate_match_id, validate_match_status, validate_user_id,
    require, sanitize_input,
)
from .compatibility import MatchProfile, Candidate, ScoredCandidate, rank_candidates

FALLBACK_ACTIVITIES = [
    'Schedule regular study sessions',
    'Share study resources and notes',
]


def parse_profile(data: Any) -> MatchProfile:
    """Validate a posted matching profile and convert it to a MatchProfile."""
    if not isinstance(data, dict):
        raise ValidationError('Request data must be a JSON object.')

    user_id = require(validate_user_id(data.get('userId')), 'userId')

    patterns = data.get('learningPatterns')
    if not patterns or not isinstance(patterns, dict):
        raise ValidationError('Learning patterns are required', 'learningPatterns')

    subjects = patterns.get('preferredSubjects')
    if not isinstance(subjects, list):
        raise ValidationError('Preferred subjects are required and must be an array',
                              'preferredSubjects')

    for name, label in (('studyStyle', 'Study style'),
                        ('availability', 'Availability'),
                        ('experienceLevel', 'Experience level')):
        if not patterns.get(name) or not isinstance(patterns.get(name), str):
            raise ValidationError(f'{label} is required', name)

    gaps = data.get('knowledgeGaps')
    if not isinstance(gaps, list):
        raise ValidationError('Knowledge gaps are required and must be an array', 'knowledgeGaps')

    knowledge_gaps = []
    for gap in gaps:
        if not isinstance(gap, dict) or not isinstance(gap.get('topic'), str) or not gap['topic'].strip():
            raise ValidationError('Each knowledge gap must have a topic string', 'knowledgeGaps')
        confidence = validate_confidence(gap.get('confidence'))
        if not confidence.is_valid:
            raise ValidationError('Each knowledge gap must have a confidence number between 0 and 1',
                                  'knowledgeGaps')
        knowledge_gaps.append((sanitize_input(gap['topic'], max_length=255),
                               confidence.sanitized_value))

    return MatchProfile(
        user_id=user_id,
        preferred_subjects=[sanitize_input(s, max_length=255) for s in subjects
                            if isinstance(s, str) and s.strip()],
        study_style=patterns['studyStyle'],
        availability=patterns['availability'],
        experience_level=patterns['experienceLevel'],
        knowledge_gaps=knowledge_gaps,
    )


class MatchingService:
    """Finds, stores and updates study partner matches."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def find_matches(self, data: Dict[str, Any]) -> Dict[str, Any]:
        start_time = time.time()
        profile = parse_profile(data)
        if not db.session.get(User, profile.user_id):
            raise NotFoundError('User')

        self.logger.info(f"Starting buddy matching for user {profile.user_id}")

        config = current_app.config
        ranked = rank_candidates(
            profile,
            self._load_candidates(profile.user_id),
            threshold=config.get('BLIND_SPOT_THRESHOLD', 0.5),
            min_score=config.get('MATCH_MIN_SCORE', 0.3),
            limit=config.get('MATCH_RESULT_LIMIT', 10),
        )

        activities = {
            scored.candidate.user_id: self._suggest_activities(profile, scored)
            for scored in ranked
        }
        stored = self._store_matches(profile.user_id, ranked, activities)

        matches = []
        for scored in ranked:
            candidate = scored.candidate
            row = stored.get(candidate.user_id)
            matches.append({
                'matchId': row.id if row else None,
                'userId': candidate.user_id,
                'name': candidate.name,
                'compatibilityScore': scored.score,
                'commonTopics': scored.common_topics,
                'learningStyle': candidate.study_style or 'unknown',
                'availability': candidate.availability or 'flexible',
                'suggestedActivities': activities[candidate.user_id],
                'status': row.status if row else MATCH_STATUS_PENDING,
            })

        suggested_topics = self._discussion_topics(profile, data.get('learningPatterns'))

        self.logger.info(
            f"Buddy matching completed for user {profile.user_id}: {len(matches)} matches "
            f"in {int((time.time() - start_time) * 1000)}ms"
        )
        return {'matches': matches, 'suggestedTopics': suggested_topics}

    def get_user_matches(self, user_id: int) -> List[Dict[str, Any]]:
        rows = (BuddyMatch.query
                .filter(or_(BuddyMatch.user_id1 == user_id, BuddyMatch.user_id2 == user_id))
                .order_by(BuddyMatch.compatibility_score.desc(), BuddyMatch.id)
                .all())
        request_logger.database_operation('select', 'buddy_matches')
        return [row.to_dict(viewer_id=user_id) for row in rows]

    def update_match_status(self, match_id: Any, status: Any,
                            user_id: int) -> Optional[BuddyMatch]:
        match_id = require(validate_match_id(match_id), 'matchId')
        status = require(validate_match_status(status), 'status')

        match = db.session.get(BuddyMatch, match_id)
        if not match or not match.involves(user_id):
            return None
        match.set_status(status)
        db.session.commit()
        request_logger.database_operation('update', 'buddy_matches')
        self.logger.info(f"Match {match_id} moved to {status}")
        return match

    def _load_candidates(self, user_id: int) -> List[Candidate]:
        started_at = time.time()
        users = User.query.filter(User.id != user_id).order_by(User.id).all()

        blind_spots = defaultdict(list)
        for spot in BlindSpot.query.filter(BlindSpot.user_id != user_id).all():
            blind_spots[spot.user_id].append((spot.topic, spot.confidence))
        request_logger.database_operation('select', 'users',
                                          duration_ms=int((time.time() - started_at) * 1000))

        return [
            Candidate(
                user_id=user.id,
                name=user.name,
                interest_tags=user.interest_tags or [],
                study_style=user.learning_type,
                availability=user.availability_time,
                experience_level=user.experience_level,
                blind_spots=blind_spots[user.id],
            )
            for user in users
        ]

    def _suggest_activities(self, profile: MatchProfile, scored: ScoredCandidate) -> List[str]:
        candidate = scored.candidate
        activities = []
        if scored.common_topics:
            first = scored.common_topics[0]
            activities.append(f'Study {first} together')
            activities.append(f'Work on {first} problems')

        try:
            activities.extend(ai_client.generate_study_activities(
                {
                    'learningStyle': profile.study_style,
                    'subjects': profile.preferred_subjects,
                    'experienceLevel': profile.experience_level,
                },
                {
                    'learningStyle': candidate.study_style or 'unknown',
                    'subjects': candidate.interest_tags,
                    'experienceLevel': candidate.experience_level or 'intermediate',
                },
                scored.common_topics,
            ))
        except AIServiceError as e:
            self.logger.error(f"Failed to generate study activities for user {candidate.user_id}: {e}")
            activities.extend(FALLBACK_ACTIVITIES)

        return activities[:MAX_ACTIVITIES_PER_MATCH]

    def _discussion_topics(self, profile: MatchProfile,
                           learning_patterns: Dict[str, Any]) -> List[Dict[str, str]]:
        gaps = [{'topic': topic, 'confidence': confidence}
                for topic, confidence in profile.knowledge_gaps]
        try:
            topics = ai_client.generate_discussion_topics(learning_patterns, gaps)
        except AIServiceError as e:
            self.logger.error(f"Failed to generate discussion topics for user {profile.user_id}: {e}")
            return [{'topic': f'Latest developments in {subject}',
                     'reason': f"You're interested in {subject}"}
                    for subject in profile.preferred_subjects]

        return [{'topic': str(t['topic']),
                 'reason': str(t.get('reason') or f"Based on your interest in {t['topic']}")}
                for t in topics]

    def _store_matches(self, user_id: int, ranked: List[ScoredCandidate],
                       activities: Dict[int, List[str]]) -> Dict[int, BuddyMatch]:
        """Upsert one BuddyMatch per unordered pair of users.

        A row created by the partner's own search is refreshed in place, so
        each pair is listed once from either side. A failed write is logged
        and rolled back; the caller still returns the computed matches
        without match ids.
        """
        started_at = time.time()
        stored = {}
        try:
            for scored in ranked:
                partner_id = scored.candidate.user_id
                row = BuddyMatch.query.filter(or_(
                    and_(BuddyMatch.user_id1 == user_id, BuddyMatch.user_id2 == partner_id),
                    and_(BuddyMatch.user_id1 == partner_id, BuddyMatch.user_id2 == user_id),
                )).first()
                if row is None:
                    row = BuddyMatch(user_id1=user_id, user_id2=partner_id,
                                     status=MATCH_STATUS_PENDING)
                    db.session.add(row)
                row.compatibility_score = scored.score
                row.common_topics = scored.common_topics
                row.suggested_activities = activities[partner_id]
                stored[partner_id] = row
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            request_logger.database_operation('upsert', 'buddy_matches', success=False,
                                              duration_ms=int((time.time() - started_at) * 1000),
                                              error=e)
            return {}

        request_logger.database_operation('upsert', 'buddy_matches',
                                          duration_ms=int((time.time() - started_at) * 1000))
        return stored


matching_service = MatchingService()
