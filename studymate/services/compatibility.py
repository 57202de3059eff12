"""
Study partner compatibility scoring.

Pure functions over already-fetched data: no database access, no AI calls.

score = 0.35 * subject overlap      (Jaccard of subjects vs. interest tags)
      + 0.15 * study style          (equal, compatible pair, or mismatch)
      + 0.15 * availability         (equal, one side flexible, or mismatch)
      + 0.15 * experience proximity (1 - 0.3 per level apart)
      + 0.20 * shared blind spots   (Jaccard of low-confidence topics)

`rank_candidates` scores every candidate and returns them sorted by score,
highest first; equal scores keep the candidates' input order.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..constants import EXPERIENCE_LEVELS

WEIGHTS = {
    'subjects': 0.35,
    'study_style': 0.15,
    'availability': 0.15,
    'experience': 0.15,
    'shared_blind_spots': 0.20,
}

# Styles that study well together besides an exact match
COMPATIBLE_STYLES = {
    'visual': {'hands-on'},
    'hands-on': {'visual', 'kinesthetic'},
    'kinesthetic': {'hands-on'},
    'reading': {'auditory'},
    'auditory': {'reading'},
}

NEUTRAL = 0.5
FLEXIBLE = 'flexible'


@dataclass
class MatchProfile:
    """What the requesting user declared about themselves."""
    user_id: int
    preferred_subjects: List[str]
    study_style: Optional[str] = None
    availability: Optional[str] = None
    experience_level: Optional[str] = None
    knowledge_gaps: List[Tuple[str, float]] = field(default_factory=list)


@dataclass
class Candidate:
    """A potential partner, built from a user row and their blind spots."""
    user_id: int
    name: str = ''
    interest_tags: List[str] = field(default_factory=list)
    study_style: Optional[str] = None
    availability: Optional[str] = None
    experience_level: Optional[str] = None
    blind_spots: List[Tuple[str, float]] = field(default_factory=list)


@dataclass
class ScoredCandidate:
    candidate: Candidate
    score: float
    breakdown: Dict[str, float]
    common_topics: List[str]


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip().lower()
    return value or None


def _casefold_set(values: Iterable[str]) -> set:
    return {v for v in (_normalize(x) for x in values or []) if v}


def overlap(first: Iterable[str], second: Iterable[str]) -> float:
    """Jaccard similarity of two case-insensitive string collections (0 when either is empty)."""
    a, b = _casefold_set(first), _casefold_set(second)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def style_score(style: Optional[str], other: Optional[str]) -> float:
    style, other = _normalize(style), _normalize(other)
    if not style or not other:
        return NEUTRAL
    if style == other:
        return 1.0
    if other in COMPATIBLE_STYLES.get(style, set()):
        return 0.6
    return 0.2


def availability_score(availability: Optional[str], other: Optional[str]) -> float:
    availability, other = _normalize(availability), _normalize(other)
    if not availability or not other:
        return NEUTRAL
    if availability == other:
        return 1.0
    if FLEXIBLE in (availability, other):
        return 0.7
    return 0.0


def experience_score(level: Optional[str], other: Optional[str]) -> float:
    level, other = _normalize(level), _normalize(other)
    if level not in EXPERIENCE_LEVELS or other not in EXPERIENCE_LEVELS:
        return NEUTRAL
    distance = abs(EXPERIENCE_LEVELS.index(level) - EXPERIENCE_LEVELS.index(other))
    return max(0.0, 1.0 - distance * 0.3)


def low_confidence_topics(gaps: Sequence[Tuple[str, float]], threshold: float) -> List[str]:
    return [topic for topic, confidence in gaps if confidence < threshold]


def find_common_topics(profile: MatchProfile, candidate: Candidate, threshold: float) -> List[str]:
    """Subjects that loosely match a candidate tag, then shared weak topics, de-duplicated."""
    tags = [t.lower() for t in candidate.interest_tags or [] if t]
    common = []
    for subject in profile.preferred_subjects:
        s = subject.lower()
        if any(s in tag or tag in s for tag in tags):
            common.append(subject)

    theirs = _casefold_set(low_confidence_topics(candidate.blind_spots, threshold))
    for topic in low_confidence_topics(profile.knowledge_gaps, threshold):
        if _normalize(topic) in theirs:
            common.append(topic)

    seen = set()
    unique = []
    for topic in common:
        key = topic.lower()
        if key not in seen:
            seen.add(key)
            unique.append(topic)
    return unique


def score_candidate(profile: MatchProfile, candidate: Candidate,
                    threshold: float = 0.5) -> ScoredCandidate:
    breakdown = {
        'subjects': overlap(profile.preferred_subjects, candidate.interest_tags),
        'study_style': style_score(profile.study_style, candidate.study_style),
        'availability': availability_score(profile.availability, candidate.availability),
        'experience': experience_score(profile.experience_level, candidate.experience_level),
        'shared_blind_spots': overlap(low_confidence_topics(profile.knowledge_gaps, threshold),
                                      low_confidence_topics(candidate.blind_spots, threshold)),
    }
    score = sum(WEIGHTS[name] * value for name, value in breakdown.items())
    return ScoredCandidate(
        candidate=candidate,
        score=round(score, 4),
        breakdown={name: round(value, 4) for name, value in breakdown.items()},
        common_topics=find_common_topics(profile, candidate, threshold),
    )


def rank_candidates(profile: MatchProfile, candidates: Iterable[Candidate],
                    threshold: float = 0.5, min_score: float = 0.0,
                    limit: Optional[int] = None) -> List[ScoredCandidate]:
    """Score every candidate other than the requester and sort by score, highest first."""
    scored = [
        score_candidate(profile, candidate, threshold)
        for candidate in candidates
        if candidate.user_id != profile.user_id
    ]
    ranked = sorted((s for s in scored if s.score >= min_score),
                    key=lambda s: s.score, reverse=True)
    return ranked[:limit] if limit is not None else ranked
