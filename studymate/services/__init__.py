"""
Services Package

FLOW OVERVIEW
- analyze_service: blind spot analysis of learning content.
- cards_service: flashcard generation, storage and Anki export.
- matching_service: study partner search and match lifecycle.
- compatibility: pure scoring functions used by matching.
"""

from .analyze import analyze_service
from .cards import cards_service
from .matching import matching_service

__all__ = [
    'analyze_service',
    'cards_service',
    'matching_service'
]
