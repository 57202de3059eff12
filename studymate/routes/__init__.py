"""
Routes Package

This package contains all Flask route blueprints.
"""

from .analyze import analyze_bp
from .auth import auth_bp
from .cards import cards_bp
from .main import main_bp
from .match import match_bp

__all__ = [
    'analyze_bp',
    'auth_bp',
    'cards_bp',
    'main_bp',
    'match_bp'
]
