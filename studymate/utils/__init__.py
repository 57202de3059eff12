"""
Utilities Package

This package contains utility functions and helper modules.
"""

from . import error_handlers
from . import validators
from . import request_logger

__all__ = [
    'error_handlers',
    'validators',
    'request_logger'
]
