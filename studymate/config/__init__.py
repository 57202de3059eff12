"""
Configuration Package

Exposes the environment-driven `Config` object consumed by `create_app`.
"""

from .config import Config

__all__ = ['Config']
