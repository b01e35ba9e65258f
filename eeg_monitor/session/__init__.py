"""
Session aggregate

This module exposes the SessionStore that owns all interpreted values of a
live session.
"""

from .store import SessionStore
from .runner import SessionRunner

__all__ = ['SessionStore', 'SessionRunner']
