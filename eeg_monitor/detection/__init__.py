"""
Signal interpretation state machines

This module implements connection health tracking, data staleness
detection and mind state confirmation.
"""

from .connection import ConnectionTracker
from .staleness import StalenessDetector
from .mind_state import MindStateConfirmer, Decision

__all__ = ['ConnectionTracker', 'StalenessDetector', 'MindStateConfirmer', 'Decision']
