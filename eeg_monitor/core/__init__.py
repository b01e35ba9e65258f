"""
Core data types and configuration for EEG Monitor

This module contains the fundamental data classes used throughout the system.
"""

from .data_types import (
    BandPower, EmotionAxes, EmotionItem, DeviceInfo, MindState, Tier,
    ConnectionState, StreamEvent, SessionSnapshot,
)
from .config import EngineConfig

__all__ = [
    'BandPower', 'EmotionAxes', 'EmotionItem', 'DeviceInfo', 'MindState', 'Tier',
    'ConnectionState', 'StreamEvent', 'SessionSnapshot', 'EngineConfig',
]
