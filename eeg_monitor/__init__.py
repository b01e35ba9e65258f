"""
EEG Monitor - Real-time interpretation of EEG headset telemetry

A modular Python package that turns asynchronous headset telemetry (device
status, band power, performance metrics) into a smoothed, debounced session
snapshot: connection health, data freshness and a confirmed mind state.

Python: 3.10+
"""

__version__ = "1.0.0"

# Main package imports for easy access
from .core.config import EngineConfig
from .core.data_types import (
    BandPower, EmotionAxes, EmotionItem, DeviceInfo, MindState, Tier,
    ConnectionState, StreamEvent, SessionSnapshot,
)
from .processing.packets import parse_device, parse_band_power, parse_metrics
from .detection.mind_state import Decision
from .session.store import SessionStore
from .session.runner import SessionRunner
from .acquisition.sources import LSLPacketSource, FakePacketSource
from .communication.snapshot_sender import SnapshotSender

__all__ = [
    'EngineConfig',
    'BandPower', 'EmotionAxes', 'EmotionItem', 'DeviceInfo', 'MindState', 'Tier',
    'ConnectionState', 'StreamEvent', 'SessionSnapshot',
    'parse_device', 'parse_band_power', 'parse_metrics',
    'Decision', 'SessionStore', 'SessionRunner',
    'LSLPacketSource', 'FakePacketSource', 'SnapshotSender',
]
