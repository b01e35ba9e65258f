"""
Telemetry processing components

This module contains the stream payload parsers and the smoothing filters
applied to parsed band power and emotion axes.
"""

from .packets import parse_device, parse_band_power, parse_metrics
from .smoothing import ema, ema_fields, dominant_band, DominantBandDebouncer

__all__ = [
    'parse_device', 'parse_band_power', 'parse_metrics',
    'ema', 'ema_fields', 'dominant_band', 'DominantBandDebouncer',
]
