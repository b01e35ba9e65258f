"""
Configuration constants for EEG Monitor

This module contains all tunable parameters for telemetry interpretation,
plus the EngineConfig dataclass that carries them into a SessionStore.
"""

from dataclasses import dataclass
from typing import Tuple

# ============================================================================
# HEADSET LAYOUT
# ============================================================================

# 14-channel EPOC layout, in dev stream order (CMS/DRL excluded)
SENSOR_NAMES: Tuple[str, ...] = (
    "AF3", "F7", "F3", "FC5", "T7", "P7", "O1",
    "O2", "P8", "T8", "FC6", "F4", "F8", "AF4",
)

BAD_SENSOR_MAX = 1                # Contact code <= this counts as bad
GOOD_SENSOR_MIN = 4               # Contact code >= this counts as good

SENSOR_LEVELS = {
    0: "very_bad",
    1: "bad",
    2: "ok",
    3: "ok",
    4: "good",
}

# Band names carried on the pow stream (delta is not on the wire)
POW_BANDS: Tuple[str, ...] = ("theta", "alpha", "beta_l", "beta_h", "gamma")

# Metric names on the met stream, in wire order
MET_NAMES: Tuple[str, ...] = (
    "Engagement", "Excitement", "Stress", "Relaxation", "Interest", "Focus",
)

# ============================================================================
# INTERPRETATION
# ============================================================================

# Smoothing
EMA_ALPHA_BAND = 0.2              # Band power EMA factor (faster)
EMA_ALPHA_EMOTION = 0.15          # Emotion axes EMA factor (steadier)
DOMINANT_BAND_DEBOUNCE_MS = 1500  # Hold time before the stable dominant band switches

# Connection health
CONNECTION_HYSTERESIS_COUNT = 5   # Consecutive agreeing observations before switching
CONNECTED_MAX_AGE_MS = 2000       # Packet age up to this -> connected
DEGRADED_MAX_AGE_MS = 6000        # ... up to this -> degraded
STALE_MAX_AGE_MS = 15000          # ... up to this -> stale, beyond -> disconnected

# Data freshness
STALE_THRESHOLD_MS = 3000         # Band power / emotions stale after this

# Mind state confirmation
STATE_CHANGE_COOLDOWN_MS = 4000   # Minimum time between accepted transitions

# Scheduling
TICK_INTERVAL_MS = 500            # Suggested tick period for the scheduler
PACKET_RATE_WINDOW_MS = 1000      # Packet rate recomputed over this window

# ============================================================================
# ADAPTERS
# ============================================================================

# Snapshot publishing
UDP_HOST = "127.0.0.1"            # UI UDP host
UDP_PORT = 5006                   # UI UDP port

# LSL stream names forwarded by the headset software
LSL_STREAMS = {
    "dev": "EmotivDataStream-DeviceInfo",
    "pow": "EmotivDataStream-BandPower",
    "met": "EmotivDataStream-Performance-Metrics",
}


@dataclass
class EngineConfig:
    """
    Per-instance settings for a SessionStore

    Defaults come from the module constants above; the CLI overrides them
    from command line arguments. ``debug`` enables verbose packet logging.
    """

    ema_alpha_band: float = EMA_ALPHA_BAND
    ema_alpha_emotion: float = EMA_ALPHA_EMOTION
    dominant_band_debounce_ms: float = DOMINANT_BAND_DEBOUNCE_MS
    hysteresis_count: int = CONNECTION_HYSTERESIS_COUNT
    connected_max_age_ms: float = CONNECTED_MAX_AGE_MS
    degraded_max_age_ms: float = DEGRADED_MAX_AGE_MS
    stale_max_age_ms: float = STALE_MAX_AGE_MS
    stale_threshold_ms: float = STALE_THRESHOLD_MS
    state_change_cooldown_ms: float = STATE_CHANGE_COOLDOWN_MS
    packet_rate_window_ms: float = PACKET_RATE_WINDOW_MS
    debug: bool = False
