"""
Core data types for EEG Monitor

This module defines the data structures shared by the parsers, the
detectors and the session store. Everything a consumer can see is frozen.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from functools import total_ordering
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


class ConnectionState(Enum):
    """Externally visible connection health"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DEGRADED = "degraded"
    STALE = "stale"

    @property
    def label(self) -> str:
        return CONNECTION_LABELS[self]


CONNECTION_LABELS = {
    ConnectionState.DISCONNECTED: "EEG Disconnected",
    ConnectionState.CONNECTING: "Connecting...",
    ConnectionState.CONNECTED: "EEG Connected",
    ConnectionState.DEGRADED: "EEG Weak",
    ConnectionState.STALE: "EEG Stale",
}


@total_ordering
class Tier(Enum):
    """Validation tier of a mind state, in ascending certainty"""
    DETECTED = "detected"
    CANDIDATE = "candidate"
    CONFIRMED = "confirmed"
    LOCKED = "locked"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank


_TIER_ORDER = (Tier.DETECTED, Tier.CANDIDATE, Tier.CONFIRMED, Tier.LOCKED)


@dataclass(frozen=True)
class BandPower:
    """Relative band powers (pow stream)"""
    theta: float = 0.0
    alpha: float = 0.0
    beta_l: float = 0.0
    beta_h: float = 0.0
    gamma: float = 0.0
    delta: float = 0.0


@dataclass(frozen=True)
class EmotionAxes:
    """Axes derived from performance metrics"""
    valence: float = 0.0   # -1 to +1
    arousal: float = 0.0   # 0 to 1, not clamped
    control: float = 0.0   # 0 to 1, not clamped


@dataclass(frozen=True)
class EmotionItem:
    name: str
    score: float


@dataclass(frozen=True)
class DeviceInfo:
    """Headset status (dev stream)"""
    battery: int = 0                   # 0-100
    signal: int = 0                    # 0-5
    eeg_quality: Optional[int] = None  # 0-100, None when not provided


@dataclass(frozen=True)
class DevicePacket:
    """Result of parsing one dev payload"""
    battery: int
    signal: int
    eeg_quality: Optional[int]
    sensors: Optional[Mapping[str, int]] = None


@dataclass(frozen=True)
class MetricsPacket:
    """Result of parsing one met payload"""
    axes: EmotionAxes
    top3: Tuple[EmotionItem, ...]


@dataclass(frozen=True)
class MindState:
    """
    A mind state as handed over by the external classifier

    ``entered_at`` and ``tier_changed_at`` are restamped by the store when
    the state is accepted, so classifiers may leave them at 0.
    """
    id: str
    confidence: float
    tier: Tier = Tier.DETECTED
    entered_at: float = 0.0
    tier_changed_at: float = 0.0
    dominant_bands: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StreamEvent:
    """One payload delivered by a transport"""
    stream: str
    payload: Any
    time: Optional[float] = None

    @classmethod
    def from_cortex_message(cls, message: Mapping[str, Any]) -> Tuple["StreamEvent", ...]:
        """
        Split a Cortex-style data message into stream events

        Data messages carry a ``sid`` and one array per subscribed stream.
        Anything else (RPC responses, warnings) yields no events.
        """
        if not isinstance(message, Mapping) or "sid" not in message:
            return ()
        return tuple(
            cls(stream=name, payload=message[name], time=message.get("time"))
            for name in ("dev", "pow", "met")
            if name in message
        )


# ----------------------------------------------------------------------------
# Snapshot views
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionView:
    state: ConnectionState
    label: str
    active: bool
    packet_rate: float


@dataclass(frozen=True)
class BandPowerView:
    smoothed: BandPower
    raw: Optional[BandPower]
    stale: bool
    dominant: str
    dominant_stable: str


@dataclass(frozen=True)
class EmotionView:
    smoothed: EmotionAxes
    raw: Optional[EmotionAxes]
    top3: Tuple[EmotionItem, ...]
    stale: bool


@dataclass(frozen=True)
class MindStateView:
    current: Optional[MindState]
    challenger: Optional[MindState]
    label: str
    blocked: bool


@dataclass(frozen=True)
class SensorView:
    sensors: Optional[Mapping[str, int]]
    levels: Optional[Mapping[str, str]]
    bad: int
    good: int
    eeg_quality: Optional[int]


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time, read-only view of a SessionStore"""
    connection: ConnectionView
    device: DeviceInfo
    band_power: BandPowerView
    emotions: EmotionView
    mind_state: MindStateView
    sensors: SensorView
    session_start_at: Optional[float] = None
    last_state_change_at: float = 0.0
    last_packet_at: Optional[float] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (enums by value, mappings as dicts)"""
        return _jsonable(self)


def frozen_mapping(values: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    if values is None:
        return None
    return MappingProxyType(dict(values))


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
