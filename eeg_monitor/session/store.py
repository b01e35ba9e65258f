"""
Session state store

This module holds the SessionStore, the single owner of everything the
engine knows about a live session. Transports push payloads in, a scheduler
ticks it, the external classifier proposes mind states, and consumers read
immutable snapshots or subscribe to them.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, List, Mapping, Optional, Sequence, Union

from ..core.data_types import (
    BandPower, BandPowerView, ConnectionState, ConnectionView, DeviceInfo,
    EmotionAxes, EmotionItem, EmotionView, MindState, MindStateView,
    SensorView, SessionSnapshot, StreamEvent, frozen_mapping,
)
from ..core.config import (
    EngineConfig, SENSOR_LEVELS, BAD_SENSOR_MAX, GOOD_SENSOR_MIN,
)
from ..processing.packets import parse_device, parse_band_power, parse_metrics
from ..processing.smoothing import ema_fields, dominant_band, DominantBandDebouncer, NO_BAND
from ..detection.connection import ConnectionTracker
from ..detection.staleness import StalenessDetector
from ..detection.mind_state import MindStateConfirmer, Decision

Subscriber = Callable[[SessionSnapshot], None]


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def sensor_level(code: int) -> str:
    return SENSOR_LEVELS[min(max(code, 0), 4)]


class SessionStore:
    """
    Aggregate of all interpreted session values

    Every mutation runs under one lock, so packet callbacks and the tick
    timer never interleave. Subscribers are called outside the lock with a
    fresh snapshot after each mutation that changed something.

    Args:
        config: Tunable thresholds and the debug flag
        clock: Returns the current time in milliseconds
    """

    def __init__(self, config: Optional[EngineConfig] = None,
                 clock: Callable[[], float] = wall_clock_ms):
        self.config = config or EngineConfig()
        self._clock = clock
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []

        self._connection = ConnectionTracker(
            threshold=self.config.hysteresis_count,
            connected_max_age_ms=self.config.connected_max_age_ms,
            degraded_max_age_ms=self.config.degraded_max_age_ms,
            stale_max_age_ms=self.config.stale_max_age_ms,
        )
        self._staleness = StalenessDetector(self.config.stale_threshold_ms)
        self._mind = MindStateConfirmer(self.config.state_change_cooldown_ms)
        self._dominant_debounce = DominantBandDebouncer(self.config.dominant_band_debounce_ms)

        self._parsers = {
            "dev": (parse_device, self._apply_device),
            "pow": (parse_band_power, self._apply_band_power),
            "met": (parse_metrics, self._apply_metrics),
        }
        self._init_values()

    def _init_values(self):
        self._connection.reset(ConnectionState.DISCONNECTED)
        self._staleness.reset()
        self._mind.reset()
        self._dominant_debounce.reset()

        self._active = False
        self._session_start_at: Optional[float] = None
        self._last_packet_at: Optional[float] = None
        self._packet_rate = 0.0
        self._rate_count = 0
        self._rate_window_start = 0.0

        self._device = DeviceInfo()

        self._band = BandPower()
        self._band_raw: Optional[BandPower] = None
        self._band_last_update = 0.0
        self._dominant = NO_BAND

        self._emotions = EmotionAxes()
        self._emotions_raw: Optional[EmotionAxes] = None
        self._top3: tuple = ()
        self._emotions_last_update = 0.0

        self._sensors: Optional[Mapping[str, int]] = None
        self._bad_sensors = 0
        self._good_sensors = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable point-in-time view of the session"""
        with self._lock:
            return self._build_snapshot()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register an observer for snapshot updates

        Returns:
            Callable that removes the observer again
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def _build_snapshot(self) -> SessionSnapshot:
        levels = None
        if self._sensors is not None:
            levels = frozen_mapping({name: sensor_level(code) for name, code in self._sensors.items()})

        return SessionSnapshot(
            connection=ConnectionView(
                state=self._connection.state,
                label=self._connection.state.label,
                active=self._active,
                packet_rate=self._packet_rate,
            ),
            device=self._device,
            band_power=BandPowerView(
                smoothed=self._band,
                raw=self._band_raw,
                stale=self._staleness.band_power_stale,
                dominant=self._dominant,
                dominant_stable=self._dominant_debounce.stable,
            ),
            emotions=EmotionView(
                smoothed=self._emotions,
                raw=self._emotions_raw,
                top3=self._top3,
                stale=self._staleness.emotions_stale,
            ),
            mind_state=MindStateView(
                current=self._mind.current,
                challenger=self._mind.challenger,
                label=self._mind.label,
                blocked=self._mind.blocked,
            ),
            sensors=SensorView(
                sensors=self._sensors,
                levels=levels,
                bad=self._bad_sensors,
                good=self._good_sensors,
                eeg_quality=self._device.eeg_quality,
            ),
            session_start_at=self._session_start_at,
            last_state_change_at=self._mind.last_change_at,
            last_packet_at=self._last_packet_at,
        )

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def _mutate(self, operation, *args, **kwargs):
        """Run operation under the lock, then notify if it changed anything"""
        with self._lock:
            result, changed = operation(*args, **kwargs)
            snapshot = None
            if changed and self._subscribers:
                snapshot = self._build_snapshot()
            subscribers = list(self._subscribers)

        if snapshot is not None:
            for callback in subscribers:
                try:
                    callback(snapshot)
                except Exception as e:
                    logging.error(f"Snapshot subscriber failed: {e}")
        return result

    def set_active(self, active: bool) -> None:
        """Start or stop a session; connection goes to connecting/disconnected"""
        self._mutate(self._set_active, bool(active))

    def _set_active(self, active: bool):
        now = self._clock()
        self._active = active
        if active:
            self._session_start_at = now
            self._rate_window_start = now
            self._rate_count = 0
        self._connection.reset(ConnectionState.CONNECTING if active else ConnectionState.DISCONNECTED)
        logging.info(f"Session {'started' if active else 'stopped'}")
        return None, True

    def receive_packet(self, stream: str, payload) -> bool:
        """
        Ingest one raw stream payload

        Args:
            stream: "dev", "pow" or "met"; anything else is ignored
            payload: Raw numeric array

        Returns:
            bool: True if the payload was accepted
        """
        return self._mutate(self._receive_packet, stream, payload)

    def handle_event(self, event: StreamEvent) -> bool:
        """Transport-agnostic form of receive_packet"""
        return self.receive_packet(event.stream, event.payload)

    def _receive_packet(self, stream: str, payload):
        handler = self._parsers.get(stream)
        if handler is None:
            if self.config.debug:
                logging.debug(f"Ignoring unknown stream '{stream}'")
            return False, False

        parse, apply = handler
        packet = parse(payload)
        if packet is None:
            if self.config.debug:
                logging.warning(f"Malformed {stream} payload discarded")
            return False, False

        now = self._clock()
        apply(packet, now)
        self._last_packet_at = now
        self._rate_count += 1
        if self._active:
            self._connection.on_packet(now)

        if self.config.debug:
            logging.debug(f"[{stream}] accepted {packet}")
        return True, True

    def _apply_device(self, packet, now: float):
        self._device = replace(
            self._device,
            battery=packet.battery,
            signal=packet.signal,
            eeg_quality=packet.eeg_quality,
        )
        if packet.sensors is not None:
            self._sensors = packet.sensors
            self._bad_sensors = sum(1 for v in packet.sensors.values() if v <= BAD_SENSOR_MAX)
            self._good_sensors = sum(1 for v in packet.sensors.values() if v >= GOOD_SENSOR_MIN)

    def _apply_band_power(self, raw: BandPower, now: float):
        self._band_raw = raw
        self._band = ema_fields(raw, self._band, self.config.ema_alpha_band)
        self._band_last_update = now
        self._staleness.mark_fresh(band_power=True)
        self._dominant = dominant_band(self._band)
        self._dominant_debounce.update(self._dominant, now)

    def _apply_metrics(self, packet, now: float):
        self._apply_emotions(packet.axes, now)
        self._top3 = packet.top3

    def _apply_emotions(self, raw: EmotionAxes, now: float):
        self._emotions_raw = raw
        self._emotions = ema_fields(raw, self._emotions, self.config.ema_alpha_emotion)
        self._emotions_last_update = now
        self._staleness.mark_fresh(emotions=True)

    def update_band_power(self, **bands: float) -> None:
        """Merge partial band values (e.g. from local inference) and smooth"""
        def operation():
            self._apply_band_power(replace(self._band, **bands), self._clock())
            return None, True
        self._mutate(operation)

    def update_emotions(self, axes: Union[EmotionAxes, Mapping[str, float]],
                        top3: Optional[Sequence[EmotionItem]] = None) -> None:
        """Merge emotion axes from an inference step and smooth"""
        def operation():
            raw = axes if isinstance(axes, EmotionAxes) else replace(self._emotions, **axes)
            self._apply_emotions(raw, self._clock())
            if top3 is not None:
                self._top3 = tuple(top3)
            return None, True
        self._mutate(operation)

    def update_device_info(self, **info) -> None:
        """Merge device fields without touching sensor data"""
        def operation():
            self._device = replace(self._device, **info)
            return None, True
        self._mutate(operation)

    def update_mind_state(self, candidate: MindState,
                          challenger: Optional[MindState] = None) -> Decision:
        """
        Offer a classifier result to the confirmation engine

        Returns:
            Decision: accepted, refined or blocked
        """
        def operation():
            decision = self._mind.propose(candidate, challenger, self._clock())
            return decision, True
        return self._mutate(operation)

    def tick(self) -> None:
        """Periodic re-evaluation of staleness, connection and packet rate"""
        self._mutate(self._tick)

    def _tick(self):
        if not self._active:
            return None, False

        now = self._clock()
        changed = self._staleness.check(self._band_last_update, self._emotions_last_update, now)
        changed |= self._connection.on_tick(self._last_packet_at, now)
        changed |= self._update_packet_rate(now)
        changed |= self._mind.expire_block(now)
        return None, changed

    def _update_packet_rate(self, now: float) -> bool:
        elapsed = now - self._rate_window_start
        if elapsed < self.config.packet_rate_window_ms:
            return False
        rate = self._rate_count * 1000.0 / elapsed
        self._rate_count = 0
        self._rate_window_start = now
        if rate == self._packet_rate:
            return False
        self._packet_rate = rate
        return True

    def reset(self) -> None:
        """Return every value to its initial form"""
        def operation():
            self._init_values()
            return None, True
        self._mutate(operation)

    def end_session(self) -> SessionSnapshot:
        """
        Stop the session and hand back its final state

        The returned snapshot is taken after deactivation and before the
        reset, for whoever archives finished sessions.
        """
        def operation():
            self._active = False
            self._connection.reset(ConnectionState.DISCONNECTED)
            final = self._build_snapshot()
            self._init_values()
            logging.info("Session ended")
            return final, True
        return self._mutate(operation)

