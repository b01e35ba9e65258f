"""
Connection health tracking

This module implements the hysteresis state machine behind the connection
indicator. Recovery is observed through accepted packets, degradation
through packet age on each tick; both feed the same counter so a single
late or early event cannot flap the indicator.
"""

import logging
import math
from typing import Optional

from ..core.data_types import ConnectionState
from ..core.config import (
    CONNECTION_HYSTERESIS_COUNT, CONNECTED_MAX_AGE_MS,
    DEGRADED_MAX_AGE_MS, STALE_MAX_AGE_MS,
)


class ConnectionTracker:
    """
    Debounced connection state

    The visible state only changes after ``threshold`` consecutive
    observations agree on the same target.
    """

    def __init__(self, threshold: int = CONNECTION_HYSTERESIS_COUNT,
                 connected_max_age_ms: float = CONNECTED_MAX_AGE_MS,
                 degraded_max_age_ms: float = DEGRADED_MAX_AGE_MS,
                 stale_max_age_ms: float = STALE_MAX_AGE_MS):
        self.threshold = threshold
        self.connected_max_age_ms = connected_max_age_ms
        self.degraded_max_age_ms = degraded_max_age_ms
        self.stale_max_age_ms = stale_max_age_ms
        self.reset()

    def reset(self, state: ConnectionState = ConnectionState.DISCONNECTED):
        """Force the visible state and clear pending bookkeeping"""
        self.state = state
        self._target = state
        self._counter = 0
        self._last_change = 0.0
        self._last_tick: Optional[float] = None

    @property
    def last_change(self) -> float:
        return self._last_change

    def target_for_age(self, age_ms: float) -> ConnectionState:
        """Map time since the last accepted packet to a target state"""
        if age_ms <= self.connected_max_age_ms:
            return ConnectionState.CONNECTED
        if age_ms <= self.degraded_max_age_ms:
            return ConnectionState.DEGRADED
        if age_ms <= self.stale_max_age_ms:
            return ConnectionState.STALE
        return ConnectionState.DISCONNECTED

    def observe(self, target: ConnectionState, now_ms: float) -> bool:
        """
        Record one observation of the target state

        Args:
            target: State suggested by this packet or tick
            now_ms: Current time (ms)

        Returns:
            bool: True if the visible state changed
        """
        if target != self._target:
            self._target = target
            self._counter = 1
        elif self._counter < self.threshold:
            self._counter += 1

        if self._counter >= self.threshold and self.state != self._target:
            logging.info(f"Connection: {self.state.value} -> {self._target.value}")
            self.state = self._target
            self._last_change = now_ms
            return True
        return False

    def on_packet(self, now_ms: float) -> bool:
        """An accepted packet is evidence of a live link"""
        return self.observe(ConnectionState.CONNECTED, now_ms)

    def on_tick(self, last_packet_ms: Optional[float], now_ms: float) -> bool:
        """Re-evaluate health from the age of the last accepted packet"""
        # A repeated tick at the same instant is not new evidence
        if self._last_tick is not None and now_ms <= self._last_tick:
            return False
        self._last_tick = now_ms
        age = math.inf if last_packet_ms is None else now_ms - last_packet_ms
        return self.observe(self.target_for_age(age), now_ms)
