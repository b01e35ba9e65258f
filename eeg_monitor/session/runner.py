"""
Session runner

Wires a packet source to a SessionStore on a single thread: drain the
source, forward events, and tick the store on a fixed period. Once
detached, late events and ticks are dropped instead of reaching the store.
"""

import logging
import time
from threading import Event
from typing import Callable, Optional

from ..core.data_types import SessionSnapshot, StreamEvent
from ..core.config import TICK_INTERVAL_MS
from .store import SessionStore, wall_clock_ms


class SessionRunner:
    """
    Drive one session from a packet source

    Args:
        store: Session aggregate to feed
        source: Object with connect(), poll(now_ms) and disconnect()
        tick_ms: Tick period for the store
        on_tick: Called with a snapshot after every tick
        clock: Returns the current time in milliseconds
    """

    def __init__(self, store: SessionStore, source, tick_ms: float = TICK_INTERVAL_MS,
                 on_tick: Optional[Callable[[SessionSnapshot], None]] = None,
                 clock: Callable[[], float] = wall_clock_ms):
        self.store = store
        self.source = source
        self.tick_ms = tick_ms
        self.on_tick = on_tick
        self._clock = clock
        self._attached = False
        self._next_tick = 0.0

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> bool:
        """Connect the source and start the session"""
        if self._attached:
            return True
        if not self.source.connect():
            logging.error("Failed to connect to telemetry source")
            return False
        self.store.set_active(True)
        self._next_tick = self._clock() + self.tick_ms
        self._attached = True
        return True

    def detach(self) -> SessionSnapshot:
        """
        Stop forwarding, disconnect the source and end the session

        Returns:
            SessionSnapshot: Final state, before the store resets
        """
        self._attached = False
        self.source.disconnect()
        return self.store.end_session()

    def deliver(self, event: StreamEvent) -> bool:
        if not self._attached:
            return False
        return self.store.handle_event(event)

    def tick(self) -> None:
        if not self._attached:
            return
        self.store.tick()
        if self.on_tick is not None:
            self.on_tick(self.store.snapshot())

    def step(self) -> int:
        """
        One loop iteration: drain the source and tick if due

        Returns:
            int: Number of accepted packets
        """
        if not self._attached:
            return 0

        now = self._clock()
        accepted = 0
        for event in self.source.poll(now):
            if self.deliver(event):
                accepted += 1

        if now >= self._next_tick:
            self.tick()
            self._next_tick = now + self.tick_ms
        return accepted

    def run(self, shutdown_event: Event, duration_s: Optional[float] = None,
            poll_interval_s: float = 0.05) -> None:
        """Loop until shutdown_event is set or duration_s has passed"""
        started = time.monotonic()
        while not shutdown_event.is_set() and self._attached:
            self.step()
            if duration_s is not None and time.monotonic() - started >= duration_s:
                logging.info("Run duration reached")
                break
            shutdown_event.wait(poll_interval_s)
