"""
Telemetry packet sources

This module provides transports that deliver dev/pow/met payloads to the
session store: an LSL reader for streams forwarded by the headset software,
and a synthetic generator for development without hardware.
"""

import logging
from typing import Dict, List, Optional

import numpy as np

from ..core.data_types import StreamEvent
from ..core.config import LSL_STREAMS, SENSOR_NAMES

# Optional imports with fallbacks
try:
    import pylsl
    LSL_AVAILABLE = True
except ImportError:
    LSL_AVAILABLE = False
    logging.warning("pylsl not available - fake mode only")


class LSLPacketSource:
    """
    Read dev/pow/met payloads from LSL outlets

    Each stream is resolved by name; streams that cannot be found are
    skipped, as long as at least one resolves the source is connected.
    """

    def __init__(self, stream_names: Dict[str, str] = LSL_STREAMS,
                 resolve_timeout: float = 2.0):
        self.stream_names = dict(stream_names)
        self.resolve_timeout = resolve_timeout
        self.inlets = {}
        self.is_connected = False

    def connect(self) -> bool:
        """
        Resolve and open inlets for the configured streams

        Returns:
            bool: True if at least one stream was found
        """
        if not LSL_AVAILABLE:
            logging.error("pylsl not available. Install with: pip install pylsl")
            return False

        try:
            for stream, name in self.stream_names.items():
                logging.info(f"Looking for LSL stream: {name}")
                found = pylsl.resolve_byprop("name", name, timeout=self.resolve_timeout)
                if not found:
                    logging.warning(f"LSL stream not found: {name} ({stream} disabled)")
                    continue
                self.inlets[stream] = pylsl.StreamInlet(found[0])
                logging.info(f"Connected to LSL stream: {name} -> {stream}")
        except Exception as e:
            logging.error(f"LSL connection failed: {e}")
            return False

        if not self.inlets:
            logging.error("No LSL telemetry streams found")
            return False

        self.is_connected = True
        return True

    def poll(self, now_ms: float) -> List[StreamEvent]:
        """Drain every inlet without blocking"""
        if not self.is_connected:
            return []

        events = []
        for stream, inlet in self.inlets.items():
            try:
                samples, timestamps = inlet.pull_chunk(timeout=0.0)
            except Exception as e:
                logging.error(f"Failed to pull {stream} chunk: {e}")
                continue
            for sample, ts in zip(samples, timestamps):
                events.append(StreamEvent(stream=stream, payload=list(sample), time=ts))
        return events

    def disconnect(self):
        """Close all inlets"""
        try:
            for inlet in self.inlets.values():
                inlet.close_stream()
            if self.inlets:
                logging.info("LSL disconnected")
        except Exception as e:
            logging.error(f"Disconnect error: {e}")
        finally:
            self.inlets = {}
            self.is_connected = False


class FakePacketSource:
    """
    Generate synthetic headset telemetry

    Band powers follow a slow random walk normalised to unit sum, metrics
    drift inside [0, 1], and contact quality occasionally drops on a few
    electrodes. ``dropout_every_s``/``dropout_len_s`` insert silent gaps so
    the degraded/stale/disconnected path can be watched.
    """

    RATES_HZ = {"pow": 8.0, "met": 2.0, "dev": 2.0}

    def __init__(self, seed: Optional[int] = None,
                 dropout_every_s: float = 0.0, dropout_len_s: float = 0.0):
        self.rng = np.random.default_rng(seed)
        self.dropout_every_ms = dropout_every_s * 1000.0
        self.dropout_len_ms = dropout_len_s * 1000.0
        self.is_connected = False
        self._start_ms: Optional[float] = None
        self._next_due: Dict[str, float] = {}

        self._bands = self.rng.uniform(0.5, 1.5, size=5)
        self._metrics = self.rng.uniform(0.3, 0.7, size=6)
        self._contact = np.full(len(SENSOR_NAMES), 4, dtype=int)
        self._battery = 100.0

    def connect(self) -> bool:
        self.is_connected = True
        return True

    def in_dropout(self, now_ms: float) -> bool:
        if self.dropout_every_ms <= 0 or self._start_ms is None:
            return False
        phase = (now_ms - self._start_ms) % self.dropout_every_ms
        return phase >= self.dropout_every_ms - self.dropout_len_ms

    def poll(self, now_ms: float) -> List[StreamEvent]:
        """Return every payload that fell due since the last poll"""
        if not self.is_connected:
            return []
        if self._start_ms is None:
            self._start_ms = now_ms
            self._next_due = {stream: now_ms for stream in self.RATES_HZ}

        events = []
        for stream, rate in self.RATES_HZ.items():
            period = 1000.0 / rate
            while self._next_due[stream] <= now_ms:
                due = self._next_due[stream]
                self._next_due[stream] = due + period
                if self.in_dropout(due):
                    continue
                events.append(StreamEvent(stream=stream, payload=self._payload(stream), time=due / 1000.0))
        return events

    def _payload(self, stream: str) -> List[float]:
        if stream == "pow":
            return self.band_power_payload()
        if stream == "met":
            return self.metrics_payload()
        return self.device_payload()

    def band_power_payload(self) -> List[float]:
        self._bands = np.clip(self._bands + self.rng.normal(0.0, 0.05, size=5), 0.05, None)
        relative = self._bands / self._bands.sum()
        return [float(v) for v in relative]

    def metrics_payload(self) -> List[float]:
        self._metrics = np.clip(self._metrics + self.rng.normal(0.0, 0.02, size=6), 0.0, 1.0)
        return [float(v) for v in self._metrics]

    def device_payload(self) -> List[float]:
        self._battery = max(0.0, self._battery - 0.01)
        signal = int(self.rng.choice([4, 5], p=[0.2, 0.8]))

        # Occasionally degrade one electrode, then let it recover
        if self.rng.random() < 0.05:
            self._contact[self.rng.integers(len(SENSOR_NAMES))] = int(self.rng.choice([0, 1, 2]))
        recovering = self._contact < 4
        self._contact[recovering & (self.rng.random(len(SENSOR_NAMES)) < 0.2)] = 4

        quality = float(np.mean(self._contact) / 4.0 * 100.0)
        return [self._battery, float(signal)] + [float(c) for c in self._contact] + [quality]

    def disconnect(self):
        self.is_connected = False
