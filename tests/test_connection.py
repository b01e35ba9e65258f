"""
Tests for connection health hysteresis

Covers the packet and tick paths and their shared counter.
"""

import math

from eeg_monitor.core.data_types import ConnectionState
from eeg_monitor.detection.connection import ConnectionTracker


class TestTargetForAge:
    """Test cases for the packet-age thresholds."""

    def test_thresholds(self):
        tracker = ConnectionTracker()

        assert tracker.target_for_age(0) == ConnectionState.CONNECTED
        assert tracker.target_for_age(2000) == ConnectionState.CONNECTED
        assert tracker.target_for_age(2001) == ConnectionState.DEGRADED
        assert tracker.target_for_age(6000) == ConnectionState.DEGRADED
        assert tracker.target_for_age(6001) == ConnectionState.STALE
        assert tracker.target_for_age(15000) == ConnectionState.STALE
        assert tracker.target_for_age(15001) == ConnectionState.DISCONNECTED
        assert tracker.target_for_age(math.inf) == ConnectionState.DISCONNECTED


class TestConnectionTracker:
    """Test cases for the hysteresis state machine."""

    def test_five_packets_connect(self):
        """The visible state switches on the fifth agreeing packet."""
        tracker = ConnectionTracker()
        tracker.reset(ConnectionState.CONNECTING)

        for i in range(4):
            assert not tracker.on_packet(i * 100.0)
            assert tracker.state == ConnectionState.CONNECTING

        assert tracker.on_packet(500.0)
        assert tracker.state == ConnectionState.CONNECTED
        assert tracker.last_change == 500.0

    def test_four_then_disagreeing_does_not_switch(self):
        """Four agreeing observations followed by a disagreeing one never switch."""
        tracker = ConnectionTracker()
        tracker.reset(ConnectionState.CONNECTING)

        for i in range(4):
            tracker.on_packet(i * 100.0)
        tracker.observe(ConnectionState.DISCONNECTED, 500.0)
        assert tracker.state == ConnectionState.CONNECTING

        # The counter restarted, so four more packets are still not enough
        for i in range(4):
            tracker.on_packet(600.0 + i * 100.0)
        assert tracker.state == ConnectionState.CONNECTING
        tracker.on_packet(1000.0)
        assert tracker.state == ConnectionState.CONNECTED

    def test_tick_without_packets_disconnects(self):
        """No packet ever received means infinite age."""
        tracker = ConnectionTracker()
        tracker.reset(ConnectionState.CONNECTING)

        for i in range(4):
            tracker.on_tick(None, i * 500.0)
        assert tracker.state == ConnectionState.CONNECTING
        tracker.on_tick(None, 2000.0)
        assert tracker.state == ConnectionState.DISCONNECTED

    def test_fresh_tick_does_not_interrupt_packet_streak(self):
        """Packets and fresh ticks agree on connected and share the counter."""
        tracker = ConnectionTracker()
        tracker.reset(ConnectionState.CONNECTING)

        tracker.on_packet(0.0)
        tracker.on_packet(100.0)
        tracker.on_tick(100.0, 200.0)
        tracker.on_packet(300.0)
        assert tracker.state == ConnectionState.CONNECTING
        tracker.on_tick(300.0, 400.0)
        assert tracker.state == ConnectionState.CONNECTED

    def test_counter_saturates(self):
        """Long agreeing runs do not need extra evidence to flip back."""
        tracker = ConnectionTracker()
        for i in range(100):
            tracker.on_packet(float(i))
        assert tracker.state == ConnectionState.CONNECTED

        for i in range(4):
            tracker.observe(ConnectionState.DEGRADED, 200.0 + i)
        assert tracker.state == ConnectionState.CONNECTED
        tracker.observe(ConnectionState.DEGRADED, 204.0)
        assert tracker.state == ConnectionState.DEGRADED

    def test_repeated_tick_is_not_counted(self):
        """Ticks at the same instant count once."""
        tracker = ConnectionTracker()
        tracker.reset(ConnectionState.CONNECTING)

        for _ in range(10):
            assert not tracker.on_tick(None, 1000.0)
        assert tracker.state == ConnectionState.CONNECTING

        for i in range(1, 5):
            tracker.on_tick(None, 1000.0 + i)
        assert tracker.state == ConnectionState.DISCONNECTED

    def test_reset_forgets_last_tick(self):
        tracker = ConnectionTracker()
        for i in range(5):
            tracker.on_tick(None, 1000.0 + i)
        tracker.reset(ConnectionState.CONNECTING)

        for i in range(5):
            tracker.on_tick(None, 1000.0 + i)
        assert tracker.state == ConnectionState.DISCONNECTED
