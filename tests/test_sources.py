"""
Tests for telemetry sources
"""

import pytest

from eeg_monitor.acquisition.sources import FakePacketSource, LSLPacketSource
from eeg_monitor.processing.packets import parse_device, parse_band_power, parse_metrics


class TestFakePacketSource:
    """Test cases for the synthetic telemetry generator."""

    def test_not_connected_yields_nothing(self):
        assert FakePacketSource(seed=1).poll(0.0) == []

    def test_schedule(self):
        source = FakePacketSource(seed=1)
        source.connect()

        first = source.poll(0.0)
        assert sorted(e.stream for e in first) == ["dev", "met", "pow"]

        events = source.poll(1000.0)
        counts = {s: sum(1 for e in events if e.stream == s) for s in ("pow", "met", "dev")}
        assert counts == {"pow": 8, "met": 2, "dev": 2}

    def test_payloads_parse(self):
        """Every generated payload is accepted by the stream parsers."""
        source = FakePacketSource(seed=7)
        source.connect()

        bands = parse_band_power(source.band_power_payload())
        assert bands.theta + bands.alpha + bands.beta_l + bands.beta_h + bands.gamma == pytest.approx(1.0)

        metrics = parse_metrics(source.metrics_payload())
        assert len(metrics.top3) == 3

        payload = source.device_payload()
        assert len(payload) == 17
        device = parse_device(payload)
        assert device.eeg_quality is not None
        assert len(device.sensors) == 14

    def test_seed_is_reproducible(self):
        a = FakePacketSource(seed=3)
        b = FakePacketSource(seed=3)
        a.connect()
        b.connect()

        assert [e.payload for e in a.poll(2000.0)] == [e.payload for e in b.poll(2000.0)]

    def test_dropout_window(self):
        source = FakePacketSource(seed=1, dropout_every_s=10, dropout_len_s=4)
        source.connect()
        source.poll(0.0)

        events = source.poll(12_000.0)
        times = [e.time for e in events]

        assert times
        assert not any(6.0 <= t < 10.0 for t in times)
        assert any(t >= 10.0 for t in times)

    def test_disconnect(self):
        source = FakePacketSource(seed=1)
        source.connect()
        source.disconnect()
        assert source.poll(5000.0) == []


class TestLSLPacketSource:
    """Test cases for the LSL reader that need no live outlet."""

    def test_poll_before_connect(self):
        assert LSLPacketSource().poll(0.0) == []

    def test_disconnect_without_inlets(self):
        source = LSLPacketSource()
        source.disconnect()
        assert not source.is_connected
