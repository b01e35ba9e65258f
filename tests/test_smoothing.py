"""
Tests for the smoothing filters

Covers EMA seeding, convergence and dominant band selection.
"""

import pytest

from eeg_monitor.core.data_types import BandPower, EmotionAxes
from eeg_monitor.processing.smoothing import (
    ema, ema_fields, dominant_band, DominantBandDebouncer,
)


class TestEma:
    """Test cases for the single-pole EMA."""

    def test_seeds_from_zero(self):
        """An unseeded (0) value takes the new value verbatim."""
        assert ema(0.7, 0.0, 0.2) == 0.7

    def test_blends(self):
        assert ema(1.0, 0.5, 0.2) == pytest.approx(0.6)

    def test_fields_seed_per_component(self):
        """Seeding applies component by component."""
        old = BandPower(theta=0.5)
        new = BandPower(theta=1.0, alpha=0.3)
        smoothed = ema_fields(new, old, 0.2)

        assert smoothed.theta == pytest.approx(0.6)
        assert smoothed.alpha == pytest.approx(0.3)

    def test_constant_input_is_fixed_point(self):
        """Feeding the same vector repeatedly stays on (and converges to) it."""
        raw = BandPower(theta=0.2, alpha=0.4, beta_l=0.15, beta_h=0.1, gamma=0.05)
        smoothed = BandPower()
        for _ in range(50):
            smoothed = ema_fields(raw, smoothed, 0.2)

        for name in ("theta", "alpha", "beta_l", "beta_h", "gamma", "delta"):
            assert getattr(smoothed, name) == pytest.approx(getattr(raw, name), abs=1e-9)

    def test_converges_after_step(self):
        """After a step change the EMA approaches the new level."""
        smoothed = EmotionAxes(valence=0.5, arousal=0.5, control=0.5)
        target = EmotionAxes(valence=-0.5, arousal=0.9, control=0.1)
        for _ in range(200):
            smoothed = ema_fields(target, smoothed, 0.15)

        assert smoothed.valence == pytest.approx(-0.5, abs=1e-6)
        assert smoothed.arousal == pytest.approx(0.9, abs=1e-6)
        assert smoothed.control == pytest.approx(0.1, abs=1e-6)


class TestDominantBand:
    """Test cases for dominant band selection."""

    def test_picks_maximum(self):
        assert dominant_band(BandPower(theta=0.1, alpha=0.5, gamma=0.2)) == "alpha"

    def test_delta_excluded(self):
        assert dominant_band(BandPower(theta=0.1, delta=9.0)) == "theta"

    def test_all_zero_is_none(self):
        assert dominant_band(BandPower()) == "none"

    def test_tie_keeps_band_order(self):
        assert dominant_band(BandPower(beta_l=0.3, beta_h=0.3)) == "beta_l"


class TestDominantBandDebouncer:
    """Test cases for the stable dominant band."""

    def test_switches_after_hold(self):
        debouncer = DominantBandDebouncer(hold_ms=1500)

        assert debouncer.update("alpha", 0) == "none"
        assert debouncer.update("alpha", 1000) == "none"
        assert debouncer.update("alpha", 1500) == "alpha"

    def test_flicker_restarts_hold(self):
        debouncer = DominantBandDebouncer(hold_ms=1500)
        debouncer.update("alpha", 0)
        debouncer.update("alpha", 1600)

        debouncer.update("theta", 1700)
        assert debouncer.update("theta", 2500) == "alpha"
        debouncer.update("alpha", 2600)
        assert debouncer.update("theta", 3300) == "alpha"
        assert debouncer.update("theta", 4800) == "theta"
