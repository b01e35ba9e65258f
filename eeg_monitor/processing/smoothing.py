"""
Exponential smoothing of band power and emotion axes

Single-pole EMA with a zero-seed rule: a component whose smoothed value is
still exactly 0 takes the raw value verbatim, so displays do not crawl up
from zero on the first samples.
"""

from dataclasses import fields
from typing import TypeVar

from ..core.data_types import BandPower
from ..core.config import POW_BANDS, DOMINANT_BAND_DEBOUNCE_MS

T = TypeVar("T")

NO_BAND = "none"


def ema(new_value: float, old_value: float, alpha: float) -> float:
    """Blend new_value into old_value; 0 is the unseeded sentinel"""
    if old_value == 0:
        return new_value
    return alpha * new_value + (1 - alpha) * old_value


def ema_fields(new: T, old: T, alpha: float) -> T:
    """Apply ema() field by field to two instances of the same dataclass"""
    values = {
        f.name: ema(getattr(new, f.name), getattr(old, f.name), alpha)
        for f in fields(new)
    }
    return type(new)(**values)


def dominant_band(powers: BandPower) -> str:
    """
    Strongest band among theta..gamma (delta excluded)

    Returns "none" when every band is 0.
    """
    best_name, best_value = NO_BAND, 0.0
    for name in POW_BANDS:
        value = getattr(powers, name)
        if value > best_value:
            best_name, best_value = name, value
    return best_name


class DominantBandDebouncer:
    """
    Hold-time filter for the dominant band

    A new dominant band has to persist for ``hold_ms`` of updates before
    the stable band switches to it.
    """

    def __init__(self, hold_ms: float = DOMINANT_BAND_DEBOUNCE_MS):
        self.hold_ms = hold_ms
        self.reset()

    def reset(self):
        self.candidate = NO_BAND
        self.since = 0.0
        self.stable = NO_BAND

    def update(self, band: str, now_ms: float) -> str:
        if band != self.candidate:
            self.candidate = band
            self.since = now_ms
        elif now_ms - self.since >= self.hold_ms:
            self.stable = band
        return self.stable
