"""
Data freshness checks

Band power and emotions are flagged stale once their last update is older
than the threshold. Last known values are kept; only the flags change.
"""

from ..core.config import STALE_THRESHOLD_MS


class StalenessDetector:
    """Tick-driven stale flags for band power and emotions"""

    def __init__(self, threshold_ms: float = STALE_THRESHOLD_MS):
        self.threshold_ms = threshold_ms
        self.reset()

    def reset(self):
        self.band_power_stale = True
        self.emotions_stale = True

    def is_stale(self, last_update_ms: float, now_ms: float) -> bool:
        return now_ms - last_update_ms > self.threshold_ms

    def mark_fresh(self, band_power: bool = False, emotions: bool = False):
        if band_power:
            self.band_power_stale = False
        if emotions:
            self.emotions_stale = False

    def check(self, band_last_update_ms: float, emotions_last_update_ms: float,
              now_ms: float) -> bool:
        """
        Recompute both flags

        Returns:
            bool: True if either flag changed value
        """
        band_stale = self.is_stale(band_last_update_ms, now_ms)
        emotions_stale = self.is_stale(emotions_last_update_ms, now_ms)

        if band_stale == self.band_power_stale and emotions_stale == self.emotions_stale:
            return False

        self.band_power_stale = band_stale
        self.emotions_stale = emotions_stale
        return True
