"""
Stream payload parsers

This module turns the raw arrays delivered on the dev, pow and met streams
into typed packets. Parsers never raise: anything malformed yields None,
which the session store treats as "no update".
"""

import logging
import math
from numbers import Real
from typing import Any, List, Optional

import numpy as np

from ..core.data_types import (
    BandPower, DevicePacket, EmotionAxes, EmotionItem, MetricsPacket,
    frozen_mapping,
)
from ..core.config import SENSOR_NAMES, MET_NAMES

DEV_MIN_LEN = 3
DEV_FULL_LEN = 2 + len(SENSOR_NAMES) + 1
MAX_CONTACT_CODE = 4
POW_MIN_LEN = 5
MET_MIN_LEN = 6


def _as_list(payload: Any) -> Optional[List[Any]]:
    """Return payload as a flat list, or None if it is not a sequence"""
    if isinstance(payload, np.ndarray):
        return payload.tolist() if payload.ndim == 1 else None
    if isinstance(payload, (list, tuple)):
        return list(payload)
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def _number(value: Any, default: float = 0.0) -> float:
    return float(value) if _is_number(value) else default


def _round(value: float) -> int:
    # Half-up rounding, matching what the headset software displays
    return int(math.floor(value + 0.5))


def parse_device(payload: Any) -> Optional[DevicePacket]:
    """
    Parse a dev payload

    Layout: [battery, signal, sensor_0 .. sensor_{N-1}, overall_quality]

    Sensor slots map onto SENSOR_NAMES by position; slots beyond the
    electrode list are ignored. The last element is only taken as overall
    EEG quality when it lies in 0-100. On payloads shorter than the full
    layout a trailing 0-4 is taken for a stray contact code and quality
    is reported absent.

    Args:
        payload: Raw dev array

    Returns:
        DevicePacket, or None for malformed input
    """
    data = _as_list(payload)
    if data is None or len(data) < DEV_MIN_LEN:
        logging.debug(f"Discarding dev payload: {payload!r}")
        return None

    battery = _round(_number(data[0]))
    signal = _round(_number(data[1]))

    last_idx = len(data) - 1
    eeg_quality = None
    if _is_number(data[last_idx]):
        value = _round(data[last_idx])
        short = len(data) < DEV_FULL_LEN
        if 0 <= value <= 100 and not (short and value <= MAX_CONTACT_CODE):
            eeg_quality = value

    sensors = {}
    for i in range(2, last_idx):
        sensor_idx = i - 2
        if sensor_idx >= len(SENSOR_NAMES):
            break
        sensors[SENSOR_NAMES[sensor_idx]] = _round(_number(data[i]))

    return DevicePacket(
        battery=battery,
        signal=signal,
        eeg_quality=eeg_quality,
        sensors=frozen_mapping(sensors) if sensors else None,
    )


def parse_band_power(payload: Any) -> Optional[BandPower]:
    """
    Parse a pow payload: [theta, alpha, betaL, betaH, gamma]

    Delta is not carried on this stream and is always 0.
    """
    data = _as_list(payload)
    if data is None or len(data) < POW_MIN_LEN:
        logging.debug(f"Discarding pow payload: {payload!r}")
        return None

    return BandPower(
        theta=_number(data[0]),
        alpha=_number(data[1]),
        beta_l=_number(data[2]),
        beta_h=_number(data[3]),
        gamma=_number(data[4]),
        delta=0.0,
    )


def parse_metrics(payload: Any) -> Optional[MetricsPacket]:
    """
    Parse a met payload and derive emotion axes

    Layout: [engagement, excitement, stress, relaxation, interest, focus]

    Valence is clamped to [-1, 1]; arousal and control are left as derived.

    Args:
        payload: Raw met array

    Returns:
        MetricsPacket with axes and the top three metrics, or None
    """
    data = _as_list(payload)
    if data is None or len(data) < MET_MIN_LEN:
        logging.debug(f"Discarding met payload: {payload!r}")
        return None

    scores = [_number(v) for v in data[:MET_MIN_LEN]]
    engagement, excitement, stress, relaxation, interest, focus = scores

    valence = (relaxation - stress + interest - 0.5) * 2
    axes = EmotionAxes(
        valence=max(-1.0, min(1.0, valence)),
        arousal=(excitement + engagement) / 2,
        control=(focus + relaxation) / 2,
    )

    # sorted() is stable, so ties keep wire order
    ranked = sorted(zip(MET_NAMES, scores), key=lambda item: item[1], reverse=True)
    top3 = tuple(EmotionItem(name=name, score=score) for name, score in ranked[:3])

    return MetricsPacket(axes=axes, top3=top3)
