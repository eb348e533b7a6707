"""Device tilt from accelerometer samples."""

from __future__ import annotations

import itertools
import logging
import math
import threading
from typing import Iterable, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

NO_MEASUREMENT: Optional[float] = None


def tilt_from_acceleration(sample: Sequence[float]) -> Optional[float]:
    """
    Signed tilt in radians from a raw (x, y, z) acceleration vector.

    Face up / tilted up reads positive. Returns None for a zero vector.
    """
    vec = np.asarray(sample, dtype=np.float64).reshape(3)
    norm = float(np.linalg.norm(vec))
    if norm == 0.0 or not math.isfinite(norm):
        return None
    ratio = float(np.clip(vec[2] / norm, -1.0, 1.0))
    return -math.asin(ratio)


class InclinationTracker:
    """
    Keeps the most recent tilt and the tilt at the last marker adjustment.

    Samples are pushed from the sensor thread; readers may poll from another.
    No history is kept.
    """

    def __init__(self, supported: bool = True):
        self._supported = bool(supported)
        self._lock = threading.Lock()
        self._current: Optional[float] = NO_MEASUREMENT
        self._at_adjustment: Optional[float] = NO_MEASUREMENT

    def is_supported(self) -> bool:
        return self._supported

    def consume(self, sample: Sequence[float]) -> Optional[float]:
        if not self._supported:
            return NO_MEASUREMENT
        angle = tilt_from_acceleration(sample)
        if angle is None:
            logger.debug("Skipping degenerate tilt sample %r", sample)
            return self.current()
        with self._lock:
            self._current = angle
        return angle

    def follow(self, samples: Iterable[Sequence[float]], limit: Optional[int] = None) -> int:
        """Consume a (possibly endless) sample stream; returns how many were read."""
        count = 0
        for sample in itertools.islice(samples, limit):
            self.consume(sample)
            count += 1
        return count

    def current(self) -> Optional[float]:
        if not self._supported:
            return NO_MEASUREMENT
        with self._lock:
            return self._current

    def capture_at_adjustment(self) -> Optional[float]:
        if not self._supported:
            return NO_MEASUREMENT
        with self._lock:
            self._at_adjustment = self._current
            return self._at_adjustment

    @property
    def last_adjustment_angle(self) -> Optional[float]:
        if not self._supported:
            return NO_MEASUREMENT
        with self._lock:
            return self._at_adjustment

    def reset(self) -> None:
        with self._lock:
            self._current = NO_MEASUREMENT
            self._at_adjustment = NO_MEASUREMENT
