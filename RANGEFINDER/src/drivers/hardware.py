import logging
import time
from abc import ABC, abstractmethod
from typing import Iterator, Optional

import numpy as np

from RANGEFINDER.config import Config

logger = logging.getLogger(__name__)

STANDARD_GRAVITY = 9.80665


class TiltSensor(ABC):
    @property
    @abstractmethod
    def supported(self) -> bool: pass
    @abstractmethod
    def read_sample(self) -> Optional[tuple[float, float, float]]: pass
    @abstractmethod
    def close(self) -> None: pass

    def samples(self) -> Iterator[tuple[float, float, float]]:
        """Endless stream of samples; stops only if the sensor goes away."""
        while self.supported:
            sample = self.read_sample()
            if sample is not None:
                yield sample


class DisplayMetrics(ABC):
    @property
    @abstractmethod
    def xdpi(self) -> float: pass
    @property
    @abstractmethod
    def width_px(self) -> int: pass


class NullTiltSensor(TiltSensor):
    """Device without an accelerometer."""

    @property
    def supported(self) -> bool: return False

    def read_sample(self) -> Optional[tuple[float, float, float]]:
        return None

    def close(self) -> None:
        pass


class MockTiltSensor(TiltSensor):
    def __init__(self, config: Optional[Config] = None, seed: Optional[int] = None):
        logger.info("--- Initializing MOCK tilt sensor ---")
        self.config = config or Config()
        self.tilt_deg = float(self.config.MOCK_TILT_DEG)
        self.noise_deg = float(self.config.MOCK_TILT_NOISE_DEG)
        self.rng = np.random.default_rng(seed)
        self.read_delay_s = 0.0
        self._open = True

    @property
    def supported(self) -> bool: return self._open

    def read_sample(self) -> Optional[tuple[float, float, float]]:
        if not self._open:
            return None
        # Landscape hold: gravity mostly along x, z picks up the tilt.
        theta = np.radians(self.tilt_deg + self.rng.normal(0.0, self.noise_deg))
        x = STANDARD_GRAVITY * np.cos(theta)
        z = -STANDARD_GRAVITY * np.sin(theta)
        y = self.rng.normal(0.0, 0.02)
        if self.read_delay_s > 0:
            time.sleep(self.read_delay_s)
        return float(x), float(y), float(z)

    def close(self) -> None:
        self._open = False
        logger.info("MOCK tilt sensor closed.")


class MockDisplay(DisplayMetrics):
    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    @property
    def xdpi(self) -> float: return float(self.config.MOCK_XDPI)

    @property
    def width_px(self) -> int: return int(self.config.MOCK_WIDTH_PX)
