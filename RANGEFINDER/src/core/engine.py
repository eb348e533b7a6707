"""Library entry point wiring preferences, tilt tracking and the session."""

from __future__ import annotations

from typing import Optional

from RANGEFINDER.config import Config
from RANGEFINDER.src.core.inclination import InclinationTracker
from RANGEFINDER.src.core.session import EstimationSession
from RANGEFINDER.src.core.types import DistanceEstimate, SessionResult
from RANGEFINDER.src.core.units import UnitStore
from RANGEFINDER.src.drivers.preferences import MemoryPreferenceStore, PreferenceStore


class RangeFinder:
    def __init__(
        self,
        config: Optional[Config] = None,
        prefs: Optional[PreferenceStore] = None,
        sensor_supported: bool = True,
    ):
        self.config = config or Config()
        self.units = UnitStore(prefs if prefs is not None else MemoryPreferenceStore())
        self.tracker = InclinationTracker(supported=sensor_supported)
        self.session = EstimationSession(
            self.units,
            self.tracker if sensor_supported else None,
            delta_m=self.config.ACCURACY_DELTA_M,
        )

    def configure(self, arm_length_m: float, eye_separation_m: float, unit_system: str) -> bool:
        """Returns False while either constant is still zero."""
        self.session.configure(arm_length_m, eye_separation_m, unit_system)
        return self.session.constants.configured

    def adjust_displacement(
        self, pixels: int, viewport_width_px: int, pixels_per_meter: float
    ) -> Optional[DistanceEstimate]:
        return self.session.adjust_displacement(pixels, viewport_width_px, pixels_per_meter)

    def current_estimate(self) -> Optional[DistanceEstimate]:
        return self.session.current_estimate()

    def push_tilt_sample(self, x: float, y: float, z: float) -> Optional[float]:
        return self.tracker.consume((x, y, z))

    def finalize_session(self) -> Optional[SessionResult]:
        return self.session.finalize_session()
