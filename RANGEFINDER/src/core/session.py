"""Estimation session: marker position in, distance estimate out."""

from __future__ import annotations

import logging
import math
from typing import Optional

from RANGEFINDER.src.core import solver
from RANGEFINDER.src.core.inclination import InclinationTracker
from RANGEFINDER.src.core.types import (
    DistanceEstimate,
    OpticalConstants,
    SessionResult,
    SessionState,
)
from RANGEFINDER.src.core.units import UnitStore

logger = logging.getLogger(__name__)

INCHES_PER_METER = 39.3700787


def pixels_per_meter_from_dpi(xdpi: float) -> float:
    return float(xdpi) * INCHES_PER_METER


class EstimationSession:
    """
    Owns the marker pixel and the live estimate.

    The estimate is always re-derived from (displacement, constants); it is
    never patched incrementally. Once finalized the session is terminated and
    further adjustments are ignored.
    """

    def __init__(
        self,
        units: UnitStore,
        tracker: Optional[InclinationTracker] = None,
        viewport_width_px: int = 0,
        pixels_per_meter: float = 0.0,
        delta_m: float = solver.ACCURACY_DELTA_M,
    ):
        self.units = units
        self.tracker = tracker
        self.viewport_width_px = max(0, int(viewport_width_px))
        self.pixels_per_meter = float(pixels_per_meter)
        self.delta_m = float(delta_m)

        self.pixel = self.viewport_width_px // 2
        self.unit_system = units.unit_system
        self.constants = OpticalConstants(0.0, 0.0)
        self._estimate: Optional[DistanceEstimate] = None
        self._result: Optional[SessionResult] = None
        self.state = SessionState.UNINITIALIZED
        self.refresh_constants()

    @property
    def terminated(self) -> bool:
        return self.state == SessionState.TERMINATED

    @property
    def displacement_m(self) -> float:
        if self.pixels_per_meter <= 0:
            return 0.0
        return self.pixel / self.pixels_per_meter

    def _set_state(self, state: str) -> None:
        if self.state != state:
            logger.debug("Session %s -> %s", self.state, state)
            self.state = state

    def _ignore_if_terminated(self, action: str) -> bool:
        if self.terminated:
            logger.warning("Ignoring %s on a finalized session", action)
            return True
        return False

    def _recompute(self) -> Optional[DistanceEstimate]:
        # Constants are read from the store on every solve.
        self.unit_system = self.units.unit_system
        self.constants = self.units.constants()
        if self.constants.configured:
            self._set_state(SessionState.ACTIVE)
        else:
            self._set_state(SessionState.UNINITIALIZED)

        if self.pixels_per_meter <= 0:
            self._estimate = None
        else:
            self._estimate = solver.estimate(
                self.displacement_m,
                self.constants.arm_length_m,
                self.constants.eye_separation_m,
                self.unit_system,
                self.delta_m,
            )
        return self._estimate

    def refresh_constants(self) -> Optional[DistanceEstimate]:
        """Re-solve against the unit store, e.g. after preferences were edited."""
        if self._ignore_if_terminated("constants refresh"):
            return self._estimate
        est = self._recompute()
        if not self.constants.configured:
            logger.info("Optical constants not configured (arm=%.4f m, eye=%.4f m)", *self.constants)
        return est

    def configure(
        self, arm_length_m: float, eye_separation_m: float, unit_system: Optional[str] = None
    ) -> Optional[DistanceEstimate]:
        if self._ignore_if_terminated("configure"):
            return self._estimate
        self.units.configure(arm_length_m, eye_separation_m, unit_system)
        return self.refresh_constants()

    def adjust_displacement(
        self,
        pixels: int,
        viewport_width_px: Optional[int] = None,
        pixels_per_meter: Optional[float] = None,
        relative: bool = False,
    ) -> Optional[DistanceEstimate]:
        """Move the marker (absolute pixel, or by a delta) and re-solve."""
        if self._ignore_if_terminated("adjustment"):
            return self._estimate
        if viewport_width_px is not None:
            self.viewport_width_px = max(0, int(viewport_width_px))
        if pixels_per_meter is not None:
            self.pixels_per_meter = float(pixels_per_meter)

        target = self.pixel + int(pixels) if relative else int(pixels)
        self.pixel = min(max(target, 0), self.viewport_width_px)

        est = self._recompute()
        if self.tracker is not None:
            self.tracker.capture_at_adjustment()
        return est

    def nudge(self, delta: int) -> Optional[DistanceEstimate]:
        return self.adjust_displacement(delta, relative=True)

    def current_estimate(self) -> Optional[DistanceEstimate]:
        return self._estimate

    def _inclination_deg(self) -> Optional[float]:
        if self.tracker is None:
            return None
        angle = self.tracker.last_adjustment_angle
        if angle is None:
            return None
        return math.degrees(angle)

    def finalize_session(self) -> Optional[SessionResult]:
        """
        Snapshot the estimate and terminate. Later calls return the same
        snapshot; None means the constants were never configured.
        """
        if self.terminated:
            return self._result

        est = self._recompute()
        if est is not None:
            self._result = SessionResult(
                distance_m=est.distance_m,
                accuracy_m=est.accuracy_m,
                unit_system=est.unit_system,
                inclination_deg=self._inclination_deg(),
            )
            logger.info("Session finalized: %s", solver.format_estimate(est))
        else:
            logger.info("Session finalized without configured constants")
        self._set_state(SessionState.TERMINATED)
        return self._result
