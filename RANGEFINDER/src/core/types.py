"""Shared core data structures used across the solver, unit store and session."""

from __future__ import annotations

import math
from typing import NamedTuple, Optional

METERS_PER_FOOT = 0.3048


class UnitSystem:
    METRIC = "metric"
    IMPERIAL = "imperial"

    @staticmethod
    def parse(raw: Optional[str]) -> str:
        if raw is not None and raw.strip().lower() == UnitSystem.IMPERIAL:
            return UnitSystem.IMPERIAL
        return UnitSystem.METRIC


class QuantityKind:
    ARM_LENGTH = "arm_length"
    EYE_SEPARATION = "eye_separation"

    ALL = (ARM_LENGTH, EYE_SEPARATION)


class SessionState:
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"
    TERMINATED = "TERMINATED"


class OpticalConstants(NamedTuple):
    """Arm length and eye separation, both in meters."""

    arm_length_m: float
    eye_separation_m: float

    @property
    def configured(self) -> bool:
        return self.arm_length_m > 0 and self.eye_separation_m > 0


INFINITE_DISTANCE = math.inf
UNDEFINED_ACCURACY = -1.0


class DistanceEstimate(NamedTuple):
    distance_m: float
    accuracy_m: float
    unit_system: str = UnitSystem.METRIC

    @property
    def is_infinite(self) -> bool:
        return math.isinf(self.distance_m)

    @property
    def display_distance(self) -> float:
        """Distance in meters, or feet for imperial display."""
        if self.unit_system == UnitSystem.IMPERIAL:
            return self.distance_m / METERS_PER_FOOT
        return self.distance_m


class SessionResult(NamedTuple):
    """Snapshot handed back to the host once the user is done."""

    distance_m: float
    accuracy_m: float
    unit_system: str
    inclination_deg: Optional[float] = None

    @property
    def units_label(self) -> str:
        return "feet" if self.unit_system == UnitSystem.IMPERIAL else "meters"

    def to_dict(self) -> dict:
        """Host extras, expressed in the unit named by ``units``."""
        scale = 1.0 / METERS_PER_FOOT if self.unit_system == UnitSystem.IMPERIAL else 1.0
        accuracy = self.accuracy_m if self.accuracy_m < 0 else self.accuracy_m * scale
        data = {
            "distance": self.distance_m * scale,
            "accuracy": accuracy,
            "units": self.units_label,
        }
        if self.inclination_deg is not None:
            data["inclination"] = self.inclination_deg
        return data
