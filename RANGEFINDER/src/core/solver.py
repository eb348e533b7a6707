"""Parallax distance solver.

An object at distance D seen past a marker held at arm length A shows a
sightline displacement X = E*(D-A)/D between the two eyes (separation E).
Inverting gives D = E*A/(E-X). Displacement can't exceed E, and distance
can't be less than A.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from RANGEFINDER.src.core.types import (
    INFINITE_DISTANCE,
    METERS_PER_FOOT,
    UNDEFINED_ACCURACY,
    DistanceEstimate,
    UnitSystem,
)

logger = logging.getLogger(__name__)

ACCURACY_DELTA_M = 0.00025

METRIC_CARD_DISTANCES = (1.0, 1.5, 2.0, 3.0, 5.0, 10.0, 20.0)  # meters
IMPERIAL_CARD_DISTANCES = (4.0, 6.0, 8.0, 12.0, 16.0, 24.0, 48.0)  # feet


def distance_for_displacement(displacement_m: float, arm_length_m: float, eye_separation_m: float) -> float:
    if displacement_m >= eye_separation_m:
        return INFINITE_DISTANCE
    return eye_separation_m * arm_length_m / (eye_separation_m - displacement_m)


def displacement_for_distance(distance_m: float, arm_length_m: float, eye_separation_m: float) -> float:
    """Inverse of `distance_for_displacement`; infinity maps to the eye separation."""
    if math.isinf(distance_m):
        return eye_separation_m
    return eye_separation_m * (distance_m - arm_length_m) / distance_m


def solve(
    displacement_m: float,
    arm_length_m: float,
    eye_separation_m: float,
    delta_m: float = ACCURACY_DELTA_M,
) -> Optional[tuple[float, float]]:
    """
    Return (distance_m, accuracy_m), or None when the constants are not set.

    Accuracy is the mean of the forward and backward distance change for a
    +/- delta_m shift of the marker. At or beyond the eye separation the
    result is (inf, -1).
    """
    if not (arm_length_m > 0 and eye_separation_m > 0):
        return None

    if displacement_m >= eye_separation_m:
        return INFINITE_DISTANCE, UNDEFINED_ACCURACY

    dist = distance_for_displacement(displacement_m, arm_length_m, eye_separation_m)
    acc_plus = distance_for_displacement(displacement_m + delta_m, arm_length_m, eye_separation_m) - dist
    acc_minus = dist - distance_for_displacement(displacement_m - delta_m, arm_length_m, eye_separation_m)
    accuracy = (acc_plus + acc_minus) / 2.0

    # Near the asymptote the forward step can run off to infinity.
    if not accuracy >= 0 or accuracy > dist:
        accuracy = dist
    return dist, accuracy


def estimate(
    displacement_m: float,
    arm_length_m: float,
    eye_separation_m: float,
    unit_system: str = UnitSystem.METRIC,
    delta_m: float = ACCURACY_DELTA_M,
) -> Optional[DistanceEstimate]:
    res = solve(displacement_m, arm_length_m, eye_separation_m, delta_m)
    if res is None:
        return None
    return DistanceEstimate(res[0], res[1], unit_system)


def precision_for_accuracy(accuracy: float) -> int:
    """Number of decimals worth showing for a given accuracy bound."""
    if accuracy > 1:
        return 0
    if accuracy > 0.1:
        return 1
    if accuracy > 0.01:
        return 2
    return 3


def format_estimate(est: DistanceEstimate) -> str:
    if est.is_infinite:
        return "inf"
    # Same tier for both unit systems.
    decimals = precision_for_accuracy(est.accuracy_m)
    suffix = "ft" if est.unit_system == UnitSystem.IMPERIAL else "m"
    return f"{est.display_distance:.{decimals}f}{suffix}"


def range_card_ticks(
    unit_system: str,
    arm_length_m: float,
    eye_separation_m: float,
    pixels_per_meter: float,
    distances: Optional[Sequence[float]] = None,
) -> list[tuple[float, int]]:
    """
    Pixel offsets of the reference distances printed on a range card.

    Returns (label_value, pixel) pairs, label_value in meters or feet.
    Distances closer than the arm length fall off the card and are skipped.
    """
    if not (arm_length_m > 0 and eye_separation_m > 0 and pixels_per_meter > 0):
        return []

    if distances is None:
        distances = IMPERIAL_CARD_DISTANCES if unit_system == UnitSystem.IMPERIAL else METRIC_CARD_DISTANCES
    labels = np.asarray(distances, dtype=np.float64)
    dist_m = labels * METERS_PER_FOOT if unit_system == UnitSystem.IMPERIAL else labels

    displ = eye_separation_m * (dist_m - arm_length_m) / dist_m
    px = displ * pixels_per_meter

    ticks = [(float(lbl), int(p)) for lbl, p in zip(labels, px) if p >= 0]
    if len(ticks) < len(labels):
        logger.debug("Dropped %d card distances closer than arm length", len(labels) - len(ticks))
    return ticks
