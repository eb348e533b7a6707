"""Arm length and eye separation kept in both metric and imperial units."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

from RANGEFINDER.src.core.types import OpticalConstants, QuantityKind, UnitSystem
from RANGEFINDER.src.drivers.preferences import PreferenceStore

logger = logging.getLogger(__name__)

CM_PER_INCH = 2.54

UNITS_KEY = "units"
_KEYS = {
    (QuantityKind.ARM_LENGTH, UnitSystem.METRIC): "arm_length_metric",
    (QuantityKind.ARM_LENGTH, UnitSystem.IMPERIAL): "arm_length_imperial",
    (QuantityKind.EYE_SEPARATION, UnitSystem.METRIC): "eye_separation_metric",
    (QuantityKind.EYE_SEPARATION, UnitSystem.IMPERIAL): "eye_separation_imperial",
}

# Decimals kept when a value is derived from the other unit system.
METRIC_DECIMALS = 1
IMPERIAL_DECIMALS = 2


def preference_key(kind: str, unit_system: str) -> str:
    return _KEYS[(kind, unit_system)]


def format_decimal(value: float, places: int) -> str:
    """
    Half-even rounding of the exact binary value to at most `places`
    decimals, trailing zeros dropped (0.15 -> "0.1").
    """
    q = Decimal(float(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)
    text = f"{q:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def parse_length(raw: Optional[str]) -> float:
    """Lenient parse of a stored length; anything unusable reads as 0 (unset)."""
    if raw is None or not raw.strip():
        return 0.0
    try:
        val = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed length %r", raw)
        return 0.0
    if not math.isfinite(val) or val < 0:
        logger.warning("Ignoring out-of-range length %r", raw)
        return 0.0
    return val


def to_meters(value: float, unit_system: str) -> float:
    if unit_system == UnitSystem.IMPERIAL:
        return value * CM_PER_INCH / 100.0
    return value / 100.0


def from_meters(value_m: float, unit_system: str) -> float:
    if unit_system == UnitSystem.IMPERIAL:
        return value_m * 100.0 / CM_PER_INCH
    return value_m * 100.0


class UnitStore:
    """
    View over a preference store with two parallel representations
    (centimeters, inches) of each optical constant.

    Every edit re-derives the opposite representation at a fixed display
    precision, in one direction only, so repeated edits never drift.
    """

    def __init__(self, prefs: PreferenceStore):
        self.prefs = prefs

    @property
    def unit_system(self) -> str:
        return UnitSystem.parse(self.prefs.get_string(UNITS_KEY, UnitSystem.METRIC))

    def set_unit_system(self, unit_system: str) -> None:
        self.prefs.put_string(UNITS_KEY, UnitSystem.parse(unit_system))

    @property
    def is_imperial(self) -> bool:
        return self.unit_system == UnitSystem.IMPERIAL

    def raw_text(self, kind: str, unit_system: Optional[str] = None) -> str:
        return self.prefs.get_string(preference_key(kind, unit_system or self.unit_system), "")

    def value(self, kind: str, unit_system: Optional[str] = None) -> float:
        return parse_length(self.raw_text(kind, unit_system))

    def set_quantity(self, kind: str, unit_system: str, raw_value: str) -> str:
        """Store `raw_value` and return the text derived for the other unit system."""
        unit_system = UnitSystem.parse(unit_system)
        self.prefs.put_string(preference_key(kind, unit_system), raw_value)

        val = parse_length(raw_value)
        if unit_system == UnitSystem.IMPERIAL:
            other = UnitSystem.METRIC
            derived = format_decimal(val * CM_PER_INCH, METRIC_DECIMALS) if val != 0 else ""
        else:
            other = UnitSystem.IMPERIAL
            derived = format_decimal(val / CM_PER_INCH, IMPERIAL_DECIMALS) if val != 0 else ""
        self.prefs.put_string(preference_key(kind, other), derived)
        logger.debug("%s set to %r (%s), derived %r (%s)", kind, raw_value, unit_system, derived, other)
        return derived

    def get_meters(self, kind: str) -> float:
        system = self.unit_system
        return to_meters(self.value(kind, system), system)

    def constants(self) -> OpticalConstants:
        return OpticalConstants(
            arm_length_m=self.get_meters(QuantityKind.ARM_LENGTH),
            eye_separation_m=self.get_meters(QuantityKind.EYE_SEPARATION),
        )

    def configure(self, arm_length_m: float, eye_separation_m: float, unit_system: Optional[str] = None) -> None:
        if unit_system is not None:
            self.set_unit_system(unit_system)
        system = self.unit_system
        self.set_quantity(QuantityKind.ARM_LENGTH, system, repr(from_meters(arm_length_m, system)))
        self.set_quantity(QuantityKind.EYE_SEPARATION, system, repr(from_meters(eye_separation_m, system)))

    def display_text(self, kind: str) -> str:
        val = self.value(kind)
        if val == 0:
            return ""
        if self.is_imperial:
            return f"{format_decimal(val, IMPERIAL_DECIMALS)} in"
        return f"{format_decimal(val, METRIC_DECIMALS)} cm"
