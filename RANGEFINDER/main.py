import sys
import json
import logging
import argparse
import math
from pathlib import Path

from RANGEFINDER.config import Config
from RANGEFINDER.src.core.engine import RangeFinder
from RANGEFINDER.src.core.session import pixels_per_meter_from_dpi
from RANGEFINDER.src.core.solver import format_estimate, range_card_ticks
from RANGEFINDER.src.core.types import QuantityKind, UnitSystem
from RANGEFINDER.src.drivers.hardware import MockDisplay, MockTiltSensor, NullTiltSensor
from RANGEFINDER.src.drivers.preferences import JsonPreferenceStore, MemoryPreferenceStore

logger = logging.getLogger(__name__)


def json_safe(payload: dict) -> dict:
    # JSON has no infinity; a distance past the card reads as null.
    return {k: (None if isinstance(v, float) and not math.isfinite(v) else v) for k, v in payload.items()}


def apply_preference_edits(rf: RangeFinder, args: argparse.Namespace) -> None:
    if args.units:
        rf.units.set_unit_system(args.units)
    edits = (
        (QuantityKind.ARM_LENGTH, UnitSystem.METRIC, args.arm_cm),
        (QuantityKind.ARM_LENGTH, UnitSystem.IMPERIAL, args.arm_in),
        (QuantityKind.EYE_SEPARATION, UnitSystem.METRIC, args.eye_cm),
        (QuantityKind.EYE_SEPARATION, UnitSystem.IMPERIAL, args.eye_in),
    )
    for kind, system, raw in edits:
        if raw is not None:
            rf.units.set_quantity(kind, system, raw)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Binocular parallax range finder")
    parser.add_argument("--sim", action="store_true", help="Run with a simulated tilt sensor")
    parser.add_argument("--config", type=Path, help="Config JSON file")
    parser.add_argument("--prefs", type=Path, help="Preferences JSON file")
    parser.add_argument("--units", choices=[UnitSystem.METRIC, UnitSystem.IMPERIAL])
    parser.add_argument("--arm-cm")
    parser.add_argument("--arm-in")
    parser.add_argument("--eye-cm")
    parser.add_argument("--eye-in")
    parser.add_argument("--pixel", type=int, help="Marker position in pixels from the left edge")
    parser.add_argument("--samples", type=int, default=20, help="Tilt samples to read before solving")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = Config.load(args.config)
    prefs_path = args.prefs or (Path(config.PREFS_PATH) if config.PREFS_PATH else None)
    prefs = JsonPreferenceStore(prefs_path) if prefs_path else MemoryPreferenceStore()

    sensor = MockTiltSensor(config) if args.sim else NullTiltSensor()
    display = MockDisplay(config)
    rf = RangeFinder(config, prefs, sensor_supported=sensor.supported)

    apply_preference_edits(rf, args)
    if args.sim and not rf.units.constants().configured:
        logger.info("Seeding default arm length and eye separation")
        rf.units.configure(config.DEFAULT_ARM_LENGTH_M, config.DEFAULT_EYE_SEPARATION_M)
    rf.session.refresh_constants()

    try:
        if sensor.supported and args.samples > 0:
            rf.tracker.follow(sensor.samples(), limit=args.samples)

        ppm = pixels_per_meter_from_dpi(display.xdpi)
        pixel = args.pixel if args.pixel is not None else display.width_px // 2
        est = rf.adjust_displacement(pixel, display.width_px, ppm)
        if est is None:
            print("Arm length and eye separation must be set first (see --arm-cm/--eye-cm).")
            rf.finalize_session()
            return 1

        constants = rf.session.constants
        print(f"Arm length:     {rf.units.display_text(QuantityKind.ARM_LENGTH)}")
        print(f"Eye separation: {rf.units.display_text(QuantityKind.EYE_SEPARATION)}")
        for label, px in range_card_ticks(
            rf.units.unit_system, constants.arm_length_m, constants.eye_separation_m, ppm
        ):
            print(f"  tick {label:g} @ {px}px")
        print(f"Marker @ {rf.session.pixel}px -> {format_estimate(est)}")

        result = rf.finalize_session()
        print(json.dumps(json_safe(result.to_dict()), indent=2, allow_nan=False))
    finally:
        sensor.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
