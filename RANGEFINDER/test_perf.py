import math
import time
from RANGEFINDER.config import Config
from RANGEFINDER.src.core.session import pixels_per_meter_from_dpi
from RANGEFINDER.src.core.solver import solve

def test_perf():
    config = Config()
    arm, eye = config.DEFAULT_ARM_LENGTH_M, config.DEFAULT_EYE_SEPARATION_M

    # Every marker position across a wide, dense display
    ppm = pixels_per_meter_from_dpi(480)
    width = 4000
    print(f"Sweeping {width + 1} marker positions at {ppm:.0f} px/m...")

    start = time.time()
    results = [solve(px / ppm, arm, eye, config.ACCURACY_DELTA_M) for px in range(width + 1)]
    end = time.time()

    print(f"Sweep Time: {end - start:.4f} seconds")

    bad = [r for r in results if r is None or math.isnan(r[0]) or math.isnan(r[1])]
    infinite = sum(1 for r in results if r is not None and math.isinf(r[0]))
    print(f"Infinite: {infinite}, invalid: {len(bad)}")

    if bad:
        print("FAIL: NaN or missing result in sweep!")
    elif end - start > 1.0:
        print("FAIL: Too slow!")
    else:
        print("PASS: Sweep clean!")
    assert not bad

if __name__ == "__main__":
    test_perf()
