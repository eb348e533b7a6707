"""Application configuration with simple JSON persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class Config:
    # Solver
    ACCURACY_DELTA_M: float = 0.00025  # smallest controllable marker step

    # Optical defaults used when the CLI seeds empty preferences
    DEFAULT_ARM_LENGTH_M: float = 0.60
    DEFAULT_EYE_SEPARATION_M: float = 0.07

    # Tilt sensor
    SENSOR_POLL_INTERVAL_S: float = 0.05

    # Simulation
    MOCK_XDPI: float = 160.0
    MOCK_WIDTH_PX: int = 800
    MOCK_TILT_DEG: float = 5.0
    MOCK_TILT_NOISE_DEG: float = 0.5

    # Preferences file (empty = in-memory)
    PREFS_PATH: str = ""

    @staticmethod
    def default_path() -> Path:
        return Path.home() / ".rangefinder_config.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        cfg = cls()
        cfg_path = path or cls.default_path()
        if not cfg_path.exists():
            return cfg

        try:
            data = json.loads(cfg_path.read_text())
        except Exception:
            logger.exception("Failed to read config file: %s", cfg_path)
            return cfg

        for f in fields(cfg):
            if f.name not in data:
                continue
            raw = data[f.name]
            try:
                if f.type in (bool, "bool"):
                    val = bool(raw)
                elif f.type in (int, "int"):
                    val = int(raw)
                elif f.type in (float, "float"):
                    val = float(raw)
                else:
                    val = raw
                setattr(cfg, f.name, val)
            except Exception:
                logger.warning("Ignoring invalid config value for %s", f.name)

        cfg.normalize()
        return cfg

    def save(self, path: Optional[Path] = None) -> None:
        cfg_path = path or self.default_path()
        cfg_path.write_text(json.dumps(asdict(self), indent=2, sort_keys=True))

    def normalize(self) -> None:
        defaults = Config()
        if self.ACCURACY_DELTA_M <= 0:
            self.ACCURACY_DELTA_M = defaults.ACCURACY_DELTA_M
        if self.SENSOR_POLL_INTERVAL_S <= 0:
            self.SENSOR_POLL_INTERVAL_S = defaults.SENSOR_POLL_INTERVAL_S
        if self.MOCK_XDPI <= 0:
            self.MOCK_XDPI = defaults.MOCK_XDPI
        if self.MOCK_WIDTH_PX <= 0:
            self.MOCK_WIDTH_PX = defaults.MOCK_WIDTH_PX
        if self.MOCK_TILT_NOISE_DEG < 0:
            self.MOCK_TILT_NOISE_DEG = abs(self.MOCK_TILT_NOISE_DEG)
