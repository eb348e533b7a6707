"""Background worker thread pushing tilt samples into the tracker."""

from __future__ import annotations

import logging
import math
import time
from typing import Optional

from PyQt5 import QtCore

from RANGEFINDER.config import Config
from RANGEFINDER.src.core.inclination import InclinationTracker
from RANGEFINDER.src.drivers.hardware import TiltSensor

logger = logging.getLogger(__name__)


class WorkerState:
    IDLE = "IDLE"
    STREAMING = "STREAMING"
    UNSUPPORTED = "UNSUPPORTED"
    ERROR = "ERROR"


class SensorWorker(QtCore.QThread):
    inclination_changed = QtCore.pyqtSignal(float)
    status_msg = QtCore.pyqtSignal(str)
    state_changed = QtCore.pyqtSignal(str)

    def __init__(self, sensor: TiltSensor, tracker: InclinationTracker, config: Config):
        super().__init__()
        self.sensor = sensor
        self.tracker = tracker
        self.config = config
        self.running = False
        self.paused = False
        self.state = WorkerState.IDLE
        self.samples_read = 0

    def _set_state(self, state: str) -> None:
        if self.state != state:
            self.state = state
            self.state_changed.emit(state)

    def poll_once(self) -> Optional[float]:
        """Read one sample and push it; returns the tilt in degrees, if any."""
        if not self.sensor.supported or not self.tracker.is_supported():
            self._set_state(WorkerState.UNSUPPORTED)
            return None

        sample = self.sensor.read_sample()
        if sample is None:
            return None
        angle = self.tracker.consume(sample)
        self.samples_read += 1
        if angle is None:
            return None
        deg = math.degrees(angle)
        self.inclination_changed.emit(deg)
        return deg

    def start(self, *args) -> None:
        self.running = True
        super().start(*args)

    def stop(self) -> None:
        self.running = False
        self.wait()

    def run(self) -> None:
        self._set_state(WorkerState.STREAMING)
        while self.running:
            if self.paused:
                time.sleep(0.1)
                continue
            try:
                self.poll_once()
            except Exception:
                self._set_state(WorkerState.ERROR)
                self.status_msg.emit("Tilt sensor error. Check logs for details.")
                logger.exception("Sensor worker iteration failed")
                time.sleep(0.05)
                if self.running:
                    self._set_state(WorkerState.STREAMING)
                continue

            if self.state == WorkerState.UNSUPPORTED:
                self.status_msg.emit("Inclination not available on this device.")
                break
            time.sleep(self.config.SENSOR_POLL_INTERVAL_S)
        self.running = False
        if self.state != WorkerState.UNSUPPORTED:
            self._set_state(WorkerState.IDLE)
