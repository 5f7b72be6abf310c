"""What the dashboard page shows: latest values, status words and a short log."""

import collections
import logging
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from irrigation.client.chart_window import clock_label
from irrigation.models.reading import Reading

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 50

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def temperature_status(temp: float) -> str:
    if temp < 15:
        return "Too Cold"
    if temp < 20:
        return "Cool"
    if temp < 30:
        return "Optimal"
    if temp < 35:
        return "Warm"
    return "Too Hot"


def humidity_status(humidity: float) -> str:
    if humidity < 30:
        return "Too Dry"
    if humidity < 50:
        return "Low"
    if humidity < 70:
        return "Optimal"
    if humidity < 80:
        return "High"
    return "Too Humid"


def soil_status(moisture: float) -> str:
    if moisture < 20:
        return "Very Dry - Needs Water"
    if moisture < 40:
        return "Dry"
    if moisture < 60:
        return "Good"
    if moisture < 80:
        return "Moist"
    return "Very Wet"


@dataclass(frozen=True)
class LogEntry:
    time: str
    message: str
    level: str = "info"


class DashboardState:
    def __init__(self) -> None:
        self.temperature = "--"
        self.humidity = "--"
        self.soil_moisture = "--"
        self.comfort_score = "--"
        self.temperature_status = ""
        self.humidity_status = ""
        self.soil_status = ""
        self.system_status = ""
        self.pump = "OFF"
        self.servo_rotation = 0
        self.connected = False
        self.last_update: Optional[str] = None
        # newest first
        self._log: Deque[LogEntry] = collections.deque(maxlen=MAX_LOG_ENTRIES)

    def show_reading(self, reading: Reading) -> None:
        sensors = reading.sensors
        irrigation = reading.irrigation

        self.temperature = f"{sensors.temperature:.1f}°C"
        self.humidity = f"{sensors.humidity:.1f}%"
        self.soil_moisture = f"{sensors.soil_moisture:.1f}%"
        self.comfort_score = f"{irrigation.comfort_score:.0f}%"

        self.temperature_status = temperature_status(sensors.temperature)
        self.humidity_status = humidity_status(sensors.humidity)
        self.soil_status = soil_status(sensors.soil_moisture)
        self.system_status = irrigation.reason

        self.pump = "ON" if sensors.pump_status else "OFF"
        # 0° -> -90, 90° -> 0, 180° -> +90 on the gauge
        self.servo_rotation = sensors.servo_angle - 90
        self.last_update = clock_label()

        if irrigation.should_water:
            self.log(f"Watering triggered: {irrigation.reason}", "warning")

    def set_connected(self, connected: bool) -> None:
        self.connected = connected

    @property
    def connection_label(self) -> str:
        return "Connected" if self.connected else "Disconnected"

    def log(self, message: str, level: str = "info") -> LogEntry:
        entry = LogEntry(time=clock_label(), message=message, level=level)
        self._log.appendleft(entry)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), message)
        return entry

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._log)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "soil_moisture": self.soil_moisture,
            "comfort_score": self.comfort_score,
            "temperature_status": self.temperature_status,
            "humidity_status": self.humidity_status,
            "soil_status": self.soil_status,
            "system_status": self.system_status,
            "pump": self.pump,
            "servo_rotation": self.servo_rotation,
            "connection": self.connection_label,
            "last_update": self.last_update,
        }
