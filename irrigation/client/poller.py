"""Polls the irrigation API and feeds the dashboard state and chart window.

Polling runs every 5 s while the dashboard is visible and every 30 s while it
is hidden. Coming back into view fetches once immediately.
"""

import enum
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import requests

from irrigation.client.chart_window import ChartWindow
from irrigation.client.dashboard import DashboardState
from irrigation.client.scheduler import PollScheduler
from irrigation.models.reading import Reading

logger = logging.getLogger(__name__)

ACTIVE_PERIOD = 5.0
BACKGROUND_PERIOD = 30.0
WATER_COOLDOWN = 2.0
HISTORY_LIMIT = 20


class NetworkError(Exception):
    """Request failed, returned garbage, or came back with success=false."""


class PollMode(enum.Enum):
    ACTIVE = "active"
    BACKGROUND = "background"


class ClientPoller:
    def __init__(
        self,
        base_url: str,
        chart: Optional[ChartWindow] = None,
        dashboard: Optional[DashboardState] = None,
        session: Optional[requests.Session] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        request_timeout: float = 10.0,
        history_limit: int = HISTORY_LIMIT,
        active_period: float = ACTIVE_PERIOD,
        background_period: float = BACKGROUND_PERIOD,
        water_cooldown: float = WATER_COOLDOWN,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.chart = chart if chart is not None else ChartWindow()
        self.dashboard = dashboard if dashboard is not None else DashboardState()
        self.session = session or requests.Session()
        self.request_timeout = request_timeout
        self.history_limit = history_limit
        self.periods = {
            PollMode.ACTIVE: active_period,
            PollMode.BACKGROUND: background_period,
        }
        self.water_cooldown = water_cooldown

        self._timer_factory = timer_factory
        self.scheduler = PollScheduler(self.fetch_current, timer_factory)
        self._lock = threading.Lock()
        self._running = False
        self.mode = PollMode.ACTIVE
        self.water_enabled = True
        self._cooldown_timer: Optional[threading.Timer] = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            self._running = True
            mode = self.mode
        self.scheduler.arm(self.periods[mode])
        logger.info("Started automatic updates every %g seconds", self.periods[mode])
        self.fetch_current()
        self.load_history()
        self.dashboard.log("System started", "success")

    def stop(self) -> None:
        with self._lock:
            self._running = False
            cooldown, self._cooldown_timer = self._cooldown_timer, None
        self.scheduler.cancel()
        if cooldown is not None:
            cooldown.cancel()

    def on_visibility_change(self, hidden: bool) -> None:
        """Slow down while hidden; on return, rearm fast polling and fetch once."""
        mode = PollMode.BACKGROUND if hidden else PollMode.ACTIVE
        with self._lock:
            if mode is self.mode:
                return
            self.mode = mode
            running = self._running
        if not running:
            return

        self.scheduler.arm(self.periods[mode])
        if mode is PollMode.ACTIVE:
            self.fetch_current()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = self.session.request(
                method, self.base_url + path, timeout=self.request_timeout, **kwargs
            )
            body = resp.json()
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e
        except ValueError as e:
            raise NetworkError(f"Invalid response from server: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise NetworkError(error or "Unknown error")
        return body

    @staticmethod
    def _reading(data: Any) -> Reading:
        try:
            return Reading.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise NetworkError(f"Malformed reading from server: {e}") from e

    # ------------------------------------------------------------------
    # actions
    # ------------------------------------------------------------------

    def _show(self, reading: Reading) -> None:
        self.dashboard.show_reading(reading)
        self.chart.append(reading)

    def fetch_current(self) -> Optional[Reading]:
        """One poll tick. Failures are reported, never raised."""
        try:
            envelope = self._request("GET", "/api/current")
            reading = self._reading(envelope.get("data"))
        except NetworkError as e:
            self.dashboard.set_connected(False)
            self.dashboard.log(f"Connection error: {e}", "error")
            return None

        self.dashboard.set_connected(True)
        self._show(reading)
        self.dashboard.log(f"Data updated - Soil: {reading.sensors.soil_moisture:.1f}%")
        return reading

    def load_history(self) -> List[Reading]:
        try:
            envelope = self._request(
                "GET", "/api/history", params={"limit": self.history_limit}
            )
            readings = [self._reading(item) for item in envelope.get("data") or []]
        except NetworkError as e:
            logger.warning("Error loading history: %s", e)
            self.dashboard.log("Failed to load historical data", "warning")
            return []

        if readings:
            self.chart.replace_all(readings)
            logger.info("Loaded %d historical readings", len(readings))
        return readings

    def trigger_water(self) -> Optional[Reading]:
        """Manual watering. The trigger stays disabled until the cool-down ends."""
        with self._lock:
            if not self.water_enabled:
                return None
            self.water_enabled = False

        reading = None
        try:
            envelope = self._request("POST", "/api/water")
            reading = self._reading(envelope.get("data"))
        except NetworkError as e:
            self.dashboard.set_connected(False)
            self.dashboard.log(f"Manual watering failed: {e}", "error")
        else:
            self.dashboard.set_connected(True)
            self.dashboard.log("Manual watering completed", "success")
            self._show(reading)
        finally:
            timer = self._timer_factory(self.water_cooldown, self._enable_water)
            timer.daemon = True
            with self._lock:
                self._cooldown_timer = timer
            timer.start()
        return reading

    def _enable_water(self) -> None:
        with self._lock:
            self.water_enabled = True
            self._cooldown_timer = None
