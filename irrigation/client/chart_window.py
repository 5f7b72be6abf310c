"""Rolling window of points shown on the dashboard chart."""

import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import plotly.graph_objs as go

from irrigation.models.reading import Reading

WINDOW_SIZE = 20

# series name -> (legend label, color)
SERIES = {
    "temperature": ("Temperature (°C)", "#e53e3e"),
    "humidity": ("Humidity (%)", "#3182ce"),
    "soil_moisture": ("Soil Moisture (%)", "#38a169"),
}


def clock_label(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime("%H:%M:%S")


def timestamp_label(timestamp: str) -> str:
    """Local HH:MM:SS for a server timestamp such as 2025-10-24T12:00:00.000Z."""
    when = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    return clock_label(when.astimezone())


class ChartWindow:
    """Labels plus three series, always the same length and at most ``capacity``."""

    def __init__(self, capacity: int = WINDOW_SIZE) -> None:
        self.capacity = capacity
        self._lock = threading.Lock()
        self._labels: List[str] = []
        self._series: Dict[str, List[float]] = {name: [] for name in SERIES}

    def _push(self, reading: Reading, label: str) -> None:
        self._labels.append(label)
        for name, values in self._series.items():
            values.append(getattr(reading.sensors, name))
        if len(self._labels) > self.capacity:
            del self._labels[0]
            for values in self._series.values():
                del values[0]

    def append(self, reading: Reading, label: Optional[str] = None) -> None:
        with self._lock:
            self._push(reading, label or clock_label())

    def replace_all(self, readings: Iterable[Reading]) -> None:
        readings = list(readings)[-self.capacity:]
        with self._lock:
            self._labels.clear()
            for values in self._series.values():
                values.clear()
            for reading in readings:
                self._push(reading, timestamp_label(reading.timestamp))

    @property
    def labels(self) -> List[str]:
        with self._lock:
            return list(self._labels)

    @property
    def series(self) -> Dict[str, List[float]]:
        with self._lock:
            return {name: list(values) for name, values in self._series.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._labels)

    def to_figure(self) -> go.Figure:
        labels = self.labels
        fig = go.Figure()
        for name, values in self.series.items():
            title, color = SERIES[name]
            fig.add_trace(
                go.Scatter(
                    x=labels,
                    y=values,
                    mode="lines",
                    name=title,
                    line=dict(width=3, color=color, shape="spline"),
                    fill="tozeroy" if name == "soil_moisture" else None,
                )
            )
        fig.update_yaxes(range=[0, 100], title="Value")
        fig.update_xaxes(title="Time")
        fig.update_layout(
            title="Real-time Sensor Readings",
            legend=dict(orientation="h"),
        )
        return fig
