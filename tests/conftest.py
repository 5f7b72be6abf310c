import itertools
import sys
import textwrap

import pytest

from irrigation import create_app
from irrigation.models.reading import Reading

_ticks = itertools.count()


def sensor_doc(soil=45.0, temperature=24.0, humidity=55.0, should_water=False,
               pump=False, angle=90, comfort=72.5):
    """Document shaped like what the sensing program prints."""
    return {
        "sensors": {
            "temperature": temperature,
            "humidity": humidity,
            "soil_moisture": soil,
            "pump_status": pump,
            "servo_angle": angle,
            "display_message": f"T:{int(temperature)}C M:{int(soil)}%",
        },
        "irrigation": {
            "should_water": should_water,
            "duration": 0,
            "reason": "Plant is healthy",
            "comfort_score": comfort,
        },
        "timestamp": "1729771200",
    }


def next_timestamp():
    n = next(_ticks)
    return f"2025-10-24T12:{n // 60 % 60:02d}:{n % 60:02d}.000Z"


def build_reading(timestamp=None, **kwargs):
    return Reading.from_dict(sensor_doc(**kwargs), timestamp=timestamp or next_timestamp())


class FakeSource:
    """Stands in for ReadingSource: returns queued readings or raises queued errors."""

    def __init__(self):
        self.queue = []
        self.calls = 0

    def push(self, *items):
        self.queue.extend(items)

    def acquire(self, into=None):
        self.calls += 1
        item = self.queue.pop(0) if self.queue else build_reading()
        if isinstance(item, Exception):
            raise item
        if into is not None:
            return into.record(lambda: item)
        return item


@pytest.fixture
def make_doc():
    return sensor_doc


@pytest.fixture
def make_reading():
    return build_reading


@pytest.fixture
def sensor_script(tmp_path):
    """Writes a python script to tmp_path and returns the command that runs it."""
    counter = itertools.count()

    def _make(body: str):
        path = tmp_path / f"sensor_{next(counter)}.py"
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return [sys.executable, str(path)]

    return _make


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def app(fake_source):
    app = create_app({"TESTING": True, "SENSOR_COMMAND": "irrigation_system"})
    svc = app.extensions["irrigation"]
    svc.reading_source = fake_source
    svc.actuation.source = fake_source
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def history(app):
    return app.extensions["irrigation"].history
