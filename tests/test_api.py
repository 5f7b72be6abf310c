import itertools
import threading
import time

from irrigation import create_app
from irrigation.models.reading import utc_timestamp
from irrigation.services.reading_source import NonZeroExit, ParseError, SpawnError


# CURRENT

def test_current_returns_and_records_reading(client, fake_source, history, make_reading):
    reading = make_reading(soil=33.3)
    fake_source.push(reading)

    resp = client.get("/api/current")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"] == reading.to_dict()
    assert history.read() == [reading]


def test_current_failure_returns_500_and_leaves_history(client, fake_source, history):
    fake_source.push(NonZeroExit(1, "[ERROR] sensor bus not responding"))

    resp = client.get("/api/current")

    assert resp.status_code == 500
    assert resp.get_json() == {
        "success": False,
        "error": "Irrigation system failed: [ERROR] sensor bus not responding",
    }
    assert len(history) == 0


def test_current_parse_and_spawn_errors(client, fake_source, history):
    fake_source.push(ParseError("Invalid data from irrigation system: boom"),
                     SpawnError("Failed to run irrigation system: not found"))

    first = client.get("/api/current")
    second = client.get("/api/current")

    assert first.status_code == second.status_code == 500
    assert "boom" in first.get_json()["error"]
    assert "not found" in second.get_json()["error"]
    assert len(history) == 0


# HISTORY

def test_history_returns_last_n_oldest_first(client, fake_source, make_reading):
    readings = [make_reading() for _ in range(3)]
    fake_source.push(*readings)
    for _ in readings:
        client.get("/api/current")

    body = client.get("/api/history?limit=2").get_json()

    assert body["success"] is True
    assert body["count"] == 2
    assert body["data"] == [r.to_dict() for r in readings[1:]]


def test_history_on_empty_buffer(client):
    assert client.get("/api/history").get_json() == {"success": True, "count": 0, "data": []}


def test_history_invalid_limit_falls_back_to_twenty(client, history, make_reading):
    for _ in range(25):
        history.append(make_reading())

    for query in ("", "?limit=abc", "?limit=0", "?limit=-4", "?limit=2.5"):
        body = client.get(f"/api/history{query}").get_json()
        assert body["count"] == 20, query


def test_history_limit_larger_than_capacity(client, history, make_reading):
    readings = [make_reading() for _ in range(60)]
    for reading in readings:
        history.append(reading)

    body = client.get("/api/history?limit=500").get_json()

    assert body["count"] == 50
    assert body["data"][0] == readings[10].to_dict()


# STATUS / HEALTH

def test_status_reflects_history_without_acquiring(client, fake_source, make_reading):
    body = client.get("/api/status").get_json()
    assert body["success"] is True
    assert body["system"]["status"] == "running"
    assert body["system"]["last_reading"] is None
    assert body["system"]["total_readings"] == 0
    assert body["system"]["uptime"] >= 0
    assert body["system"]["memory"]["rss"] > 0
    assert body["system"]["memory"]["max_rss"] >= body["system"]["memory"]["rss"]

    reading = make_reading()
    fake_source.push(reading)
    client.get("/api/current")
    calls = fake_source.calls

    system = client.get("/api/status").get_json()["system"]
    assert system["last_reading"] == reading.timestamp
    assert system["total_readings"] == 1
    assert fake_source.calls == calls


def test_health(client):
    body = client.get("/api/health").get_json()
    assert body["success"] is True
    assert body["message"] == "Water Irrigation System API is running"
    assert body["timestamp"].endswith("Z")


def test_cors_headers(client):
    resp = client.get("/api/health", headers={"Origin": "http://dashboard.local"})
    assert "Access-Control-Allow-Origin" in resp.headers


def test_dashboard_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Smart Irrigation System" in resp.data


# END TO END

def test_current_runs_the_configured_program(sensor_script, make_doc):
    doc = make_doc(soil=12.0)
    cmd = sensor_script(f"""
        import json
        print(json.dumps({doc!r}))
    """)
    app = create_app({"TESTING": True, "SENSOR_COMMAND": cmd})
    client = app.test_client()

    body = client.get("/api/current").get_json()

    assert body["success"] is True
    assert body["data"]["sensors"]["soil_moisture"] == 12.0
    assert body["data"]["timestamp"] != doc["timestamp"]
    assert client.get("/api/history").get_json()["count"] == 1


def test_current_with_failing_program(sensor_script):
    cmd = sensor_script("""
        import sys
        sys.stderr.write("GPIO init failed")
        sys.exit(1)
    """)
    client = create_app({"TESTING": True, "SENSOR_COMMAND": cmd}).test_client()

    resp = client.get("/api/current")

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "error": "Irrigation system failed: GPIO init failed"}
    assert client.get("/api/history").get_json()["count"] == 0


def test_current_with_undecodable_output(sensor_script):
    cmd = sensor_script("""
        import sys
        sys.stderr.buffer.write(b"\\xfe\\n")
        sys.stdout.buffer.write(b"\\xff{}\\n")
    """)
    client = create_app({"TESTING": True, "SENSOR_COMMAND": cmd}).test_client()

    resp = client.get("/api/current")

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"].startswith("Invalid data from irrigation system:")
    assert client.get("/api/history").get_json()["count"] == 0


def test_concurrent_current_requests_record_in_timestamp_order(sensor_script, make_doc):
    cmd = sensor_script(f"""
        import json
        print(json.dumps({make_doc()!r}))
    """)
    app = create_app({"TESTING": True, "SENSOR_COMMAND": cmd})
    calls = itertools.count()

    def slow_first_clock():
        ts = utc_timestamp()
        if next(calls) == 0:
            # the first request stalls between stamping and recording
            time.sleep(0.5)
        return ts

    app.extensions["irrigation"].reading_source.clock = slow_first_clock
    statuses = []

    def worker():
        statuses.append(app.test_client().get("/api/current").status_code)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stamps = [r.timestamp for r in app.extensions["irrigation"].history.read(50)]
    assert statuses == [200] * 4
    assert len(stamps) == 4
    assert stamps == sorted(stamps)


# STARTUP

def test_prime_history_records_one_reading(app, fake_source, history, make_reading):
    from irrigation.__main__ import prime_history

    reading = make_reading()
    fake_source.push(reading)
    prime_history(app)

    assert history.read() == [reading]


def test_prime_history_failure_is_only_a_warning(app, fake_source, history, caplog):
    from irrigation.__main__ import prime_history

    fake_source.push(SpawnError("Failed to run irrigation system: not found"))
    prime_history(app)

    assert len(history) == 0
    assert "Initial reading failed" in caplog.text
