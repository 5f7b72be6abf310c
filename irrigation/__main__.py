"""
Runs the irrigation API server.

    python -m irrigation

Settings come from environment variables (see irrigation/config.py), e.g.
SENSOR_COMMAND=/opt/irrigation/bin/irrigation_system PORT=8080.
"""

import logging
import threading

from irrigation import create_app
from irrigation.services.reading_source import AcquisitionError

logger = logging.getLogger("irrigation")


def prime_history(app) -> None:
    """Take one reading so the dashboard has something to plot on first load."""
    svc = app.extensions["irrigation"]
    try:
        svc.reading_source.acquire(into=svc.history)
    except AcquisitionError as e:
        logger.warning("Initial reading failed - is the sensing program built? (%s)", e)


def main() -> None:
    app = create_app()
    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    port = app.config["PORT"]
    logger.info("Water Irrigation System started")
    logger.info("Dashboard: http://localhost:%d", port)
    logger.info("API: http://localhost:%d/api/current", port)
    logger.info("Sensing command: %s", app.config["SENSOR_COMMAND"])

    warmup = threading.Timer(app.config["INITIAL_READING_DELAY"], prime_history, args=(app,))
    warmup.daemon = True
    warmup.start()

    app.run(host=app.config["HOST"], port=port, debug=False, use_reloader=False, threaded=True)


if __name__ == "__main__":
    main()
