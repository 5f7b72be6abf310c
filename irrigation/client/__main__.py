#!/usr/bin/env python3
"""
Headless dashboard client: polls the irrigation API and logs what the web
dashboard would show.

    python -m irrigation.client --url http://localhost:8080

SIGUSR1 toggles between the visible (5 s) and hidden (30 s) polling rates,
SIGUSR2 triggers a manual watering. Ctrl+C stops.
"""

import argparse
import logging
import signal
from threading import Event

from irrigation.client.poller import ClientPoller, PollMode


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Poll the irrigation API from the command line.")
    p.add_argument("--url", default="http://localhost:8080", help="API base URL")
    p.add_argument("--history-limit", type=int, default=20, help="readings loaded at start")
    p.add_argument("--timeout", type=float, default=10.0, help="per-request timeout (s)")
    p.add_argument("--hidden", action="store_true", help="start in background (30 s) mode")
    return p.parse_args()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")
    args = parse_args()

    poller = ClientPoller(
        args.url,
        request_timeout=args.timeout,
        history_limit=args.history_limit,
    )
    if args.hidden:
        poller.on_visibility_change(hidden=True)

    stop_event = Event()

    def _handle_stop(signum, frame):
        stop_event.set()

    def _toggle_visibility(signum, frame):
        poller.on_visibility_change(hidden=poller.mode is PollMode.ACTIVE)

    def _water(signum, frame):
        poller.trigger_water()

    signal.signal(signal.SIGINT, _handle_stop)
    signal.signal(signal.SIGTERM, _handle_stop)
    if hasattr(signal, "SIGUSR1"):
        signal.signal(signal.SIGUSR1, _toggle_visibility)
        signal.signal(signal.SIGUSR2, _water)

    poller.start()
    try:
        stop_event.wait()
    finally:
        poller.stop()


if __name__ == "__main__":
    main()
