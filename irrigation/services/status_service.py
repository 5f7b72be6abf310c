import os
import resource
import sys
import time
from typing import Any, Dict, Optional

from irrigation.services.history_buffer import HistoryBuffer

STATM_PATH = "/proc/self/statm"


def current_rss() -> Optional[int]:
    """Resident set size right now in bytes, None where /proc is unavailable."""
    try:
        with open(STATM_PATH, "r", encoding="utf-8") as f:
            resident_pages = int(f.read().split()[1])
    except (OSError, IndexError, ValueError):
        return None
    return resident_pages * os.sysconf("SC_PAGE_SIZE")


def peak_rss() -> int:
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    if sys.platform != "darwin":
        rss *= 1024
    return rss


def memory_usage() -> Dict[str, Optional[int]]:
    return {"rss": current_rss(), "max_rss": peak_rss()}


class StatusService:
    def __init__(self, history: HistoryBuffer, started_at: Optional[float] = None):
        self.history = history
        self.started_at = time.monotonic() if started_at is None else started_at

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def system_status(self) -> Dict[str, Any]:
        latest = self.history.latest()
        return {
            "status": "running",
            "uptime": round(self.uptime(), 3),
            "memory": memory_usage(),
            "last_reading": latest.timestamp if latest else None,
            "total_readings": len(self.history),
        }
