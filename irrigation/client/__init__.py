from .chart_window import ChartWindow
from .dashboard import DashboardState, LogEntry
from .poller import ClientPoller, NetworkError, PollMode
from .scheduler import PollScheduler

__all__ = [
    "ChartWindow",
    "ClientPoller",
    "DashboardState",
    "LogEntry",
    "NetworkError",
    "PollMode",
    "PollScheduler",
]
