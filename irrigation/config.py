import os


def _optional_float(name):
    value = os.environ.get(name)
    if value in (None, ""):
        return None
    return float(value)


class Config:
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    ROOT_DIR = os.path.dirname(BASE_DIR)

    # Executable that prints one JSON reading on stdout and exits
    SENSOR_COMMAND = os.environ.get(
        "SENSOR_COMMAND",
        os.path.join(ROOT_DIR, "raspberry-pi", "build", "irrigation_system"),
    )

    HISTORY_CAPACITY = int(os.environ.get("HISTORY_CAPACITY", "50"))
    HISTORY_DEFAULT_LIMIT = int(os.environ.get("HISTORY_DEFAULT_LIMIT", "20"))

    # None waits forever for the sensing process
    ACQUIRE_TIMEOUT = _optional_float("ACQUIRE_TIMEOUT")
    # 0 = no bound on simultaneous sensing processes
    MAX_CONCURRENT_ACQUISITIONS = int(os.environ.get("MAX_CONCURRENT_ACQUISITIONS", "0"))

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "8080"))
    INITIAL_READING_DELAY = float(os.environ.get("INITIAL_READING_DELAY", "1.0"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
