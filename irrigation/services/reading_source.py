import json
import logging
import shlex
import subprocess
import threading
from contextlib import nullcontext
from typing import Callable, List, Optional, Sequence, Union

from irrigation.models.reading import Reading, utc_timestamp
from irrigation.services.history_buffer import HistoryBuffer

logger = logging.getLogger(__name__)


class AcquisitionError(Exception):
    """Base class for every way a sensing run can fail."""


class SpawnError(AcquisitionError):
    """The sensing process could not be started at all."""


class NonZeroExit(AcquisitionError):
    def __init__(self, returncode: int, stderr: str):
        super().__init__(f"Irrigation system failed: {stderr}")
        self.returncode = returncode
        self.stderr = stderr


class ParseError(AcquisitionError):
    """Process exited 0 but stdout was not one valid reading document."""


class AcquisitionTimeout(AcquisitionError):
    pass


class ReadingSource:
    """
    Runs the external sensing process once per call and turns its stdout into
    a Reading. Nothing is pooled: every call is a fresh process.
    """

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout: Optional[float] = None,
        max_concurrent: int = 0,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.command = self._split(command)
        self.timeout = timeout
        self.clock = clock
        self._slots = threading.BoundedSemaphore(max_concurrent) if max_concurrent > 0 else None

    @staticmethod
    def _split(command: Union[str, Sequence[str]]) -> List[str]:
        if isinstance(command, str):
            return shlex.split(command)
        return list(command)

    def acquire(self, into: Optional[HistoryBuffer] = None) -> Reading:
        """
        Runs the process once and returns the stamped reading. With *into*
        the reading is stamped and appended in one step under the buffer's
        lock, so buffer order and timestamp order always agree.
        """
        with self._slots or nullcontext():
            stdout, stderr, returncode = self._run()

        # diagnostics never decide success, so undecodable bytes are replaced
        diagnostics = stderr.decode("utf-8", errors="replace")
        for line in diagnostics.splitlines():
            if line.strip():
                logger.info("Hardware: %s", line.strip())

        if returncode != 0:
            raise NonZeroExit(returncode, diagnostics.strip())

        try:
            document = json.loads(stdout.decode("utf-8").strip())
            unstamped = Reading.from_dict(document, timestamp="")
        except (ValueError, KeyError, TypeError) as e:
            raise ParseError(f"Invalid data from irrigation system: {e}") from e

        def stamp() -> Reading:
            return unstamped.model_copy(update={"timestamp": self.clock()})

        if into is None:
            return stamp()
        return into.record(stamp)

    def _run(self):
        try:
            proc = subprocess.Popen(
                self.command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnError(f"Failed to run irrigation system: {e}") from e

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            proc.kill()
            proc.communicate()
            raise AcquisitionTimeout(
                f"Irrigation system timed out after {self.timeout:g}s"
            ) from e
        return stdout, stderr, proc.returncode
