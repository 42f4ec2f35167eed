import math
import sys
import threading
from typing import Callable, Optional, TextIO

from colorama import Cursor

from . import config


def render_bar(total: int, remaining: int, width: int = config.PROGRESS_BAR_WIDTH) -> str:
    completed = 1.0 if total <= 0 else (total - remaining) / total
    completed = min(max(completed, 0.0), 1.0)
    filled = int(math.floor(width * completed + 0.5))
    return "[" + "=" * filled + " " * (width - filled) + "]" + Cursor.BACK(width + 2)


class ProgressReporter:
    """Redraws a fixed-width bar in place while a category's workers run."""

    def __init__(
        self,
        total: int,
        remaining: Callable[[], int],
        stream: Optional[TextIO] = None,
        *,
        enabled: bool = True,
        interval: float = config.PROGRESS_INTERVAL,
        width: int = config.PROGRESS_BAR_WIDTH,
    ) -> None:
        self.total = total
        self._remaining = remaining
        self._stream = stream
        self.enabled = enabled
        self._interval = interval
        self._width = width

        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _tick(self) -> None:
        with self._lock:
            self.stream.write(render_bar(self.total, self._remaining(), self._width))
            self.stream.flush()

    def _spin(self) -> None:
        while not self._stop_event.wait(self._interval):
            self._tick()

    def start(self) -> None:
        if not self.enabled:
            return
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._tick()
        self._thread = threading.Thread(target=self._spin, name="huffbench-progress", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if not self.enabled:
            return
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        self._tick()

    def __enter__(self) -> "ProgressReporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.stop()
        else:
            self._stop_event.set()
            if self._thread:
                self._thread.join(timeout=1.0)
                self._thread = None
        return False
