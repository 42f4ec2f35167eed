import logging
import threading
from pathlib import Path
from typing import Iterable, List, Optional

from . import config


class WorkQueue:
    """Pending files of one category, shared by all workers of its pass."""

    def __init__(self, paths: Iterable[Path], suffix: str = config.ELIGIBLE_SUFFIX) -> None:
        self._pending: List[Path] = [Path(path) for path in paths]
        self._total = len(self._pending)
        self._suffix = suffix
        self._skipped = 0
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return self._total

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def skipped(self) -> int:
        with self._lock:
            return self._skipped

    def take_next(self) -> Optional[Path]:
        with self._lock:
            while self._pending:
                path = self._pending.pop()
                if path.name.endswith(self._suffix):
                    return path
                self._skipped += 1
                logging.debug("Skipping ineligible file %s", path)
            return None
