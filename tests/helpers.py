import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

from huffbench.errors import MeasurementError
from huffbench.measure import ExternalMeasurer, MeasurementResult


class FakeMeasurer(ExternalMeasurer):
    """Answers from a table of sizes keyed by file name instead of running a tool."""

    def __init__(
        self,
        sizes: Optional[Dict[str, Tuple[int, int, int]]] = None,
        default: Tuple[int, int, int] = (100, 90, 80),
        fail_on: Iterable[str] = (),
        hook: Optional[Callable[[Path], None]] = None,
    ) -> None:
        super().__init__("fake-tool")
        self.sizes = sizes or {}
        self.default = default
        self.fail_on = set(fail_on)
        self.hook = hook
        self.calls: list[Path] = []
        self._lock = threading.Lock()

    def measure(self, path: Path) -> MeasurementResult:
        with self._lock:
            self.calls.append(path)
        if self.hook is not None:
            self.hook(path)
        if path.name in self.fail_on:
            raise MeasurementError("fake-tool exited with status 1", path)
        uncompressed, reference, coded = self.sizes.get(path.name, self.default)
        return MeasurementResult(path, uncompressed, reference, coded)


def make_corpus(root: Path, layout: Dict[str, Iterable[str]]) -> Path:
    for category, names in layout.items():
        directory = root / category
        directory.mkdir(parents=True)
        for name in names:
            (directory / name).write_bytes(b"not really an image")
    return root
