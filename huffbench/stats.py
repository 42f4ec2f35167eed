import math
import threading
from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import EmptyAccumulatorError


@dataclass
class StatsAccumulator:
    name: str = "samples"
    _values: List[float] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, value: float) -> None:
        with self._lock:
            self._values.append(float(value))

    def extend(self, values: Iterable[float]) -> None:
        converted = [float(value) for value in values]
        with self._lock:
            self._values.extend(converted)

    @property
    def samples(self) -> tuple[float, ...]:
        with self._lock:
            return tuple(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def mean(self) -> float:
        values = self.samples
        if not values:
            raise EmptyAccumulatorError(f"No samples recorded for {self.name}")
        return sum(values) / len(values)

    def stddev(self) -> float:
        """Population standard deviation (divides by N, not N - 1)."""
        values = self.samples
        if not values:
            raise EmptyAccumulatorError(f"No samples recorded for {self.name}")
        average = sum(values) / len(values)
        return math.sqrt(sum((value - average) ** 2 for value in values) / len(values))


@dataclass
class SavingsStats:
    raw: StatsAccumulator = field(default_factory=lambda: StatsAccumulator("raw savings"))
    reference: StatsAccumulator = field(default_factory=lambda: StatsAccumulator("reference savings"))

    def record(self, raw_saving: float, reference_saving: float) -> None:
        self.raw.add(raw_saving)
        self.reference.add(reference_saving)

    def absorb(self, other: "SavingsStats") -> None:
        self.raw.extend(other.raw.samples)
        self.reference.extend(other.reference.samples)

    def __len__(self) -> int:
        return len(self.raw)
