import logging
import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class TimingStats:
    total_time: float = 0.0
    measure_time: float = 0.0
    categories: int = 0
    files_measured: int = 0
    files_skipped: int = 0

    @property
    def avg_time_per_file(self) -> float:
        return self.measure_time / self.files_measured if self.files_measured else 0.0

    @property
    def throughput(self) -> float:
        return self.files_measured / self.measure_time if self.measure_time else 0.0

    def print_summary(self) -> None:
        logging.info("")
        logging.info("Performance summary")
        logging.info("  elapsed total : %.3fs", self.total_time)
        if self.measure_time > 0 and self.total_time > 0:
            logging.info("  measuring     : %.3fs (%s)", self.measure_time, self._percent(self.measure_time))
        logging.info("  categories    : %d", self.categories)
        logging.info("  files measured: %d", self.files_measured)
        if self.files_skipped:
            logging.info("  files skipped : %d", self.files_skipped)
        if self.files_measured:
            logging.info("  avg per file  : %.4fs", self.avg_time_per_file)
            logging.info("  throughput    : %.2f files/s", self.throughput)

    def _percent(self, span: float) -> str:
        return f"{(span / self.total_time) * 100:.1f}%" if self.total_time else "0.0%"


class PerformanceMonitor:
    def __init__(self) -> None:
        self.stats = TimingStats()
        self._operation_start: Optional[float] = None

    def start_operation(self) -> None:
        self._operation_start = time.perf_counter()

    def end_operation(self) -> None:
        if self._operation_start is not None:
            self.stats.total_time = time.perf_counter() - self._operation_start

    def time_measurement(self) -> "SectionTimer":
        return SectionTimer(self, 'measure_time')

    def record_category(self, measured: int, skipped: int) -> None:
        self.stats.categories += 1
        self.stats.files_measured += measured
        self.stats.files_skipped += skipped

    def print_summary(self) -> None:
        self.stats.print_summary()


class SectionTimer:
    def __init__(self, monitor: PerformanceMonitor, stat_name: str) -> None:
        self.monitor = monitor
        self.stat_name = stat_name
        self.start_time: Optional[float] = None

    def __enter__(self) -> "SectionTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self.start_time is None:
            return False
        elapsed = time.perf_counter() - self.start_time
        current_value = getattr(self.monitor.stats, self.stat_name)
        setattr(self.monitor.stats, self.stat_name, current_value + elapsed)
        return False
