import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from . import config
from .errors import BenchmarkError, BuildError, EmptyAccumulatorError, EmptyCategoryError, MeasurementError
from .measure import ExternalMeasurer
from .progress import ProgressReporter
from .report import Report
from .stats import SavingsStats
from .timer import PerformanceMonitor
from .work_queue import WorkQueue
from .workers import run_workers


@dataclass(frozen=True)
class Category:
    name: str
    files: tuple[Path, ...]


@dataclass
class BenchOutcome:
    totals: SavingsStats
    failed_categories: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_categories


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def discover_categories(root: Path) -> list[Category]:
    """One category per visible subdirectory of ``root``, in name order. Dotfiles are ignored."""
    root = Path(root)
    if not root.is_dir():
        raise BenchmarkError(f"Corpus directory not found: {root}")

    categories = []
    for directory in sorted(entry for entry in root.iterdir() if entry.is_dir() and not _is_hidden(entry)):
        files = tuple(sorted(entry for entry in directory.iterdir() if entry.is_file() and not _is_hidden(entry)))
        categories.append(Category(directory.name, files))
    logging.debug("Discovered %d categories under %s", len(categories), root)
    return categories


def build_tool(command: Sequence[str] = config.DEFAULT_BUILD_COMMAND, cwd: Optional[Path] = None) -> None:
    logging.info("Building measurement tool: %s", " ".join(command))
    try:
        completed = subprocess.run(list(command), cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=False)
    except OSError as exc:
        raise BuildError(f"Could not start build command {command[0]}: {exc}") from exc
    if completed.returncode != 0:
        detail = completed.stderr.strip()
        raise BuildError(f"Build failed with status {completed.returncode}" + (f":\n{detail}" if detail else ""))


def run_category(
    category: Category,
    measurer: ExternalMeasurer,
    report: Report,
    concurrency: Optional[int] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> SavingsStats:
    report.begin_category(category.name)
    queue = WorkQueue(category.files)
    progress = ProgressReporter(
        queue.total,
        lambda: queue.remaining,
        report.stream,
        enabled=report.progress_enabled,
    )

    try:
        with progress:
            if monitor is not None:
                with monitor.time_measurement():
                    stats = run_workers(queue, measurer, concurrency)
            else:
                stats = run_workers(queue, measurer, concurrency)
    finally:
        report.end_progress()

    if monitor is not None:
        monitor.record_category(len(stats), queue.skipped)
    logging.info(
        "Category %s: %d measured, %d skipped",
        category.name,
        len(stats),
        queue.skipped,
    )

    if not len(stats):
        raise EmptyCategoryError(
            f"No eligible {config.ELIGIBLE_SUFFIX} files ({len(category.files)} files found)",
            category=category.name,
        )
    return stats


def run_benchmark(
    categories: Iterable[Category],
    measurer: ExternalMeasurer,
    report: Report,
    concurrency: Optional[int] = None,
    monitor: Optional[PerformanceMonitor] = None,
) -> BenchOutcome:
    """Benchmark each category in turn, then report the total over every sample.

    A measurement failure aborts the run; rows already emitted stay emitted and
    the interrupted category gets none. Empty categories are logged, skipped and
    recorded in the outcome.
    """
    outcome = BenchOutcome(totals=SavingsStats())
    report.start()

    for category in categories:
        try:
            stats = run_category(category, measurer, report, concurrency, monitor)
        except EmptyCategoryError as exc:
            logging.error("%s", exc.describe())
            outcome.failed_categories.append(category.name)
            continue
        except MeasurementError as exc:
            exc.category = category.name
            raise

        report.category(category.name, stats)
        outcome.totals.absorb(stats)

    if not len(outcome.totals):
        detail = "no categories found"
        if outcome.failed_categories:
            detail = "empty categories: " + ", ".join(outcome.failed_categories)
        raise EmptyAccumulatorError(f"No samples in any category ({detail})", category=config.TOTAL_LABEL)

    report.total(outcome.totals)
    return outcome
