from .bench import (
    BenchOutcome,
    Category,
    build_tool,
    discover_categories,
    run_benchmark,
    run_category,
)
from .errors import (
	BenchmarkError,
	BuildError,
	EmptyAccumulatorError,
	EmptyCategoryError,
	MeasurementError,
)
from .measure import CombinedMeasurer, ExternalMeasurer, MeasurementResult, SplitMeasurer, measurer_from_settings
from .report import HumanReport, TableReport, make_report
from .stats import SavingsStats, StatsAccumulator
from .timer import PerformanceMonitor, TimingStats
from .work_queue import WorkQueue
from .workers import run_workers
