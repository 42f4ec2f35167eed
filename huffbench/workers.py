import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from . import config
from .measure import ExternalMeasurer
from .stats import SavingsStats
from .work_queue import WorkQueue


def _drain(
    queue: WorkQueue,
    measurer: ExternalMeasurer,
    stats: SavingsStats,
    stop_event: threading.Event,
) -> int:
    measured = 0
    while not stop_event.is_set():
        path = queue.take_next()
        if path is None:
            break
        try:
            result = measurer.measure(path)
        except Exception:
            stop_event.set()
            raise
        stats.record(result.raw_saving, result.reference_saving)
        measured += 1
    return measured


def run_workers(
    queue: WorkQueue,
    measurer: ExternalMeasurer,
    concurrency: Optional[int] = None,
    stats: Optional[SavingsStats] = None,
) -> SavingsStats:
    """Drain the queue with a fixed number of workers and return the savings they recorded.

    Returns only after every worker has finished. When a measurement fails the
    remaining workers stop taking new files and the failure is re-raised.
    """
    count = config.clamp_worker_count(concurrency)
    stats = stats if stats is not None else SavingsStats()
    stop_event = threading.Event()

    with ThreadPoolExecutor(max_workers=count, thread_name_prefix="huffbench") as executor:
        futures = [executor.submit(_drain, queue, measurer, stats, stop_event) for _ in range(count)]
        wait(futures)

    failures = [future.exception() for future in futures if future.exception() is not None]
    if failures:
        raise failures[0]

    logging.debug(
        "Workers finished: %d measured, %d skipped",
        sum(future.result() for future in futures),
        queue.skipped,
    )
    return stats
