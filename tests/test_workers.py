import threading
import unittest
from pathlib import Path

from helpers import FakeMeasurer
from huffbench.errors import MeasurementError
from huffbench.work_queue import WorkQueue
from huffbench.workers import run_workers


class TestRunWorkers(unittest.TestCase):
    def test_fixed_sizes_give_constant_savings(self) -> None:
        queue = WorkQueue([Path("a.png"), Path("b.png"), Path("c.png")])

        stats = run_workers(queue, FakeMeasurer(default=(100, 90, 80)), concurrency=16)

        self.assertEqual((20.0, 20.0, 20.0), stats.raw.samples)
        self.assertEqual(20.0, stats.raw.mean())
        self.assertEqual(0.0, stats.raw.stddev())
        for sample in stats.reference.samples:
            self.assertAlmostEqual(11.1111111, sample, places=6)
        self.assertAlmostEqual(11.1111111, stats.reference.mean(), places=6)
        self.assertAlmostEqual(0.0, stats.reference.stddev(), places=9)

    def test_every_file_measured_exactly_once(self) -> None:
        paths = [Path(f"img{i:03d}.png") for i in range(120)]
        measurer = FakeMeasurer()

        stats = run_workers(WorkQueue(paths), measurer, concurrency=8)

        self.assertEqual(120, len(stats))
        self.assertEqual(sorted(paths), sorted(measurer.calls))

    def test_ineligible_files_are_not_measured(self) -> None:
        paths = [Path("a.png"), Path("b.png"), Path("x.txt"), Path("y.jpg"), Path("z.webp")]
        measurer = FakeMeasurer()

        stats = run_workers(WorkQueue(paths), measurer, concurrency=4)

        self.assertEqual(2, len(stats))
        self.assertEqual({"a.png", "b.png"}, {path.name for path in measurer.calls})

    def test_workers_run_concurrently(self) -> None:
        barrier = threading.Barrier(4, timeout=5)
        measurer = FakeMeasurer(hook=lambda _path: barrier.wait())

        stats = run_workers(WorkQueue([Path(f"{i}.png") for i in range(4)]), measurer, concurrency=4)

        self.assertEqual(4, len(stats))

    def test_failure_propagates_and_stops_taking_work(self) -> None:
        # Single worker pops from the end, so bad.png is measured first
        queue = WorkQueue([Path("a.png"), Path("b.png"), Path("bad.png")])
        measurer = FakeMeasurer(fail_on={"bad.png"})

        with self.assertRaises(MeasurementError) as ctx:
            run_workers(queue, measurer, concurrency=1)

        self.assertEqual(Path("bad.png"), ctx.exception.path)
        self.assertEqual(2, queue.remaining)
        self.assertEqual([Path("bad.png")], measurer.calls)

    def test_failure_with_many_workers(self) -> None:
        paths = [Path(f"img{i:03d}.png") for i in range(60)] + [Path("bad.png")]
        with self.assertRaises(MeasurementError):
            run_workers(WorkQueue(paths), FakeMeasurer(fail_on={"bad.png"}), concurrency=16)


if __name__ == "__main__":
    unittest.main()
