import math
import threading
import unittest

from huffbench.errors import EmptyAccumulatorError
from huffbench.stats import SavingsStats, StatsAccumulator


class TestStatsAccumulator(unittest.TestCase):
    def test_mean_and_population_stddev(self) -> None:
        acc = StatsAccumulator()
        acc.extend([1, 2, 3, 4])
        self.assertEqual(2.5, acc.mean())
        self.assertAlmostEqual(1.118033988749895, acc.stddev())

    def test_single_sample_has_zero_spread(self) -> None:
        acc = StatsAccumulator()
        acc.add(42.0)
        self.assertEqual(42.0, acc.mean())
        self.assertEqual(0.0, acc.stddev())

    def test_empty_accumulator_raises(self) -> None:
        acc = StatsAccumulator("raw savings")
        with self.assertRaises(EmptyAccumulatorError) as ctx:
            acc.mean()
        self.assertIn("raw savings", str(ctx.exception))
        with self.assertRaises(EmptyAccumulatorError):
            acc.stddev()

    def test_order_does_not_matter(self) -> None:
        forward = StatsAccumulator()
        forward.extend([3.5, -1.0, 7.25, 0.0])
        backward = StatsAccumulator()
        backward.extend([0.0, 7.25, -1.0, 3.5])
        self.assertAlmostEqual(forward.mean(), backward.mean())
        self.assertAlmostEqual(forward.stddev(), backward.stddev())

    def test_non_finite_samples_propagate(self) -> None:
        acc = StatsAccumulator()
        acc.extend([10.0, math.nan])
        self.assertTrue(math.isnan(acc.mean()))

    def test_concurrent_adds_are_all_kept(self) -> None:
        acc = StatsAccumulator()

        def _fill() -> None:
            for _ in range(500):
                acc.add(1.0)

        threads = [threading.Thread(target=_fill) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(4000, len(acc))


class TestSavingsStats(unittest.TestCase):
    def test_absorb_concatenates_samples(self) -> None:
        first = SavingsStats()
        first.record(10.0, 1.0)
        second = SavingsStats()
        second.record(50.0, 5.0)
        second.record(50.0, 5.0)

        totals = SavingsStats()
        totals.absorb(first)
        totals.absorb(second)

        self.assertEqual(3, len(totals))
        self.assertEqual((10.0, 50.0, 50.0), totals.raw.samples)
        self.assertEqual((1.0, 5.0, 5.0), totals.reference.samples)
        # untouched after folding
        self.assertEqual(1, len(first))


if __name__ == "__main__":
    unittest.main()
