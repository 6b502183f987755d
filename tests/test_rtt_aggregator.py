import unittest

from algorithms.rtt_aggregator import RTTAggregator
from contracts.errors import InsufficientDataError
from contracts.probe_outcome import ProbeOutcome


class TestRTTAggregator(unittest.TestCase):
    def test_worst_rtt_is_propagated(self):
        outcomes = [
            ProbeOutcome(host="h1", rtt_ms=10.0),
            ProbeOutcome(host="h2", error="unreachable"),
            ProbeOutcome(host="h3", rtt_ms=50.0),
        ]
        estimate = RTTAggregator(min_hosts=1).aggregate(outcomes)
        self.assertEqual(estimate.rtt_ms, 50.0)
        self.assertEqual(estimate.alive_hosts, 2)
        self.assertEqual(estimate.total_hosts, 3)
        self.assertAlmostEqual(estimate.mean_ms, 30.0)

    def test_order_independent(self):
        outcomes = [
            ProbeOutcome(host="h3", rtt_ms=50.0),
            ProbeOutcome(host="h1", rtt_ms=10.0),
        ]
        forward = RTTAggregator(min_hosts=1).aggregate(outcomes)
        backward = RTTAggregator(min_hosts=1).aggregate(reversed(outcomes))
        self.assertEqual(forward, backward)

    def test_all_failures_raise_with_zero_alive(self):
        outcomes = [
            ProbeOutcome(host="a", error="down"),
            ProbeOutcome(host="b", error="down"),
        ]
        with self.assertRaises(InsufficientDataError) as ctx:
            RTTAggregator(min_hosts=1).aggregate(outcomes)
        self.assertEqual(ctx.exception.alive, 0)
        self.assertEqual(ctx.exception.required, 1)

    def test_below_minimum_reports_partial_count(self):
        outcomes = [
            ProbeOutcome(host="a", rtt_ms=5.0),
            ProbeOutcome(host="b", error="down"),
            ProbeOutcome(host="c", rtt_ms=7.0),
        ]
        with self.assertRaises(InsufficientDataError) as ctx:
            RTTAggregator(min_hosts=3).aggregate(outcomes)
        self.assertEqual(ctx.exception.alive, 2)
        self.assertIn("2 < 3", str(ctx.exception))

    def test_no_successes_with_zero_minimum(self):
        with self.assertRaises(InsufficientDataError):
            RTTAggregator(min_hosts=0).aggregate([])

    def test_fractional_milliseconds_preserved(self):
        estimate = RTTAggregator(min_hosts=1).aggregate(
            [ProbeOutcome(host="a", rtt_ms=12.345)]
        )
        self.assertAlmostEqual(estimate.rtt_ms, 12.345)


if __name__ == "__main__":
    unittest.main()
