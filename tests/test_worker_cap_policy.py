import unittest

from algorithms.worker_cap_policy import ThresholdWorkerCapPolicy
from contracts.service_config import ServiceConfig


class TestThresholdWorkerCapPolicy(unittest.TestCase):
    def setUp(self):
        self.policy = ThresholdWorkerCapPolicy()

    def test_high_cpu_reduces(self):
        self.assertEqual(self.policy.compute_target(100, 200, 85.0), 70)

    def test_high_cpu_never_below_one(self):
        self.assertEqual(self.policy.compute_target(1, 100, 95.0), 1)

    def test_low_cpu_increases(self):
        self.assertEqual(self.policy.compute_target(10, 200, 10.0), 12)

    def test_low_cpu_capped_at_configured_max(self):
        self.assertEqual(self.policy.compute_target(190, 200, 10.0), 200)

    def test_dead_band_unchanged(self):
        for usage in (30.0, 55.0, 80.0):
            self.assertEqual(self.policy.compute_target(42, 200, usage), 42)

    def test_properties_over_range(self):
        for current in range(1, 120):
            for usage in (80.5, 99.0):
                self.assertEqual(
                    self.policy.compute_target(current, 100, usage),
                    max(1, int(current * 0.7)),
                )
            for usage in (0.0, 29.9):
                self.assertEqual(
                    self.policy.compute_target(current, 100, usage),
                    min(100, int(current * 1.1) + 1),
                )

    def test_from_config(self):
        cfg = ServiceConfig(
            cpu_high_threshold=90,
            cpu_low_threshold=10,
            worker_decrease_factor=0.5,
            worker_increase_factor=2.0,
        )
        policy = ThresholdWorkerCapPolicy.from_config(cfg)
        self.assertEqual(policy.compute_target(10, 100, 85.0), 10)
        self.assertEqual(policy.compute_target(10, 100, 95.0), 5)
        self.assertEqual(policy.compute_target(10, 100, 5.0), 21)


if __name__ == "__main__":
    unittest.main()
