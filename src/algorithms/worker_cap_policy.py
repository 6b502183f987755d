import math


class ThresholdWorkerCapPolicy:
    """
    Shrinks the worker cap when the CPU is busy and grows it when the CPU is idle.
    """

    def __init__(
        self,
        high_threshold: float = 80.0,
        low_threshold: float = 30.0,
        decrease_factor: float = 0.7,
        increase_factor: float = 1.1,
    ):
        self.high_threshold = high_threshold
        self.low_threshold = low_threshold
        self.decrease_factor = decrease_factor
        self.increase_factor = increase_factor

    @classmethod
    def from_config(cls, config):
        return cls(
            high_threshold=config.cpu_high_threshold,
            low_threshold=config.cpu_low_threshold,
            decrease_factor=config.worker_decrease_factor,
            increase_factor=config.worker_increase_factor,
        )

    def compute_target(self, current: int, cfg_max: int, cpu_usage: float) -> int:
        """
        Args:
            current (int): Current worker cap.
            cfg_max (int): Configured maximum number of concurrent probes.
            cpu_usage (float): CPU utilization in percent over the last interval.

        Returns:
            int: The new worker cap, equal to `current` inside the dead band.
        """
        if cpu_usage > self.high_threshold:
            return max(1, math.floor(current * self.decrease_factor))
        if cpu_usage < self.low_threshold:
            return min(cfg_max, math.floor(current * self.increase_factor) + 1)
        return current
