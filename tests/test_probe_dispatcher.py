import asyncio
import unittest
from unittest.mock import MagicMock

from contracts.probe_status import ProbeStage
from core.probe_dispatcher import SAFETY_MAX_WORKERS, ProbeDispatcher
from core.probe_state import ProbeStateStore
from fakes import FakeProbeExecutor


class TestProbeDispatcher(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.state = ProbeStateStore(completed_max_entries=50, completed_retention_seconds=60)

    def make_dispatcher(self, executor, **kwargs):
        kwargs.setdefault("pacing_base_ms", 0)
        kwargs.setdefault("pacing_spread", 1)
        return ProbeDispatcher(self.state, executor, **kwargs)

    async def test_one_outcome_per_host(self):
        executor = FakeProbeExecutor({"h1": 0.010, "h3": 0.050})
        dispatcher = self.make_dispatcher(executor)
        outcomes = await dispatcher.dispatch(["h1", "h2", "h3"], timeout=1, worker_cap=2)

        by_host = {o.host: o for o in outcomes}
        self.assertEqual(sorted(by_host), ["h1", "h2", "h3"])
        self.assertAlmostEqual(by_host["h1"].rtt_ms, 10.0)
        self.assertAlmostEqual(by_host["h3"].rtt_ms, 50.0)
        self.assertFalse(by_host["h2"].ok)
        self.assertEqual(by_host["h2"].error, "unreachable")
        self.assertEqual(sorted(h for h, _ in executor.calls), ["h1", "h2", "h3"])

    async def test_timeout_passed_to_executor(self):
        executor = FakeProbeExecutor({"h1": 0.001})
        await self.make_dispatcher(executor).dispatch(["h1"], timeout=3, worker_cap=1)
        self.assertEqual(executor.calls, [("h1", 3)])

    async def test_results_mirrored_into_probe_state(self):
        executor = FakeProbeExecutor({"h1": 0.005})
        await self.make_dispatcher(executor).dispatch(["h1", "h2"], timeout=1, worker_cap=2)
        self.assertEqual(await self.state.current_probes(), [])
        completed = {p.host: p for p in await self.state.recent_completed()}
        self.assertEqual(completed["h1"].stage, "done")
        self.assertEqual(completed["h1"].rtt_ms, 5)
        self.assertEqual(completed["h2"].stage, "failed")

    async def test_concurrency_bounded_by_worker_cap(self):
        hosts = [f"h{i}" for i in range(12)]
        executor = FakeProbeExecutor({h: 0.001 for h in hosts}, delay=0.01)
        await self.make_dispatcher(executor).dispatch(hosts, timeout=1, worker_cap=3)
        self.assertEqual(executor.max_in_flight, 3)
        self.assertEqual(len(executor.calls), 12)

    async def test_worker_cap_below_one_still_probes(self):
        executor = FakeProbeExecutor({"h1": 0.001, "h2": 0.001})
        outcomes = await self.make_dispatcher(executor).dispatch(["h1", "h2"], timeout=1, worker_cap=0)
        self.assertEqual(len(outcomes), 2)
        self.assertEqual(executor.max_in_flight, 1)

    async def test_safety_ceiling(self):
        self.assertEqual(SAFETY_MAX_WORKERS, 500)
        hosts = [f"h{i}" for i in range(600)]
        executor = FakeProbeExecutor({h: 0.001 for h in hosts}, delay=0.01)
        dispatcher = self.make_dispatcher(executor)
        await dispatcher.dispatch(hosts, timeout=1, worker_cap=10_000)
        self.assertLessEqual(executor.max_in_flight, SAFETY_MAX_WORKERS)

    async def test_empty_host_list_rejected(self):
        with self.assertRaises(ValueError):
            await self.make_dispatcher(FakeProbeExecutor()).dispatch([], timeout=1, worker_cap=1)

    async def test_unexpected_executor_error_counts_as_failure(self):
        executor = MagicMock()

        async def boom(host, timeout):
            raise RuntimeError("socket exploded")

        executor.probe = boom
        outcomes = await self.make_dispatcher(executor).dispatch(["h1"], timeout=1, worker_cap=1)
        self.assertEqual(outcomes[0].error, "socket exploded")

    async def test_pacing_delay_is_worker_indexed(self):
        dispatcher = ProbeDispatcher(self.state, FakeProbeExecutor())
        self.assertAlmostEqual(dispatcher.pacing_delay(0), 0.010)
        self.assertAlmostEqual(dispatcher.pacing_delay(3), 0.013)
        self.assertAlmostEqual(dispatcher.pacing_delay(13), 0.013)

    async def test_shutdown_records_unclaimed_hosts_as_cancelled(self):
        shutdown = asyncio.Event()
        shutdown.set()
        executor = FakeProbeExecutor({"h1": 0.001, "h2": 0.001})
        dispatcher = self.make_dispatcher(executor, shutdown=shutdown)
        outcomes = await dispatcher.dispatch(["h1", "h2"], timeout=1, worker_cap=2)
        self.assertEqual(executor.calls, [])
        self.assertEqual({o.error for o in outcomes}, {"probe cancelled"})
        self.assertEqual(len(outcomes), 2)
        self.assertEqual(await self.state.current_probes(), [])

    async def test_metrics_observed(self):
        metrics = MagicMock()
        executor = FakeProbeExecutor({"h1": 0.02})
        await self.make_dispatcher(executor, metrics=metrics).dispatch(["h1", "h2"], timeout=1, worker_cap=2)
        metrics.observe_probe.assert_called_once_with(0.02)
        metrics.probe_failed.assert_called_once()

    async def test_hosts_are_admitted_as_queued(self):
        seen = []
        original = self.state.set_stage

        async def spy(host, stage):
            seen.append((host, stage))
            return await original(host, stage)

        self.state.set_stage = spy
        executor = FakeProbeExecutor({"h1": 0.001})
        await self.make_dispatcher(executor).dispatch(["h1"], timeout=1, worker_cap=1)
        self.assertEqual(seen, [("h1", ProbeStage.QUEUED), ("h1", ProbeStage.PROBING)])


    async def test_set_pacing_applies_to_later_dispatch(self):
        dispatcher = self.make_dispatcher(FakeProbeExecutor({"h1": 0.001}))
        dispatcher.set_pacing(0, 0)
        self.assertEqual(dispatcher.pacing_spread, 1)
        self.assertEqual(dispatcher.pacing_delay(5), 0)

    async def test_cancelled_hosts_follow_completed_ones(self):
        executor = FakeProbeExecutor({"h1": 0.001, "h2": 0.001, "h3": 0.001})
        dispatcher = self.make_dispatcher(executor, shutdown=asyncio.Event())
        original = executor.probe

        async def stop_after_first(host, timeout):
            dispatcher.shutdown.set()
            return await original(host, timeout)

        executor.probe = stop_after_first
        outcomes = await dispatcher.dispatch(["h1", "h2", "h3"], timeout=1, worker_cap=1)
        self.assertEqual(sorted(o.host for o in outcomes), ["h1", "h2", "h3"])
        self.assertTrue(outcomes[0].ok)
        self.assertEqual([o.error for o in outcomes[1:]], ["probe cancelled", "probe cancelled"])


if __name__ == "__main__":
    unittest.main()
