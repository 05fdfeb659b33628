import asyncio
import unittest

from dfs_stepper.engine import DFSEngine
from dfs_stepper.errors import InvalidSpeedError
from dfs_stepper.graph import sample_graph
from dfs_stepper.scheduler import AsyncioScheduler, VirtualClock


class TestVirtualClock(unittest.TestCase):
    def testFiresInDueOrder(self):
        clock = VirtualClock()
        fired = []
        clock.call_later(300, lambda: fired.append("c"))
        clock.call_later(100, lambda: fired.append("a"))
        clock.call_later(100, lambda: fired.append("b"))
        self.assertEqual(clock.advance(99), 0)
        self.assertEqual(clock.advance(201), 3)
        self.assertEqual(fired, ["a", "b", "c"])
        self.assertEqual(clock.now, 300)

    def testCancel(self):
        clock = VirtualClock()
        fired = []
        handle = clock.call_later(100, lambda: fired.append(1))
        self.assertEqual(clock.pending, 1)
        handle.cancel()
        handle.cancel()
        self.assertEqual(clock.pending, 0)
        clock.advance(1000)
        self.assertEqual(fired, [])

    def testChainedTimersInsideWindow(self):
        clock = VirtualClock()
        fired = []

        def again():
            fired.append(clock.now)
            if len(fired) < 5:
                clock.call_later(100, again)

        clock.call_later(100, again)
        clock.advance(350)
        self.assertEqual(fired, [100, 200, 300])
        clock.advance(1000)
        self.assertEqual(fired, [100, 200, 300, 400, 500])

    def testRejectsBadDelay(self):
        clock = VirtualClock()
        with self.assertRaises(InvalidSpeedError):
            clock.call_later(0, lambda: None)
        with self.assertRaises(ValueError):
            clock.advance(-1)


class TestAutoAdvance(unittest.TestCase):
    def setUp(self):
        self.clock = VirtualClock()
        self.engine = DFSEngine(sample_graph(), speed=100, scheduler=self.clock)

    def testRunsToCompletion(self):
        self.engine.start("A")
        self.assertEqual(self.clock.pending, 1)
        self.clock.advance(100)
        self.assertEqual(self.engine.snapshot().visited, ("A",))
        # nine examinations empty the stack, the tenth tick ends the run
        self.clock.advance(800)
        snap = self.engine.snapshot()
        self.assertEqual(snap.stack, ())
        self.assertFalse(snap.is_done)
        self.assertEqual(self.clock.pending, 1)
        self.clock.advance(100)
        snap = self.engine.snapshot()
        self.assertTrue(snap.is_done)
        self.assertFalse(snap.is_running)
        self.assertEqual(snap.visited, ("A", "B", "D", "E", "C", "F"))
        self.assertEqual(snap.steps, 9)
        self.assertEqual(self.clock.pending, 0)

    def testOneStepPerPeriod(self):
        self.engine.start("A")
        for expected in range(1, 6):
            self.clock.advance(100)
            self.assertEqual(self.engine.snapshot().steps, expected)
            self.assertEqual(self.clock.pending, 1)

    def testPauseCancels(self):
        self.engine.start("A")
        self.clock.advance(250)
        paused = self.engine.pause()
        self.assertEqual(self.clock.pending, 0)
        self.clock.advance(100000)
        self.assertEqual(self.engine.snapshot(), paused)

    def testManualStepAfterPauseDoesNotRearm(self):
        self.engine.start("A")
        self.engine.pause()
        self.engine.step()
        self.assertEqual(self.clock.pending, 0)
        self.clock.advance(1000)
        self.assertEqual(self.engine.snapshot().steps, 1)

    def testResume(self):
        self.engine.start("A")
        self.clock.advance(100)
        self.engine.pause()
        self.engine.resume()
        self.assertEqual(self.clock.pending, 1)
        self.clock.advance(100)
        self.assertEqual(self.engine.snapshot().steps, 2)

    def testResetCancels(self):
        self.engine.start("A")
        self.engine.reset()
        self.assertEqual(self.clock.pending, 0)
        self.clock.advance(1000)
        self.assertEqual(self.engine.snapshot().visited, ())

    def testRestartLeavesSingleTimer(self):
        self.engine.start("A")
        self.clock.advance(50)
        self.engine.start("C")
        self.engine.start("C")
        self.assertEqual(self.clock.pending, 1)
        self.clock.advance(100)
        self.assertEqual(self.engine.snapshot().visited, ("C",))

    def testManualStepWhileRunningDoesNotOverlap(self):
        self.engine.start("A")
        self.clock.advance(60)
        self.engine.step()
        self.assertEqual(self.clock.pending, 1)
        # the old deadline at t=100 was cancelled; the next step is due at t=160
        self.clock.advance(60)
        self.assertEqual(self.engine.snapshot().steps, 1)
        self.clock.advance(40)
        self.assertEqual(self.engine.snapshot().steps, 2)

    def testSpeedChangeRearms(self):
        self.engine.start("A")
        self.engine.set_speed(500)
        self.assertEqual(self.clock.pending, 1)
        self.clock.advance(400)
        self.assertEqual(self.engine.snapshot().steps, 0)
        self.clock.advance(100)
        self.assertEqual(self.engine.snapshot().steps, 1)

    def testSpeedChangeWhilePausedArmsNothing(self):
        self.engine.start("A")
        self.engine.pause()
        self.engine.set_speed(200)
        self.assertEqual(self.clock.pending, 0)

    def testUnknownStartFinishesOnSecondTick(self):
        self.engine.start("Z")
        self.clock.advance(100)
        snap = self.engine.snapshot()
        self.assertEqual(snap.visited, ("Z",))
        self.assertFalse(snap.is_done)
        self.clock.advance(100)
        self.assertTrue(self.engine.snapshot().is_done)
        self.assertEqual(self.clock.pending, 0)

    def testRestoreRearms(self):
        self.engine.start("A")
        self.clock.advance(100)
        clock = VirtualClock()
        restored = DFSEngine.restore(sample_graph(), self.engine.snapshot(), scheduler=clock)
        self.assertEqual(clock.pending, 1)
        clock.advance(10000)
        self.assertTrue(restored.snapshot().is_done)


class TestAsyncioScheduler(unittest.TestCase):
    def testDrivesEngineOnEventLoop(self):
        async def run():
            engine = DFSEngine(sample_graph(), speed=1, scheduler=AsyncioScheduler())
            done = asyncio.Event()
            engine.subscribe(lambda snap: snap.is_done and done.set())
            engine.start("A")
            await asyncio.wait_for(done.wait(), timeout=5)
            return engine.snapshot()

        snap = asyncio.run(run())
        self.assertEqual(snap.visited, ("A", "B", "D", "E", "C", "F"))
        self.assertFalse(snap.is_running)

    def testPauseStopsEventLoopSteps(self):
        async def run():
            engine = DFSEngine(sample_graph(), speed=1, scheduler=AsyncioScheduler())
            engine.start("A")
            await asyncio.sleep(0.01)
            paused = engine.pause()
            await asyncio.sleep(0.05)
            return paused, engine.snapshot()

        paused, later = asyncio.run(run())
        self.assertEqual(paused, later)

    def testRejectsBadDelay(self):
        scheduler = AsyncioScheduler(loop=asyncio.new_event_loop())
        try:
            with self.assertRaises(InvalidSpeedError):
                scheduler.call_later(-5, lambda: None)
        finally:
            scheduler.loop.close()
