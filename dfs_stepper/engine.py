"""
DFS stepping engine.

Runs an explicit-stack depth-first search one stack-top examination at a
time, marking a node visited when it is examined at the top of the stack
(on pop), not when it is pushed as a neighbor.

A node that gets expanded stays on the stack underneath the neighbors it
pushed. When it surfaces again it is already visited, and that second
arrival is the backtrack step that pops it.

The engine owns all run state. Readers get immutable Snapshot objects, either
by calling snapshot() or by subscribing to changes.
"""

import enum
import logging
from dataclasses import dataclass, asdict

from .config import DEFAULT_SPEED, MIN_SPEED, MAX_SPEED
from .scheduler import check_delay

LOG = logging.getLogger(__name__)


class Status(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    DONE = "done"


@dataclass(frozen=True)
class Snapshot:
    visited: tuple = ()
    stack: tuple = ()
    current: object = None
    is_running: bool = False
    is_done: bool = False
    speed: int = DEFAULT_SPEED
    steps: int = 0

    @property
    def status(self):
        if self.is_done:
            return Status.DONE
        if self.is_running:
            return Status.RUNNING
        if self.stack or self.current is not None:
            return Status.PAUSED
        return Status.IDLE

    def to_dict(self):
        data = asdict(self)
        data["visited"] = list(self.visited)
        data["stack"] = list(self.stack)
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            visited=tuple(data["visited"]),
            stack=tuple(data["stack"]),
            current=data.get("current"),
            is_running=bool(data["is_running"]),
            is_done=bool(data["is_done"]),
            speed=check_delay(data["speed"]),
            steps=int(data.get("steps", 0)),
        )


def clamp_speed(value, low=MIN_SPEED, high=MAX_SPEED):
    """Coerce a UI value into the slider range; junk falls back to the default."""
    try:
        ms = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_SPEED
    return max(low, min(high, ms))


class DFSEngine:
    def __init__(self, graph, speed=DEFAULT_SPEED, scheduler=None):
        self.graph = graph
        self.scheduler = scheduler
        self._speed = check_delay(speed)
        self._timer = None
        self._listeners = []
        self._clear()

    # ---------- state ----------
    def _clear(self):
        self._visited = []
        self._seen = set()
        self._stack = []
        self._current = None
        self._running = False
        self._done = False
        self._steps = 0

    @property
    def speed(self):
        return self._speed

    @property
    def status(self):
        return self.snapshot().status

    def snapshot(self):
        return Snapshot(
            visited=tuple(self._visited),
            stack=tuple(self._stack),
            current=self._current,
            is_running=self._running,
            is_done=self._done,
            speed=self._speed,
            steps=self._steps,
        )

    @classmethod
    def restore(cls, graph, snapshot, scheduler=None):
        """Rebuild an engine mid-run, e.g. from a snapshot kept in a browser store."""
        if not isinstance(snapshot, Snapshot):
            snapshot = Snapshot.from_dict(snapshot)
        engine = cls(graph, speed=snapshot.speed, scheduler=scheduler)
        engine._visited = list(snapshot.visited)
        engine._seen = set(snapshot.visited)
        engine._stack = list(snapshot.stack)
        engine._current = snapshot.current
        engine._done = snapshot.is_done
        engine._running = snapshot.is_running and not snapshot.is_done
        engine._steps = snapshot.steps
        engine._arm()
        return engine

    # ---------- observers ----------
    def subscribe(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self):
        snap = self.snapshot()
        for callback in list(self._listeners):
            callback(snap)
        return snap

    # ---------- timer ----------
    def _arm(self):
        self._cancel_timer()
        if self.scheduler is None or not self._running or self._done:
            return
        self._timer = self.scheduler.call_later(self._speed, self.tick)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def tick(self):
        """Auto-advance body: one step if still running, re-armed by step()."""
        self._timer = None
        if not self._running or self._done:
            return self.snapshot()
        return self.step()

    # ---------- transitions ----------
    def start(self, start_node):
        self._cancel_timer()
        self._clear()
        self._stack.append(start_node)
        self._running = True
        LOG.debug("DFS start at %r (speed=%dms)", start_node, self._speed)
        self._arm()
        return self._emit()

    def step(self):
        if self._done:
            return self.snapshot()
        self._cancel_timer()

        if not self._stack:
            self._finish()
            return self._emit()

        node = self._stack[-1]
        self._current = node
        self._steps += 1

        if node not in self._seen:
            self._visited.append(node)
            self._seen.add(node)
            candidates = [n for n in self.graph.neighbors(node) if n not in self._seen]
            candidates.reverse()
            if candidates:
                # node stays below its children and is popped when it resurfaces
                self._stack.extend(candidates)
                LOG.debug("visit %r, push %s", node, candidates)
            else:
                self._stack.pop()
                LOG.debug("visit %r, nothing to expand", node)
        else:
            self._stack.pop()
            LOG.debug("backtrack from %r", node)

        # an emptied stack is only noticed by the next step, which finishes the run
        self._arm()
        return self._emit()

    def _finish(self):
        self._cancel_timer()
        self._running = False
        self._done = True
        LOG.debug("DFS done after %d steps, visited %s", self._steps, self._visited)

    def pause(self):
        self._cancel_timer()
        if not self._running:
            return self.snapshot()
        self._running = False
        LOG.debug("DFS paused with stack %s", self._stack)
        return self._emit()

    def resume(self):
        if self.status is not Status.PAUSED:
            return self.snapshot()
        self._running = True
        LOG.debug("DFS resumed")
        self._arm()
        return self._emit()

    def reset(self):
        self._cancel_timer()
        self._clear()
        LOG.debug("DFS reset")
        return self._emit()

    def set_speed(self, ms):
        self._speed = check_delay(ms)
        if self._timer is not None:
            self._arm()
        return self._emit()


def trace(graph, start_node):
    """Yield the snapshot after start and after every step until the run is done."""
    engine = DFSEngine(graph)
    yield engine.start(start_node)
    while not engine.snapshot().is_done:
        yield engine.step()
