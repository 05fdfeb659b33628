"""Step-by-step depth-first search, marking nodes visited when they are popped."""

from .engine import DFSEngine, Snapshot, Status, clamp_speed, trace
from .errors import DFSStepperError, InvalidSpeedError, MalformedGraphError
from .graph import Edge, Graph, Node, sample_graph
from .scheduler import AsyncioScheduler, VirtualClock

__version__ = "0.1.0"
