import logging
from collections import namedtuple

import networkx as nx

from .errors import MalformedGraphError

LOG = logging.getLogger(__name__)

Node = namedtuple("Node", ["id", "x", "y"])


class Edge(namedtuple("Edge", ["source", "target"])):
    __slots__ = ()

    @property
    def id(self):
        return f"{self.source}-{self.target}"


# ---------- REFERENCE GRAPH ----------
SAMPLE_POSITIONS = {
    "A": (250, 50),
    "B": (150, 150),
    "C": (350, 150),
    "D": (100, 250),
    "E": (200, 250),
    "F": (400, 250),
}
SAMPLE_EDGES = [
    ("A", "B"),
    ("A", "C"),
    ("B", "D"),
    ("B", "E"),
    ("C", "E"),
    ("C", "F"),
]


class Graph:
    """
    Immutable directed graph over labeled nodes.

    Backed by a networkx DiGraph, whose successor dicts keep edge insertion
    order, so neighbors() comes back in the order the edges were given.
    Repeated (source, target) pairs collapse to the first occurrence.

    In lenient mode (the default) an edge may reference a node that was never
    declared; it is kept as data and neighbors() returns it like any other
    target. With strict=True such graphs raise MalformedGraphError.
    """

    def __init__(self, nodes, edges, strict=False):
        declared = []
        seen = set()
        for node in nodes:
            if not isinstance(node, Node):
                node = Node(*node)
            if node.id in seen:
                if strict:
                    raise MalformedGraphError(f"Duplicate node id {node.id!r}")
                continue
            seen.add(node.id)
            declared.append(node)

        G = nx.DiGraph()
        for node in declared:
            G.add_node(node.id, x=node.x, y=node.y)

        kept = []
        for source, target in edges:
            dangling = [n for n in (source, target) if n not in seen]
            if dangling:
                if strict:
                    raise MalformedGraphError(
                        f"Edge {source}->{target} references unknown node(s) {dangling}"
                    )
                LOG.debug("Keeping dangling edge %s->%s", source, target)
            if G.has_edge(source, target):
                continue
            G.add_edge(source, target)
            kept.append(Edge(source, target))

        self._G = G
        self._nodes = tuple(declared)
        self._edges = tuple(kept)
        self._ids = frozenset(seen)

    @classmethod
    def from_edges(cls, edges, positions=None, strict=False):
        """Build a graph whose node set is every endpoint, in first-seen order."""
        positions = positions or {}
        order = []
        for source, target in edges:
            for n in (source, target):
                if n not in order:
                    order.append(n)
        for n in positions:
            if n not in order:
                order.append(n)
        nodes = [Node(n, *positions.get(n, (0, 0))) for n in order]
        return cls(nodes, edges, strict=strict)

    @property
    def nodes(self):
        return self._nodes

    @property
    def edges(self):
        return self._edges

    @property
    def node_ids(self):
        return tuple(node.id for node in self._nodes)

    def __contains__(self, node_id):
        return node_id in self._ids

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(self.node_ids)

    def __repr__(self):
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    def has_edge(self, source, target):
        return self._G.has_edge(source, target)

    def neighbors(self, node_id):
        # unknown ids are not an error, they just have nothing to expand
        if node_id not in self._G:
            return ()
        return tuple(self._G.successors(node_id))

    def reachable_from(self, node_id):
        if node_id not in self._G:
            return {node_id}
        return {node_id} | nx.descendants(self._G, node_id)

    def to_networkx(self):
        return self._G.copy()


def sample_graph():
    nodes = [Node(n, x, y) for n, (x, y) in SAMPLE_POSITIONS.items()]
    return Graph(nodes, SAMPLE_EDGES, strict=True)
