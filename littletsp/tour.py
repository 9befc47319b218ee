from dataclasses import dataclass
from typing import Iterable, List, Optional

import networkx as nx
import numpy as np


@dataclass(frozen=True)
class Edge:
    """
    Directed edge. Two edges are equal iff begin, end and cost all match.
    """
    begin: int
    end: int
    cost: float

    def __str__(self):
        return f"{self.begin}->{self.end} ({self.cost:g})"


class Tour:
    """
    Ordered set of edges with a running cost.
    An edge already in the tour is never appended twice.
    """

    def __init__(self, edges: Iterable[Edge] = ()):
        self._edges: List[Edge] = []
        self._cost = 0.0
        for e in edges:
            self.append(e)

    @property
    def cost(self):
        return self._cost

    @property
    def edges(self):
        return tuple(self._edges)

    @property
    def exists(self):
        return len(self._edges) > 0 and not np.isinf(self._cost)

    def append(self, edge: Edge):
        if edge in self._edges:
            return False
        self._cost += edge.cost
        self._edges.append(edge)
        return True

    def contains(self, edge: Edge):
        return edge in self._edges

    def next_vertex(self, begin: int) -> Optional[int]:
        """
        End vertex of the edge leaving `begin`, None if there is no such edge.
        """
        for e in self._edges:
            if e.begin == begin:
                return e.end
        return None

    def order(self, start: Optional[int] = None):
        """
        Vertex sequence obtained by following the edges from `start`
        (the first edge's begin by default). The start vertex is not repeated.
        """
        if not self._edges:
            return []
        if start is None:
            start = self._edges[0].begin
        seq = [start]
        v = self.next_vertex(start)
        while v is not None and v != start and len(seq) <= len(self._edges):
            seq.append(v)
            v = self.next_vertex(v)
        return seq

    def to_digraph(self):
        G = nx.DiGraph()
        for e in self._edges:
            G.add_edge(e.begin, e.end, weight=e.cost)
        return G

    def is_hamiltonian(self, n: int):
        """
        Every vertex of 0..n-1 leaves and enters exactly once and the edges
        form one single cycle.
        """
        if len(self._edges) != n:
            return False
        if n == 0:
            return True
        G = self.to_digraph()
        if set(G.nodes()) != set(range(n)):
            return False
        if any(d != 1 for _, d in G.out_degree()) or any(d != 1 for _, d in G.in_degree()):
            return False
        return nx.is_strongly_connected(G)

    def __len__(self):
        return len(self._edges)

    def __iter__(self):
        return iter(self._edges)

    def __contains__(self, edge):
        return self.contains(edge)

    def __eq__(self, other):
        if not isinstance(other, Tour):
            return NotImplemented
        return self._edges == other._edges

    def __str__(self):
        if not self._edges:
            return "Tour: (empty)"
        path = ' -> '.join(str(v) for v in self.order() + self.order()[:1])
        return f"Tour: {path} \nTour Cost: {self.cost}"

    def __repr__(self):
        return f"Tour({self._edges!r})"
