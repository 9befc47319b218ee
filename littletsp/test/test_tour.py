import numpy as np

from littletsp.tour import Edge, Tour


def test_edge_equality():
    assert Edge(0, 1, 3.0) == Edge(0, 1, 3.0)
    assert Edge(0, 1, 3.0) != Edge(0, 1, 4.0)
    assert Edge(0, 1, 3.0) != Edge(1, 0, 3.0)
    assert len({Edge(0, 1, 3.0), Edge(0, 1, 3.0)}) == 1


def test_append_refuses_duplicates():
    t = Tour()
    assert t.append(Edge(0, 1, 2.0))
    assert not t.append(Edge(0, 1, 2.0))
    assert t.append(Edge(1, 0, 5.0))
    assert len(t) == 2
    assert t.cost == 7.0
    assert Edge(1, 0, 5.0) in t


def test_next_vertex_and_order():
    t = Tour([Edge(0, 2, 1.0), Edge(2, 1, 1.0), Edge(1, 0, 1.0)])
    assert t.next_vertex(2) == 1
    assert t.next_vertex(5) is None
    assert t.order() == [0, 2, 1]
    assert t.order(start=1) == [1, 0, 2]


def test_hamiltonian():
    cycle = Tour([Edge(0, 1, 1.0), Edge(1, 2, 1.0), Edge(2, 3, 1.0), Edge(3, 0, 1.0)])
    assert cycle.is_hamiltonian(4)
    assert not cycle.is_hamiltonian(5)
    two_cycles = Tour([Edge(0, 1, 1.0), Edge(1, 0, 1.0), Edge(2, 3, 1.0), Edge(3, 2, 1.0)])
    assert not two_cycles.is_hamiltonian(4)
    assert Tour().is_hamiltonian(0)


def test_exists():
    assert not Tour().exists
    assert Tour([Edge(0, 1, 1.0), Edge(1, 0, 1.0)]).exists
    assert not Tour([Edge(0, 1, np.inf), Edge(1, 0, 1.0)]).exists


def test_to_digraph():
    G = Tour([Edge(0, 1, 2.0), Edge(1, 0, 3.0)]).to_digraph()
    assert G[0][1]['weight'] == 2.0
    assert G.number_of_edges() == 2
