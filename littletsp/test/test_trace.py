import numpy as np
import pytest

from littletsp.problems.atsp import ATSPProblem
from littletsp.solver.BnB.bnb import LittleBnB
from littletsp.solver.BnB.trace import SearchTrace, TraceCursor, TraceState
from littletsp.tour import Edge

inf = np.inf

CLASSIC = [
    [inf, 10, 15, 20],
    [5, inf, 9, 10],
    [6, 13, inf, 12],
    [8, 8, 9, inf],
]


def test_state_sequence_on_classic():
    cursor = TraceCursor(CLASSIC)
    cursor.run_to_end()
    states = [s.state for s in cursor.snapshots]
    assert states == [
        TraceState.START,
        TraceState.LEFT_BRANCHING,
        TraceState.RIGHT_BRANCHING,
        TraceState.LEFT_BRANCHING,
        TraceState.RIGHT_BRANCHING,
        TraceState.LITTLE_MATRIX,
        TraceState.LITTLE_MATRIX,
        TraceState.END,
    ]
    assert not cursor.step_forward()
    assert cursor.at_end


def test_little_matrix_adds_one_edge_per_step():
    cursor = TraceCursor(CLASSIC)
    cursor.run_to_end()
    snaps = cursor.snapshots
    assert len(snaps[4].candidate_path) == 2
    assert snaps[5].candidate_path[-1] == Edge(2, 0, 6.0)
    assert len(snaps[5].candidate_path) == 3
    assert snaps[6].candidate_path[-1] == Edge(3, 2, 9.0)
    assert snaps[5].best_tour is None
    assert snaps[6].best_bound == 35


def test_end_snapshot_holds_best_tour():
    cursor = TraceCursor(CLASSIC)
    last = cursor.run_to_end()
    assert last.state == TraceState.END
    assert last.best_bound == 35
    assert set(last.best_tour) == {Edge(0, 1, 10.0), Edge(1, 3, 10.0), Edge(2, 0, 6.0), Edge(3, 2, 9.0)}
    assert last.candidate_path == last.best_tour


def test_branching_edge_is_exposed():
    cursor = TraceCursor(CLASSIC)
    cursor.step_forward()
    snap = cursor.current_snapshot()
    assert snap.state == TraceState.LEFT_BRANCHING
    assert snap.branching_edge == Edge(0, 1, 4.0)
    left = snap.tree[snap.tree[0].left]
    assert left.bound == 39
    assert not left.included


def test_forward_then_backward_replays_identical_snapshots():
    problem = ATSPProblem.generate_random_atsp_problem(6, seed=21)
    cursor = TraceCursor(problem.adjacency_matrix)
    seen = [cursor.current_snapshot()]
    n = 0
    while n < 25 and cursor.step_forward():
        seen.append(cursor.current_snapshot())
        n += 1
    for k in range(n, 0, -1):
        assert cursor.current_snapshot() == seen[k]
        assert cursor.current_snapshot() is seen[k]
        assert cursor.step_backward()
    assert cursor.current_snapshot() == seen[0]
    assert not cursor.step_backward()

    # forward again replays the log instead of searching
    n_nodes = len(cursor.engine.tree)
    for k in range(1, n + 1):
        assert cursor.step_forward()
        assert cursor.current_snapshot() is seen[k]
    assert len(cursor.engine.tree) == n_nodes


def test_two_cursors_record_the_same_trace():
    problem = ATSPProblem.generate_random_atsp_problem(6, seed=8)
    a = TraceCursor(problem.adjacency_matrix)
    b = TraceCursor(problem.adjacency_matrix)
    a.run_to_end()
    b.run_to_end()
    assert a.snapshots == b.snapshots


def test_snapshots_are_not_changed_by_later_steps():
    cursor = TraceCursor(CLASSIC)
    cursor.step_forward()
    first = cursor.current_snapshot()
    n_nodes = len(first.tree)
    path = first.candidate_path
    cursor.run_to_end()
    assert len(first.tree) == n_nodes
    assert first.candidate_path == path


def test_reset_rewinds_to_start():
    cursor = TraceCursor(CLASSIC)
    cursor.run_to_end()
    last = cursor.current_snapshot()
    cursor.reset()
    assert cursor.position == 0
    assert cursor.current_snapshot().state == TraceState.START
    assert cursor.run_to_end() is last


@pytest.mark.parametrize("seed", range(4))
def test_trace_agrees_with_batch(seed):
    problem = ATSPProblem.generate_random_atsp_problem(7, seed=seed)
    batch = LittleBnB()
    tour = batch.main_loop(problem.adjacency_matrix)
    cursor = TraceCursor(problem.adjacency_matrix)
    last = cursor.run_to_end()
    assert last.best_bound == batch.best_bound
    assert last.best_tour == tour.edges
    assert len(last.tree) == len(batch.tree)


@pytest.mark.parametrize("seed", range(4))
def test_trace_prunes_like_batch_on_sparse_graphs(seed):
    problem = ATSPProblem.generate_random_atsp_problem(7, p_missing=0.5, seed=seed)
    batch = LittleBnB()
    tour = batch.main_loop(problem.adjacency_matrix)
    cursor = TraceCursor(problem.adjacency_matrix)
    last = cursor.run_to_end()
    assert last.best_tour == (None if tour is None else tour.edges)
    assert cursor.engine.n_pruned == batch.n_pruned
    dead_right = [view for view in last.tree if view.edge is not None and view.included and view.bound == inf]
    assert cursor.engine.n_pruned == len(dead_right)


def test_trace_of_trivial_instance():
    cursor = TraceCursor([[inf, 2], [3, inf]])
    last = cursor.run_to_end()
    assert [s.state for s in cursor.snapshots] == [TraceState.START, TraceState.END]
    assert last.best_tour == (Edge(0, 1, 2.0), Edge(1, 0, 3.0))


def test_trace_of_infeasible_instance():
    costs = np.array(CLASSIC)
    costs[2, :] = inf
    cursor = TraceCursor(costs)
    last = cursor.run_to_end()
    assert [s.state for s in cursor.snapshots] == [TraceState.START, TraceState.END]
    assert last.best_tour is None
    assert last.best_bound == inf


def test_history_frame():
    cursor = TraceCursor(CLASSIC)
    cursor.run_to_end()
    df = cursor.history()
    assert list(df.columns) == ['step', 'state', 'current', 'current_bound', 'best_bound', 'n_nodes']
    assert len(df) == len(cursor.snapshots)
    assert df['state'].iloc[-1] == 'end'
    assert df['n_nodes'].is_monotonic_increasing


def test_search_trace_stops():
    trace = SearchTrace([[inf, 1], [1, inf]])
    assert trace.advance().state == TraceState.START
    assert trace.advance().state == TraceState.END
    assert trace.done
    assert trace.advance() is None
