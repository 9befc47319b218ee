from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pandas as pd

from littletsp.solver.BnB.bnb import LittleBnB
from littletsp.solver.BnB.tree import NodeView
from littletsp.tour import Edge
from littletsp.utils.const import ArrayLike


class TraceState(Enum):
    START = 'start'
    LEFT_BRANCHING = 'left_branching'
    RIGHT_BRANCHING = 'right_branching'
    LITTLE_MATRIX = 'little_matrix'
    END = 'end'
    STOP = 'stop'


@dataclass(frozen=True)
class Snapshot:
    """
    Everything a renderer needs to draw one step of the search:
    the whole tree, the node worked on and the path highlighted on the graph.
    """
    step: int
    state: TraceState
    tree: Tuple[NodeView, ...]
    current: int
    candidate_path: Tuple[Edge, ...]
    branching_edge: Optional[Edge]
    best_bound: float
    best_tour: Optional[Tuple[Edge, ...]]

    @property
    def current_node(self):
        return self.tree[self.current]

    @property
    def current_bound(self):
        return self.current_node.bound


class SearchTrace:
    """
    The branch and bound search as an explicit state machine.

        START -> LEFT_BRANCHING -> RIGHT_BRANCHING -> (LITTLE_MATRIX | LEFT_BRANCHING) -> END -> STOP

    `advance` runs exactly one transition and returns its Snapshot,
    or None once the machine is in STOP.
    """

    def __init__(self, costs: ArrayLike, engine: LittleBnB = None):
        self.costs = costs
        self.engine = engine if engine is not None else LittleBnB()
        self.state = TraceState.START
        self.n_steps = 0
        self._choice = None
        self._focus = None
        self._forced: List[Edge] = []

    @property
    def done(self):
        return self.state == TraceState.STOP

    def advance(self) -> Optional[Snapshot]:
        if self.done:
            return None
        executed = self.state
        transition = {
            TraceState.START: self._start,
            TraceState.LEFT_BRANCHING: self._left_branching,
            TraceState.RIGHT_BRANCHING: self._right_branching,
            TraceState.LITTLE_MATRIX: self._little_matrix,
            TraceState.END: self._end,
        }[executed]
        self.state = transition()
        snapshot = self._snapshot(executed)
        self.n_steps += 1
        return snapshot

    def _start(self):
        root = self.engine.start(self.costs)
        self._focus = root
        return TraceState.END if self.engine.finished else TraceState.LEFT_BRANCHING

    def _left_branching(self):
        engine = self.engine
        node = engine.current
        self._focus = node
        choice = engine.branching_edge(node)
        if choice is None:
            self._choice = None
            if node.is_root:
                engine.logger.info("No zero cell in the root matrix")
                return TraceState.END
            engine.prune(node)
            return self._select()
        self._choice = choice
        i, j, penalty = choice
        engine.make_left(node, i, j, penalty)
        return TraceState.RIGHT_BRANCHING

    def _right_branching(self):
        engine = self.engine
        i, j, _ = self._choice
        right = engine.make_right(engine.current, i, j)
        self._focus = right
        if right.matrix.real_size == 2:
            forced = engine.forced_edges(right)
            if forced is not None:
                self._forced = list(forced)
                return TraceState.LITTLE_MATRIX
            engine.prune(right)
        return self._select()

    def _little_matrix(self):
        # one forced edge per step
        engine = self.engine
        engine.extend_path(self._focus, self._forced.pop(0))
        if self._forced:
            return TraceState.LITTLE_MATRIX
        engine.offer(self._focus)
        return self._select()

    def _select(self):
        return TraceState.END if self.engine.select_next() else TraceState.LEFT_BRANCHING

    def _end(self):
        engine = self.engine
        if not engine.finished:
            engine.finish()
        self._focus = engine.current
        self._choice = None
        return TraceState.STOP

    def _snapshot(self, executed: TraceState):
        engine = self.engine
        if executed == TraceState.END and engine.best_tour is not None:
            candidate = engine.best_tour.edges
        else:
            candidate = tuple(self._focus.path)
        branching_edge = None
        if self._choice is not None and executed in (TraceState.LEFT_BRANCHING, TraceState.RIGHT_BRANCHING):
            i, j, penalty = self._choice
            branching_edge = Edge(i, j, penalty)
        return Snapshot(
            step=self.n_steps,
            state=executed,
            tree=engine.tree.views(),
            current=self._focus.index,
            candidate_path=candidate,
            branching_edge=branching_edge,
            best_bound=engine.best_bound,
            best_tour=None if engine.best_tour is None else engine.best_tour.edges,
        )


class TraceCursor:
    """
    Forward/backward navigation over a SearchTrace.
    Stepping forward over a recorded step replays it, stepping past the end of
    the log advances the search by one transition. Stepping backward only
    re-exposes recorded steps.
    """

    def __init__(self, costs: ArrayLike, engine: LittleBnB = None):
        self._trace = SearchTrace(costs, engine=engine)
        self._log: List[Snapshot] = [self._trace.advance()]
        self._position = 0

    @property
    def position(self):
        return self._position

    @property
    def snapshots(self):
        return tuple(self._log)

    @property
    def engine(self):
        return self._trace.engine

    @property
    def at_end(self):
        return self._trace.done and self._position == len(self._log) - 1

    def current_snapshot(self) -> Snapshot:
        return self._log[self._position]

    def step_forward(self):
        if self._position < len(self._log) - 1:
            self._position += 1
            return True
        snapshot = self._trace.advance()
        if snapshot is None:
            return False
        self._log.append(snapshot)
        self._position += 1
        return True

    def step_backward(self):
        if self._position == 0:
            return False
        self._position -= 1
        return True

    def reset(self):
        """
        Rewind to the first step. Recorded steps are kept and replayed.
        """
        self._position = 0

    def run_to_end(self):
        while self.step_forward():
            pass
        return self.current_snapshot()

    def history(self):
        return pd.DataFrame({
            'step': [s.step for s in self._log],
            'state': [s.state.value for s in self._log],
            'current': [s.current for s in self._log],
            'current_bound': [s.current_bound for s in self._log],
            'best_bound': [s.best_bound for s in self._log],
            'n_nodes': [len(s.tree) for s in self._log],
        })
