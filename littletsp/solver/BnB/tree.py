from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from littletsp.mat_op import ReducedMatrix
from littletsp.solver.BnB.union_find import DisjointVertexSet
from littletsp.tour import Edge


class Direction(Enum):
    LEFT = 'left'    # branching edge excluded
    RIGHT = 'right'  # branching edge included


@dataclass(eq=False)
class SearchNode:
    """
    One node ("branch") of the binary search tree.

    bound:      lower bound on any tour completing this node
    matrix:     reduced cost matrix, owned by this node only
    vertex_set: path segments formed by the included edges, owned by this node only
    edge:       branching edge that created this node (None for the root)
    included:   whether `edge` was included (right child) or excluded (left child)
    path:       included edges from the root down to here
    parent/left/right are arena indices in the owning SearchTree
    """
    bound: float
    matrix: ReducedMatrix
    vertex_set: DisjointVertexSet
    edge: Optional[Edge] = None
    included: bool = True
    path: Tuple[Edge, ...] = ()
    index: int = -1
    parent: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None
    depth: int = 0
    terminal: bool = field(default=False, metadata={'help': 'path holds a complete tour'})

    @property
    def is_open(self):
        return self.left is None and self.right is None

    @property
    def is_root(self):
        return self.parent is None


@dataclass(frozen=True)
class NodeView:
    """
    Immutable picture of a SearchNode, enough to draw the search tree.
    """
    index: int
    parent: Optional[int]
    left: Optional[int]
    right: Optional[int]
    depth: int
    bound: float
    edge: Optional[Edge]
    included: bool
    path: Tuple[Edge, ...]
    real_size: int
    terminal: bool

    @classmethod
    def of(cls, node: SearchNode):
        return cls(
            index=node.index,
            parent=node.parent,
            left=node.left,
            right=node.right,
            depth=node.depth,
            bound=node.bound,
            edge=node.edge,
            included=node.included,
            path=tuple(node.path),
            real_size=node.matrix.real_size,
            terminal=node.terminal,
        )


class SearchTree:
    """
    Arena of search nodes. A node refers to its parent and children by index,
    so the tree holds no reference cycles.
    """

    def __init__(self, root: SearchNode):
        self.nodes: List[SearchNode] = []
        root.index = 0
        root.parent = None
        root.depth = 0
        self.nodes.append(root)

    @property
    def root(self):
        return self.nodes[0]

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def __getitem__(self, index):
        return self.nodes[index]

    def add(self, parent: SearchNode, direction: Direction, child: SearchNode):
        child.index = len(self.nodes)
        child.parent = parent.index
        child.depth = parent.depth + 1
        if direction == Direction.LEFT:
            parent.left = child.index
        else:
            parent.right = child.index
        self.nodes.append(child)
        return child

    def parent_of(self, node: SearchNode):
        return None if node.parent is None else self.nodes[node.parent]

    def open_nodes(self):
        """
        All childless nodes, collected depth-first with the left subtree first.
        """
        leaves = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_open:
                leaves.append(node)
            if node.right is not None:
                stack.append(self.nodes[node.right])
            if node.left is not None:
                stack.append(self.nodes[node.left])
        return leaves

    def best_open_node(self):
        # min() keeps the first node among equal bounds
        return min(self.open_nodes(), key=lambda node: node.bound)

    def path_to(self, node: SearchNode):
        """
        Included branching edges from the root down to `node`.
        """
        edges = []
        while node is not None:
            if node.edge is not None and node.included:
                edges.append(node.edge)
            node = self.parent_of(node)
        edges.reverse()
        return edges

    def views(self):
        return tuple(NodeView.of(node) for node in self.nodes)
