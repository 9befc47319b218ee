class DisjointVertexSet:
    """
    Union-Find over the original vertices.
    Two vertices share a set when they are already chained into the same
    partial path segment, so an edge between them would close a short cycle.
    """

    @property
    def n_var(self):
        return len(self.parent)

    @property
    def n_rep(self):
        """
        number of segments (singletons included)
        """
        return len({self.find(x) for x in range(self.n_var)})

    def __init__(self, n):
        self.parent = list(range(n))

    def find(self, x):
        """
        Find with path-compression. Returns the root of x.
        """
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, x, y):
        """
        Attach the root of x under the root of y.
        Nothing happens if they are already in the same set.
        """
        rx = self.find(x)
        ry = self.find(y)
        if rx != ry:
            self.parent[rx] = ry

    def same(self, x, y):
        return self.find(x) == self.find(y)

    @staticmethod
    def clone(vs):
        new_vs = DisjointVertexSet(0)
        new_vs.parent = vs.parent[:]
        return new_vs

    def __repr__(self):
        return f"DisjointVertexSet({self.parent})"
