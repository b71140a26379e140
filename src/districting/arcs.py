class InternalError(AssertionError):
    pass


class ArcIndex:
    """Dense numbering of the arcs (i,j), j a neighbor of i, of a graph.

    Vertices are visited in order 0..n-1 and the neighbors of each vertex in
    adjacency order, so that the same graph always gets the same numbering.
    Build a fresh one for every model; indices are only meaningful to the
    flow variables created alongside them.
    """

    def __init__(self, G):
        n = G.number_of_nodes()
        if set(G.nodes) != set(range(n)):
            raise InternalError("Internal Error : vertices must be labeled 0..n-1")

        self._index = {}
        self._arcs = []
        self._out = [[] for i in range(n)]
        for i in range(n):
            for j in G.neighbors(i):
                e = len(self._arcs)
                self._index[i,j] = e
                self._arcs.append((i,j))
                self._out[i].append(e)

        for (i,j) in self._arcs:
            if (j,i) not in self._index:
                raise InternalError("Internal Error : arc (%d,%d) has no reverse arc" % (i,j))

        self._in = [[self._index[j,i] for j in G.neighbors(i)] for i in range(n)]

    def index(self, i, j):
        return self._index[i,j]

    def count(self):
        return len(self._arcs)

    def __len__(self):
        return len(self._arcs)

    def __iter__(self):
        return iter(self._arcs)

    def arc(self, e):
        return self._arcs[e]

    # arcs (i,u) leaving i
    def out_arcs(self, i):
        return self._out[i]

    # arcs (u,i) entering i
    def in_arcs(self, i):
        return self._in[i]
