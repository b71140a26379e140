import networkx as nx


def sort_by_second(val):
    return val[1]


def find_ordering(order, G, population):
    if order == 'decreasing':
        nodes_with_population = [(i,population[i]) for i in G.nodes]
        nodes_with_population.sort(key=sort_by_second, reverse=True)
        return [v for (v,p) in nodes_with_population]
    else:
        return [v for v in G.nodes]


def construct_position(ordering):
    position = [-1 for i in range(len(ordering))]
    for p in range(len(ordering)):
        v = ordering[p]
        position[v] = p
    return position


# how many people are reachable from v in G[S]? Uses BFS
def reachable_population(G, population, S, v):
    pr = 0 # population reached
    if not S[v]:
        return 0

    visited = [False for i in G.nodes]
    child = [v]
    visited[v] = True
    while child:
        parent = child
        child = list()
        for i in parent:
            pr += population[i]
            for j in G.neighbors(i):
                if S[j] and not visited[j]:
                    child.append(j)
                    visited[j] = True
    return pr


# given a vertex ordering, fix X[i,j]=0 when i comes before j
def do_DFixing(F0, G, position):
    DFixings = 0
    for i in G.nodes:
        for j in G.nodes:
            if position[i] < position[j] and not F0[i][j]:
                F0[i][j] = True
                DFixings += 1
    return DFixings


# fix column j when the vertices reachable from j among j and its successors weigh less than L
def do_LFixing(F0, G, population, L, ordering):
    LFixings = 0
    S = [True for v in G.nodes]
    for j in ordering:
        if reachable_population(G, population, S, j) < L:
            for i in G.nodes:
                if not F0[i][j]:
                    F0[i][j] = True
                    LFixings += 1
        S[j] = False
    return LFixings


# fix X[i,j]=0 when every i,j-path through j and its successors weighs more than U
def do_UFixing(F0, G, population, U, ordering):
    UFixings = 0
    DG = nx.DiGraph(G) # bidirected copy, its arc weights are changed below

    for (i,j) in DG.edges:
        DG[i][j]['ufixweight'] = population[j] # weight of edge (i,j) is population of its head j

    for j in ordering:
        dist = nx.shortest_path_length(DG, source=j, weight='ufixweight')
        for i in DG.nodes:
            if i != j and (i not in dist or dist[i] + population[j] > U) and not F0[i][j]:
                F0[i][j] = True
                UFixings += 1

        # we should "remove" vertex j from the graph for subsequent distance calculations, so give incoming edges large weights
        for i in DG.neighbors(j):
            DG[i][j]['ufixweight'] = U + 1

    return UFixings


# a vertex with a single remaining center is fixed to it
def do_F1Fixing(F0, F1, G):
    F1Fixings = 0
    for i in G.nodes:
        free = [ j for j in G.nodes if not F0[i][j] ]
        if len(free) == 1 and not F1[i][free[0]]:
            F1[i][free[0]] = True
            F1Fixings += 1
    return F1Fixings


def compute_fixings(G, population, L, U, ordering, contiguity=True):
    """Bound-tightening pass for the Hess assignment matrix.

    Returns (F0, F1, counts) where F0[i][j] means X[i,j] can be fixed to 0
    and F1[i][j] means X[i,j] can be fixed to 1. L-fixing and U-fixing
    reason about connected districts and are only valid when a contiguity
    formulation is added to the model.
    """
    n = G.number_of_nodes()
    F0 = [[False for j in range(n)] for i in range(n)]
    F1 = [[False for j in range(n)] for i in range(n)]
    position = construct_position(ordering)

    counts = {}
    counts['DFixings'] = do_DFixing(F0, G, position)
    if contiguity:
        counts['LFixings'] = do_LFixing(F0, G, population, L, ordering)
        counts['UFixings'] = do_UFixing(F0, G, population, U, ordering)
    else:
        counts['LFixings'] = 0
        counts['UFixings'] = 0
    counts['F1Fixings'] = do_F1Fixing(F0, F1, G)

    print("Number of XFixings =", counts['DFixings'] + counts['LFixings'] + counts['UFixings'], "out of", n * n)
    print("Number of centers left =", sum(1 for i in range(n) if not F0[i][i]))
    return F0, F1, counts
