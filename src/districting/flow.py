import gurobipy as gp
from gurobipy import GRB

from districting.arcs import ArcIndex, InternalError


def candidate_centers(n, F0=None, F1=None):
    # vertex i may root a district unless X[i,i]=0 is fixed or i is fixed to another center
    centers = []
    for i in range(n):
        if F0 is not None and F0[i][i]:
            continue
        if F1 is not None and any(F1[i][j] for j in range(n) if j != i):
            continue
        centers.append(i)
    return centers


def non_neighborhoods(G):
    # non_nbs[b] = V \ N[b], in increasing order
    n = G.number_of_nodes()
    non_nbs = []
    for b in range(n):
        closed_nb = [False for i in range(n)]
        closed_nb[b] = True
        for j in G.neighbors(b):
            closed_nb[j] = True
        non_nbs.append([i for i in range(n) if not closed_nb[i]])

        if len(non_nbs[b]) != n - 1 - len(list(G.neighbors(b))):
            raise InternalError("Internal Error : non nb size for vertex %d" % b)
    return non_nbs


def build_scf(m, G, X, F0=None, F1=None):
    n = G.number_of_nodes()
    arcs = ArcIndex(G)

    # Y[e]=1 if arc e is selected, F[e] tells how much flow is sent across arc e
    Y = m.addVars(arcs.count(), vtype=GRB.BINARY)
    F = m.addVars(arcs.count(), ub=n, vtype=GRB.CONTINUOUS)
    m.update()

    # each non-center has exactly one selected incoming arc, centers have none
    m.addConstrs( gp.quicksum(Y[e] for e in arcs.in_arcs(i)) + X[i,i] == 1 for i in range(n) )

    # centers send one unit to each other vertex of their district
    m.addConstrs( gp.quicksum(F[e] for e in arcs.out_arcs(i)) - gp.quicksum(F[e] for e in arcs.in_arcs(i))
                  - gp.quicksum(X[j,i] for j in range(n)) == -1 for i in range(n) )

    # flow only on selected arcs
    m.addConstrs( F[e] >= Y[e] for e in range(arcs.count()) )
    m.addConstrs( F[e] <= n * Y[e] for e in range(arcs.count()) )

    # cannot select arc (i,j) when i->v but j!->v
    m.addConstrs( X[i,v] + Y[e] - X[j,v] <= 1 for v in range(n) for e, (i,j) in enumerate(arcs) )

    m.update()
    print("SCF: added", 2 * arcs.count(), "arc variables over", arcs.count(), "arcs")
    return Y, F


def build_mcf1(m, G, X, F0=None, F1=None, ordered_arcs_only=False):
    n = G.number_of_nodes()
    arcs = ArcIndex(G)

    # F[v,e] tells how much of commodity v is sent across arc e
    F = m.addVars(n, arcs.count(), vtype=GRB.CONTINUOUS)
    m.update()

    # reaching v itself is a 0/1 event
    for v in range(n):
        for e in arcs.in_arcs(v):
            F[v,e].VType = GRB.BINARY
    m.update()

    # the center of i emits one unit of commodity i
    m.addConstrs( gp.quicksum(F[i,e] for e in arcs.out_arcs(j)) - gp.quicksum(F[i,e] for e in arcs.in_arcs(j)) == X[i,j]
                  for i in range(n) for j in range(n) if i != j )

    # commodity i never leaves i
    m.addConstrs( gp.quicksum(F[i,e] for e in arcs.out_arcs(i)) == 0 for i in range(n) )

    # commodity v may use arc (i,j) only if commodity j enters j through it
    for e, (i,j) in enumerate(arcs):
        if ordered_arcs_only and i > j:
            continue
        m.addConstrs( F[v,e] <= F[j,e] for v in range(n) if v != i and v != j )

    m.update()
    print("MCF1: added", n * arcs.count(), "flow variables over", arcs.count(), "arcs")
    return F


def _add_base_flow_variables(m, arcs, bases, non_nbs):
    # F[b,e,a] tells how much flow from base b towards non_nbs[b][a] is sent across arc e
    F = m.addVars([ (b,e,a) for b in bases for e in range(arcs.count()) for a in range(len(non_nbs[b])) ],
                  vtype=GRB.CONTINUOUS)
    m.update()
    return F


def _add_base_flow_constraints(m, arcs, X, F, bases, non_nbs):
    n = len(non_nbs)
    for b in bases:
        for a, t in enumerate(non_nbs[b]):
            # b sends one unit to t if t is assigned to b
            m.addConstr( gp.quicksum(F[b,e,a] for e in arcs.out_arcs(b)) - gp.quicksum(F[b,e,a] for e in arcs.in_arcs(b)) == X[t,b] )

            # conservation everywhere else
            m.addConstrs( gp.quicksum(F[b,e,a] for e in arcs.out_arcs(i)) - gp.quicksum(F[b,e,a] for e in arcs.in_arcs(i)) == 0
                          for i in range(n) if i != t and i != b )

            # flow only passes through vertices assigned to b
            m.addConstrs( gp.quicksum(F[b,e,a] for e in arcs.in_arcs(j)) <= X[j,b] for j in range(n) if j != b )


def build_mcf2(m, G, X, F0=None, F1=None):
    n = G.number_of_nodes()
    arcs = ArcIndex(G)
    non_nbs = non_neighborhoods(G)
    bases = list(range(n))

    F = _add_base_flow_variables(m, arcs, bases, non_nbs)
    _add_base_flow_constraints(m, arcs, X, F, bases, non_nbs)

    # nothing flows back into the base
    m.addConstrs( gp.quicksum(F[b,e,a] for e in arcs.in_arcs(b)) == 0 for b in bases for a in range(len(non_nbs[b])) )

    m.update()
    print("MCF2: added", len(F), "flow variables over", arcs.count(), "arcs")
    return F


def build_shir(m, G, X, F0=None, F1=None):
    n = G.number_of_nodes()
    arcs = ArcIndex(G)
    centers = candidate_centers(n, F0, F1)

    # F[c,e] tells how much flow from center c is sent across arc e
    F = m.addVars(centers, range(arcs.count()), vtype=GRB.CONTINUOUS)
    m.update()

    # every vertex assigned to c consumes one unit from c
    m.addConstrs( gp.quicksum(F[c,e] for e in arcs.in_arcs(i)) - gp.quicksum(F[c,e] for e in arcs.out_arcs(i)) == X[i,c]
                  for c in centers for i in range(n) if i != c )
    m.addConstrs( gp.quicksum(F[c,e] for e in arcs.in_arcs(i)) <= (n - 1) * X[i,c]
                  for c in centers for i in range(n) if i != c )

    # c is never a destination of its own flow
    for c in centers:
        for e in arcs.in_arcs(c):
            F[c,e].UB = 0

    m.update()
    print("SHIR: added", len(F), "flow variables for", len(centers), "candidate centers")
    return F


def build_mcf(m, G, X, F0=None, F1=None):
    n = G.number_of_nodes()
    arcs = ArcIndex(G)
    non_nbs = non_neighborhoods(G)
    bases = candidate_centers(n, F0, F1)

    F = _add_base_flow_variables(m, arcs, bases, non_nbs)
    _add_base_flow_constraints(m, arcs, X, F, bases, non_nbs)

    # nothing flows back into the base
    for b in bases:
        for a in range(len(non_nbs[b])):
            for e in arcs.in_arcs(b):
                F[b,e,a].UB = 0

    m.update()
    print("MCF: added", len(F), "flow variables for", len(bases), "candidate centers")
    return F
