import gurobipy as gp
from gurobipy import GRB


def add_assignment_variables(m, G, F0=None, F1=None):
    # X[i,j]=1 if vertex i is assigned to (district centered at) vertex j
    X = m.addVars(G.nodes, G.nodes, vtype=GRB.BINARY)
    m.update()

    if F0 is not None:
        for i in G.nodes:
            for j in G.nodes:
                if F0[i][j]:
                    X[i,j].UB = 0
    if F1 is not None:
        for i in G.nodes:
            for j in G.nodes:
                if F1[i][j]:
                    X[i,j].LB = 1
    m.update()
    return X


def add_base_constraints(m, G, X, population, L, U, k):
    # Each vertex i assigned to one district
    m.addConstrs(gp.quicksum(X[i,j] for j in G.nodes) == 1 for i in G.nodes)

    # Pick k centers
    m.addConstr(gp.quicksum(X[j,j] for j in G.nodes) == k)

    # Population balance: population assigned to vertex j should be in [L,U], if j is a center
    m.addConstrs(gp.quicksum(population[i] * X[i,j] for i in G.nodes) <= U * X[j,j] for j in G.nodes)
    m.addConstrs(gp.quicksum(population[i] * X[i,j] for i in G.nodes) >= L * X[j,j] for j in G.nodes)

    # Add coupling inequalities for added model strength
    couplingConstrs = m.addConstrs(X[i,j] <= X[j,j] for i in G.nodes for j in G.nodes if i != j)

    # Make them user cuts
    for c in couplingConstrs.values():
        c.Lazy = -1

    # Set branch priority on center vars
    for j in G.nodes:
        X[j,j].BranchPriority = 1


def add_objective(m, G, X):
    # Y[i,j] = 1 if edge {i,j} is cut
    m._Y = m.addVars(G.edges, vtype=GRB.BINARY)
    m.addConstrs( X[i,v] - X[j,v] <= m._Y[i,j] for i,j in G.edges for v in G.nodes )
    m.setObjective( m._Y.sum(), GRB.MINIMIZE )


def extract_districts(G, X):
    # districts of the incumbent, one list per center (in center order)
    centers = [ j for j in G.nodes if X[j,j].x > 0.5 ]
    return [ [ i for i in G.nodes if X[i,j].x > 0.5 ] for j in centers ]
