import gurobipy as gp
from gurobipy import GRB
import networkx as nx
import pytest

from districting import hess


# plans as center_of[i] for every vertex i
PATH_CONNECTED = [0, 0, 3, 3]
PATH_DISCONNECTED = [0, 3, 0, 3]

GRID_ROWS = [0, 0, 0, 3, 3, 3, 6, 6, 6]
GRID_DISCONNECTED = [4, 2, 2, 6, 4, 4, 6, 4, 4] # vertex 0 is cut off from center 4


@pytest.fixture
def path4():
    # 0 - 1 - 2 - 3
    return nx.path_graph(4)


@pytest.fixture
def grid3():
    # 0 - 1 - 2
    # |   |   |
    # 3 - 4 - 5
    # |   |   |
    # 6 - 7 - 8
    return nx.convert_node_labels_to_integers(nx.grid_2d_graph(3, 3))


@pytest.fixture
def model():
    m = gp.Model()
    m.Params.OutputFlag = 0
    m.Params.DualReductions = 0 # report INFEASIBLE rather than INF_OR_UNBD
    yield m
    m.dispose()


def fixed_bounds(n, center_of):
    # F0/F1 matrices pinning X to the plan i -> center_of[i]
    F0 = [[center_of[i] != j for j in range(n)] for i in range(n)]
    F1 = [[center_of[i] == j for j in range(n)] for i in range(n)]
    return F0, F1


def fixed_assignment(m, G, center_of):
    F0, F1 = fixed_bounds(G.number_of_nodes(), center_of)
    X = hess.add_assignment_variables(m, G, F0, F1)
    return X, F0, F1


def is_feasible(m):
    m.optimize()
    assert m.status in (GRB.OPTIMAL, GRB.INFEASIBLE)
    return m.status == GRB.OPTIMAL
