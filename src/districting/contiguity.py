from districting import flow


class ConfigError(ValueError):
    pass


class UnknownFormulationError(ConfigError):
    pass


# every builder takes (m, G, X, F0=None, F1=None) and only adds to m
CONTIGUITY_BUILDERS = {
    'scf' : flow.build_scf,
    'mcf1' : flow.build_mcf1,
    'mcf2' : flow.build_mcf2,
    'shir' : flow.build_shir,
    'mcf' : flow.build_mcf
}


def get_builder(contiguity):
    if contiguity not in CONTIGUITY_BUILDERS:
        raise UnknownFormulationError("Error: the contiguity formulation " + str(contiguity) + " is not known. "
                                      "Choose one of " + ", ".join(sorted(CONTIGUITY_BUILDERS)) + ".")
    return CONTIGUITY_BUILDERS[contiguity]


def add_contiguity_constraints(m, contiguity, G, X, F0=None, F1=None):
    """Add the auxiliary flow variables and constraints of one formulation to m.

    X is the n x n assignment matrix (X[i,j]=1 if i is assigned to center j).
    F0/F1 are the optional fixed-bound matrices; shir and mcf use them to
    restrict the candidate centers. Returns whatever the builder returns
    (its flow variables).
    """
    builder = get_builder(contiguity)
    return builder(m, G, X, F0, F1)
