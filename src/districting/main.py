###########################
# Imports
###########################

import gurobipy as gp
from gurobipy import GRB

from datetime import date
import math
import networkx as nx
import csv
import time
import json
import sys
import os

from gerrychain import Graph

from districting import hess
from districting import fixing
from districting.contiguity import CONTIGUITY_BUILDERS, ConfigError, add_contiguity_constraints, get_builder


################################################
# Summarize computational results to csv file
################################################

from csv import DictWriter
def append_dict_as_row(file_name, dict_of_elem, field_names):
    # Open file in append mode
    with open(file_name, 'a+', newline='') as write_obj:
        dict_writer = DictWriter(write_obj, fieldnames=field_names, extrasaction='ignore')
        dict_writer.writerow(dict_of_elem)


################################################
# Writes districting solution to json file
################################################

def export_to_json(G, districts, filename):
    with open(filename, 'w') as outfile:
        soln = {}
        soln['nodes'] = []
        for j in range(len(districts)):
            for i in districts[j]:
                soln['nodes'].append({
                        'name': G.nodes[i].get("NAME10", str(i)),
                        'index': i,
                        'district': j
                        })
        json.dump(soln, outfile)


###########################
# Config options
###########################

fieldnames = ['run','graph','k','contiguity','fixing','order','deviation','lp','timelimit'] # configs
fieldnames += ['L','U','n','m'] # params
fieldnames += ['DFixings', 'LFixings', 'UFixings', 'F1Fixings', 'centers'] # fixing info
fieldnames += ['build_time', 'num_vars', 'num_constrs'] # model info
fieldnames += ['LP_obj', 'LP_time'] # root LP info
fieldnames += ['MIP_obj','MIP_bound','MIP_time', 'MIP_status', 'MIP_nodes', 'connected'] # MIP info

default_config = {
    'contiguity' : 'mcf',
    'fixing' : True,
    'order' : 'decreasing',
    'deviation' : 0.01,
    'lp' : False,
    'timelimit' : 3600,
    'population' : 'TOTPOP'
}

available_config = {
    'contiguity' : set(CONTIGUITY_BUILDERS) | {'none'},
    'fixing' : {True, False},
    'order' : {'none', 'decreasing'},
    'lp' : {True, False} # solve and report root LP bound? (in addition to MIP)
}


def check_config(config):
    for ckey in ('graph', 'k'):
        if ckey not in config:
            raise ConfigError("Error: the config option " + ckey + " is required.")

    if config.get('contiguity', 'none') != 'none':
        get_builder(config['contiguity'])

    for ckey in available_config.keys():
        if ckey in config and config[ckey] not in available_config[ckey]:
            raise ConfigError("Error: the config option " + ckey + ":" + str(config[ckey]) + " is not known.")

    # fill-in unspecified configs using default values
    for ckey in default_config.keys():
        if ckey not in config:
            print("Using default value", ckey, "=", default_config[ckey], "since no option was selected.")
            config[ckey] = default_config[ckey]
    return config


def read_graph(filename, population_key):
    G = Graph.from_json(filename)
    population = [G.nodes[i][population_key] for i in G.nodes]
    return G, population


###########################
# Build and solve one run
###########################

def run(config, G, population):
    result = dict(config)
    result['n'] = G.number_of_nodes()
    result['m'] = G.number_of_edges()

    # the model only makes sense on a nonempty, connected graph
    if G.number_of_nodes() == 0:
        print("Skipping empty graph.")
        result['MIP_status'] = 'empty'
        return result
    if not nx.is_connected(G):
        print("Problem is infeasible (not connected!)")
        result['MIP_status'] = 'disconnected'
        return result

    k = config['k']
    deviation = config['deviation']
    L = math.ceil((1-deviation/2)*sum(population)/k)
    U = math.floor((1+deviation/2)*sum(population)/k)
    print("L =", L, ", U =", U, ", k =", k)
    result['L'] = L
    result['U'] = U

    # abort early for overtly infeasible instances
    maxp = max(population[i] for i in G.nodes)
    if maxp > U or L > U:
        print("max{ p_v | v in V } =", maxp, ", L =", L, ", U =", U, end='. ')
        print("Skipping overtly infeasible instance.")
        result['MIP_status'] = 'overtly_infeasible'
        return result

    contiguity = config['contiguity']

    ####################################
    # Variable fixing
    ####################################

    if config['fixing']:
        ordering = fixing.find_ordering(config['order'], G, population)
        (F0, F1, counts) = fixing.compute_fixings(G, population, L, U, ordering, contiguity != 'none')
        result.update(counts)
        result['centers'] = sum(1 for i in G.nodes if not F0[i][i])
    else:
        (F0, F1) = (None, None)
        result['centers'] = G.number_of_nodes()

    ############################
    # Build model
    ############################

    build_start = time.time()
    m = gp.Model()
    m._X = hess.add_assignment_variables(m, G, F0, F1)
    hess.add_base_constraints(m, G, m._X, population, L, U, k)
    hess.add_objective(m, G, m._X)

    if contiguity != 'none':
        add_contiguity_constraints(m, contiguity, G, m._X, F0, F1)

    m.update()
    result['build_time'] = '{0:.2f}'.format(time.time() - build_start)
    result['num_vars'] = m.NumVars
    result['num_constrs'] = m.NumConstrs

    ######################################################################################
    # Solve root LP? Used only for reporting purposes. Not used for MIP solve.
    ######################################################################################

    if config['lp']:
        r = m.relax() # LP relaxation of MIP model m
        r.Params.Method = 3 # use concurrent LP solver
        r.Params.TimeLimit = config['timelimit']
        print("To get the root LP bound, now solving a (separate) LP model.")

        lp_start = time.time()
        r.optimize()
        lp_end = time.time()

        if r.status == GRB.OPTIMAL:
            result['LP_obj'] = '{0:.2f}'.format(r.objVal)
        elif r.status == GRB.TIME_LIMIT:
            result['LP_obj'] = 'TL'
        else:
            result['LP_obj'] = '?'
        result['LP_time'] = '{0:.2f}'.format(lp_end - lp_start)
    else:
        result['LP_obj'] = 'n/a'
        result['LP_time'] = 'n/a'

    ####################################
    # Solve MIP
    ####################################

    m.Params.TimeLimit = config['timelimit']
    m.Params.Method = 3 # use concurrent method for root LP. Useful for degenerate models
    m.Params.MIPGap = 0

    start = time.time()
    m.optimize()
    end = time.time()
    result['MIP_time'] = '{0:.2f}'.format(end-start)
    result['MIP_status'] = int(m.status)

    if m.status == GRB.INFEASIBLE:
        result['MIP_obj'] = 'infeasible'
        result['connected'] = 'n/a'
        return result

    result['MIP_nodes'] = int(m.NodeCount)
    result['MIP_bound'] = m.objBound

    # report best solution found
    if m.SolCount > 0:
        result['MIP_obj'] = int(round(m.objVal))
        districts = hess.extract_districts(G, m._X)
        print("best solution (found) =", districts)
        result['districts'] = districts

        # is solution connected?
        result['connected'] = all(nx.is_connected(G.subgraph(district)) for district in districts)
    else:
        result['MIP_obj'] = 'no_solution_found'
        result['connected'] = 'n/a'

    return result


###############################################
# Read configs/inputs and run the batch
###############################################

def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    # name your own config file in command line, like this:
    #       python -m districting.main usethisconfig.json
    config_filename = argv[0] if argv else 'config.json'
    print("Reading config from", config_filename)
    config_filename_wo_extension = os.path.basename(config_filename).rsplit('.',1)[0]
    with open(config_filename, 'r') as configs_file:
        batch_configs = json.load(configs_file)

    # check every run before building anything
    try:
        for key in batch_configs.keys():
            check_config(batch_configs[key])
    except ConfigError as e:
        sys.exit(str(e))

    # create directory for results
    path = "results_for_" + config_filename_wo_extension
    os.makedirs(path, exist_ok=True)

    today_string = date.today().strftime("%Y_%b_%d") # Year_Month_Day, like 2019_Sep_16
    results_filename = os.path.join(path, "results_" + config_filename_wo_extension + "_" + today_string + ".csv")

    # prepare csv file by writing column headers
    with open(results_filename, 'w', newline='') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
        writer.writeheader()

    for key in batch_configs.keys():
        config = batch_configs[key]
        print("In run", key, "using config:", config, end='.\n')

        G, population = read_graph(config['graph'], config['population'])
        result = run(config, G, population)
        result['run'] = key

        if 'districts' in result:
            json_fn = os.path.join(path, key + "-" + config['contiguity'] + ".json")
            export_to_json(G, result['districts'], json_fn)

        append_dict_as_row(results_filename, result, fieldnames)


if __name__ == '__main__':
    main()
