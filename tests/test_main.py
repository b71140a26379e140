import csv
import json
import os

from gurobipy import GRB
import networkx as nx
import pytest

from districting import main
from districting.contiguity import ConfigError, UnknownFormulationError


def grid_config(**options):
    config = {'graph': 'grid3.json', 'k': 3}
    config.update(options)
    return main.check_config(config)


def test_check_config_fills_defaults():
    config = grid_config()
    assert config['contiguity'] == 'mcf'
    assert config['fixing'] is True
    assert config['order'] == 'decreasing'
    assert config['population'] == 'TOTPOP'


def test_check_config_rejects_unknown_formulation():
    with pytest.raises(UnknownFormulationError):
        grid_config(contiguity='lcut')


def test_check_config_rejects_unknown_option():
    with pytest.raises(ConfigError):
        grid_config(order='B_decreasing')


def test_check_config_requires_graph():
    with pytest.raises(ConfigError):
        main.check_config({'k': 3})


@pytest.mark.parametrize("contiguity", ['scf', 'mcf1', 'mcf2', 'shir', 'mcf'])
def test_run_finds_connected_plan(grid3, contiguity):
    config = grid_config(contiguity=contiguity, timelimit=60)
    result = main.run(config, grid3, [1] * 9)
    assert (result['L'], result['U']) == (3, 3)
    assert result['MIP_status'] == GRB.OPTIMAL
    assert result['MIP_obj'] == 6
    assert result['connected'] is True
    assert len(result['districts']) == 3
    assert result['centers'] < 9


def test_run_without_fixing_reports_root_lp(grid3):
    config = grid_config(contiguity='shir', fixing=False, lp=True, timelimit=60)
    result = main.run(config, grid3, [1] * 9)
    assert result['centers'] == 9
    assert float(result['LP_obj']) <= 6
    assert result['MIP_obj'] == 6
    assert result['connected'] is True


def test_run_skips_overtly_infeasible(grid3):
    config = grid_config()
    result = main.run(config, grid3, [7, 1, 1, 1, 1, 1, 1, 1, 1])
    assert result['MIP_status'] == 'overtly_infeasible'
    assert 'num_vars' not in result


def test_run_skips_disconnected_graph():
    G = nx.Graph([(0,1), (2,3)])
    result = main.run(grid_config(k=1), G, [1, 1, 1, 1])
    assert result['MIP_status'] == 'disconnected'
    assert 'num_vars' not in result


def test_run_skips_empty_graph():
    result = main.run(grid_config(k=1), nx.Graph(), [])
    assert result['MIP_status'] == 'empty'
    assert 'num_vars' not in result


def test_main_writes_results(grid3, tmp_path, monkeypatch):
    config_file = tmp_path / "small.json"
    config_file.write_text(json.dumps({'grid': {'graph': 'grid3.json', 'k': 3, 'contiguity': 'scf', 'timelimit': 60}}))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main, 'read_graph', lambda filename, key: (grid3, [1] * 9))

    main.main([str(config_file)])

    results_dir = tmp_path / "results_for_small"
    (results_file,) = [f for f in os.listdir(results_dir) if f.endswith('.csv')]
    with open(results_dir / results_file, newline='') as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 1
    assert rows[0]['run'] == 'grid'
    assert rows[0]['MIP_obj'] == '6'

    with open(results_dir / "grid-scf.json") as f:
        soln = json.load(f)
    assert sorted(node['index'] for node in soln['nodes']) == list(range(9))


def test_main_exits_on_bad_config(tmp_path, monkeypatch):
    config_file = tmp_path / "bad.json"
    config_file.write_text(json.dumps({'run1': {'graph': 'grid3.json', 'k': 3, 'contiguity': 'cut'}}))
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit):
        main.main([str(config_file)])
    assert not (tmp_path / "results_for_bad").exists()
