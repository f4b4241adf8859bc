#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
    CrazyOR
    Copyright (C) 2025 anonimous

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with this program.  If not, see <http://www.gnu.org/licenses/>.

    Please contact with me by E-mail: shkolnick.kun@gmail.com
"""
import logging

import graphviz
import numpy as np
import pytest

from crazy_or import Activity, CycleDetected, NetworkModel, analyze, topological_levels

SAMPLE = [
    {'id': 'A', 'duration': 3., 'predecessors': []},
    {'id': 'B', 'duration': 4., 'predecessors': []},
    {'id': 'C', 'duration': 2., 'predecessors': ['A']},
    {'id': 'D', 'duration': 5., 'predecessors': ['A']},
    {'id': 'E', 'duration': 3., 'predecessors': ['B', 'C']},
    {'id': 'F', 'duration': 2., 'predecessors': ['D', 'E']},
]

def random_dag(seed, n=30):
    rng = np.random.default_rng(seed)
    acts = []
    for i in range(n):
        n_pred = int(rng.integers(0, min(i, 3) + 1))
        preds = ['T%d' % p for p in rng.choice(i, size=n_pred, replace=False)] if i else []
        acts.append({'id': 'T%d' % i, 'duration': float(rng.integers(1, 10)), 'predecessors': preds})
    # Shuffle so that input order is not topological
    rng.shuffle(acts)
    return acts

#==============================================================================
def test_sample_schedule():
    model = NetworkModel(SAMPLE)
    times = {a.id: (a.early_start, a.early_end, a.late_start, a.late_end) for a in model.activities}

    assert model.completion_time == 10.
    assert times['A'] == (0., 3., 0., 3.)
    assert times['B'] == (0., 4., 1., 5.)
    assert times['C'] == (3., 5., 3., 5.)
    assert times['D'] == (3., 8., 3., 8.)
    assert times['E'] == (5., 8., 5., 8.)
    assert times['F'] == (8., 10., 8., 10.)

    assert model.get_activity('B').slack == 1.
    assert model.critical_activities == ['A', 'C', 'D', 'E', 'F']

def test_result_keeps_input_order():
    res = analyze(list(reversed(SAMPLE)))
    assert [a.id for a in res] == ['F', 'E', 'D', 'C', 'B', 'A']
    assert {a.id: a.slack for a in res}['B'] == 1.

def test_critical_path_sample():
    model = NetworkModel(SAMPLE)
    assert model.critical_path() == ['A', 'C', 'E', 'F']

def test_critical_path_single_branch():
    acts = [
        {'id': 'A', 'duration': 3.},
        {'id': 'B', 'duration': 4.},
        {'id': 'C', 'duration': 2., 'predecessors': ['A']},
        {'id': 'D', 'duration': 5., 'predecessors': ['A']},
        {'id': 'E', 'duration': 1., 'predecessors': ['B', 'C']},
        {'id': 'F', 'duration': 2., 'predecessors': ['D', 'E']},
    ]
    model = NetworkModel(acts)
    assert model.critical_path() == ['A', 'D', 'F']
    assert model.get_activity('E').slack == 2.
    assert model.get_activity('B').slack == 3.

@pytest.mark.parametrize('seed', range(5))
def test_pass_invariants(seed):
    model = NetworkModel(random_dag(seed))

    for a in model.activities:
        assert a.early_end == a.early_start + a.duration
        assert a.late_start == a.late_end - a.duration
        assert a.slack >= 0.
        assert a.is_critical == (a.slack == 0.)
        for p in a.in_activities:
            assert p.early_end <= a.early_start

    assert model.completion_time == max(a.early_end for a in model.activities)

@pytest.mark.parametrize('seed', range(5))
def test_critical_path_spans_project(seed):
    model = NetworkModel(random_dag(seed))
    path = [model.get_activity(i) for i in model.critical_path()]

    assert path
    assert not path[0].in_activities
    assert not path[-1].out_activities
    assert all(a.is_critical for a in path)
    for prev, nxt in zip(path, path[1:]):
        assert prev.id in nxt.predecessors
    assert sum(a.duration for a in path) == model.completion_time

def test_empty():
    model = NetworkModel([])
    assert analyze([]) == []
    assert model.completion_time == 0.
    assert model.critical_path() == []
    assert topological_levels([]) == {}

def test_single_activity():
    res = analyze([Activity('A', 7)])
    assert res[0].to_dict()['late_end'] == 7.
    assert res[0].is_critical

def test_cycle_detected():
    acts = [
        {'id': 'A', 'duration': 1., 'predecessors': ['C']},
        {'id': 'B', 'duration': 1., 'predecessors': ['A']},
        {'id': 'C', 'duration': 1., 'predecessors': ['B']},
        {'id': 'D', 'duration': 1., 'predecessors': []},
    ]
    with pytest.raises(CycleDetected) as e:
        analyze(acts)
    assert e.value.cycle == ['B', 'C', 'A', 'B']

def test_cycle_downstream_of_loop():
    acts = [
        {'id': 'X', 'duration': 1., 'predecessors': ['B']},
        {'id': 'A', 'duration': 1., 'predecessors': ['B']},
        {'id': 'B', 'duration': 1., 'predecessors': ['A']},
    ]
    with pytest.raises(CycleDetected) as e:
        NetworkModel(acts)
    assert set(e.value.cycle) == {'A', 'B'}

def test_self_reference():
    with pytest.raises(CycleDetected) as e:
        topological_levels([{'id': 'A', 'duration': 1., 'predecessors': ['A']}])
    assert e.value.cycle == ['A', 'A']
    assert isinstance(e.value, ValueError)

def test_dangling_predecessor(caplog):
    acts = [
        {'id': 'A', 'duration': 2., 'predecessors': ['Z']},
        {'id': 'B', 'duration': 1., 'predecessors': ['A', 'Z']},
    ]
    with caplog.at_level(logging.WARNING, logger='crazy_or.net_model'):
        model = NetworkModel(acts)

    assert model.get_activity('A').early_start == 0.
    assert model.get_activity('B').early_start == 2.
    assert model.levels == {'A': 1, 'B': 2}
    assert 'unknown predecessor Z' in caplog.text

def test_duplicate_id():
    with pytest.raises(ValueError):
        NetworkModel([Activity('A', 1), Activity('A', 2)])

def test_duplicate_predecessors_collapse():
    a = Activity('B', 1, ['A', 'A'])
    assert a.predecessors == ('A',)

def test_levels():
    expected = {'A': 0, 'B': 0, 'C': 1, 'D': 1, 'E': 2, 'F': 3}
    assert topological_levels(SAMPLE) == expected
    assert topological_levels(list(reversed(SAMPLE))) == expected

def test_slack_round_off():
    acts = [
        {'id': 'A', 'duration': 0.1},
        {'id': 'B', 'duration': 0.2, 'predecessors': ['A']},
        {'id': 'C', 'duration': 0.3},
    ]
    model = NetworkModel(acts)
    assert model.get_activity('C').slack == 0.
    assert model.get_activity('C').is_critical

    exact = NetworkModel(acts, tol=0.0)
    assert exact.get_activity('C').slack > 0.
    assert not exact.get_activity('C').is_critical

def test_debug_keeps_raw_slack():
    acts = [
        {'id': 'A', 'duration': 0.1},
        {'id': 'B', 'duration': 0.2, 'predecessors': ['A']},
        {'id': 'C', 'duration': 0.3},
    ]
    d = NetworkModel(acts, debug=True).to_dict()
    c = [a for a in d['activities'] if a['id'] == 'C'][0]
    assert c['slack'] == 0.
    assert 0. < c['raw_slack'] < 1e-9

def test_idempotent():
    assert NetworkModel(SAMPLE).to_dict() == NetworkModel(SAMPLE).to_dict()

def test_to_dataframe():
    df = NetworkModel(SAMPLE).to_dataframe()
    assert list(df.index) == ['A', 'B', 'C', 'D', 'E', 'F']
    assert df.at['E', 'predecessors'] == 'B, C'
    assert df.at['B', 'slack'] == 1.
    assert not df.at['B', 'is_critical']
    assert df.at['F', 'stage'] == 3

def test_viz():
    dot = NetworkModel(SAMPLE).viz()
    assert isinstance(dot, graphviz.Digraph)
    assert 'A -> D' in dot.source
    assert 'B -> E' in dot.source
    assert '#ff0000' in dot.source

def test_critical_path_long_chain():
    n = 3000
    acts = [{'id': 'T0', 'duration': 1.}]
    acts += [{'id': 'T%d' % i, 'duration': 1., 'predecessors': ['T%d' % (i - 1)]}
             for i in range(1, n)]
    model = NetworkModel(acts)

    assert model.completion_time == float(n)
    assert model.critical_path() == ['T%d' % i for i in range(n)]
    assert len(model.to_dict()['critical_path']) == n

def test_critical_path_skips_dead_branch():
    # A -> B is tight but B is not critical, path has to go through C
    acts = [
        {'id': 'A', 'duration': 1.},
        {'id': 'B', 'duration': 1., 'predecessors': ['A']},
        {'id': 'C', 'duration': 5., 'predecessors': ['A']},
    ]
    model = NetworkModel(acts)
    assert model.critical_path() == ['A', 'C']

def test_viz_critical_edges_use_tolerance():
    # X ends at 0.3, B ends at 0.1 + 0.2, both feed C
    acts = [
        {'id': 'X', 'duration': 0.3},
        {'id': 'A', 'duration': 0.1},
        {'id': 'B', 'duration': 0.2, 'predecessors': ['A']},
        {'id': 'C', 'duration': 1., 'predecessors': ['X', 'B']},
    ]
    model = NetworkModel(acts)
    source = model.viz().source

    assert model.critical_path() == ['X', 'C']
    assert 'X -> C [color="#ff0000"]' in source
    assert 'B -> C [color="#ff0000"]' in source
