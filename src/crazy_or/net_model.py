#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CrazyOR - Critical Path Method analysis
=======================================

This module provides CPM (Critical Path Method) analysis for project
networks given in activity-on-node form.

Features
--------
- Forward and backward passes over the predecessor graph
- Slack and critical activity detection
- Topological levels for diagram layout
- Cycle detection with the offending loop reported
- Export to dictionaries and pandas DataFrames
- Network diagram generation using Graphviz

Classes
-------
- :class:`Activity`: Input activity record
- :class:`NetworkModel`: Main class for network analysis
- :class:`_Activity`: Scheduled activity (internal)
- :class:`CycleDetected`: Raised for cyclic predecessor graphs

Usage Example
-------------
>>> acts = [
...     {'id': 'A', 'duration': 3.0},
...     {'id': 'B', 'duration': 2.0, 'predecessors': ['A']},
... ]
>>> model = NetworkModel(acts)
>>> model.completion_time
5.0
>>> model.critical_path()
['A', 'B']
"""

#==============================================================================
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

#==============================================================================
import graphviz
import logging
import pandas as pd

log = logging.getLogger(__name__)

# Slack values with smaller magnitude are rounded off to zero
SLACK_TOL = 1e-6

#==============================================================================
class CycleDetected(ValueError):
    """
    Predecessor graph contains a cycle.

    Attributes
    ----------
    cycle : list
        Activity ids along the loop, the first id is repeated at the end
    """

    def __init__(self, cycle):
        self.cycle = list(cycle)
        super().__init__("Cycle detected in predecessor graph: " + ' -> '.join(self.cycle))

#==============================================================================
class Activity:
    """
    Input activity record.

    Parameters
    ----------
    id : str
        Unique activity identifier
    duration : float
        Activity duration
    predecessors : iterable, optional
        Ids of activities which must finish before this one starts.
        Duplicates are collapsed, order of first appearance is kept.
    """

    def __init__(self, id, duration, predecessors=()):
        assert isinstance(id, str)

        self.id = id
        self.duration = float(duration)
        self.predecessors = tuple(dict.fromkeys(predecessors))

    @classmethod
    def from_dict(cls, data):
        """Build an activity from ``{'id', 'duration', 'predecessors'}`` mapping."""
        return cls(data['id'], data['duration'], data.get('predecessors', ()))

    def __eq__(self, other):
        if not isinstance(other, Activity):
            return NotImplemented
        return (self.id, self.duration, self.predecessors) == \
               (other.id, other.duration, other.predecessors)

    def __repr__(self):
        return str(self.to_dict())

    def to_dict(self):
        return {
            'id': self.id,
            'duration': self.duration,
            'predecessors': list(self.predecessors),
        }

#==============================================================================
def _as_activity(item):
    if isinstance(item, Activity):
        return item
    return Activity.from_dict(item)

#==============================================================================
class _Activity:
    """
    Scheduled activity: input record plus computed CPM parameters.

    Parameters
    ----------
    activity : Activity
        Input activity record
    model : NetworkModel
        Parent network model instance

    Attributes
    ----------
    early_start, early_end : float
        Earliest start and finish times
    late_start, late_end : float
        Latest start and finish times
    slack : float
        Total float, ``late_start - early_start``
    stage : int
        Topological level of the activity
    """

    def __init__(self, activity, model):
        assert isinstance(activity, Activity)
        assert isinstance(model, NetworkModel)

        self.id = activity.id
        self.duration = activity.duration
        self.predecessors = activity.predecessors
        self.model = model

        # CPM parameters (calculated later)
        self.early_start = 0.0
        self.early_end = 0.0
        self.late_start = 0.0
        self.late_end = 0.0
        self.slack = 0.0
        self.raw_slack = 0.0
        self.stage = 0

    @property
    def in_activities(self):
        """Get all existing predecessor activities."""
        return [self.model._index[i] for i in self.predecessors if i in self.model._index]

    @property
    def out_activities(self):
        """Get all successor activities."""
        return [self.model._index[i] for i in self.model._successors[self.id]]

    @property
    def n_dangling(self):
        """Number of predecessor ids missing in the model."""
        return len(self.predecessors) - len(self.in_activities)

    @property
    def is_critical(self):
        return self.slack == 0.0

    def __repr__(self):
        """String representation of the activity."""
        return str(self.to_dict())

    def to_dict(self):
        """
        Convert activity to dictionary representation.

        Returns
        -------
        dict
            Dictionary with ``id``, ``duration``, ``predecessors``,
            ``early_start``, ``early_end``, ``late_start``, ``late_end``,
            ``slack``, ``is_critical`` and ``stage`` keys
        """
        return {
            'id': self.id,
            'duration': self.duration,
            'predecessors': list(self.predecessors),
            'early_start': self.early_start,
            'early_end': self.early_end,
            'late_start': self.late_start,
            'late_end': self.late_end,
            'slack': self.slack,
            'is_critical': self.is_critical,
            'stage': self.stage,
        }

#==============================================================================
class NetworkModel:
    """
    Main class for CPM network analysis.

    The constructor builds the model and computes every time parameter,
    the instance is not supposed to be changed afterwards.

    Parameters
    ----------
    activities : iterable
        :class:`Activity` objects or mappings with ``id``, ``duration``
        and optional ``predecessors`` keys
    tol : float, default=SLACK_TOL
        Slack values with magnitude up to ``tol`` are rounded off to zero.
        Use ``0.0`` for exact comparison.
    debug : bool, default=False
        Keep unrounded slack values in ``to_dict`` output

    Raises
    ------
    CycleDetected
        If predecessor graph is not acyclic
    ValueError
        If activity ids are not unique

    Attributes
    ----------
    activities : list
        List of :class:`_Activity` objects in input order
    completion_time : float
        Project completion time, maximum of early ends
    levels : dict
        Topological level of each activity

    Notes
    -----
    Predecessor ids missing in the model are treated as finished at time
    zero, such links are reported with a warning.
    """

    def __init__(self, activities, tol=SLACK_TOL, debug=False):
        assert tol >= 0.0

        self.tol = tol
        self.debug = debug

        # Create network model
        self._create_model([_as_activity(a) for a in activities])

        # Compute stages of project
        self._compute_target('stage')

        # Compute activity time parameters
        self._compute_time_params()

    def _create_model(self, activities):
        """
        Build activity index, successor map and topological order.

        Parameters
        ----------
        activities : list
            Input :class:`Activity` records
        """
        self.activities = []
        self._index = {}
        self._successors = {}

        for a in activities:
            if a.id in self._index:
                raise ValueError(f"Duplicate activity id: {a.id}")
            act = _Activity(a, self)
            self.activities.append(act)
            self._index[a.id] = act
            self._successors[a.id] = []

        # Successor map is the inverse of the predecessor relation
        for a in self.activities:
            for p in a.predecessors:
                if p in self._successors:
                    self._successors[p].append(a.id)
                else:
                    log.warning("Activity %s has unknown predecessor %s", a.id, p)

        self._order = self._topological_order()

    def _topological_order(self):
        """
        Sort activities with Kahn's algorithm.

        Returns
        -------
        list
            Activities, each one placed after all of its predecessors

        Raises
        ------
        CycleDetected
            If some activities never get ready
        """
        # Count dependencies for topological sorting
        n_dep = {a.id: len(a.in_activities) for a in self.activities}

        # Find starting activities (no dependencies)
        order = [a for a in self.activities if 0 == n_dep[a.id]]

        # Process activities in topological order
        i = 0
        while i < len(order):
            for s in order[i].out_activities:
                n_dep[s.id] -= 1
                if 0 == n_dep[s.id]:
                    order.append(s)
            i += 1

        if len(order) < len(self.activities):
            raise CycleDetected(self._find_cycle(n_dep))

        return order

    def _find_cycle(self, n_dep):
        """Walk unresolved predecessors until some activity repeats."""
        left = [a for a in self.activities if n_dep[a.id] > 0]
        path = [left[0]]
        seen = {left[0].id: 0}
        while True:
            nxt = next(p for p in path[-1].in_activities if n_dep[p.id] > 0)
            if nxt.id in seen:
                loop = [a.id for a in path[seen[nxt.id]:]]
                # Predecessor walk goes backwards in time
                loop.reverse()
                return loop + [loop[0]]
            seen[nxt.id] = len(path)
            path.append(nxt)

    def _compute_time_params(self):
        """
        Compute all time parameters of activities.

        Forward pass gives early times, backward pass starting from project
        completion gives late times, then slacks are computed.
        """
        self._compute_target('early')

        self.completion_time = max((a.early_end for a in self.activities), default=0.0)

        self._compute_target('late')

        # Compute slacks
        for a in self.activities:
            r = a.late_start - a.early_start
            # Check for programming errors
            if r < -self.tol:
                raise RuntimeError("Activities can not have negative slack!!!")
            # Round off insignificant values
            a.slack = r if abs(r) > self.tol else 0.0
            a.raw_slack = r

        log.debug("Network of %d activities analyzed, completion time %g",
                  len(self.activities), self.completion_time)

    def _compute_target(self, target=None):
        """
        Compute CPM parameters of activities.

        Parameters
        ----------
        target : str
            What to compute: 'stage', 'early' or 'late'

        Raises
        ------
        ValueError
            If target parameter is invalid
        """
        if 'stage' == target:
            act_base = None
            act_new = 'stage'
            rev = 'in_activities'
            rev_val = 'stage'
            choice = max
            start = -1
            dangling = 0
            delta = lambda a: 1
            order = self._order

        elif 'early' == target:
            act_base = 'early_start'
            act_new = 'early_end'
            rev = 'in_activities'
            rev_val = 'early_end'
            choice = max
            start = 0.0
            dangling = 0.0
            delta = lambda a: a.duration
            order = self._order

        elif 'late' == target:
            act_base = 'late_end'
            act_new = 'late_start'
            rev = 'out_activities'
            rev_val = 'late_start'
            choice = min
            start = self.completion_time
            dangling = None
            delta = lambda a: -a.duration
            order = reversed(self._order)

        else:
            raise ValueError("Unknown 'target' value!!!")

        for a in order:
            vals = [getattr(r, rev_val) for r in getattr(a, rev)]
            # Missing predecessors contribute zero
            if dangling is not None and a.n_dangling:
                vals.append(dangling)

            base_val = choice(vals) if vals else start

            if act_base:
                setattr(a, act_base, base_val)
            setattr(a, act_new, base_val + delta(a))

    #--------------------------------------------------------------------------
    @property
    def levels(self):
        """Topological level of each activity."""
        return {a.id: a.stage for a in self.activities}

    @property
    def critical_activities(self):
        """Ids of activities with zero slack."""
        return [a.id for a in self.activities if a.is_critical]

    def get_activity(self, id):
        """
        Get scheduled activity by id.

        Returns
        -------
        _Activity or None
        """
        return self._index.get(id)

    def _is_critical_link(self, p, a):
        """Both ends critical and ``a`` starts right when ``p`` ends."""
        return (p.is_critical and a.is_critical
                and abs(a.early_start - p.early_end) <= self.tol)

    def critical_path(self):
        """
        Find a critical path.

        Returns
        -------
        list
            Ids of zero slack activities chained from a source activity to a
            sink activity, total duration equals ``completion_time``.
            When several critical paths exist the first branch in input
            order is taken. Empty list for an empty model.
        """
        dead = set()
        for a in self.activities:
            if not (a.is_critical and 0.0 == a.early_start):
                continue

            # Depth first search with explicit stack of successor iterators
            path = [a]
            stack = [iter(a.out_activities)]
            while stack:
                if not path[-1].out_activities:
                    return [p.id for p in path]
                nxt = next((s for s in stack[-1]
                            if s.id not in dead
                            and self._is_critical_link(path[-1], s)), None)
                if nxt is None:
                    dead.add(path.pop().id)
                    stack.pop()
                else:
                    path.append(nxt)
                    stack.append(iter(nxt.out_activities))
        return []

    def __repr__(self):
        """String representation of the network model."""
        _repr = 'Activities:{\n'
        for a in self.activities:
            _repr += '        ' + str(a) + '\n'
        _repr += '}\n'
        return _repr

    def to_dict(self):
        """
        Convert network model to dictionary representation.

        Returns
        -------
        dict
            Dictionary with structure:

            .. code-block:: python

                {
                    'activities': [
                        {activity1_data},
                        ...
                    ],
                    'completion_time': float,
                    'critical_path': [ids]
                }
        """
        activities_data = []
        for a in self.activities:
            d = a.to_dict()
            if self.debug:
                d['raw_slack'] = a.raw_slack
            activities_data.append(d)

        return {
            'activities': activities_data,
            'completion_time': self.completion_time,
            'critical_path': self.critical_path(),
        }

    def to_dataframe(self):
        """
        Convert network model to pandas DataFrame.

        Returns
        -------
        pandas.DataFrame
            Analysis table indexed by activity id, predecessors are joined
            into a comma separated string
        """
        columns = ['duration', 'predecessors', 'early_start', 'early_end',
                   'late_start', 'late_end', 'slack', 'is_critical', 'stage']

        rows = []
        for a in self.activities:
            d = a.to_dict()
            d['predecessors'] = ', '.join(d['predecessors'])
            rows.append(d)

        df = pd.DataFrame(rows, columns=['id'] + columns)
        return df.set_index('id')

    def viz(self, output_path=None):
        """
        Create Graphviz activity-on-node diagram of the network.

        Parameters
        ----------
        output_path : str, optional
            Path for saving the rendered PNG file (without extension)

        Returns
        -------
        graphviz.Digraph
            Graphviz object for rendering or saving

        Notes
        -----
        Each node shows the activity id, early start and end, late start
        and end and the slack. Critical activities and links between them
        are red, activities of one topological level share a rank.
        """
        dot = graphviz.Digraph(node_attr={'shape': 'record', 'style': 'rounded'})
        dot.graph_attr['rankdir'] = 'LR'

        def _cl(critical):
            return '#ff0000' if critical else '#000000'

        # Add nodes, one rank per level
        for level in sorted(set(self.levels.values())):
            with dot.subgraph() as sub:
                sub.attr(rank='same')
                for a in self.activities:
                    if a.stage != level:
                        continue
                    sub.node(a.id,
                             '{%s t=%.1f|{%.1f|%.1f}|{%.1f|%.1f}|r=%.1f}' % (a.id,
                                                                           a.duration,
                                                                           a.early_start,
                                                                           a.early_end,
                                                                           a.late_start,
                                                                           a.late_end,
                                                                           a.slack),
                             color=_cl(a.is_critical))

        # Add links
        for a in self.activities:
            for p in a.in_activities:
                dot.edge(p.id, a.id, color=_cl(self._is_critical_link(p, a)))

        if output_path is not None:
            dot.render(output_path, format='png', cleanup=True)

        return dot

#==============================================================================
def analyze(activities, tol=SLACK_TOL):
    """
    Compute CPM parameters of a project.

    Parameters
    ----------
    activities : iterable
        :class:`Activity` objects or mappings
    tol : float, default=SLACK_TOL
        Slack round-off threshold

    Returns
    -------
    list
        Scheduled activities in input order

    Raises
    ------
    CycleDetected
        If predecessor graph is not acyclic
    """
    return NetworkModel(activities, tol=tol).activities

#==============================================================================
def topological_levels(activities):
    """
    Compute layout levels of activities.

    Level is 0 for activities without predecessors, otherwise one more than
    the highest predecessor level. Result does not depend on input order.

    Returns
    -------
    dict
        Activity id to level mapping
    """
    return NetworkModel(activities).levels

#==============================================================================
if __name__ == '__main__':
    acts = [
        {'id': 'A', 'duration': 3., 'predecessors': []},
        {'id': 'B', 'duration': 4., 'predecessors': []},
        {'id': 'C', 'duration': 2., 'predecessors': ['A']},
        {'id': 'D', 'duration': 5., 'predecessors': ['A']},
        {'id': 'E', 'duration': 3., 'predecessors': ['B', 'C']},
        {'id': 'F', 'duration': 2., 'predecessors': ['D', 'E']},
    ]

    model = NetworkModel(acts)
    print(model.to_dataframe())
    print(f"Completion time: {model.completion_time}")
    print(f"Critical path: {' -> '.join(model.critical_path())}")

    try:
        NetworkModel(acts + [{'id': 'G', 'duration': 1., 'predecessors': ['G']}])
    except CycleDetected as e:
        print(e)
