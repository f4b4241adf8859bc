#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CrazyOR - Graphical solver for two variable linear programs
===========================================================

Maximize or minimize ``Z = zx * x + zy * y`` subject to constraints
``a * x + b * y {<=, >=, =} c`` and ``x >= 0, y >= 0``.

The feasible region vertices are found by intersecting every pair of
boundary lines (the axes included), filtering feasible points and ordering
them around their centroid, so the result can be drawn as a polygon.

Usage Example
-------------
>>> cons = [Constraint(1, 1, 40), Constraint(1, 0, 30), Constraint(0, 1, 40)]
>>> sol = solve(cons, Objective(3, 5, 'max'))
>>> sol.best_point, sol.best_value
(Point(x=0.0, y=40.0), 200.0)
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
from collections import namedtuple
import logging
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

EPS = 1e-6         # Feasibility tolerance
DET_EPS = 1e-9     # Parallel lines threshold
DEDUP_DIST = 1e-3  # Points closer than this are the same vertex

SENSES = {'<=': '<=', '≤': '<=', '>=': '>=', '≥': '>=', '=': '=', '==': '='}

Point = namedtuple('Point', ['x', 'y'])

#==============================================================================
class Constraint:
    """
    Linear constraint ``a * x + b * y {sense} c``.

    Parameters
    ----------
    a, b : float
        Coefficients of x and y
    c : float
        Right hand side
    sense : str, default='<='
        One of ``'<='``, ``'>='``, ``'='`` (``'≤'``, ``'≥'`` are accepted)
    id : int, optional
        Constraint number used in labels
    """

    def __init__(self, a, b, c, sense='<=', id=None):
        if sense not in SENSES:
            raise ValueError(f"Unknown constraint sense: {sense!r}")

        self.a = float(a)
        self.b = float(b)
        self.c = float(c)
        self.sense = SENSES[sense]
        self.id = id

    def evaluate(self, point):
        """Left hand side value at the point."""
        return self.a * point[0] + self.b * point[1]

    def is_satisfied(self, point, eps=EPS):
        lhs = self.evaluate(point)
        if '<=' == self.sense:
            return lhs <= self.c + eps
        elif '>=' == self.sense:
            return lhs + eps >= self.c
        return abs(lhs - self.c) <= eps

    def __repr__(self):
        return f"{self.a:g}x + {self.b:g}y {self.sense} {self.c:g}"

    def to_dict(self):
        return {'id': self.id, 'a': self.a, 'b': self.b, 'c': self.c, 'sense': self.sense}

#==============================================================================
class Objective:
    """
    Objective function ``Z = zx * x + zy * y``.

    Parameters
    ----------
    zx, zy : float
        Coefficients of x and y
    type : str, default='max'
        ``'max'`` or ``'min'``
    """

    def __init__(self, zx, zy, type='max'):
        if type not in ('max', 'min'):
            raise ValueError(f"Unknown objective type: {type!r}")

        self.zx = float(zx)
        self.zy = float(zy)
        self.type = type

    def __call__(self, point):
        return self.zx * point[0] + self.zy * point[1]

    def __repr__(self):
        return f"{self.type} Z = {self.zx:g}x + {self.zy:g}y"

    def to_dict(self):
        return {'zx': self.zx, 'zy': self.zy, 'type': self.type}

#==============================================================================
class Solution:
    """
    Graphical method result.

    Attributes
    ----------
    feasible_points : list
        Feasible region vertices in polygon winding order
    best_point : Point or None
        Optimal vertex
    best_value : float or None
        Objective value at the optimal vertex
    is_feasible : bool
        False if the feasible region is empty
    message : str
        Human readable outcome
    """

    def __init__(self, constraints, objective, feasible_points, best_point, best_value):
        self.constraints = list(constraints)
        self.objective = objective
        self.feasible_points = feasible_points
        self.best_point = best_point
        self.best_value = best_value
        self.is_feasible = 0 < len(feasible_points)

        if self.is_feasible:
            self.message = "Solved successfully."
        else:
            self.message = "No feasible solution (region is empty)."

    @property
    def values(self):
        """Objective values at the feasible points."""
        return [self.objective(p) for p in self.feasible_points]

    def __repr__(self):
        return str(self.to_dict())

    def to_dict(self):
        return {
            'feasible_points': [tuple(p) for p in self.feasible_points],
            'best_point': tuple(self.best_point) if self.best_point else None,
            'best_value': self.best_value,
            'is_feasible': self.is_feasible,
            'message': self.message,
        }

    def to_dataframe(self):
        """
        Vertex table.

        Returns
        -------
        pandas.DataFrame
            Columns ``x``, ``y``, ``z`` and ``is_best``, one row per vertex
            in winding order
        """
        df = pd.DataFrame(self.feasible_points, columns=['x', 'y'], dtype=float)
        df['z'] = self.values
        df['is_best'] = [p == self.best_point for p in self.feasible_points]
        return df

    def plot(self, ax=None):
        """
        Draw constraint lines, the feasible region and the optimum.

        Parameters
        ----------
        ax : matplotlib.axes.Axes, optional
            Axes to draw on, a new figure is created if None

        Returns
        -------
        matplotlib.axes.Axes
        """
        if ax is None:
            _, ax = plt.subplots()

        pts = np.array(self.feasible_points, dtype=float).reshape(-1, 2)
        lim = max(50.0, pts.max()) * 1.1 if len(pts) else 50.0

        xs = np.linspace(0.0, lim, 2)
        for i, c in enumerate(self.constraints, 1):
            lbl = f"C{c.id if c.id is not None else i}: {c!r}"
            if abs(c.b) > DET_EPS:
                ax.plot(xs, (c.c - c.a * xs) / c.b, label=lbl)
            elif abs(c.a) > DET_EPS:
                ax.axvline(c.c / c.a, label=lbl)

        if 2 < len(pts):
            ax.fill(pts[:, 0], pts[:, 1], color='#4ade80', alpha=0.6, label='Feasible region')
        elif len(pts):
            ax.plot(pts[:, 0], pts[:, 1], color='#16a34a', marker='o', label='Feasible region')

        if self.best_point is not None:
            ax.plot(*self.best_point, marker='*', color='#ff0000', markersize=12,
                    label=f"Optimum Z={self.best_value:g}")

        ax.set_xlim(0.0, lim)
        ax.set_ylim(0.0, lim)
        ax.set_xlabel('x')
        ax.set_ylabel('y')
        ax.legend()
        return ax

#==============================================================================
def _intersect(l1, l2):
    """Solve two line equations with Cramer's rule, None for parallel lines."""
    a1, b1, c1 = l1
    a2, b2, c2 = l2

    det = a1 * b2 - a2 * b1
    if abs(det) < DET_EPS:
        return None

    x = (c1 * b2 - c2 * b1) / det
    y = (a1 * c2 - a2 * c1) / det
    if not (np.isfinite(x) and np.isfinite(y)):
        return None
    return Point(float(x), float(y))

def _candidates(constraints):
    """Origin, axis intercepts and pairwise intersections of boundary lines."""
    points = [Point(0.0, 0.0)]

    for c in constraints:
        if abs(c.a) > DET_EPS:
            points.append(Point(c.c / c.a, 0.0))
        if abs(c.b) > DET_EPS:
            points.append(Point(0.0, c.c / c.b))

    lines = [(c.a, c.b, c.c) for c in constraints]
    lines += [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]  # x = 0, y = 0

    for i in range(len(lines)):
        for j in range(i + 1, len(lines)):
            p = _intersect(lines[i], lines[j])
            if p is not None:
                points.append(p)

    return points

def _is_feasible(p, constraints, eps=EPS):
    if p.x < -eps or p.y < -eps:
        return False
    return all(c.is_satisfied(p, eps) for c in constraints)

def _dedupe(points):
    unique = []
    for p in points:
        if not any(np.hypot(q.x - p.x, q.y - p.y) < DEDUP_DIST for q in unique):
            unique.append(p)
    return unique

def _sort_around_centroid(points):
    if not points:
        return points
    cx = sum(p.x for p in points) / len(points)
    cy = sum(p.y for p in points) / len(points)
    return sorted(points, key=lambda p: np.arctan2(p.y - cy, p.x - cx))

#==============================================================================
def solve(constraints, objective, eps=EPS):
    """
    Solve a two variable linear program with the graphical method.

    Parameters
    ----------
    constraints : iterable
        :class:`Constraint` objects
    objective : Objective
        Objective function
    eps : float, default=EPS
        Feasibility tolerance

    Returns
    -------
    Solution
        Feasible region vertices and the optimum. When several vertices
        give the same objective value the first one in winding order wins.

    Notes
    -----
    Only vertices are examined, so the region is assumed to be bounded in
    the optimization direction.
    """
    constraints = list(constraints)
    assert all(isinstance(c, Constraint) for c in constraints)
    assert isinstance(objective, Objective)

    points = [p for p in _candidates(constraints) if _is_feasible(p, constraints, eps)]
    points = _sort_around_centroid(_dedupe(points))

    best_point = None
    best_value = None
    for p in points:
        z = objective(p)
        if best_value is None or \
           ('max' == objective.type and z > best_value) or \
           ('min' == objective.type and z < best_value):
            best_point = p
            best_value = z

    log.debug("%d feasible vertices, best %s", len(points), best_point)

    return Solution(constraints, objective, points, best_point, best_value)

#==============================================================================
if __name__ == '__main__':
    cons = [
        Constraint(1, 1, 40, id=1),
        Constraint(1, 0, 30, id=2),
        Constraint(0, 1, 40, id=3),
    ]
    sol = solve(cons, Objective(3, 5, 'max'))
    print(sol.to_dataframe())
    print(sol.message, sol.best_point, sol.best_value)

    sol = solve(cons + [Constraint(1, 1, 100, '>=')], Objective(3, 5, 'max'))
    print(sol.message)
