#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CrazyOR - Initial basic feasible solutions of transportation problems
=====================================================================

Balanced problems only: total supply must equal total demand.

Methods
-------
- ``'nw'``: North-West Corner rule
- ``'least'``: Least Cost method
- ``'vogel'``: Vogel's Approximation method
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
import logging
import numpy as np
import pandas as pd

log = logging.getLogger(__name__)

BALANCE_TOL = 1e-6

UNBALANCED_MESSAGE = ("Currently this solver supports only *balanced* problems. "
                      "Please ensure total supply = total demand "
                      "(add dummy row/column if needed).")

METHOD_NAMES = {
    'nw': 'North-West Corner',
    'least': 'Least Cost',
    'vogel': "Vogel's Approximation",
}

_ALIASES = {
    'nw': 'nw', 'north_west': 'nw', 'northwest': 'nw',
    'least': 'least', 'least_cost': 'least',
    'vogel': 'vogel', 'vam': 'vogel',
}

#==============================================================================
class TransportResult:
    """
    Transportation problem allocation.

    Parameters
    ----------
    costs : numpy.ndarray
        Unit cost matrix
    allocation : numpy.ndarray or None
        Allocated amounts, None for rejected problems
    method : str
        Method key
    supply, demand : numpy.ndarray
        Problem margins
    message : str, optional
        Reason of rejection

    Attributes
    ----------
    total_cost : float
        Sum of ``cost * alloc`` over the whole matrix
    """

    def __init__(self, costs, allocation, method, supply, demand, message=None):
        self.costs = costs
        self.allocation = allocation
        self.method = method
        self.supply = supply
        self.demand = demand
        self.message = message

        if allocation is None:
            self.total_cost = 0.0
        else:
            self.total_cost = float((costs * allocation).sum())

    @property
    def allocations(self):
        """Cells matrix ``[row][col] = {'cost', 'alloc'}``, empty if rejected."""
        if self.allocation is None:
            return []
        return [[{'cost': float(c), 'alloc': float(x)} for c, x in zip(cr, xr)]
                for cr, xr in zip(self.costs, self.allocation)]

    def __repr__(self):
        return str(self.to_dict())

    def to_dict(self):
        return {
            'allocations': self.allocations,
            'total_cost': self.total_cost,
            'method': self.method,
            'message': self.message,
        }

    def to_dataframe(self):
        """
        Allocation table with margins.

        Returns
        -------
        pandas.DataFrame
            Rows ``S1..Sm`` and ``Demand``, columns ``D1..Dn`` and ``Supply``.
            Empty for rejected problems.
        """
        if self.allocation is None:
            return pd.DataFrame()

        m, n = self.allocation.shape
        df = pd.DataFrame(self.allocation,
                          index=[f"S{i + 1}" for i in range(m)],
                          columns=[f"D{j + 1}" for j in range(n)])
        df['Supply'] = self.supply
        df.loc['Demand'] = list(self.demand) + [self.supply.sum()]
        return df

#==============================================================================
def is_balanced(supply, demand, tol=BALANCE_TOL):
    return abs(float(np.sum(supply)) - float(np.sum(demand))) < tol

#==============================================================================
def _north_west(costs, supply, demand):
    m, n = costs.shape
    supply_left = supply.copy()
    demand_left = demand.copy()
    alloc = np.zeros_like(costs)

    i = 0
    j = 0
    while i < m and j < n:
        x = min(supply_left[i], demand_left[j])
        alloc[i, j] = x
        supply_left[i] -= x
        demand_left[j] -= x

        row_done = 0 == supply_left[i]
        col_done = 0 == demand_left[j]
        # Degenerate step moves diagonally
        if row_done:
            i += 1
        if col_done:
            j += 1

    return alloc

def _least_cost(costs, supply, demand):
    m, n = costs.shape
    supply_left = supply.copy()
    demand_left = demand.copy()
    alloc = np.zeros_like(costs)
    used = np.zeros(costs.shape, dtype=bool)

    for _ in range(m * n):
        avail = ~used & (supply_left > 0)[:, None] & (demand_left > 0)[None, :]
        if not avail.any():
            break

        # argmin gives the first cell in row-major order on ties
        masked = np.where(avail, costs, np.inf)
        i, j = np.unravel_index(np.argmin(masked), costs.shape)

        x = min(supply_left[i], demand_left[j])
        alloc[i, j] = x
        supply_left[i] -= x
        demand_left[j] -= x
        used[i, j] = True

        if 0 == supply_left[i]:
            used[i, :] = True
        if 0 == demand_left[j]:
            used[:, j] = True

    return alloc

def _penalty(line_costs):
    """Difference of two smallest costs, the cost itself if it is alone, -1 if none."""
    if 0 == len(line_costs):
        return -1.0
    if 1 == len(line_costs):
        return float(line_costs[0])
    c = np.sort(line_costs)
    return float(c[1] - c[0])

def _vogel(costs, supply, demand):
    m, n = costs.shape
    supply_left = supply.copy()
    demand_left = demand.copy()
    alloc = np.zeros_like(costs)

    active_row = np.ones(m, dtype=bool)
    active_col = np.ones(n, dtype=bool)

    remaining = supply.sum()
    while remaining > 0:
        rows = active_row & (supply_left > 0)
        cols = active_col & (demand_left > 0)

        row_pen = [_penalty(costs[i, cols]) if rows[i] else -1.0 for i in range(m)]
        col_pen = [_penalty(costs[rows, j]) if cols[j] else -1.0 for j in range(n)]

        # Rows win ties, then lower index
        max_pen = -1.0
        is_row = True
        idx = -1
        for i, p in enumerate(row_pen):
            if p > max_pen:
                max_pen, is_row, idx = p, True, i
        for j, p in enumerate(col_pen):
            if p > max_pen:
                max_pen, is_row, idx = p, False, j

        if -1 == idx:
            break

        # Choose minimum cost cell in the selected line
        if is_row:
            i = idx
            j = int(np.argmin(np.where(cols, costs[i, :], np.inf)))
        else:
            j = idx
            i = int(np.argmin(np.where(rows, costs[:, j], np.inf)))

        x = min(supply_left[i], demand_left[j])
        alloc[i, j] = x
        supply_left[i] -= x
        demand_left[j] -= x
        remaining -= x

        if 0 == supply_left[i]:
            active_row[i] = False
        if 0 == demand_left[j]:
            active_col[j] = False

    return alloc

_METHODS = {
    'nw': _north_west,
    'least': _least_cost,
    'vogel': _vogel,
}

#==============================================================================
def solve(costs, supply, demand, method='vogel'):
    """
    Find an initial basic feasible solution of a transportation problem.

    Parameters
    ----------
    costs : array-like
        Unit cost matrix, ``rows x cols``
    supply : array-like
        Source capacities, length ``rows``
    demand : array-like
        Destination requirements, length ``cols``
    method : str, default='vogel'
        ``'nw'``, ``'least'`` or ``'vogel'`` (``'north_west'``,
        ``'least_cost'``, ``'vam'`` are accepted too)

    Returns
    -------
    TransportResult
        Allocation and total cost. Unbalanced problems give an empty
        allocation with ``message`` set.

    Raises
    ------
    ValueError
        If method is unknown or shapes do not match
    """
    if method not in _ALIASES:
        raise ValueError(f"Unknown method: {method!r}")
    method = _ALIASES[method]

    costs = np.array(costs, dtype=float, ndmin=2)
    supply = np.array(supply, dtype=float).reshape(-1)
    demand = np.array(demand, dtype=float).reshape(-1)

    if costs.shape != (len(supply), len(demand)):
        raise ValueError(f"Cost matrix shape {costs.shape} does not match "
                         f"supply ({len(supply)}) and demand ({len(demand)})")

    if not is_balanced(supply, demand):
        log.info("Unbalanced problem: supply %g, demand %g", supply.sum(), demand.sum())
        return TransportResult(costs, None, method, supply, demand, UNBALANCED_MESSAGE)

    alloc = _METHODS[method](costs, supply, demand)
    res = TransportResult(costs, alloc, method, supply, demand)

    log.debug("%s: total cost %g", METHOD_NAMES[method], res.total_cost)
    return res

def solve_all(costs, supply, demand):
    """Run every method, results are keyed by method."""
    return {m: solve(costs, supply, demand, m) for m in _METHODS}

#==============================================================================
if __name__ == '__main__':
    costs = [
        [19, 30, 50],
        [70, 30, 40],
        [40,  8, 70],
    ]
    supply = [7, 9, 18]
    demand = [5, 8, 21]

    for m, res in solve_all(costs, supply, demand).items():
        print(f"{METHOD_NAMES[m]}: total cost {res.total_cost:g}")
        print(res.to_dataframe())

    print(solve(costs, supply, [5, 8, 20]).message)
