#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CrazyOR - small Operations Research models
==========================================

- :mod:`crazy_or.net_model`: Critical Path Method
- :mod:`crazy_or.lpp`: graphical method for two variable linear programs
- :mod:`crazy_or.transport`: initial solutions of transportation problems
- :mod:`crazy_or.project`: activity list editing and snapshots
"""
from crazy_or.net_model import Activity, CycleDetected, NetworkModel, analyze, topological_levels
from crazy_or.lpp import Constraint, Objective, Point, Solution
from crazy_or.lpp import solve as solve_lpp
from crazy_or.transport import TransportResult, is_balanced
from crazy_or.transport import solve as solve_transport
from crazy_or.project import Project, ValidationError

__version__ = '0.1.0'
