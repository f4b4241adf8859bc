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
import json
import logging
import os

from crazy_or.net_model import Activity, NetworkModel

log = logging.getLogger(__name__)

SNAPSHOT_KEY = 'activities'

SAMPLE_PROJECT = [
    {'id': 'A', 'duration': 3., 'predecessors': []},
    {'id': 'B', 'duration': 4., 'predecessors': []},
    {'id': 'C', 'duration': 2., 'predecessors': ['A']},
    {'id': 'D', 'duration': 5., 'predecessors': ['A']},
    {'id': 'E', 'duration': 3., 'predecessors': ['B', 'C']},
    {'id': 'F', 'duration': 2., 'predecessors': ['D', 'E']},
]

#==============================================================================
class ValidationError(ValueError):
    """Rejected activity edit or unreadable snapshot."""

#==============================================================================
def _normalize_id(id):
    return str(id).strip().upper()

def _parse_predecessors(predecessors):
    if isinstance(predecessors, str):
        predecessors = predecessors.split(',')
    return [p for p in (_normalize_id(p) for p in predecessors) if p]

#==============================================================================
class Project:
    """
    Editable list of activities with validation and a JSON snapshot.

    Every activity is checked on insertion, so the list handed over to
    :class:`NetworkModel` always refers to existing predecessors only.

    Parameters
    ----------
    activities : iterable, optional
        Initial activities, validated one by one in order
    path : str, optional
        Default snapshot file
    """

    def __init__(self, activities=None, path=None):
        self.path = path
        self._activities = []
        for a in activities or ():
            if isinstance(a, Activity):
                a = a.to_dict()
            self.add_activity(a['id'], a['duration'], a.get('predecessors', ()))

    @property
    def activities(self):
        return list(self._activities)

    @property
    def ids(self):
        return [a.id for a in self._activities]

    def __len__(self):
        return len(self._activities)

    def add_activity(self, id, duration, predecessors=()):
        """
        Validate and append an activity.

        Parameters
        ----------
        id : str
            Activity id, surrounding spaces are stripped, letters upper-cased
        duration : float
            Positive duration
        predecessors : iterable or str
            Existing activity ids, a comma separated string is accepted

        Returns
        -------
        Activity
            The added activity

        Raises
        ------
        ValidationError
            For empty or duplicate id, bad duration or unknown predecessors
        """
        act_id = _normalize_id(id)
        if not act_id:
            raise ValidationError("Please enter an activity ID")

        if act_id in self.ids:
            raise ValidationError(f"Activity ID already exists: {act_id}")

        try:
            duration = float(duration)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid duration: {duration!r}")
        if not duration > 0:
            raise ValidationError("Please enter a valid duration greater than 0")

        preds = _parse_predecessors(predecessors)
        invalid = [p for p in preds if p not in self.ids]
        if invalid:
            raise ValidationError(f"Invalid predecessor(s): {', '.join(invalid)}")

        act = Activity(act_id, duration, preds)
        self._activities.append(act)
        log.debug("Activity %s added", act_id)
        return act

    def dependents(self, id):
        """Ids of activities listing ``id`` as a predecessor."""
        id = _normalize_id(id)
        return [a.id for a in self._activities if id in a.predecessors]

    def delete_activity(self, id):
        """
        Remove an activity nobody depends on.

        Raises
        ------
        KeyError
            If there is no such activity
        ValidationError
            If other activities list it as a predecessor
        """
        id = _normalize_id(id)
        if id not in self.ids:
            raise KeyError(id)

        dependents = self.dependents(id)
        if dependents:
            raise ValidationError(f"Cannot delete {id}. It is a predecessor of: {', '.join(dependents)}")

        self._activities = [a for a in self._activities if a.id != id]
        log.debug("Activity %s deleted", id)

    def clear(self):
        self._activities = []

    def load_sample(self):
        """Replace activities with the sample project."""
        self.clear()
        for a in SAMPLE_PROJECT:
            self.add_activity(a['id'], a['duration'], a['predecessors'])

    def analyze(self, **kwargs):
        """Build :class:`NetworkModel` of current activities."""
        return NetworkModel(self._activities, **kwargs)

    #--------------------------------------------------------------------------
    def to_dict(self):
        return {SNAPSHOT_KEY: [a.to_dict() for a in self._activities]}

    def save(self, path=None):
        """
        Write JSON snapshot of the activity list.

        Parameters
        ----------
        path : str, optional
            Target file, ``self.path`` is used if None
        """
        path = path or self.path
        if path is None:
            raise ValueError("Snapshot path is not set")

        dir_name = os.path.dirname(os.path.abspath(path))
        os.makedirs(dir_name, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

        log.debug("Snapshot of %d activities saved to %s", len(self), path)

    @classmethod
    def load(cls, path):
        """
        Read JSON snapshot.

        A missing file gives an empty project bound to ``path``.

        Raises
        ------
        ValidationError
            If the file is not a valid snapshot
        """
        if not os.path.isfile(path):
            return cls(path=path)

        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
            return cls(data[SNAPSHOT_KEY], path=path)
        except ValidationError:
            raise
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ValidationError(f"Corrupt snapshot {path}: {e}") from e

#==============================================================================
if __name__ == '__main__':
    prj = Project()
    prj.load_sample()
    print(prj.analyze().to_dataframe())

    try:
        prj.delete_activity('a')
    except ValidationError as e:
        print(e)
