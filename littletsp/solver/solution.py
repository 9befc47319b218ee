import copy

import numpy as np
import pandas as pd

from littletsp.tour import Tour


class Solution:
    """
    Breadcrumbs of a solve: one step per improvement of the best tour.
    The best step is the one with the lowest cost.
    """

    @property
    def data(self):
        # get the best step as dictionary
        self._best_step['first_seen'] = self.first_sight_optimal()
        self._best_step['total_steps'] = self.total_step()
        result = copy.deepcopy(self._best_step)
        return result

    @property
    def cost(self):
        return self._best_step['cost']

    @property
    def tour(self) -> Tour:
        return self._best_step['tour']

    @property
    def found(self):
        return self.tour is not None

    @property
    def approx_ratio(self):
        return self._best_step['approx_ratio']

    def __init__(self):
        self._step_template = {
            'tour': None,
            'cost': None,
            'time': None,
            'approx_ratio': None
        }
        self._breadcrumbs = []

        self._best_step = {
            'cost': None,
            'tour': None,
            'time': None,
            'approx_ratio': None,
            'n_steps': None,
            'first_seen': None
        }

    def add_step(
        self,
        tour: Tour,
        cost: float,
        elapsed_time: float,
        approx_ratio: float = None,
        **kwargs
    ):
        step = self._step_template.copy()
        step['tour'] = tour
        step['cost'] = cost
        step['time'] = elapsed_time
        step['approx_ratio'] = approx_ratio
        for k, v in kwargs.items():
            step[k] = v
        self._breadcrumbs.append(step)

        if self._best_step['cost'] is None or cost <= self._best_step['cost']:
            self._best_step['cost'] = cost
            self._best_step['tour'] = step['tour']
            self._best_step['time'] = elapsed_time
            self._best_step['approx_ratio'] = approx_ratio
            for k, v in kwargs.items():
                self._best_step[k] = v

        return self

    def total_step(self):
        n_step = 0
        for step in self._breadcrumbs:
            if 'n_steps' in step and step['n_steps'] > n_step:
                n_step = step['n_steps']
        return n_step

    def first_sight_optimal(self):
        n_step = np.inf
        for step in self._breadcrumbs:
            if 'n_steps' in step:
                if step['cost'] == self._best_step['cost'] and step['n_steps'] < n_step:
                    n_step = step['n_steps']
        return n_step

    def __getitem__(self, index):
        return self._breadcrumbs[index]

    def __str__(self):
        if not self.found:
            return "Solution: no Hamiltonian tour"
        return f"Solution: {self.tour.order()} \nSolution Value: {self.cost} \nApproximation Ratio: {self.approx_ratio}"

    def __len__(self):
        return len(self._breadcrumbs)

    def get_history(self, *keys):
        history = {}
        for key in keys:
            history[key] = [step.get(key) for step in self._breadcrumbs]

        return pd.DataFrame(history)
