import numpy as np

from nweno.initial_conditions import InitialCondition
from nweno.initial_conditions.initial_condition import cell_edges


class PiecewiseConstant(InitialCondition):
    def __init__(self, ks, xs=None):
        """Piecewise constant function on [0, 1].

        Args:
            ks (list of float): Step values of the function.
            xs (list of float): Increasing step boundaries, from 0 to 1 (len(ks) + 1 values). Uniform if None.
        """
        self.ks = np.array(ks, dtype=np.float64)
        self.xs = np.linspace(0, 1, len(self.ks) + 1) if xs is None else np.array(xs, dtype=np.float64)
        if len(self.xs) != len(self.ks) + 1 or np.any(np.diff(self.xs) <= 0):
            raise ValueError(f"Expected {len(self.ks) + 1} increasing step boundaries (got {self.xs})")

    def discretize(self, nx):
        """See parent class."""
        x_cells = cell_edges(nx)

        # overlap[i, j] is the length of step j that lies within cell i
        lower = np.maximum(x_cells[:-1][:, None], self.xs[:-1])
        upper = np.minimum(x_cells[1:][:, None], self.xs[1:])
        overlap = np.clip(upper - lower, 0, None)

        # each row of `overlap` sums to 1/nx
        return (self.ks * overlap).sum(axis=1) * nx

    def evaluate(self, x):
        """See parent class."""
        idx = np.searchsorted(self.xs, np.asarray(x), side="right") - 1
        return self.ks[np.clip(idx, 0, len(self.ks) - 1)]
