from abc import ABC, abstractmethod

import numpy as np


def cell_edges(nx):
    """Edges of `nx` uniform cells spanning [0, 1]."""
    return np.linspace(0, 1, nx + 1)


def point_coordinates(nx, points):
    """(nx, n) positions in [0, 1] of reconstruction points given in [-1, 1] relative to each cell."""
    xs = cell_edges(nx)
    centers = 0.5 * (xs[:-1] + xs[1:])
    return centers[:, None] + 0.5 * np.asarray(points, dtype=np.float64)[None, :] / nx


class InitialCondition(ABC):
    @abstractmethod
    def discretize(self, nx):
        """Integral average of the function over each of `nx` uniform cells spanning [0, 1].

        Args:
            nx (int): Number of discrete cells (in space).

        Returns:
            np.ndarray: Array of length `nx` containing the cell averages.
        """
        pass

    @abstractmethod
    def evaluate(self, x):
        """Point values of the function at positions `x` in [0, 1]."""
        pass

    def __call__(self, x):
        return self.evaluate(x)
