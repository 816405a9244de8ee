from .initial_condition import InitialCondition, cell_edges, point_coordinates
from .piecewise_constant import PiecewiseConstant
from .riemann import Riemann
from .smooth import Polynomial, Sine, Smooth

__all__ = ["InitialCondition", "PiecewiseConstant", "Riemann", "Smooth", "Polynomial", "Sine", "cell_edges", "point_coordinates"]
