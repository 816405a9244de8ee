import numpy as np
from numpy.polynomial import Polynomial as NumpyPolynomial

from nweno.initial_conditions import InitialCondition
from nweno.initial_conditions.initial_condition import cell_edges


class Smooth(InitialCondition):
    def __init__(self, fn, primitive):
        """Function known through its point values and one of its primitives, giving exact cell averages."""
        self.fn = fn
        self.primitive = primitive

    def discretize(self, nx):
        """See parent class."""
        F = self.primitive(cell_edges(nx))
        return (F[1:] - F[:-1]) * nx

    def evaluate(self, x):
        """See parent class."""
        return self.fn(np.asarray(x, dtype=np.float64))


class Polynomial(Smooth):
    def __init__(self, coefficients):
        """Polynomial sum_d coefficients[d] * x**d."""
        p = NumpyPolynomial(coefficients)
        super().__init__(p, p.integ())
        self.degree = p.degree()


class Sine(Smooth):
    def __init__(self, frequency=1, amplitude=1.0, offset=0.0):
        """offset + amplitude * sin(2 pi frequency x)"""
        omega = 2 * np.pi * frequency
        super().__init__(
            lambda x: offset + amplitude * np.sin(omega * x),
            lambda x: offset * x - amplitude * np.cos(omega * x) / omega,
        )
