from nweno.initial_conditions import PiecewiseConstant


class Riemann(PiecewiseConstant):
    def __init__(self, k1, k2, x0=0.5):
        """Single jump from k1 to k2 at x0."""
        super().__init__([k1, k2], xs=[0.0, x0, 1.0])
