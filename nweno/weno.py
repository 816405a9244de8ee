import torch

from nweno.coefficients import linear_weights, reconstruction_coefficients, smoothness, smoothness_coefficients
from nweno.reconstruct import reconstruct
from nweno.utils.tensor import ensure_tensor
from nweno.weights import EPSILON, compute_weights


class WENO:
    def __init__(self, k=3, points=(-1.0, 1.0), eps=EPSILON, verbose=False):
        """
        Weighted essentially non-oscillatory reconstruction of order 2k-1 on a uniform grid.

        k: stencil width of the candidate reconstructions
        points: reconstruction points in each cell, in [-1, 1] (-1 and 1 being the left and right cell edges)
        eps: regularization of the nonlinear weights
        verbose: print precomputation notices and warnings
        """
        self.k = k
        self.points = tuple(float(p) for p in points)
        self.eps = eps
        self.verbose = verbose

        # fails early if the scheme can't reach order 2k-1 at one of the points
        self.linear_weights = [linear_weights(k, p) for p in self.points]
        self.S = smoothness_coefficients(k)
        self.buffers = {}

    def __str__(self):
        return f"WENO(k={self.k}, order={self.order})"

    @property
    def order(self):
        return 2 * self.k - 1

    def cell_range(self, nx):
        """Cells whose stencils all lie within a grid of nx cells."""
        return self.k - 1, nx - self.k

    def get_buffers(self, nx, device):
        """Coefficients and scratch buffers for a grid of nx cells, computed once per grid size and device."""
        key = (nx, str(device))
        if key not in self.buffers:
            if self.verbose:
                print(f"Precomputing {self} coefficients for {nx} cells and {len(self.points)} points on {device}")
            k = self.k
            self.buffers[key] = {
                # one set of coefficients per point, each with its own optimal weights
                "c": [
                    torch.as_tensor(reconstruction_coefficients(nx, k, [p]), device=device).contiguous() for p in self.points
                ],
                "w": [torch.as_tensor(d, device=device).expand(nx, k).contiguous() for d in self.linear_weights],
                "sigma": torch.zeros((nx, k), dtype=torch.float64, device=device),
                "wr": torch.zeros((nx, k), dtype=torch.float64, device=device),
                "qr": torch.zeros((nx, k, 1), dtype=torch.float64, device=device),
            }
        return self.buffers[key]

    @ensure_tensor
    def __call__(self, q):
        """
        Params
            q: (nx,) cell averages
        Returns
            (nx, n) reconstructed values at each of the n points of each cell. Cells closer than k-1 cells
            to a boundary don't have a full set of stencils and are reconstructed as piecewise constant.
        """
        if q.ndim != 1:
            raise ValueError(f"Expected a 1D array of cell averages (got shape {tuple(q.shape)})")
        nx = q.shape[0]
        if nx < 2 * self.k - 1:
            raise ValueError(f"{self} needs at least {2 * self.k - 1} cells (got {nx})")

        imin, imax = self.cell_range(nx)
        buffers = self.get_buffers(nx, q.device)
        qs = q[:, None].repeat(1, len(self.points))

        smoothness(q, imin, imax, self.S, buffers["sigma"])
        for l in range(len(self.points)):
            wr = buffers["wr"]
            wr.zero_()
            compute_weights(imin, imax, buffers["sigma"], buffers["w"][l], wr, eps=self.eps)
            if self.verbose and (x := (wr[imin : imax + 1].sum(dim=1) - 1.0).abs().max()) > 1e-12:
                print(f"WARNING: nonlinear weights at point {self.points[l]} are not normalized (max error = {x})")
            reconstruct(q, 0, imin, imax, buffers["c"][l], wr, buffers["qr"], qs[:, l : l + 1])
        return qs
