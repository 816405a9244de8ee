"""
Geometry of WENO reconstructions on a uniform grid.

Everything is expressed in units of the cell width: cell i is centered at 0 and the cells of
the stencil of shift r are centered at offsets -r, ..., k-1-r. Reconstruction points are given in
[-1, 1], -1 being the left edge of a cell and 1 its right edge (so the physical position is
x_i + points * dx / 2).

The reconstruction coefficients and the optimal weights do not depend on the cell on a uniform
grid. They are still broadcast to one entry per cell, which is the layout `nweno.reconstruct`
and `nweno.weights` expect.
"""

import math

import numpy as np
import torch

from nweno.utils.tensor import as_buffer, check_buffer, check_devices, first_failure


def _check_k(k):
    if k < 1:
        raise ValueError(f"Stencil width k must be at least 1 (got {k})")


def _check_points(points):
    points = np.atleast_1d(np.asarray(points, dtype=np.float64))
    if points.ndim != 1 or np.any(np.abs(points) > 1.0):
        raise ValueError(f"Reconstruction points must be a 1D sequence of values in [-1, 1] (got {points})")
    return points


def cell_moments(offsets, degree):
    """A[m, d] = average of x**d over the unit cell centered at offsets[m]."""
    offsets = np.asarray(offsets, dtype=np.float64)[:, None]
    d = np.arange(degree + 1)
    return ((offsets + 0.5) ** (d + 1) - (offsets - 0.5) ** (d + 1)) / (d + 1)


def point_coefficients(offsets, x):
    """Coefficients c such that p(x) = sum_j c[j] * q[j], p being the polynomial with cell averages q on `offsets`."""
    A = cell_moments(offsets, len(offsets) - 1)
    v = x ** np.arange(len(offsets), dtype=np.float64)
    return np.linalg.solve(A.T, v)


def stencil_coefficients(k, points):
    """(k, n, k) coefficients of the k-order reconstructions, indexed by shift, point, stencil offset."""
    _check_k(k)
    xs = 0.5 * _check_points(points)
    return np.array([[point_coefficients(np.arange(-r, k - r), x) for x in xs] for r in range(k)])


def reconstruction_coefficients(nx, k, points):
    """(nx, k, n, k) reconstruction coefficients c for a uniform grid of nx cells."""
    c_RLJ = stencil_coefficients(k, points)
    return np.ascontiguousarray(np.broadcast_to(c_RLJ, (nx,) + c_RLJ.shape))


def linear_weights(k, point, tol=1e-10):
    """Weights d[r] such that sum_r d[r] * p_r(x) is the (2k-1)-order reconstruction at `point`.

    Raises a ValueError if no such weights exist at that point (e.g. the cell center for k = 2),
    or if some of them are negative (e.g. the cell center for k = 3).
    """
    _check_k(k)
    points = _check_points(point)
    if points.size != 1:
        raise ValueError(f"Linear weights are computed for a single point (got {points})")
    x = 0.5 * points[0]
    target = point_coefficients(np.arange(-(k - 1), k), x)

    # column r holds the coefficients of shift r embedded in the 2k-1 cell stencil
    M = np.zeros((2 * k - 1, k))
    for r in range(k):
        M[k - 1 - r : 2 * k - 1 - r, r] = point_coefficients(np.arange(-r, k - r), x)
    d, *_ = np.linalg.lstsq(M, target, rcond=None)
    if np.max(np.abs(M @ d - target)) > tol:
        raise ValueError(f"No linear weights reach order {2 * k - 1} at point {point} with k={k}")
    if np.any(d < -tol):
        raise ValueError(f"Linear weights at point {point} with k={k} are not all non-negative (got {d})")
    return np.clip(d, 0.0, None)


def optimal_weights(nx, k, point):
    """(nx, k) optimal weights w for a uniform grid of nx cells, at a single reconstruction point."""
    d_R = linear_weights(k, point)
    return np.ascontiguousarray(np.broadcast_to(d_R, (nx, k)))


def derivative_gram(k):
    """B[a, b] = sum_{m=1}^{k-1} integral over [-1/2, 1/2] of (d^m x^a / dx^m) (d^m x^b / dx^m)."""
    B = np.zeros((k, k))
    for m in range(1, k):
        for a in range(m, k):
            for b in range(m, k):
                p = a + b - 2 * m
                integral = (0.5 ** (p + 1) - (-0.5) ** (p + 1)) / (p + 1)
                B[a, b] += math.perm(a, m) * math.perm(b, m) * integral
    return B


def smoothness_coefficients(k):
    """(k, k, k) quadratic forms S such that sigma_r = q_r^T S[r] q_r (Jiang & Shu indicators).

    q_r = (q[i-r], ..., q[i-r+k-1]) is the stencil of shift r.
    """
    _check_k(k)
    B = derivative_gram(k)
    S = []
    for r in range(k):
        A_inv = np.linalg.inv(cell_moments(np.arange(-r, k - r), k - 1))
        S.append(A_inv.T @ B @ A_inv)
    return np.array(S)


@torch.no_grad()
def smoothness(q, imin, imax, S, sigma):
    """
    Compute the smoothness indicators sigma[i, r] of the stencils of cells in [imin, imax].

    Params
        q: (X,) cell averages, any stride
        S: (k, k, k) quadratic forms, see `smoothness_coefficients`
        sigma: (N, k) output buffer, written in place

    Every stencil of every cell in the range must lie within q.
    """
    first_failure(
        check_buffer(q, "q", 1),
        check_buffer(sigma, "sigma", 2, writable=True),
        check_devices(q=q, sigma=sigma),
    ).raise_for_status()
    k = sigma.shape[1]
    if imin > imax:
        return
    if imin - (k - 1) < 0 or imax + k - 1 >= q.shape[0] or imax >= sigma.shape[0]:
        raise IndexError(f"stencils of cells [{imin}, {imax}] do not fit in q ({q.shape[0]} cells)")

    q, sigma = as_buffer(q), as_buffer(sigma)
    S = torch.as_tensor(S, dtype=torch.float64, device=q.device)
    windows_JK = q.unfold(0, k, 1)
    for r in range(k):
        stencils_CK = windows_JK[imin - r : imax - r + 1]
        sigma[imin : imax + 1, r] = torch.einsum("cj,jk,ck->c", stencils_CK, S[r], stencils_CK)
