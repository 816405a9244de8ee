# WENO reconstruction from cell averages
# see https://www3.nd.edu/~zxu2/acms60790S13/Shu-WENO-notes.pdf
#
# indexing:
#   - q: cell
#   - c: cell, shift, point, stencil offset (i, r, l, j)
#   - qr: cell, shift, point (i, r, l)
#   - wr: cell, shift (i, r)
#   - qs: cell, point (i, l)
import torch

from nweno.utils.tensor import as_buffer, check_buffer, check_devices, first_failure, strided_dot


def biased_shifts(s, k):
    """Range of shifts computed by stage 1 for the biasing parameter `s`."""
    return range(max(0, s), min(k - 1 + s, k - 1) + 1)


def check_reconstruct_args(q, c, wr, qr, qs):
    """Validate the buffers of `reconstruct` without computing anything."""
    return first_failure(
        check_buffer(q, "q", 1),
        check_buffer(c, "c", 4, dense=True),
        check_buffer(wr, "wr", 2, dense=True),
        check_buffer(qr, "qr", 3, dense=True, writable=True),
        check_buffer(qs, "qs", 2, writable=True),
        check_devices(q=q, c=c, wr=wr, qr=qr, qs=qs),
    )


def _check_cells(imin, imax, **buffers):
    if imin > imax:
        return
    for name, x in buffers.items():
        if imin < 0 or imax >= x.shape[0]:
            raise IndexError(f"cell range [{imin}, {imax}] is outside of {name} (cells [0, {x.shape[0] - 1}])")


def _check_stencil_bounds(q, s, imin, imax, c, qr):
    _, k, n, width = c.shape
    if width != k:
        raise ValueError(f"c has {k} shifts but stencils of width {width}")
    if tuple(qr.shape[1:]) != (k, n):
        raise ValueError(f"qr has shape {tuple(qr.shape)}, expected (N, {k}, {n}) to match c")
    _check_cells(imin, imax, c=c, qr=qr)
    shifts = biased_shifts(s, k)
    if imin <= imax and len(shifts) > 0:
        first, last = imin - shifts[-1], imax - shifts[0] + k - 1
        if first < 0 or last >= q.shape[0]:
            raise IndexError(f"stencils of cells [{imin}, {imax}] read q[{first}:{last + 1}] but q has {q.shape[0]} cells")


def _check_blend_bounds(wr, qr, imin, imax, qs):
    _, k, n = qr.shape
    if wr.shape[1] != k:
        raise ValueError(f"wr has {wr.shape[1]} shifts but qr has {k}")
    if qs.shape[1] != n:
        raise ValueError(f"qs has {qs.shape[1]} points but qr has {n}")
    _check_cells(imin, imax, wr=wr, qr=qr, qs=qs)


def _stencil_reconstruct(q, s, imin, imax, c, qr):
    k = c.shape[1]
    # windows_JK[j] = q[j : j + k], a view whatever the stride of q
    windows_JK = q.unfold(0, k, 1)
    for r in biased_shifts(s, k):
        stencils_CK = windows_JK[imin - r : imax - r + 1]
        qr[imin : imax + 1, r] = strided_dot(c[imin : imax + 1, r], stencils_CK[:, None, :], k, 1)


def _blend(wr, qr, imin, imax, qs):
    k, n = qr.shape[1], qr.shape[2]
    wr_CR = wr[imin : imax + 1]
    # shift axis of the flattened (shift, point) layout has stride n
    qr_CF = qr[imin : imax + 1].reshape(imax - imin + 1, k * n)
    for l in range(n):
        qs[imin : imax + 1, l] = strided_dot(wr_CR, qr_CF[:, l:], k, n)


@torch.no_grad()
def stencil_reconstruct(q, s, imin, imax, c, qr, check_bounds=True):
    """
    Compute the k-order reconstructions qr given cell averages q and reconstruction coefficients c.

    For each cell i in [imin, imax], each shift r in `biased_shifts(s, k)` and each point l:
        qr[i, r, l] = sum_j c[i, r, l, j] * q[i - r + j]

    Shifts excluded by the biasing parameter s are not written.
    """
    first_failure(
        check_buffer(q, "q", 1),
        check_buffer(c, "c", 4, dense=True),
        check_buffer(qr, "qr", 3, dense=True, writable=True),
        check_devices(q=q, c=c, qr=qr),
    ).raise_for_status()
    if check_bounds:
        _check_stencil_bounds(q, s, imin, imax, c, qr)
    if imin > imax:
        return
    _stencil_reconstruct(as_buffer(q), s, imin, imax, as_buffer(c), as_buffer(qr))


@torch.no_grad()
def blend(wr, qr, imin, imax, qs, check_bounds=True):
    """
    Build the 2k-1 order reconstructions qs given k-order reconstructions qr and weights wr.

    For each cell i in [imin, imax] and each point l:
        qs[i, l] = sum_r wr[i, r] * qr[i, r, l]

    All shifts r = 0, ..., k-1 are blended regardless of any biasing: biased weights are expected to be zero.
    """
    first_failure(
        check_buffer(wr, "wr", 2, dense=True),
        check_buffer(qr, "qr", 3, dense=True),
        check_buffer(qs, "qs", 2, writable=True),
        check_devices(wr=wr, qr=qr, qs=qs),
    ).raise_for_status()
    if check_bounds:
        _check_blend_bounds(wr, qr, imin, imax, qs)
    if imin > imax:
        return
    _blend(as_buffer(wr), as_buffer(qr), imin, imax, as_buffer(qs))


@torch.no_grad()
def reconstruct(q, s, imin, imax, c, wr, qr, qs, check_bounds=True):
    """
    Reconstruct a function at the points of each cell in [imin, imax] given its cell averages q.

    Params
        q: (X,) cell averages, any stride
        s: biasing parameter, restricts the shifts computed in `qr` to `biased_shifts(s, k)`
        imin, imax: closed range of cells to reconstruct
        c: (N, k, n, k) reconstruction coefficients
        wr: (N, k) nonlinear weights, see `nweno.weights.compute_weights`
        qr: (N, k, n) buffer for the k-order reconstructions, written in place
        qs: (N, n) buffer for the 2k-1 order reconstructions, written in place, any stride
        check_bounds: if False, imin, imax and s are trusted to be compatible with the shapes of the buffers

    c, wr and qr must be C-contiguous float64 arrays (numpy or torch). Every buffer is validated
    before anything is computed; an `ArrayLayoutError` names the first offending one.
    """
    check_reconstruct_args(q, c, wr, qr, qs).raise_for_status()
    if check_bounds:
        _check_stencil_bounds(q, s, imin, imax, c, qr)
        _check_blend_bounds(wr, qr, imin, imax, qs)
    if imin > imax:
        return

    q, c, wr, qr, qs = as_buffer(q), as_buffer(c), as_buffer(wr), as_buffer(qr), as_buffer(qs)
    _stencil_reconstruct(q, s, imin, imax, c, qr)
    _blend(wr, qr, imin, imax, qs)
