# Nonlinear weights of the weighted essentially non-oscillatory (WENO) scheme
# see https://www3.nd.edu/~zxu2/acms60790S13/Shu-WENO-notes.pdf
import torch

from nweno.utils.tensor import as_buffer, check_buffer, check_devices, first_failure

# regularizes alpha when a stencil is perfectly smooth (sigma = 0)
EPSILON = 1e-5


def shift_bounds(i, N, k):
    """Return the closed range [rmin, rmax] of shifts that are weighted for cell `i` of a grid of `N` cells."""
    return max(0, i - (N - k) - 1), min(k - 1, i)


def check_weights_args(sigma, w, wr):
    """Validate the buffers of `compute_weights` without computing anything."""
    return first_failure(
        check_buffer(sigma, "sigma", 2, dense=True),
        check_buffer(w, "w", 2, dense=True),
        check_buffer(wr, "wr", 2, dense=True, writable=True),
        check_devices(sigma=sigma, w=w, wr=wr),
    )


def _check_bounds(imin, imax, sigma, w, wr):
    N, k = w.shape
    for name, x in [("sigma", sigma), ("wr", wr)]:
        if tuple(x.shape) != (N, k):
            raise ValueError(f"{name} has shape {tuple(x.shape)} but w has shape {(N, k)}")
    if imin <= imax and (imin < 0 or imax >= N):
        raise IndexError(f"cell range [{imin}, {imax}] is outside of [0, {N - 1}]")


@torch.no_grad()
def compute_weights(imin, imax, sigma, w, wr, eps=EPSILON, check_bounds=True):
    """
    Compute the nonlinear weights wr from optimal weights w and smoothness indicators sigma.

    For each cell i in [imin, imax] and each shift r in `shift_bounds(i, N, k)`:
        alpha_r = w[i, r] / (eps + sigma[i, r]) ** 2
        wr[i, r] = alpha_r / sum(alpha)

    Params
        imin, imax: closed range of cells to process
        sigma: (N, k) smoothness indicators
        w: (N, k) optimal (linear) weights
        wr: (N, k) output buffer, written in place. Shifts outside of the valid range of a cell are left
            untouched, so the caller should zero-initialize it if those entries are read later on.
        check_bounds: if False, [imin, imax] is trusted to be compatible with the shapes of the buffers

    All three buffers must be C-contiguous float64 arrays (numpy or torch), otherwise an
    `ArrayLayoutError` naming the offending buffer is raised and nothing is written.
    """
    check_weights_args(sigma, w, wr).raise_for_status()
    if check_bounds:
        _check_bounds(imin, imax, sigma, w, wr)
    if imin > imax:
        return

    sigma, w, wr = as_buffer(sigma), as_buffer(w), as_buffer(wr)
    N, k = w.shape

    # boundary clipping: mask of the shifts that are weighted, for each cell
    cells = torch.arange(imin, imax + 1, device=w.device)
    shifts = torch.arange(k, device=w.device)
    rmin = torch.clamp(cells - (N - k) - 1, min=0)
    rmax = torch.clamp(cells, max=k - 1)
    valid_CR = (shifts >= rmin[:, None]) & (shifts <= rmax[:, None])

    alpha_CR = w[imin : imax + 1] / (eps + sigma[imin : imax + 1]) ** 2
    alpha_CR = torch.where(valid_CR, alpha_CR, torch.zeros_like(alpha_CR))
    sum_alpha_C = alpha_CR.sum(dim=1, keepdim=True)

    wr[imin : imax + 1][valid_CR] = (alpha_CR / sum_alpha_C)[valid_CR]
