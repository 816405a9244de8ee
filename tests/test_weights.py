import numpy as np
import pytest
import torch

from nweno.errors import ArrayLayoutError
from nweno.weights import EPSILON, check_weights_args, compute_weights, shift_bounds


def random_weights_inputs(rng, N=10, k=3):
    sigma = rng.uniform(0.0, 2.0, size=(N, k))
    w = rng.uniform(0.1, 1.0, size=(N, k))
    return sigma, w


@pytest.mark.mathematical
def test_weights_are_normalized_and_non_negative(rng):
    N, k = 10, 3
    sigma, w = random_weights_inputs(rng, N, k)
    wr = np.zeros((N, k))
    compute_weights(0, N - 1, sigma, w, wr)
    for i in range(N):
        rmin, rmax = shift_bounds(i, N, k)
        np.testing.assert_allclose(wr[i, rmin : rmax + 1].sum(), 1.0, rtol=1e-12)
    assert np.all(wr >= 0.0)


def test_weights_formula(rng):
    N, k = 8, 3
    sigma, w = random_weights_inputs(rng, N, k)
    wr = np.zeros((N, k))
    compute_weights(3, 4, sigma, w, wr)
    alpha = w[3:5] / (EPSILON + sigma[3:5]) ** 2
    np.testing.assert_allclose(wr[3:5], alpha / alpha.sum(axis=1, keepdims=True), rtol=1e-14)
    # cells outside of [imin, imax] are untouched
    assert np.all(wr[:3] == 0.0) and np.all(wr[5:] == 0.0)


def test_shift_bounds():
    # k=3, N=10
    assert shift_bounds(0, 10, 3) == (0, 0)
    assert shift_bounds(1, 10, 3) == (0, 1)
    assert shift_bounds(5, 10, 3) == (0, 2)
    assert shift_bounds(8, 10, 3) == (0, 2)
    assert shift_bounds(9, 10, 3) == (1, 2)


@pytest.mark.mathematical
def test_boundary_clipping_leaves_invalid_shifts_untouched(rng):
    N, k = 10, 3
    sigma, w = random_weights_inputs(rng, N, k)
    wr = np.full((N, k), -7.0)
    compute_weights(0, N - 1, sigma, w, wr)

    # first cell: only the stencil starting at the cell itself
    assert wr[0, 0] == 1.0
    assert np.all(wr[0, 1:] == -7.0)
    assert wr[1, 2] == -7.0
    assert np.all(wr[1, :2] >= 0.0)
    # last cell: rmin = 1
    assert wr[N - 1, 0] == -7.0
    np.testing.assert_allclose(wr[N - 1, 1:].sum(), 1.0, rtol=1e-12)
    # interior cells use every shift
    assert np.all(wr[2 : N - 1] >= 0.0)


@pytest.mark.mathematical
def test_weight_concentrates_on_smoothest_stencil():
    N, k = 5, 3
    w = np.tile([0.3, 0.6, 0.1], (N, 1))
    sigma = np.ones((N, k))
    sigma[:, 2] = 0.0
    wr = np.zeros((N, k))
    compute_weights(2, 2, sigma, w, wr)
    assert wr[2, 2] > 1.0 - 1e-8
    assert wr[2, 0] < 1e-8 and wr[2, 1] < 1e-8


@pytest.mark.mathematical
def test_equal_smoothness_recovers_linear_weights(rng):
    N, k = 12, 4
    w = rng.uniform(0.1, 1.0, size=(N, k))
    sigma = np.full((N, k), 0.25)
    wr = np.zeros((N, k))
    compute_weights(k - 1, N - k, sigma, w, wr)
    expected = w / w.sum(axis=1, keepdims=True)
    np.testing.assert_allclose(wr[k - 1 : N - k + 1], expected[k - 1 : N - k + 1], rtol=1e-14)


def test_weights_are_idempotent(rng):
    N, k = 10, 3
    sigma, w = random_weights_inputs(rng, N, k)
    wr1 = np.zeros((N, k))
    wr2 = np.zeros((N, k))
    compute_weights(0, N - 1, sigma, w, wr1)
    compute_weights(0, N - 1, sigma, w, wr2)
    compute_weights(0, N - 1, sigma, w, wr2)
    np.testing.assert_array_equal(wr1, wr2)


def test_weights_with_torch_tensors(rng):
    N, k = 10, 3
    sigma, w = random_weights_inputs(rng, N, k)
    wr_np = np.zeros((N, k))
    wr_t = torch.zeros((N, k), dtype=torch.float64)
    compute_weights(0, N - 1, sigma, w, wr_np)
    compute_weights(0, N - 1, torch.from_numpy(sigma), torch.from_numpy(w), wr_t)
    np.testing.assert_allclose(wr_t.numpy(), wr_np, rtol=1e-15)


def test_weights_eps():
    w = np.tile([0.3, 0.6, 0.1], (5, 1))
    sigma = np.tile([0.0, 1.0, 1.0], (5, 1))
    wr_small = np.zeros((5, 3))
    wr_large = np.zeros((5, 3))
    compute_weights(2, 2, sigma, w, wr_small)
    compute_weights(2, 2, sigma, w, wr_large, eps=1e6)
    assert wr_small[2, 0] > wr_large[2, 0]
    np.testing.assert_allclose(wr_large[2], [0.3, 0.6, 0.1], rtol=1e-5)


def test_empty_range_is_a_no_op():
    wr = np.full((4, 3), -1.0)
    compute_weights(3, 2, np.zeros((4, 3)), np.ones((4, 3)), wr)
    assert np.all(wr == -1.0)


@pytest.mark.parametrize("argument", ["sigma", "w", "wr"])
def test_non_contiguous_buffer_is_rejected(rng, argument):
    N, k = 10, 3
    sigma, w = random_weights_inputs(rng, N, k)
    buffers = {"sigma": sigma, "w": w, "wr": np.zeros((N, k))}
    buffers[argument] = np.asfortranarray(buffers[argument])
    wr = buffers["wr"]

    result = check_weights_args(**buffers)
    assert not result.ok
    assert result.argument == argument
    with pytest.raises(ArrayLayoutError, match=f"^{argument} is not contiguous") as excinfo:
        compute_weights(0, N - 1, **buffers)
    assert excinfo.value.argument == argument
    assert np.all(wr == 0.0)


def test_wrong_dtype_is_rejected(rng):
    sigma, w = random_weights_inputs(rng)
    wr = np.zeros((10, 3))
    with pytest.raises(ArrayLayoutError) as excinfo:
        compute_weights(0, 9, sigma, w.astype(np.float32), wr)
    assert excinfo.value.argument == "w"
    assert np.all(wr == 0.0)


def test_read_only_output_is_rejected(rng):
    sigma, w = random_weights_inputs(rng)
    wr = np.zeros((10, 3))
    wr.setflags(write=False)
    with pytest.raises(ArrayLayoutError) as excinfo:
        compute_weights(0, 9, sigma, w, wr)
    assert excinfo.value.argument == "wr"


def test_check_weights_args_ok(rng):
    sigma, w = random_weights_inputs(rng)
    assert check_weights_args(sigma, w, np.zeros((10, 3))).ok


def test_out_of_range_cells_are_rejected(rng):
    sigma, w = random_weights_inputs(rng)
    wr = np.zeros((10, 3))
    with pytest.raises(IndexError):
        compute_weights(0, 10, sigma, w, wr)
    with pytest.raises(IndexError):
        compute_weights(-1, 5, sigma, w, wr)
    assert np.all(wr == 0.0)


def test_mismatched_shapes_are_rejected(rng):
    sigma, w = random_weights_inputs(rng)
    with pytest.raises(ValueError):
        compute_weights(0, 9, sigma[:, :2].copy(), w, np.zeros((10, 3)))
    with pytest.raises(ValueError):
        compute_weights(0, 5, sigma, w, np.zeros((6, 3)))
