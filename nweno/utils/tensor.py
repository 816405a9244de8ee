import numpy as np
import torch

from nweno.errors import ValidationResult


def get_dtype(x):
    if isinstance(x, torch.Tensor):
        return x.dtype
    elif isinstance(x, np.ndarray):
        if x.dtype == np.float64:
            return torch.float64
        elif x.dtype == np.float32:
            return torch.float32
        else:
            raise ValueError(f"Unsupported dtype {x.dtype}")
    else:
        raise ValueError(f"Unsupported type {type(x)}")


def check_buffer(x, name, ndim, dense=False, writable=False):
    """Check that `x` can be used as a float64 buffer of rank `ndim`.

    Args:
        dense: require a C-contiguous, aligned layout (no gaps between logically adjacent elements)
        writable: require that the buffer can be written in place, with no two elements sharing memory
    """
    if not isinstance(x, (np.ndarray, torch.Tensor)):
        return ValidationResult.failure(name, f"is not a numpy array or torch tensor (got {type(x).__name__})")
    if x.ndim != ndim:
        return ValidationResult.failure(name, f"must have {ndim} dimensions (got {x.ndim})")
    try:
        dtype = get_dtype(x)
    except ValueError:
        dtype = None
    if dtype != torch.float64:
        return ValidationResult.failure(name, f"must be float64 (got {x.dtype})")

    if isinstance(x, np.ndarray):
        if any(stride < 0 for stride in x.strides):
            return ValidationResult.failure(name, "has negative strides")
        if dense and not (x.flags.c_contiguous and x.flags.aligned):
            return ValidationResult.failure(name, "is not contiguous and/or aligned")
        if writable and not x.flags.writeable:
            return ValidationResult.failure(name, "is read-only")
    elif dense and not (x.is_contiguous() and x.data_ptr() % x.element_size() == 0):
        return ValidationResult.failure(name, "is not contiguous and/or aligned")

    # broadcast views (stride 0) would make every write land on the same element
    strides = x.strides if isinstance(x, np.ndarray) else x.stride()
    if writable and any(size > 1 and stride == 0 for size, stride in zip(x.shape, strides)):
        return ValidationResult.failure(name, "has overlapping elements")
    return ValidationResult.success()


def check_devices(**buffers):
    """All torch tensors among `buffers` must live on the same device (numpy arrays live on cpu)."""
    reference = None
    for name, x in buffers.items():
        device = x.device if isinstance(x, torch.Tensor) else torch.device("cpu")
        if reference is None:
            reference = device
        elif device != reference:
            return ValidationResult.failure(name, f"is on device {device}, expected {reference}")
    return ValidationResult.success()


def first_failure(*results):
    for result in results:
        if not result:
            return result
    return ValidationResult.success()


def as_buffer(x):
    """View `x` as a torch tensor sharing its memory.

    Read-only numpy arrays are copied since torch cannot wrap them; they are only ever read.
    """
    if isinstance(x, torch.Tensor):
        return x
    if not x.flags.writeable:
        return torch.tensor(x)
    return torch.from_numpy(x)


def strided_dot(u, v, n, stride):
    """Compute sum_j u[..., j] * v[..., j * stride] for j in [0, n).

    `u` is read densely along its last axis, `v` with step `stride`. Leading axes broadcast,
    so a whole range of cells (and points) is handled in one call.
    """
    if stride < 1:
        raise ValueError(f"stride must be positive (got {stride})")
    taps = v[..., : (n - 1) * stride + 1 : stride]
    return (u[..., :n] * taps).sum(dim=-1)


def ensure_tensor(func):
    def wrapper(self, x):
        x = torch.as_tensor(x, dtype=torch.float64)
        return func(self, x)

    return wrapper
