from .errors import ArrayLayoutError, ValidationResult
from .reconstruct import blend, check_reconstruct_args, reconstruct, stencil_reconstruct
from .utils.tensor import strided_dot
from .weights import EPSILON, check_weights_args, compute_weights
from .weno import WENO

__all__ = [
    "ArrayLayoutError",
    "ValidationResult",
    "EPSILON",
    "WENO",
    "blend",
    "check_reconstruct_args",
    "check_weights_args",
    "compute_weights",
    "reconstruct",
    "stencil_reconstruct",
    "strided_dot",
]
