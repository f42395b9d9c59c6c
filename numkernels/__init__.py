from .constants import DEFAULT_MAX_ITER, TIMESTAMP_FORMAT
from .integrators import (
    Rk4Result,
    Rk4Workspace,
    propagate_rk4,
    rk4,
    rk4vec,
)
from .matmul import mat_mult, matmul
from .newton import ConvergenceError, NewtonConfig, NewtonResult, newton, newton_solve
from .timestamp import timestamp, timestamp_string

__all__ = [
    "DEFAULT_MAX_ITER",
    "TIMESTAMP_FORMAT",
    "mat_mult",
    "matmul",
    "newton",
    "newton_solve",
    "NewtonConfig",
    "NewtonResult",
    "ConvergenceError",
    "rk4",
    "rk4vec",
    "Rk4Workspace",
    "propagate_rk4",
    "Rk4Result",
    "timestamp",
    "timestamp_string",
]
