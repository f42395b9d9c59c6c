import logging
from dataclasses import dataclass
from typing import Callable, MutableSequence, Optional, Sequence

import numpy as np


logger = logging.getLogger(__name__)

ScalarDerivFn = Callable[[float, float], float]
# f(t, m, u, uout) writes du/dt into uout
VectorDerivFn = Callable[[float, int, np.ndarray, np.ndarray], object]


# -------------------------
# rk4 (scalar, one step)
# -------------------------
def rk4(t0: float, u0: float, dt: float, f: ScalarDerivFn) -> float:
    """
    One classical Runge-Kutta step for the scalar problem du/dt = f(t, u), u(t0) = u0.

    Returns the fourth-order estimate of u(t0 + dt).
    """
    f0 = f(t0, u0)

    t1 = t0 + dt / 2.0
    u1 = u0 + dt * f0 / 2.0
    f1 = f(t1, u1)

    t2 = t0 + dt / 2.0
    u2 = u0 + dt * f1 / 2.0
    f2 = f(t2, u2)

    t3 = t0 + dt
    u3 = u0 + dt * f2
    f3 = f(t3, u3)

    return u0 + dt * (f0 + 2.0 * f1 + 2.0 * f2 + f3) / 6.0


@dataclass
class Rk4Workspace:
    """
    Scratch arena for rk4vec: four derivative samples and three stage states.
    """
    f0: np.ndarray
    f1: np.ndarray
    f2: np.ndarray
    f3: np.ndarray
    u1: np.ndarray
    u2: np.ndarray
    u3: np.ndarray

    @classmethod
    def allocate(cls, m: int) -> "Rk4Workspace":
        if m < 0:
            raise ValueError("m must be non-negative.")
        return cls(
            f0=np.empty(m),
            f1=np.empty(m),
            f2=np.empty(m),
            f3=np.empty(m),
            u1=np.empty(m),
            u2=np.empty(m),
            u3=np.empty(m),
        )

    @property
    def m(self) -> int:
        return int(self.f0.shape[0])


# -------------------------
# rk4 (vector, one step)
# -------------------------
def rk4vec(
    t0: float,
    m: int,
    u0: Sequence[float],
    dt: float,
    f: VectorDerivFn,
    out: MutableSequence[float],
    work: Optional[Rk4Workspace] = None,
) -> None:
    """
    One classical Runge-Kutta step for the vector problem du/dt = f(t, u).

    u0 is read only; out[:m] receives the estimate of u(t0 + dt).
    Without a workspace the seven scratch buffers live only for this call;
    a failed allocation surfaces as MemoryError.
    """
    if work is None:
        work = Rk4Workspace.allocate(m)
    elif work.m != m:
        raise ValueError(f"Workspace dimension {work.m} does not match m={m}.")

    u0_arr = np.asarray(u0, dtype=float)[:m]
    f0, f1, f2, f3 = work.f0, work.f1, work.f2, work.f3
    u1, u2, u3 = work.u1, work.u2, work.u3

    f(t0, m, u0_arr, f0)

    t1 = t0 + dt / 2.0
    np.multiply(f0, dt, out=u1)
    np.divide(u1, 2.0, out=u1)
    np.add(u0_arr, u1, out=u1)
    f(t1, m, u1, f1)

    t2 = t0 + dt / 2.0
    np.multiply(f1, dt, out=u2)
    np.divide(u2, 2.0, out=u2)
    np.add(u0_arr, u2, out=u2)
    f(t2, m, u2, f2)

    t3 = t0 + dt
    np.multiply(f2, dt, out=u3)
    np.add(u0_arr, u3, out=u3)
    f(t3, m, u3, f3)

    # stage states are spent; reuse u1/u2 for the weighted sum
    np.multiply(f1, 2.0, out=u1)
    np.add(f0, u1, out=u1)
    np.multiply(f2, 2.0, out=u2)
    np.add(u1, u2, out=u1)
    np.add(u1, f3, out=u1)
    np.multiply(u1, dt, out=u1)
    np.divide(u1, 6.0, out=u1)
    np.add(u0_arr, u1, out=u1)

    out[:m] = u1.tolist()


# -------------------------
# fixed-step propagation
# -------------------------
@dataclass
class Rk4Result:
    t: np.ndarray
    u: np.ndarray


def propagate_rk4(
    f: Callable[[float, np.ndarray], np.ndarray],
    u0,
    dt: float,
    steps: int,
    t0: float = 0.0,
) -> Rk4Result:
    """
    Fixed-step RK4 propagation of du/dt = f(t, u), sampled at every step.

    A scalar u0 is stepped with rk4, a 1-D u0 with rk4vec through one reused
    workspace, so each sample matches the single-step kernels exactly.
    """
    x0 = np.asarray(u0, dtype=float)
    if x0.ndim > 1:
        raise ValueError("u0 must be a scalar or a 1-D state vector.")
    if dt <= 0.0:
        raise ValueError("dt must be positive.")
    if steps < 1:
        raise ValueError("steps must be >= 1.")

    n = steps + 1
    t_log = np.zeros(n, dtype=float)
    u_log = np.zeros((n,) + x0.shape, dtype=float)
    t_log[0] = float(t0)
    u_log[0] = x0

    if x0.ndim == 0:
        u = float(x0)
        for k in range(steps):
            u = rk4(t_log[k], u, dt, f)
            t_log[k + 1] = t_log[k] + dt
            u_log[k + 1] = u
    else:
        m = x0.shape[0]
        work = Rk4Workspace.allocate(m)

        def f_out(t: float, m: int, u: np.ndarray, uout: np.ndarray) -> None:
            uout[:] = f(t, u)

        for k in range(steps):
            rk4vec(t_log[k], m, u_log[k], dt, f_out, u_log[k + 1], work=work)
            t_log[k + 1] = t_log[k] + dt

    logger.debug("propagate_rk4: %d steps of dt=%g from t=%g to t=%g", steps, dt, t_log[0], t_log[-1])
    return Rk4Result(t=t_log, u=u_log)
