import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np


logger = logging.getLogger(__name__)

ScalarFn = Callable[[float], float]


@dataclass(frozen=True)
class NewtonConfig:
    """
    Opt-in guards for the Newton iteration.

    max_iter=None and strict=False reproduce the unguarded textbook loop:
    no iteration cap, and a zero derivative yields inf/NaN instead of raising.
    """
    max_iter: Optional[int] = None
    strict: bool = False
    keep_history: bool = False

    def __post_init__(self) -> None:
        if self.max_iter is not None and self.max_iter < 1:
            raise ValueError("max_iter must be >= 1 when provided.")


@dataclass
class NewtonResult:
    root: float
    iterations: int
    converged: bool
    residual: float
    termination_reason: str = ""
    history: list[float] = field(default_factory=list)


class ConvergenceError(RuntimeError):
    def __init__(self, result: NewtonResult):
        super().__init__(
            f"Newton iteration did not converge after {result.iterations} iterations "
            f"(last guess {result.root!r}, |f| = {abs(result.residual)!r})."
        )
        self.result = result


def newton_solve(
    f: ScalarFn,
    fprime: ScalarFn,
    guess: float,
    tolerance: float,
    config: Optional[NewtonConfig] = None,
) -> NewtonResult:
    """
    Newton's method: guess <- guess - f(guess) / fprime(guess) until
    |f(guess)| <= tolerance.

    Reaching config.max_iter is reported through the result, never raised.
    """
    cfg = config or NewtonConfig()
    tol = float(tolerance)
    # float64 throughout so overflow and zero division give inf/NaN as in IEEE C code
    x = np.float64(guess)
    history = [float(x)] if cfg.keep_history else []
    iterations = 0

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        fx = f(x)
        while abs(fx) > tol:
            if cfg.max_iter is not None and iterations >= cfg.max_iter:
                logger.warning("newton: no convergence after %d iterations (x=%r, f=%r)", iterations, x, fx)
                return NewtonResult(
                    root=float(x),
                    iterations=iterations,
                    converged=False,
                    residual=float(fx),
                    termination_reason="max_iter_exceeded",
                    history=history,
                )

            dfx = fprime(x)
            if cfg.strict and dfx == 0.0:
                raise ZeroDivisionError(f"fprime vanished at x={x!r}.")

            x = x - np.float64(fx) / np.float64(dfx)
            iterations += 1
            if cfg.keep_history:
                history.append(float(x))

            fx = f(x)
            if cfg.strict and not (np.isfinite(x) and np.isfinite(fx)):
                raise FloatingPointError(f"Non-finite Newton iterate x={x!r}, f(x)={fx!r}.")
            logger.debug("newton: iter=%d x=%r f=%r", iterations, x, fx)

    # |NaN| > tol is false, so a NaN residual also ends the loop
    finite = bool(np.isfinite(x) and np.isfinite(fx))
    return NewtonResult(
        root=float(x),
        iterations=iterations,
        converged=finite,
        residual=float(fx),
        termination_reason="tolerance_met" if finite else "non_finite",
        history=history,
    )


def newton(
    f: ScalarFn,
    fprime: ScalarFn,
    guess: float,
    tolerance: float,
    max_iter: Optional[int] = None,
    strict: bool = False,
) -> float:
    """
    Root of f near guess, refined until |f(root)| <= tolerance.

    Without max_iter the loop is unbounded, as in the classic formulation.
    With max_iter, running out of iterations raises ConvergenceError.
    """
    result = newton_solve(f, fprime, guess, tolerance, NewtonConfig(max_iter=max_iter, strict=strict))
    if result.termination_reason == "max_iter_exceeded":
        raise ConvergenceError(result)
    return result.root
