import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

# Allow running this file directly: `python examples/Newton_MatMult_Example.py`
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from numkernels.constants import DEFAULT_MAX_ITER
from numkernels.matmul import mat_mult
from numkernels.newton import NewtonConfig, newton, newton_solve


def main() -> None:
    a = [1.0, 2.0, 3.0, 4.0]
    b = [5.0, 6.0, 7.0, 8.0]
    c = [0.0] * 4
    mat_mult(a, b, c, 2, 2, 2)
    print("A @ B =", np.reshape(c, (2, 2)).tolist())

    root = newton(lambda x: x * x - 2.0, lambda x: 2.0 * x, 1.0, 1e-10)
    print("sqrt(2) by Newton:", root, " error:", root - np.sqrt(2.0))

    cfg = NewtonConfig(max_iter=DEFAULT_MAX_ITER, keep_history=True)
    quad = newton_solve(lambda x: x * x - 2.0, lambda x: 2.0 * x, 1.0, 1e-14, cfg)
    cubic = newton_solve(lambda x: x**3, lambda x: 3.0 * x**2, 1.0, 1e-14, cfg)
    print("x^2 - 2 iterations:", quad.iterations)
    print("x^3 iterations:", cubic.iterations, "root:", cubic.root)

    # Classic 2-cycle, stopped by the iteration cap.
    cycle = newton_solve(
        lambda x: x**3 - 2.0 * x + 2.0,
        lambda x: 3.0 * x**2 - 2.0,
        0.0,
        1e-10,
        NewtonConfig(max_iter=20, keep_history=True),
    )
    print("x^3 - 2x + 2 from 0:", cycle.termination_reason, cycle.history[:6])

    plt.figure()
    plt.semilogy(np.abs(np.array(quad.history) - np.sqrt(2.0)) + 1e-17, "o-", label="x^2 - 2 (quadratic)")
    plt.semilogy(np.abs(cubic.history) + 1e-17, ".-", label="x^3 (linear)")
    plt.xlabel("Iteration")
    plt.ylabel("|x - root|")
    plt.title("Newton Convergence")
    plt.grid(True)
    plt.legend()

    plt.show()


if __name__ == "__main__":
    main()
