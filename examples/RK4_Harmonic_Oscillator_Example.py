import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

# Allow running this file directly: `python examples/RK4_Harmonic_Oscillator_Example.py`
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from numkernels.integrators import Rk4Workspace, rk4, rk4vec
from numkernels.timestamp import timestamp


def oscillator(t: float, m: int, u: np.ndarray, uout: np.ndarray) -> None:
    uout[0] = u[1]
    uout[1] = -u[0]


def main() -> None:
    timestamp()

    # Scalar: du/dt = u, one step per dt, compared against exp(t).
    dt_list = [0.4, 0.2, 0.1, 0.05, 0.025]
    err_list = []
    for dt in dt_list:
        u = rk4(0.0, 1.0, dt, lambda t, u: u)
        err_list.append(abs(np.exp(dt) - u))
        print(f"dt={dt:<6} one-step error={err_list[-1]:.3e}")

    # Vector: u'' = -u as [u, u'], ten periods with a reused workspace.
    m = 2
    dt = 0.05
    t_period = 2.0 * np.pi
    steps = int(np.ceil(10.0 * t_period / dt))
    work = Rk4Workspace.allocate(m)

    t_log = np.zeros(steps + 1)
    u_log = np.zeros((steps + 1, m))
    u_log[0, :] = [1.0, 0.0]
    out = np.zeros(m)
    for k in range(steps):
        rk4vec(t_log[k], m, u_log[k], dt, oscillator, out, work=work)
        u_log[k + 1, :] = out
        t_log[k + 1] = t_log[k] + dt

    energy = np.sum(u_log**2, axis=1)
    print("Initial energy:", energy[0])
    print("Final energy:", energy[-1])
    print("Max |u - cos t|:", np.max(np.abs(u_log[:, 0] - np.cos(t_log))))

    plt.figure()
    plt.loglog(dt_list, err_list, "o-", label="RK4 one-step error")
    plt.loglog(dt_list, [d**5 / 120.0 for d in dt_list], "--", label="dt^5 / 120")
    plt.xlabel("dt")
    plt.ylabel("|exp(dt) - u1|")
    plt.title("Scalar RK4 Local Error")
    plt.grid(True)
    plt.legend()

    plt.figure()
    plt.plot(u_log[:, 0], u_log[:, 1])
    plt.xlabel("u")
    plt.ylabel("du/dt")
    plt.title("Harmonic Oscillator Phase Portrait")
    plt.axis("equal")
    plt.grid(True)

    plt.figure()
    plt.plot(t_log / t_period, energy - energy[0])
    plt.xlabel("Time (periods)")
    plt.ylabel("Energy drift")
    plt.title("RK4 Energy Drift")
    plt.grid(True)

    plt.show()


if __name__ == "__main__":
    main()
