import math
import tracemalloc

import numpy as np
import numpy.testing as npt
import pytest
from scipy.integrate import solve_ivp

from numkernels import integrators
from numkernels.integrators import (
    Rk4Workspace,
    propagate_rk4,
    rk4,
    rk4vec,
)


def oscillator(t, m, u, uout):
    uout[0] = u[1]
    uout[1] = -u[0]


def oscillator_array(t, x):
    return np.array([x[1], -x[0]])


def test_scalar_exponential_growth_is_fourth_order():
    dt = 0.1
    u1 = rk4(0.0, 1.0, dt, lambda t, u: u)

    taylor = 1.0 + dt + dt**2 / 2.0 + dt**3 / 6.0 + dt**4 / 24.0
    assert u1 == pytest.approx(taylor, rel=1e-14)
    err = math.exp(dt) - u1
    assert 0.0 < err < dt**5 / 100.0


def test_scalar_error_shrinks_with_fifth_power_of_dt():
    errs = [abs(math.exp(dt) - rk4(0.0, 1.0, dt, lambda t, u: u)) for dt in (0.2, 0.1)]
    assert errs[0] / errs[1] == pytest.approx(32.0, rel=0.1)


def test_scalar_stage_times():
    seen = []

    def f(t, u):
        seen.append(t)
        return 0.0

    assert rk4(2.0, 5.0, 0.5, f) == 5.0
    assert seen == [2.0, 2.25, 2.25, 2.5]


def test_scalar_non_finite_values_propagate():
    assert math.isnan(rk4(0.0, 1.0, 0.1, lambda t, u: math.nan))
    assert math.isinf(rk4(0.0, 1.0, math.inf, lambda t, u: 1.0))


def test_vector_matches_scalar_bit_for_bit():
    f_scalar = lambda t, u: math.sin(t) * u - u**2
    out = [0.0]

    def f_vec(t, m, u, uout):
        uout[0] = f_scalar(t, float(u[0]))

    rk4vec(0.3, 1, [0.7], 0.05, f_vec, out)
    assert out[0] == rk4(0.3, 0.7, 0.05, f_scalar)


def test_vector_oscillator_preserves_energy():
    u0 = [1.0, 0.0]
    out = [0.0, 0.0]
    dt = 0.01

    rk4vec(0.0, 2, u0, dt, oscillator, out)

    assert u0 == [1.0, 0.0]
    assert len(out) == 2
    assert out[0] ** 2 + out[1] ** 2 == pytest.approx(1.0, abs=1e-10)
    npt.assert_allclose(out, [math.cos(dt), -math.sin(dt)], atol=1e-11)


def test_vector_does_not_touch_ndarray_input():
    u0 = np.array([0.2, -0.4, 1.5])
    snapshot = u0.copy()
    out = np.zeros(3)

    def decay(t, m, u, uout):
        uout[:] = -u

    rk4vec(0.0, 3, u0, 0.1, decay, out)

    npt.assert_array_equal(u0, snapshot)
    npt.assert_allclose(out, snapshot * math.exp(-0.1), rtol=1e-6)


def test_vector_workspace_gives_identical_result():
    rng = np.random.default_rng(3)
    a = rng.normal(size=(4, 4))
    u0 = rng.normal(size=4)

    def linear(t, m, u, uout):
        uout[:] = a @ u + t

    plain = np.zeros(4)
    reused = np.zeros(4)
    work = Rk4Workspace.allocate(4)
    rk4vec(0.5, 4, u0, 0.02, linear, plain)
    rk4vec(0.5, 4, u0, 0.02, linear, reused, work=work)
    npt.assert_array_equal(plain, reused)

    # second call through the same arena is unaffected by leftover scratch
    rk4vec(0.5, 4, u0, 0.02, linear, reused, work=work)
    npt.assert_array_equal(plain, reused)


def test_vector_workspace_dimension_mismatch():
    with pytest.raises(ValueError, match="does not match"):
        rk4vec(0.0, 2, [1.0, 0.0], 0.1, oscillator, [0.0, 0.0], work=Rk4Workspace.allocate(3))


def test_workspace_rejects_negative_dimension():
    with pytest.raises(ValueError):
        Rk4Workspace.allocate(-1)


def test_vector_repeated_calls_do_not_retain_memory():
    out = [0.0, 0.0]
    u = [1.0, 0.0]
    rk4vec(0.0, 2, u, 0.01, oscillator, out)

    tracemalloc.start()
    try:
        before, _ = tracemalloc.get_traced_memory()
        for k in range(2000):
            rk4vec(k * 0.01, 2, u, 0.01, oscillator, out)
        after, _ = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert len(out) == 2
    assert after - before < 4096


def test_vector_reads_only_first_m_entries_of_long_buffers():
    u0 = [1.0, 0.0, 99.0, -99.0]
    out = [7.0, 7.0, 7.0]
    exact = [0.0, 0.0]

    rk4vec(0.0, 2, u0, 0.01, oscillator, out)
    rk4vec(0.0, 2, u0[:2], 0.01, oscillator, exact)

    assert out[:2] == exact
    assert out[2] == 7.0
    assert u0 == [1.0, 0.0, 99.0, -99.0]


def test_vector_scratch_allocation_failure_propagates(monkeypatch):
    work = Rk4Workspace.allocate(2)

    def failing_empty(*args, **kwargs):
        raise MemoryError("scratch")

    monkeypatch.setattr(integrators.np, "empty", failing_empty)
    out = [0.0, 0.0]

    with pytest.raises(MemoryError):
        rk4vec(0.0, 2, [1.0, 0.0], 0.01, oscillator, out)
    assert out == [0.0, 0.0]

    # a caller-supplied arena needs no allocation
    rk4vec(0.0, 2, [1.0, 0.0], 0.01, oscillator, out, work=work)
    npt.assert_allclose(out, [math.cos(0.01), -math.sin(0.01)], atol=1e-11)


@pytest.mark.parametrize("seed", range(4))
def test_propagate_scalar_matches_single_steps_exactly(seed):
    rng = np.random.default_rng(seed)
    f = lambda t, u: math.sin(t) * u - u * u

    for _ in range(50):
        u0 = float(rng.uniform(0.0, 2.0))
        dt = float(rng.uniform(1e-3, 0.5))
        result = propagate_rk4(f, u0, dt, 3)

        u = u0
        for k in range(3):
            u = rk4(result.t[k], u, dt, f)
            assert result.u[k + 1] == u
        assert result.u[1] == rk4(0.0, u0, dt, f)


def test_propagate_vector_matches_rk4vec_exactly():
    rng = np.random.default_rng(7)
    a = rng.normal(size=(3, 3))
    u0 = rng.normal(size=3)
    dt = 0.05

    result = propagate_rk4(lambda t, u: a @ u - t, u0, dt, 4)

    def f_out(t, m, u, uout):
        uout[:] = a @ u - t

    u = u0.copy()
    for k in range(4):
        nxt = np.zeros(3)
        rk4vec(result.t[k], 3, u, dt, f_out, nxt)
        npt.assert_array_equal(result.u[k + 1], nxt)
        u = nxt


def test_propagate_rejects_matrix_state():
    with pytest.raises(ValueError, match="1-D"):
        propagate_rk4(lambda t, u: u, np.eye(2), 0.1, 2)

def test_propagate_oscillator_tracks_reference():
    steps = 628
    dt = 2.0 * math.pi / steps
    result = propagate_rk4(oscillator_array, [1.0, 0.0], dt, steps)

    assert result.t.shape == (steps + 1,)
    assert result.u.shape == (steps + 1, 2)
    assert result.t[-1] == pytest.approx(2.0 * math.pi)

    ref = solve_ivp(
        oscillator_array, (0.0, result.t[-1]), [1.0, 0.0], t_eval=result.t, rtol=1e-11, atol=1e-12
    )
    npt.assert_allclose(result.u, ref.y.T, atol=1e-7)
    energy = np.sum(result.u**2, axis=1)
    npt.assert_allclose(energy, 1.0, atol=1e-7)


def test_propagate_scalar_state():
    result = propagate_rk4(lambda t, u: u, 1.0, 0.1, 10)
    assert result.u.shape == (11,)
    assert result.u[0] == 1.0
    assert result.u[-1] == pytest.approx(math.e, rel=1e-5)


@pytest.mark.parametrize("dt, steps", [(0.0, 5), (-0.1, 5), (0.1, 0)])
def test_propagate_rejects_bad_arguments(dt, steps):
    with pytest.raises(ValueError):
        propagate_rk4(oscillator_array, [1.0, 0.0], dt, steps)
