"""
===========================================================
Test suite for circle_fit core
===========================================================
"""

import numpy as np
import pytest

from circle_fit import core
from circle_fit.config import FitOptions
from circle_fit.core import (
    CircleFitter,
    circle_points,
    circumcenter,
    cost_function,
    cost_gradient,
    fit_circle,
    initial_estimate,
    radius_estimate,
    step_length,
)
from circle_fit.errors import (
    DegenerateInputError,
    FitStatus,
    NonConvergenceError,
    NumericalSingularityError,
)
from circle_fit.reference import fit_circle_scipy


def _noisy_circle(cx, cy, r, n=20, noise=0.05, seed=0):
    rng = np.random.default_rng(seed)
    t = np.linspace(0, 2*np.pi, n, endpoint=False)
    rr = r + noise * rng.standard_normal(n)
    return np.column_stack([cx + rr*np.cos(t), cy + rr*np.sin(t)])


# --- Building blocks ------------------------------------------------------

def test_circumcenter_right_triangle():
    cx, cy = circumcenter((2, 0), (0, 2), (0, 0))
    assert cx == pytest.approx(1.0)
    assert cy == pytest.approx(1.0)


def test_circumcenter_collinear_raises():
    with pytest.raises(DegenerateInputError):
        circumcenter((0, 0), (1, 1), (2, 2))


def test_initial_estimate_exact_circle():
    t = np.linspace(0, 2*np.pi, 7, endpoint=False)
    P = np.column_stack([3 + 5*np.cos(t), -2 + 5*np.sin(t)])
    c = initial_estimate(P)
    assert np.allclose(c, [3.0, -2.0], atol=1e-9)


def test_radius_and_cost_on_square():
    P = np.array([(10, 0), (0, 10), (-10, 0), (0, -10)], float)
    r = radius_estimate(P, (0.0, 0.0))
    assert r == pytest.approx(10.0)
    assert cost_function(P, (0.0, 0.0), r) == pytest.approx(0.0)
    assert cost_function(P, (1.0, 0.0), 10.0) > 0.0


def test_gradient_matches_per_point_formula():
    P = _noisy_circle(1.0, 2.0, 4.0, n=12, noise=0.2, seed=3)
    c = np.array([1.3, 1.6])
    r = radius_estimate(P, c)
    expected = np.zeros(2)
    for p in P:
        d = np.hypot(*(c - p))
        expected += 2 * (c - p) * (d - r)
    assert np.allclose(cost_gradient(P, c, r), expected)


def test_negative_gradient_is_a_descent_direction():
    """The gradient lacks the 1/d weight of d cost / dc but stays within 90° of it."""
    P = _noisy_circle(1.0, 2.0, 4.0, n=12, noise=0.2, seed=3)
    c = np.array([1.3, 1.6])
    g = cost_gradient(P, c, radius_estimate(P, c))

    def J(cc):
        return cost_function(P, cc, radius_estimate(P, cc))

    h = 1e-6
    num = np.array([
        (J(c + [h, 0]) - J(c - [h, 0])) / (2*h),
        (J(c + [0, h]) - J(c - [0, h])) / (2*h),
    ])
    assert g @ num > 0


def test_step_length_reduces_cost_along_gradient():
    P = _noisy_circle(0.0, 0.0, 10.0, n=16, noise=0.1, seed=1)
    c = np.array([0.8, -0.5])
    r = radius_estimate(P, c)
    u = -cost_gradient(P, c, r)
    lam = step_length(P, c, r, u)
    c2 = c + lam * u
    assert lam > 0
    assert cost_function(P, c2, radius_estimate(P, c2)) < cost_function(P, c, r)


def test_step_length_point_on_center_raises():
    P = np.array([(10, 0), (0, 10), (-10, 0), (0, -10)], float)
    with pytest.raises(NumericalSingularityError):
        step_length(P, (10.0, 0.0), 12.0, (1.0, 0.0))


def test_step_length_none_when_cost_not_convex():
    # Center close to (1, 0): along y the Newton denominator is negative
    P = np.array([(1, 0), (-1, 0), (0, 1), (0, -1)], float)
    c = np.array([0.9, 0.0])
    assert step_length(P, c, radius_estimate(P, c), (0.0, 1.0)) is None


# --- fit() scenarios ------------------------------------------------------

def test_fit_exact_square():
    res = CircleFitter([(10, 0), (0, 10), (-10, 0), (0, -10)]).fit()
    assert res.success and res.status is FitStatus.CONVERGED
    assert res.center == pytest.approx((0.0, 0.0), abs=1e-9)
    assert res.radius == pytest.approx(10.0)


def test_fit_exact_synthetic_circle():
    t = np.linspace(0, 2*np.pi, 12, endpoint=False)
    P = np.column_stack([3 + 5*np.cos(t), -2 + 5*np.sin(t)])
    res = CircleFitter(P).fit()
    assert res.success
    assert res.center == pytest.approx((3.0, -2.0), abs=1e-6)
    assert res.radius == pytest.approx(5.0, abs=1e-6)


def test_fit_slightly_perturbed_square():
    res = CircleFitter([(10, 0.1), (0, 10), (-10, -0.1), (0, -10)]).fit()
    assert res.success
    assert res.center == pytest.approx((0.0, 0.0), abs=1e-2)
    assert res.radius == pytest.approx(10.0, abs=1e-2)


def test_fit_noisy_refines_and_matches_scipy():
    P = _noisy_circle(3.0, -2.0, 5.0)
    res = CircleFitter(P).fit()
    assert res.success
    assert res.iterations >= 1
    assert res.cost <= res.initial_cost
    cx, cy, r = fit_circle_scipy(P[:, 0], P[:, 1])
    assert res.center == pytest.approx((cx, cy), abs=1e-4)
    assert res.radius == pytest.approx(r, abs=1e-4)


@pytest.mark.parametrize("points", [
    [(0, 0), (1, 1), (2, 2)],
    [(0, 0), (5, 0), (10, 0)],
    [(0, 0), (5, 0), (10, 0), (5, 5)],      # one collinear triplet is enough
    [(1, 1), (1, 1), (4, 0)],               # coincident points
])
def test_fit_degenerate_input(points):
    res = CircleFitter(points).fit()
    assert not res.success
    assert res.status is FitStatus.DEGENERATE_INPUT
    assert res.center is None and res.radius is None
    with pytest.raises(DegenerateInputError):
        res.raise_for_status()


@pytest.mark.parametrize("points", [[], [(0, 0)], [(0, 0), (1, 0)]])
def test_fewer_than_three_points_rejected(points):
    with pytest.raises(ValueError):
        CircleFitter(points)


def test_bad_shape_and_non_finite_rejected():
    with pytest.raises(ValueError):
        CircleFitter([(0, 0, 0), (1, 0, 0), (0, 1, 0)])
    with pytest.raises(ValueError):
        CircleFitter([(0, 0), (1, np.nan), (0, 1)])


def test_fit_is_repeatable_and_input_untouched():
    pts = [(10, 0.1), (0, 10), (-10, -0.1), (0, -10), (7, 7.2)]
    copy = [tuple(p) for p in pts]
    fitter = CircleFitter(pts)
    r1, r2 = fitter.fit(), fitter.fit()
    r3 = CircleFitter(pts).fit()
    assert r1 == r2 == r3
    assert pts == copy


def test_integer_points_accepted():
    P = np.array([(600, 400), (200, 400), (400, 600), (400, 200)], dtype=int)
    res = CircleFitter(P).fit()
    assert res.center == pytest.approx((400.0, 400.0))
    assert res.radius == pytest.approx(200.0)


def test_non_convergence_with_tiny_budget():
    P = _noisy_circle(0.0, 0.0, 10.0, n=15, noise=0.5, seed=7)
    opts = FitOptions(max_iterations=1, max_inner_iterations=1)
    res = CircleFitter(P, opts).fit()
    assert res.status is FitStatus.NOT_CONVERGED
    assert res.center is None and res.iterations == 1
    with pytest.raises(NonConvergenceError):
        fit_circle(P[:, 0], P[:, 1], opts)


def test_numerical_singularity_is_reported(monkeypatch):
    # Start the refinement exactly on one of the points
    monkeypatch.setattr(core, "initial_estimate", lambda pts, tol: np.array([10.0, 0.0]))
    res = CircleFitter([(10, 0), (0, 10), (-10, 0), (0, -10)]).fit()
    assert res.status is FitStatus.NUMERICAL_SINGULARITY
    assert res.center is None
    with pytest.raises(NumericalSingularityError):
        res.raise_for_status()


def test_non_convex_line_reported_as_non_convergence(monkeypatch):
    monkeypatch.setattr(core, "step_length", lambda *args: None)
    res = CircleFitter(_noisy_circle(0.0, 0.0, 10.0, seed=4)).fit()
    assert res.status is FitStatus.NOT_CONVERGED
    assert res.center is None
    assert "not convex" in res.message


def test_diverging_estimate_reported_as_non_convergence(monkeypatch):
    monkeypatch.setattr(core, "step_length", lambda *args: np.inf)
    res = CircleFitter(_noisy_circle(0.0, 0.0, 10.0, seed=4)).fit()
    assert res.status is FitStatus.NOT_CONVERGED
    assert "diverged" in res.message
    with pytest.raises(NonConvergenceError):
        res.raise_for_status()


def test_cost_rise_is_not_reported_as_convergence(monkeypatch):
    def wander(self):
        self.center = self.center + [50.0, 0.0]
        self._update_radius_and_cost()
        return FitStatus.CONVERGED, 1, "converged"

    monkeypatch.setattr(CircleFitter, "_converge", wander)
    res = CircleFitter(_noisy_circle(0.0, 0.0, 10.0, seed=4)).fit()
    assert res.status is FitStatus.NOT_CONVERGED
    assert "Cost rose" in res.message


def test_scattered_grid_points_do_not_run_off():
    P = [(200, 320), (280, 240), (320, 240), (440, 360), (480, 360)]
    res = CircleFitter(P).fit()
    assert res.status in (FitStatus.CONVERGED, FitStatus.NOT_CONVERGED)
    assert res.cost <= res.initial_cost
    if res.success:
        assert np.isfinite(res.radius)


def _grid_arc(cx, cy, r, start, stop, n, spacing=40.0):
    """Arc points snapped to grid nodes, as picked on a PointGrid."""
    t = np.radians(np.linspace(start, stop, n))
    P = np.column_stack([cx + r*np.cos(t), cy + r*np.sin(t)])
    return np.unique(np.round(P / spacing) * spacing, axis=0)


def _noisy_arc(r, span, n, noise, seed):
    rng = np.random.default_rng(seed)
    t = np.radians(np.linspace(0.0, span, n))
    return np.column_stack([r*np.cos(t), r*np.sin(t)]) + rng.normal(scale=noise, size=(n, 2))


@pytest.mark.parametrize("points", [
    np.array([(200, 320), (280, 240), (320, 240), (440, 360), (480, 360)], float),
    _grid_arc(400, 400, 240, 0, 120, 15),
    _grid_arc(400, 400, 240, 200, 260, 10),
    _grid_arc(300, 300, 160, -30, 210, 20),
    _noisy_arc(100.0, 15.0, 8, 0.5, seed=2),
    _noisy_arc(100.0, 30.0, 10, 0.1, seed=5),
    _noisy_circle(0.0, 0.0, 10.0, n=5, noise=0.5, seed=7),
    _noisy_circle(5.0, -3.0, 2.0, n=6, noise=0.4, seed=11),
])
def test_fit_never_reports_success_with_higher_cost(points):
    res = CircleFitter(points).fit()
    assert res.status is not FitStatus.NUMERICAL_SINGULARITY
    assert not res.success or res.cost <= res.initial_cost
    if res.success:
        assert np.isfinite(res.radius)


def test_degenerate_fit_logs_warning(caplog):
    with caplog.at_level("WARNING", logger="circle_fit"):
        CircleFitter([(0, 0), (5, 0), (10, 0)]).fit()
    assert "collinear" in caplog.text


# --- Functional API / sampling --------------------------------------------

def test_fit_circle_returns_tuple():
    X, Y = circle_points(1.5, -0.5, 2.0, n=9)
    cx, cy, r = fit_circle(X[:-1], Y[:-1])      # last sample duplicates the first
    assert (cx, cy, r) == pytest.approx((1.5, -0.5, 2.0), abs=1e-6)


def test_fit_circle_length_mismatch():
    with pytest.raises(ValueError):
        fit_circle([0, 1, 2], [0, 1])


def test_sampling_shape():
    X, Y = circle_points(0, 0, 3, n=100)
    assert X.shape == (100,) and Y.shape == (100,)
    assert np.allclose(np.hypot(X, Y), 3.0)


# --- Options --------------------------------------------------------------

def test_options_validation_and_replace():
    with pytest.raises(ValueError):
        FitOptions(max_iterations=0)
    with pytest.raises(ValueError):
        FitOptions(cost_tolerance=-1.0)
    opts = FitOptions().replace(max_inner_iterations=3)
    assert opts.max_inner_iterations == 3
    assert opts.max_iterations == 100
