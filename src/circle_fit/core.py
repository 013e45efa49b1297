"""
===========================================================
circle_fit.core — geometric circle fitting (NumPy-only)
===========================================================

Implements the computational parts of the library:
  - initial_estimate()   : mean circumcenter of every point triplet
  - radius_estimate()    : mean distance from the points to a center
  - cost_function()      : sum of squared radial deviations
  - cost_gradient()      : gradient of the cost w.r.t. the center
  - step_length()        : Newton step along a search direction
  - CircleFitter         : Polak–Ribière conjugate-gradient refinement
  - fit_circle()         : functional shortcut returning (cx, cy, r)
  - circle_points()      : sample points on a fitted circle

Method
------
L. Maisonobe, "Finding the circle that best fits a set of points" (2007).
The radius is not a free parameter: it is always the mean distance from
the points to the current center, so only the center is optimized.

Scaling
-------
The initial estimate visits all C(n, 3) triplets, which limits practical
use to point sets of a few tens of points.
"""

# --- Imports --------------------------------------------------------------

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Optional, Tuple

import numpy as np

from .config import DEFAULT_OPTIONS, FitOptions
from .errors import (
    DegenerateInputError,
    FitStatus,
    NonConvergenceError,
    NumericalSingularityError,
    error_for,
)

logger = logging.getLogger(__name__)


# --- Input validation -----------------------------------------------------

def as_points(points) -> np.ndarray:
    """
    Copy array-like input into an owned (N, 2) float array.

    Raises
    ------
    ValueError
        Wrong shape, fewer than 3 points or non-finite coordinates.
    """
    P = np.array(points, dtype=float)
    if P.ndim != 2 or P.shape[1] != 2:
        raise ValueError(f"Expected an (N, 2) array of points, got shape {P.shape}.")
    if len(P) < 3:
        raise ValueError("Need ≥ 3 points for circle fit.")
    if not np.all(np.isfinite(P)):
        raise ValueError("Point coordinates must be finite.")
    return P


# --- Initial estimate -----------------------------------------------------

def circumcenter(p_i, p_j, p_k, tol: float = DEFAULT_OPTIONS.degeneracy_tolerance):
    """
    Center of the circle through three points.

    Raises DegenerateInputError when the points are collinear or coincident.
    """
    P = np.array([p_i, p_j, p_k], dtype=float)
    cx, cy = _triplet_circumcenters(P, np.array([[0, 1, 2]]), tol)
    return float(cx[0]), float(cy[0])


def _triplet_circumcenters(P: np.ndarray, idx: np.ndarray, tol: float):
    pi, pj, pk = P[idx[:, 0]], P[idx[:, 1]], P[idx[:, 2]]
    d_ij = pj - pi
    d_jk = pk - pj
    d_ki = pi - pk

    # (k - j) x (j - i)
    delta = d_jk[:, 0] * d_ij[:, 1] - d_ij[:, 0] * d_jk[:, 1]
    bad = np.abs(delta) < tol
    if np.any(bad):
        t = idx[np.argmax(bad)]
        raise DegenerateInputError(
            f"Points {tuple(int(v) for v in t)} are collinear or coincident; "
            "no circle passes through them."
        )

    sq_i = np.sum(pi * pi, axis=1)
    sq_j = np.sum(pj * pj, axis=1)
    sq_k = np.sum(pk * pk, axis=1)
    cx = (sq_i * d_jk[:, 1] + sq_j * d_ki[:, 1] + sq_k * d_ij[:, 1]) / (2.0 * delta)
    cy = -(sq_i * d_jk[:, 0] + sq_j * d_ki[:, 0] + sq_k * d_ij[:, 0]) / (2.0 * delta)
    return cx, cy


def initial_estimate(points: np.ndarray,
                     tol: float = DEFAULT_OPTIONS.degeneracy_tolerance) -> np.ndarray:
    """
    Closed-form center estimate: mean of the circumcenters of all triplets.

    A single collinear (or coincident) triplet aborts the whole estimate
    with DegenerateInputError.
    """
    P = np.asarray(points, float)
    idx = np.array(list(combinations(range(len(P)), 3)), dtype=int)
    cx, cy = _triplet_circumcenters(P, idx, tol)
    return np.array([cx.mean(), cy.mean()])


# --- Cost evaluation ------------------------------------------------------

def _distances(points: np.ndarray, center) -> np.ndarray:
    return np.hypot(points[:, 0] - center[0], points[:, 1] - center[1])


def radius_estimate(points: np.ndarray, center) -> float:
    """Mean Euclidean distance from the points to center."""
    return float(np.mean(_distances(points, center)))


def cost_function(points: np.ndarray, center, radius: float) -> float:
    """Σ (|p - center| - radius)²; zero when every point lies on the circle."""
    r = _distances(points, center) - radius
    return float(np.sum(r * r))


def cost_gradient(points: np.ndarray, center, radius: float) -> np.ndarray:
    """
    Gradient of the cost with respect to the center coordinates:
        g = 2 Σ (center - p) (|p - center| - radius)
    """
    diff = np.asarray(center, float) - points
    r = _distances(points, center) - radius
    return 2.0 * np.sum(diff * r[:, None], axis=0)


def circle_residuals(cx: float, cy: float, r: float, x, y) -> np.ndarray:
    """Signed radial residuals |p - c| - r for points (x, y)."""
    x = np.asarray(x, float); y = np.asarray(y, float)
    return np.hypot(x - cx, y - cy) - r


# --- Line search ----------------------------------------------------------

def step_length(points: np.ndarray, center, radius: float, u) -> Optional[float]:
    """
    One Newton step on the directional derivative of the cost along u.
    Returns lambda such that center + lambda * u approximately minimizes
    the cost on that line, or None when the cost is not convex along u
    (non-positive or non-finite Newton denominator): Newton would then
    head for a maximum.

    Raises
    ------
    NumericalSingularityError
        A point coincides with the center.
    """
    u = np.asarray(u, float)
    diff = np.asarray(center, float) - points
    d = np.hypot(diff[:, 0], diff[:, 1])
    if np.any(d == 0.0):
        raise NumericalSingularityError(
            f"Point {points[np.argmin(d)].tolist()} coincides with the center estimate."
        )

    c1 = (diff @ u) / d          # projection of u on the point->center unit vector
    c2 = d - radius
    sum1 = np.sum(c1 * c2)
    sum2 = np.sum(c2 / d)
    sum_fac = np.sum(c1)
    sum_fac_dr = np.sum(c1 * c1 / d)

    den = float(u @ u) * sum2 - sum_fac * sum_fac / len(points) + radius * sum_fac_dr
    if not (np.isfinite(den) and den > 0.0):
        return None
    lam = -float(sum1) / den
    if not np.isfinite(lam):
        return None
    return lam


def _relative_change(new: float, old: float) -> float:
    if new == 0.0:
        return 0.0 if old == 0.0 else np.inf
    return abs(new - old) / new


# --- Result ---------------------------------------------------------------

@dataclass(frozen=True)
class CircleFitResult:
    """
    Outcome of CircleFitter.fit().

    center / radius are None unless status is CONVERGED: a failed fit
    never hands out an estimate.
    """

    status: FitStatus
    center: Optional[Tuple[float, float]] = None
    radius: Optional[float] = None
    cost: Optional[float] = None
    initial_cost: Optional[float] = None
    iterations: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is FitStatus.CONVERGED

    def raise_for_status(self) -> "CircleFitResult":
        """Raise the CircleFitError matching a failed status; return self otherwise."""
        if not self.success:
            raise error_for(self.status, self.message)
        return self


# --- Conjugate-gradient fitter --------------------------------------------

class CircleFitter:
    """
    Least-squares circle fit of a fixed point set.

    Parameters
    ----------
    points : array-like, shape (N, 2)
        N ≥ 3 points, copied on construction.
    options : FitOptions, optional
        Tolerances and iteration budgets.

    Example
    -------
        >>> res = CircleFitter([(10, 0), (0, 10), (-10, 0), (0, -10)]).fit()
        >>> res.success, round(res.radius, 6)
        (True, 10.0)
    """

    def __init__(self, points, options: Optional[FitOptions] = None):
        self.points = as_points(points)
        self.points.setflags(write=False)
        self.options = options or DEFAULT_OPTIONS
        self.center = np.zeros(2)
        self.radius = 0.0
        self.cost = 0.0

    # Evaluation at the current estimate

    def _update_radius_and_cost(self):
        radius = radius_estimate(self.points, self.center)
        cost = cost_function(self.points, self.center, radius)
        if not (np.all(np.isfinite(self.center)) and np.isfinite(cost)):
            raise NonConvergenceError(
                f"Estimate diverged (center={self.center.tolist()}, cost={cost})"
            )
        self.radius, self.cost = radius, cost

    def _gradient(self) -> np.ndarray:
        return cost_gradient(self.points, self.center, self.radius)

    def _line_search(self, u: np.ndarray) -> Tuple[int, bool]:
        """
        Newton sub-steps along u. A sub-step raising the cost is halved up
        to max_backtracks times, then dropped.

        Returns (accepted sub-steps, whether the cost was convex along u).
        """
        opts = self.options
        accepted = 0
        for _ in range(opts.max_inner_iterations):
            lam = step_length(self.points, self.center, self.radius, u)
            if lam is None:
                return accepted, False
            center0, radius0, cost0 = self.center, self.radius, self.cost
            for _ in range(opts.max_backtracks + 1):
                self.center = center0 + lam * u
                self._update_radius_and_cost()
                if self.cost <= cost0:
                    break
                lam *= 0.5
            else:
                self.center, self.radius, self.cost = center0, radius0, cost0
                break
            accepted += 1
            if (self.cost < opts.cost_tolerance
                    or _relative_change(self.cost, cost0) < opts.inner_tolerance):
                break
        return accepted, True

    def _converge(self) -> Tuple[FitStatus, int, str]:
        opts = self.options
        g = self._gradient()
        if self.cost < opts.cost_tolerance or np.hypot(*g) < opts.gradient_tolerance:
            return FitStatus.CONVERGED, 0, "converged"

        g_prev = g
        u_prev = np.zeros(2)
        for it in range(opts.max_iterations):
            # Polak–Ribière direction
            u = -g
            if it > 0:
                beta = float(g @ (g - g_prev)) / float(g_prev @ g_prev)
                u = u + beta * u_prev

            outer_start = self.cost
            accepted, convex = self._line_search(u)
            if not accepted and it > 0:
                # restart along steepest descent
                u = -g
                accepted, convex = self._line_search(u)
            g_prev, u_prev = g, u
            logger.debug(f"iteration {it}: center=({self.center[0]:.6g}, {self.center[1]:.6g}), "
                         f"radius={self.radius:.6g}, cost={self.cost:.6g}, steps={accepted}")

            if not accepted:
                if not convex:
                    return (FitStatus.NOT_CONVERGED, it + 1,
                            f"Cost is not convex along the descent direction at iteration {it}")
                # no downhill step left: line minimum at working precision
                return FitStatus.CONVERGED, it + 1, "converged"

            if (self.cost < opts.cost_tolerance
                    or _relative_change(self.cost, outer_start) < opts.outer_tolerance):
                return FitStatus.CONVERGED, it + 1, "converged"

            g = self._gradient()
            if np.hypot(*g) < opts.gradient_tolerance:
                return FitStatus.CONVERGED, it + 1, "converged"

        return (FitStatus.NOT_CONVERGED, opts.max_iterations,
                f"No convergence after {opts.max_iterations} iterations")

    # Public API

    def fit(self) -> CircleFitResult:
        """
        Run initial estimate + refinement from scratch.

        Returns a CircleFitResult; failures (degenerate input, exhausted
        budget or diverging estimate, numerical singularity) are reported
        through its status.
        """
        opts = self.options
        try:
            self.center = initial_estimate(self.points, opts.degeneracy_tolerance)
        except DegenerateInputError as e:
            logger.warning(f"Invalid point selection: {e}")
            return CircleFitResult(FitStatus.DEGENERATE_INPUT, message=str(e))

        iterations = 0
        initial_cost = None
        try:
            self._update_radius_and_cost()
            initial_cost = self.cost
            status, iterations, reason = self._converge()
        except NumericalSingularityError as e:
            logger.warning(f"Fit aborted: {e}")
            return CircleFitResult(FitStatus.NUMERICAL_SINGULARITY, initial_cost=initial_cost,
                                   iterations=iterations, message=str(e))
        except NonConvergenceError as e:
            status, reason = FitStatus.NOT_CONVERGED, str(e)

        if status is FitStatus.CONVERGED and self.cost > initial_cost:
            status = FitStatus.NOT_CONVERGED
            reason = f"Cost rose from {initial_cost:.6g} to {self.cost:.6g}"

        if status is not FitStatus.CONVERGED:
            msg = f"{reason} (cost={self.cost:.6g}); try different or additional points."
            logger.warning(msg)
            return CircleFitResult(status, cost=float(self.cost), initial_cost=initial_cost,
                                   iterations=iterations, message=msg)

        cx, cy = float(self.center[0]), float(self.center[1])
        logger.info(f"circle center=({cx:.6g}, {cy:.6g}), radius={self.radius:.6g} "
                    f"after {iterations} iterations")
        return CircleFitResult(FitStatus.CONVERGED, center=(cx, cy), radius=float(self.radius),
                               cost=float(self.cost), initial_cost=float(initial_cost),
                               iterations=iterations, message=reason)


# --- Functional API -------------------------------------------------------

def fit_circle(x, y, options: Optional[FitOptions] = None):
    """
    Fit a circle to points (x, y) and return (cx, cy, r).

    Raises
    ------
    ValueError
        Fewer than 3 points or mismatched / non-finite coordinates.
    CircleFitError
        DegenerateInputError, NonConvergenceError or NumericalSingularityError.
    """
    x = np.asarray(x, float).ravel()
    y = np.asarray(y, float).ravel()
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same length ({x.size} != {y.size}).")
    res = CircleFitter(np.column_stack([x, y]), options).fit().raise_for_status()
    cx, cy = res.center
    return cx, cy, res.radius


# --- Sampling -------------------------------------------------------------

def circle_points(cx: float, cy: float, r: float, n: int = 400):
    """
    Generate n sampled points on the circle (no plotting).
    """
    t = np.linspace(0.0, 2.0 * np.pi, n)
    return cx + r * np.cos(t), cy + r * np.sin(t)
