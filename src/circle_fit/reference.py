"""
Reference geometric fit with SciPy (Levenberg–Marquardt), used to
cross-check the conjugate-gradient fitter.
"""

import numpy as np
from scipy.optimize import least_squares

from .core import as_points


def fit_circle_scipy(x, y, x0=None):
    """
    Minimize Σ (|p - c| - r)² over (cx, cy, r) with scipy.

    x0 : optional (cx, cy, r) start; defaults to centroid + mean distance.
    Returns (cx, cy, r).
    """
    P = as_points(np.column_stack([np.ravel(x), np.ravel(y)]))
    if x0 is None:
        c = P.mean(axis=0)
        x0 = [c[0], c[1], np.mean(np.hypot(*(P - c).T))]

    def residuals(params):
        cx, cy, r = params
        return np.hypot(P[:, 0] - cx, P[:, 1] - cy) - r

    res = least_squares(residuals, x0=x0, method="lm")
    if not res.success:
        raise RuntimeError(f"scipy least_squares failed: {res.message}")
    cx, cy, r = res.x
    return float(cx), float(cy), abs(float(r))
