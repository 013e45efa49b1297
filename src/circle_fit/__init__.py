"""
===========================================================
circle_fit — least-squares circle fitting library
===========================================================

A small NumPy-based toolkit fitting the circle that best fits a set of
2D points (minimum of Σ (distance to center - radius)²), with a
closed-form initial estimate and a conjugate-gradient refinement.

Main functions
--------------
- CircleFitter(points).fit()
- fit_circle(x, y)
- circle_points(cx, cy, r)
- load_points_csv(path) / save_xy_csv(path, x, y)
- PointGrid, band_points, band_radii

Typical workflow
----------------
    from circle_fit import *
    x, y = load_points_csv("points.csv")
    res = CircleFitter(np.column_stack([x, y])).fit()
    if res.success:
        Xf, Yf = circle_points(*res.center, res.radius)
"""

# --- Public Imports -------------------------------------------------------

from .config import FitOptions, DEFAULT_OPTIONS
from .errors import (
    FitStatus,
    CircleFitError,
    DegenerateInputError,
    NonConvergenceError,
    NumericalSingularityError,
)
from .core import CircleFitter, CircleFitResult, fit_circle, circle_points
from .io import load_points_csv, save_xy_csv
from .grid import PointGrid, band_points, band_radii, fit_band

__all__ = [
    "FitOptions",
    "DEFAULT_OPTIONS",
    "FitStatus",
    "CircleFitError",
    "DegenerateInputError",
    "NonConvergenceError",
    "NumericalSingularityError",
    "CircleFitter",
    "CircleFitResult",
    "fit_circle",
    "circle_points",
    "load_points_csv",
    "save_xy_csv",
    "PointGrid",
    "band_points",
    "band_radii",
    "fit_band",
]
