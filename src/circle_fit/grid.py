"""
===========================================================
circle_fit.grid — selectable point grid & threshold bands
===========================================================

Non-interactive models behind the two digitizing tools:
  - PointGrid     : regular grid whose nodes can be toggled on/off; the
                    selected nodes are the point set handed to the fitter
  - band_points() : grid nodes lying within ±threshold of a given circle
  - band_radii()  : inner/outer radii enclosing a set of distances

Grid node (i, j) sits at (spacing * (i + 1), spacing * (j + 1)), so the
first node is one spacing away from the origin (canvas margin).
"""

# --- Imports --------------------------------------------------------------

import logging
import math
from typing import Optional

import numpy as np

from .core import fit_circle, CircleFitter

logger = logging.getLogger(__name__)


# --- Grid -----------------------------------------------------------------

class PointGrid:
    """
    rows x cols grid of selectable nodes.

    Parameters
    ----------
    rows, cols : int
        Grid size (default 20 x 20).
    spacing : float
        Distance between neighbouring nodes (default 40).
    """

    def __init__(self, rows: int = 20, cols: int = 20, spacing: float = 40.0):
        if rows < 1 or cols < 1:
            raise ValueError("Grid needs at least one row and one column.")
        if spacing <= 0:
            raise ValueError("spacing must be > 0")
        self.rows, self.cols, self.spacing = int(rows), int(cols), float(spacing)
        self._selected = np.zeros((self.rows, self.cols), dtype=bool)

    def _check(self, i: int, j: int):
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"Node ({i}, {j}) outside {self.rows}x{self.cols} grid")

    def node(self, i: int, j: int):
        """Coordinates of node (i, j)."""
        self._check(i, j)
        return self.spacing * (i + 1), self.spacing * (j + 1)

    def coordinates(self):
        """All node coordinates as flat arrays (x, y), row-major."""
        I, J = np.meshgrid(np.arange(self.rows), np.arange(self.cols), indexing="ij")
        return self.spacing * (I.ravel() + 1.0), self.spacing * (J.ravel() + 1.0)

    def toggle(self, i: int, j: int) -> bool:
        """Flip the selection of node (i, j) and return its new state."""
        self._check(i, j)
        self._selected[i, j] = not self._selected[i, j]
        return bool(self._selected[i, j])

    def is_selected(self, i: int, j: int) -> bool:
        self._check(i, j)
        return bool(self._selected[i, j])

    def reset(self):
        self._selected[:] = False

    def select_near(self, x: float, y: float, tol: Optional[float] = None):
        """
        Toggle the node closest to (x, y), if within tol (default spacing/2).
        Returns the node index, or None when no node is close enough.
        """
        tol = self.spacing / 2.0 if tol is None else tol
        i = int(round(x / self.spacing)) - 1
        j = int(round(y / self.spacing)) - 1
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            return None
        nx, ny = self.node(i, j)
        if math.hypot(x - nx, y - ny) > tol:
            return None
        self.toggle(i, j)
        return i, j

    def selected_points(self) -> np.ndarray:
        """Selected node coordinates, shape (N, 2), row-major order."""
        I, J = np.nonzero(self._selected)
        return np.column_stack([self.spacing * (I + 1.0), self.spacing * (J + 1.0)])

    def fit(self, options=None):
        """Fit a circle through the selected nodes (CircleFitResult)."""
        pts = self.selected_points()
        logger.debug(f"fitting {len(pts)} selected grid nodes")
        return CircleFitter(pts, options).fit()


# --- Threshold bands ------------------------------------------------------

def band_points(x, y, cx: float, cy: float, radius: float, threshold: float):
    """
    Points whose distance d to (cx, cy) satisfies |r - t| <= d <= |r + t|.

    Returns
    -------
    mask : np.ndarray of bool
        Which points lie in the band.
    distances : np.ndarray
        Distances of the points in the band, in input order.
    """
    x = np.asarray(x, float).ravel(); y = np.asarray(y, float).ravel()
    d = np.hypot(x - cx, y - cy)
    mask = (d >= abs(radius - threshold)) & (d <= abs(radius + threshold))
    return mask, d[mask]


def band_radii(distances, radius: float, increment: float):
    """
    Inner and outer radii enclosing all distances, stepping away from
    radius by whole increments (at least one step each side).

    Both sides are always searched: the digitizing tool this replaces
    stopped at the first side found and truncated its threshold to int.
    """
    if increment <= 0:
        raise ValueError("increment must be > 0")
    d = np.asarray(distances, float).ravel()
    if d.size == 0:
        return radius - increment, radius + increment
    n_in = max(1, math.ceil((radius - d.min()) / increment))
    n_out = max(1, math.ceil((d.max() - radius) / increment))
    return max(0.0, radius - n_in * increment), radius + n_out * increment


def fit_band(x, y, cx: float, cy: float, radius: float, threshold: float, options=None):
    """
    Refit a circle on the points of a threshold band around a guessed
    circle (e.g. one dragged by hand). Returns (cx, cy, r).
    """
    mask, _ = band_points(x, y, cx, cy, radius, threshold)
    x = np.asarray(x, float).ravel(); y = np.asarray(y, float).ravel()
    return fit_circle(x[mask], y[mask], options)
