"""
===========================================================
circle_fit.config — tolerances and iteration budgets
===========================================================

All numerical knobs of the fitter live in one frozen dataclass so that a
fit is fully described by (points, options). The defaults reproduce the
classic conjugate-gradient circle fit (Maisonobe, "Finding the circle that
best fits a set of points").
"""

# --- Imports --------------------------------------------------------------

from dataclasses import dataclass, fields, replace as _replace


# --- Defaults -------------------------------------------------------------

DEGENERACY_TOLERANCE = 1e-10   # |cross product| below this -> collinear triplet
COST_TOLERANCE = 1e-10         # cost below this -> points already on the circle
GRADIENT_TOLERANCE = 1e-10     # |gradient| below this -> stationary point
MAX_ITERATIONS = 100           # outer conjugate-gradient iterations
MAX_INNER_ITERATIONS = 10      # line-search sub-steps per outer iteration
INNER_TOLERANCE = 0.1          # relative cost change ending the line search
OUTER_TOLERANCE = 1e-12        # relative cost change declaring convergence
MAX_BACKTRACKS = 30            # step halvings before an uphill sub-step is dropped


# --- Options --------------------------------------------------------------

@dataclass(frozen=True)
class FitOptions:
    """
    Numerical settings for one circle fit.

    Parameters
    ----------
    degeneracy_tolerance : float
        Threshold on the triplet cross product used by the initial estimate.
    cost_tolerance : float
        Cost considered as an exact fit.
    gradient_tolerance : float
        Gradient norm considered as a stationary point.
    max_iterations : int
        Budget of outer conjugate-gradient iterations.
    max_inner_iterations : int
        Budget of Newton line-search sub-steps per outer iteration.
    inner_tolerance : float
        Relative cost change below which the line search stops early.
    outer_tolerance : float
        Relative cost change (over one outer iteration) declaring convergence.
    max_backtracks : int
        Halvings of a Newton step that raises the cost before it is rejected.
    """

    degeneracy_tolerance: float = DEGENERACY_TOLERANCE
    cost_tolerance: float = COST_TOLERANCE
    gradient_tolerance: float = GRADIENT_TOLERANCE
    max_iterations: int = MAX_ITERATIONS
    max_inner_iterations: int = MAX_INNER_ITERATIONS
    inner_tolerance: float = INNER_TOLERANCE
    outer_tolerance: float = OUTER_TOLERANCE
    max_backtracks: int = MAX_BACKTRACKS

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.startswith("max_"):
                if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                    raise ValueError(f"{f.name} must be a positive integer, got {value!r}")
            elif not value > 0:
                raise ValueError(f"{f.name} must be > 0, got {value!r}")

    def replace(self, **changes) -> "FitOptions":
        """Return a copy with some fields changed (validated again)."""
        return _replace(self, **changes)


DEFAULT_OPTIONS = FitOptions()
