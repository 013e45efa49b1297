"""
===========================================================
circle_fit.errors — failure taxonomy of a circle fit
===========================================================

Every way a fit can fail has one FitStatus member and one exception class.
CircleFitter.fit() reports failures as a status on its result; the
functional API (fit_circle) raises the matching exception.
"""

# --- Imports --------------------------------------------------------------

from enum import Enum


# --- Status ---------------------------------------------------------------

class FitStatus(str, Enum):
    CONVERGED = "converged"
    DEGENERATE_INPUT = "degenerate_input"
    NOT_CONVERGED = "not_converged"
    NUMERICAL_SINGULARITY = "numerical_singularity"


# --- Exceptions -----------------------------------------------------------

class CircleFitError(RuntimeError):
    """Base class for all fit failures."""

    status = None


class DegenerateInputError(CircleFitError):
    """A point triplet is collinear or has coincident points."""

    status = FitStatus.DEGENERATE_INPUT


class NonConvergenceError(CircleFitError):
    """
    The refinement failed to reach a minimum: budget exhausted, cost not
    convex along the search line, estimate diverging, or cost increased.
    """

    status = FitStatus.NOT_CONVERGED


class NumericalSingularityError(CircleFitError):
    """A point coincides with the center estimate (division by zero)."""

    status = FitStatus.NUMERICAL_SINGULARITY


_ERRORS = {
    FitStatus.DEGENERATE_INPUT: DegenerateInputError,
    FitStatus.NOT_CONVERGED: NonConvergenceError,
    FitStatus.NUMERICAL_SINGULARITY: NumericalSingularityError,
}


def error_for(status: FitStatus, message: str) -> CircleFitError:
    """Build the exception matching a failure status."""
    try:
        cls = _ERRORS[status]
    except KeyError:
        raise ValueError(f"No error for status {status!r}") from None
    return cls(message)
