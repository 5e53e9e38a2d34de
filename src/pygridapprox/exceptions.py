"""Exception and warning types raised by pygridapprox."""

from __future__ import annotations

import numpy as np


class ApproximationError(Exception):
    """Base class for all pygridapprox errors."""


class InvalidDimensionError(ApproximationError, ValueError):
    """A dimension specification is malformed.

    Raised at basis construction for degenerate bounds (``lower >= upper``),
    fewer than two nodes, unsorted or out-of-range breakpoints, or an
    unusable basis family.
    """


class DimensionMismatchError(ApproximationError, ValueError):
    """Point dimensionality or sample length disagrees with the basis."""


class SingularBasisError(ApproximationError, np.linalg.LinAlgError):
    """The basis matrix is rank-deficient beyond the fitting tolerance."""


class IllConditionedBasisWarning(UserWarning):
    """The basis matrix is full rank but poorly conditioned."""
