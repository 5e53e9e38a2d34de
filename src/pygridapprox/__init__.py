"""pygridapprox: Multivariate function approximation on structured grids.

Provides :class:`GridBasis` for tensor-product grids with pluggable
univariate families (barycentric Lagrange, Chebyshev, linear and cubic
splines), :class:`SmolyakBasis` for isotropic sparse grids, the
:class:`Fitter` that solves for basis coefficients with a pivoted QR
factorisation, and :class:`Approximant` for evaluating the fitted
approximation and its partial derivatives at arbitrary points.

Example
-------
>>> import numpy as np
>>> from pygridapprox import Approximant, GridBasis
>>> basis = GridBasis.build([(0, 2, 3), (0, 2, 3)], family="lagrange")
>>> x = basis.nodes()
>>> approx = Approximant.fit(basis, x[:, 0] + x[:, 1])
>>> round(approx.eval([1.5, 1.5]), 10)
3.0
"""

from pygridapprox._version import __version__
from pygridapprox.approximant import Approximant
from pygridapprox.exceptions import (
    ApproximationError,
    DimensionMismatchError,
    IllConditionedBasisWarning,
    InvalidDimensionError,
    SingularBasisError,
)
from pygridapprox.families import (
    BasisFamily,
    ChebyshevFamily,
    LagrangeFamily,
    SplineFamily,
    get_family,
)
from pygridapprox.fitting import Factorization, Fitter
from pygridapprox.grid import DimensionSpec, GridBasis
from pygridapprox.sparse import SmolyakBasis

__all__ = [
    "Approximant",
    "ApproximationError",
    "BasisFamily",
    "ChebyshevFamily",
    "DimensionMismatchError",
    "DimensionSpec",
    "Factorization",
    "Fitter",
    "GridBasis",
    "IllConditionedBasisWarning",
    "InvalidDimensionError",
    "LagrangeFamily",
    "SingularBasisError",
    "SmolyakBasis",
    "SplineFamily",
    "get_family",
    "__version__",
]
