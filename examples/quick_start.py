"""Quick start example: fit a 2D function on a grid and compute derivatives."""

import math

import numpy as np

from pygridapprox import Approximant, GridBasis


def f(x):
    """A smooth 2D function: sin(x) * exp(-y), vectorised over rows."""
    return np.sin(x[:, 0]) * np.exp(-x[:, 1])


# Build the basis and sample the function at its nodes
basis = GridBasis.build([(-3.0, 3.0, 15), (0.0, 2.0, 15)], family="chebyshev")
approx = Approximant.fit(basis, f(basis.nodes()), verbose=True)

# Evaluate at a test point
point = [1.0, 0.5]
exact = math.sin(point[0]) * math.exp(-point[1])
value = approx.eval(point)

print(f"\nExact:  {exact:.10f}")
print(f"Approx: {value:.10f}")
print(f"Error:  {abs(value - exact):.2e}")

# Derivative df/dx
dfdx_exact = math.cos(point[0]) * math.exp(-point[1])
dfdx_approx = approx.eval(point, [1, 0])
print(f"\ndf/dx exact:  {dfdx_exact:.10f}")
print(f"df/dx approx: {dfdx_approx:.10f}")
print(f"df/dx error:  {abs(dfdx_approx - dfdx_exact):.2e}")

# Same nodes, new function: the factorisation is reused
approx.update_coefficients(np.cos(basis.nodes()[:, 0]) * basis.nodes()[:, 1])
print(f"\ncos(x) * y at {point}: {approx.eval(point):.10f} "
      f"(exact {math.cos(point[0]) * point[1]:.10f})")
