"""Shared argument validation for bases, fitting and evaluation."""

from __future__ import annotations

import numpy as np

from pygridapprox.exceptions import DimensionMismatchError


def _as_points(points, ndim: int) -> np.ndarray:
    """Return *points* as a float array of shape (N, ndim).

    A flat sequence is a single point, except on a 1-D basis where it is
    a batch of scalar coordinates.  An empty sequence is an empty batch.
    """
    arr = np.asarray(points, dtype=float)
    if arr.ndim == 1 and arr.size == 0:
        return np.empty((0, ndim))
    if arr.ndim == 1 and ndim == 1:
        return arr[:, np.newaxis]
    arr = np.atleast_2d(arr)
    if arr.ndim != 2 or arr.shape[1] != ndim:
        raise DimensionMismatchError(
            f"Expected points with {ndim} coordinate(s), got array of "
            f"shape {np.shape(points)}"
        )
    return arr


def _as_derivative_order(derivative_order, ndim: int) -> tuple:
    """Validate a per-dimension derivative order; ``None`` means all zeros."""
    if derivative_order is None:
        return (0,) * ndim
    order = tuple(int(o) for o in derivative_order)
    if len(order) != ndim:
        raise DimensionMismatchError(
            f"derivative_order has {len(order)} entries, basis has "
            f"{ndim} dimension(s)"
        )
    for d, o in enumerate(order):
        if o < 0:
            raise ValueError(
                f"derivative_order[{d}]={o} must be non-negative"
            )
    return order


def _as_samples(values, num_nodes: int) -> np.ndarray:
    """Return sampled values as a float array of shape (N,) or (N, k)."""
    arr = np.asarray(values, dtype=float)
    if arr.ndim not in (1, 2):
        raise DimensionMismatchError(
            f"Sampled values must be 1-D or 2-D, got {arr.ndim}-D array"
        )
    if arr.shape[0] != num_nodes:
        raise DimensionMismatchError(
            f"Got {arr.shape[0]} sampled values for {num_nodes} grid nodes"
        )
    if not np.isfinite(arr).all():
        raise ValueError("Sampled values contain NaN or Inf")
    return arr
