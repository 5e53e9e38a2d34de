"""Shared helpers for approximant arithmetic operators."""

from __future__ import annotations

import numpy as np


def _is_scalar(value) -> bool:
    """Return True if *value* is a numeric scalar (int, float, or numpy scalar)."""
    return isinstance(value, (int, float, np.integer, np.floating))


def _check_compatible(a, b) -> None:
    """Validate that two approximants can be combined arithmetically.

    Both operands must:
    - be the same type
    - live on compatible bases (same nodes, families and truncation)
    - have coefficient arrays of the same shape
    """
    if type(a) is not type(b):
        raise TypeError(
            f"Cannot combine {type(a).__name__} with {type(b).__name__}; "
            f"operands must be the same type."
        )

    if not a.basis.is_compatible(b.basis):
        raise ValueError(
            f"Basis mismatch: {a.basis!r} vs {b.basis!r}"
        )

    if a.coefficients.shape != b.coefficients.shape:
        raise ValueError(
            f"Coefficient shape mismatch: "
            f"{a.coefficients.shape} vs {b.coefficients.shape}"
        )
