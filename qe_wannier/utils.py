"""
Utility Functions Module

Shape normalization for geometry values and the scaling used when
converting pw.x `alat` units to bohr.
"""

import numpy as np
from typing import Sequence, Tuple

Vector3 = Tuple[float, float, float]
Matrix3 = Tuple[Vector3, Vector3, Vector3]


# ==============================
# Shape Normalization
# ==============================

def as_vector3(value: Sequence[float], name: str = "vector") -> Vector3:
    """Convert a length-3 sequence to a tuple of Python floats."""
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}")
    return tuple(float(x) for x in arr)


def as_matrix3(value: Sequence[Sequence[float]], name: str = "matrix") -> Matrix3:
    """Convert a 3x3 nested sequence to a tuple of row tuples."""
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3, 3):
        raise ValueError(f"{name} must be 3x3, got shape {arr.shape}")
    return tuple(tuple(float(x) for x in row) for row in arr)


def as_grid3(value: Sequence[int], name: str = "grid") -> Tuple[int, int, int]:
    """Convert a 3-entry grid shape to a tuple of positive ints."""
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 entries, got {len(value)}")
    grid = []
    for n in value:
        if isinstance(n, bool):
            raise ValueError(f"{name} entries must be integers, got {tuple(value)}")
        try:
            as_int = int(n)
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"{name} entries must be integers, got {tuple(value)}") from None
        if as_int != n:
            raise ValueError(f"{name} entries must be integers, got {tuple(value)}")
        grid.append(as_int)
    grid = tuple(grid)
    if any(n < 1 for n in grid):
        raise ValueError(f"{name} entries must be positive, got {grid}")
    return grid


# ==============================
# Unit Conversion
# ==============================

def scale_cell(cell: Matrix3, alat: float) -> Matrix3:
    """Multiply every lattice vector component by `alat`."""
    return as_matrix3(alat * np.asarray(cell, dtype=float))


def scale_vector(r: Vector3, alat: float) -> Vector3:
    """Multiply every component of `r` by `alat`."""
    return as_vector3(alat * np.asarray(r, dtype=float))
