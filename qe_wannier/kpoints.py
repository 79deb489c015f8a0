"""
K-Point Grid Module

This module contains the uniform k-point grid used for the nscf step and
for the `kpoints` block of the Wannier90 input file.
"""

import numpy as np
from typing import Tuple


def generate_kpoint_grid(k_grid: Tuple[int, int, int]) -> np.ndarray:
    """
    Generate a uniform k-point grid in fractional (crystal) coordinates.

    The k-points are uniformly distributed in the first Brillouin zone
    using fractional coordinates: k = (i/nk1, j/nk2, k/nk3). The first
    index varies slowest, which is the ordering Wannier90 expects when it
    matches the `kpoints` block against `mp_grid`.

    Parameters
    ----------
    k_grid : tuple of 3 ints
        Dimensions of the k-point grid (nk1, nk2, nk3)

    Returns
    -------
    kpoints : ndarray of shape (num_kpoints, 3)
        Array of k-points in fractional coordinates

    Raises
    ------
    ValueError
        If the grid does not have three positive dimensions.

    Examples
    --------
    >>> kpoints = generate_kpoint_grid((2, 2, 1))
    >>> print(kpoints.shape)
    (4, 3)
    >>> print(kpoints[1])
    [0.  0.5 0. ]
    """
    if len(k_grid) != 3:
        raise ValueError(f"k_grid must have 3 dimensions, got {len(k_grid)}")
    if any(int(n) < 1 for n in k_grid):
        raise ValueError(f"k_grid dimensions must be positive, got {tuple(k_grid)}")

    nk1, nk2, nk3 = (int(n) for n in k_grid)
    kpoints = []

    for i in range(nk1):
        for j in range(nk2):
            for k in range(nk3):
                kx = i / nk1
                ky = j / nk2
                kz = k / nk3
                kpoints.append([kx, ky, kz])

    return np.array(kpoints, dtype=float)


def num_kpoints(k_grid: Tuple[int, int, int]) -> int:
    """Total number of points in a uniform grid."""
    nk1, nk2, nk3 = k_grid
    return int(nk1) * int(nk2) * int(nk3)
