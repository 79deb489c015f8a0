"""
Unit tests for kpoints module

Tests uniform k-point grid generation.
"""

import sys
import os
import numpy as np
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qe_wannier.kpoints import generate_kpoint_grid, num_kpoints


def test_kpoint_grid_generation():
    """Test k-point grid generation."""
    print("\nTest 1: K-Point Grid Generation")
    print("-" * 50)

    k_grid = (2, 2, 2)
    kpoints = generate_kpoint_grid(k_grid)

    assert kpoints.shape == (8, 3), f"Expected (8, 3), got {kpoints.shape}"

    assert np.all(kpoints >= 0) and np.all(kpoints < 1), \
        "K-points outside [0, 1) range"

    for dim in range(3):
        unique_vals = np.unique(kpoints[:, dim])
        assert len(unique_vals) == 2, \
            f"Expected 2 unique values in dimension {dim}, got {len(unique_vals)}"

    print(f"  Generated {len(kpoints)} k-points for {k_grid} grid")
    print("  PASSED")


def test_grid_ordering():
    """Test that the first index varies slowest."""
    print("\nTest 2: Grid Ordering")
    print("-" * 50)

    kpoints = generate_kpoint_grid((2, 3, 1))

    expected = np.array([
        [0.0, 0.0, 0.0],
        [0.0, 1 / 3, 0.0],
        [0.0, 2 / 3, 0.0],
        [0.5, 0.0, 0.0],
        [0.5, 1 / 3, 0.0],
        [0.5, 2 / 3, 0.0],
    ])

    assert kpoints.shape == expected.shape
    # Exact equality: the values are the same i/n divisions
    assert np.array_equal(kpoints, expected), f"Unexpected ordering:\n{kpoints}"

    print("  PASSED")


def test_grid_spacing():
    """Test uniform spacing along every axis."""
    print("\nTest 3: Grid Spacing")
    print("-" * 50)

    k_grid = (4, 5, 6)
    kpoints = generate_kpoint_grid(k_grid)

    assert len(kpoints) == num_kpoints(k_grid) == 120

    for dim in range(3):
        unique_vals = np.sort(np.unique(kpoints[:, dim]))
        assert len(unique_vals) == k_grid[dim]
        spacings = np.diff(unique_vals)
        assert np.allclose(spacings, 1.0 / k_grid[dim], atol=1e-12), \
            f"Inconsistent spacing in dimension {dim}"

    unique_kpoints = np.unique(kpoints, axis=0)
    assert len(unique_kpoints) == len(kpoints), "Duplicate k-points found"

    print("  PASSED")


def test_gamma_only_grid():
    """A 1x1x1 grid is the single Gamma point."""
    kpoints = generate_kpoint_grid((1, 1, 1))
    assert kpoints.shape == (1, 3)
    assert np.all(kpoints == 0.0)


def test_invalid_grid():
    """Non-positive or wrongly sized grids are rejected."""
    with pytest.raises(ValueError, match="positive"):
        generate_kpoint_grid((4, 0, 1))

    with pytest.raises(ValueError, match="3 dimensions"):
        generate_kpoint_grid((4, 4))


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
