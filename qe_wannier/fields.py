"""
Field Formatting Module

Each renderable value in a Wannier90 input has exactly one textual token:
the right-hand side of a `field_name = value` line, or one entry line of a
`begin ... end` block. `field_value` dispatches on the value's type; every
model type that can appear in the file registers a renderer here.
"""

import math
from functools import singledispatch

import numpy as np

from .model import (
    AngularMomentum,
    CartesianSite,
    CrystalSite,
    LatticeUnits,
    MLWF,
    ProjectionOnly,
    RandomProjection,
    SiteProjection,
    SpeciesSite,
)


def format_real(x: float) -> str:
    """
    Render a real number in shortest round-trip positional form.

    No exponent is ever used and integral values carry no fractional part,
    e.g. ``0.0 -> "0"``, ``0.5 -> "0.5"``, ``1e-7 -> "0.0000001"``.
    """
    x = float(x)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    return np.format_float_positional(x, unique=True, trim="-")


def format_bool(b: bool) -> str:
    """Fortran logical literal."""
    return ".true." if b else ".false."


def format_vector(r, sep: str = " ") -> str:
    return sep.join(format_real(x) for x in r)


@singledispatch
def field_value(value) -> str:
    """
    Textual representation of `value` in a Wannier90 input file.

    Raises
    ------
    TypeError
        If no renderer is registered for the type of `value`.
    """
    raise TypeError(f"No Wannier90 field representation for {type(value).__name__}")


# ==============================
# Iteration Policy
# ==============================

@field_value.register
def _(value: ProjectionOnly) -> str:
    return "0"


@field_value.register
def _(value: MLWF) -> str:
    return str(value.num_iter)


# ==============================
# Units
# ==============================

@field_value.register
def _(value: LatticeUnits) -> str:
    if value is LatticeUnits.BOHR:
        return "bohr"
    elif value is LatticeUnits.ANGSTROM:
        return "ang"
    raise TypeError(f"Unhandled lattice units: {value!r}")


# ==============================
# Projections
# ==============================

@field_value.register
def _(value: AngularMomentum) -> str:
    return f"l={value.value}"


@field_value.register
def _(value: SpeciesSite) -> str:
    return value.species


@field_value.register
def _(value: CartesianSite) -> str:
    return f"c = {format_vector(value.center, ', ')}"


@field_value.register
def _(value: CrystalSite) -> str:
    return f"f = {format_vector(value.center, ', ')}"


@field_value.register
def _(value: RandomProjection) -> str:
    return "random"


@field_value.register
def _(value: SiteProjection) -> str:
    # <site>:<l1>;<l2>...[:z=..][:x=..][:r=..][:zona=..]
    proj = field_value(value.site) + ":"
    proj += ";".join(field_value(l) for l in value.ang_mtm)

    if value.zaxis is not None:
        proj += f":z={format_vector(value.zaxis, ',')}"
    if value.xaxis is not None:
        proj += f":x={format_vector(value.xaxis, ',')}"
    if value.radial is not None:
        proj += f":r={value.radial}"
    if value.zona is not None:
        proj += f":zona={format_real(value.zona)}"

    return proj
