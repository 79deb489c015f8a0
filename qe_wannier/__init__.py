"""
QE-to-Wannier90 Input Package

A Python package for deriving Quantum ESPRESSO nscf / bands inputs from an
scf input, and for deriving, validating and writing the Wannier90 `.win`
input that follows the nscf step.

Main Components
---------------
Wannier90Input : class
    Structured contents of a Wannier90 input file
validate : function
    Check cross-field invariants of a Wannier90Input

Workflow Functions
------------------
nscf_input : function
    Derive the nscf pw.x input from the scf input
bands_input : function
    Derive the bands pw.x input from the nscf input
w90_input : function
    Derive the Wannier90 input from the nscf input

Writer Functions
----------------
make_input_file : function
    Render a Wannier90Input as `.win` text
write_input_file : function
    Render and write a `.win` file

Example
-------
>>> from qe_wannier import nscf_input, w90_input, write_input_file
>>> from qe_wannier import MLWF, SiteProjection, SpeciesSite, AngularMomentum
>>> from qe_wannier.pw_input import Smearing
>>>
>>> nscf = nscf_input(scf, 1e-6, 44, Smearing.MARZARI_VANDERBILT, 0.01, (9, 9, 1))
>>> projections = [
...     SiteProjection(SpeciesSite("Se"), [AngularMomentum.P]),
...     SiteProjection(SpeciesSite("W"), [AngularMomentum.D]),
... ]
>>> w90 = w90_input(nscf, 22, MLWF(num_iter=100), None, None, projections)
>>> write_input_file(w90, 'wse2.win', verbose=True)
"""

__version__ = "0.1.0"

# Model
from .model import (
    Wannier90Input,
    ProjectionOnly,
    MLWF,
    Disentanglement,
    RandomProjection,
    SiteProjection,
    SpeciesSite,
    CartesianSite,
    CrystalSite,
    AngularMomentum,
    Cell,
    LatticeUnits,
    Positions,
    PositionCoordinateType,
    AtomCoordinate,
    validate,
    find_input_errors,
)

# Errors
from .errors import (
    QEWannierError,
    InputError,
    ValidationError,
    WorkflowError,
    WrongCalculationError,
    NoSymError,
    NumBandsError,
    WrongKPointsNscfError,
    WrongKPointsBandsError,
    CrystalSGError,
    UnsupportedCellError,
    InputFileWriteError,
)

# Workflow
from .workflow import (
    nscf_input,
    bands_input,
    w90_input,
)

# Formatting and writing
from .fields import field_value, format_real, format_bool
from .wannier90 import make_input_file, write_input_file
from .kpoints import generate_kpoint_grid

# Public API
__all__ = [
    # Model
    'Wannier90Input',
    'ProjectionOnly',
    'MLWF',
    'Disentanglement',
    'RandomProjection',
    'SiteProjection',
    'SpeciesSite',
    'CartesianSite',
    'CrystalSite',
    'AngularMomentum',
    'Cell',
    'LatticeUnits',
    'Positions',
    'PositionCoordinateType',
    'AtomCoordinate',
    'validate',
    'find_input_errors',

    # Errors
    'QEWannierError',
    'InputError',
    'ValidationError',
    'WorkflowError',
    'WrongCalculationError',
    'NoSymError',
    'NumBandsError',
    'WrongKPointsNscfError',
    'WrongKPointsBandsError',
    'CrystalSGError',
    'UnsupportedCellError',
    'InputFileWriteError',

    # Workflow
    'nscf_input',
    'bands_input',
    'w90_input',

    # Writer
    'field_value',
    'format_real',
    'format_bool',
    'make_input_file',
    'write_input_file',
    'generate_kpoint_grid',
]
