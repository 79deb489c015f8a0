"""
Calculation Stage Module

This module derives the input of one calculation stage from the input of
the previous one:

    scf  --nscf_input-->  nscf  --bands_input-->  bands
                           |
                           +----w90_input-->  Wannier90 input

Each function is pure. The upstream input is never modified; on a failed
precondition a single WorkflowError subclass is raised and nothing is
returned.
"""

from dataclasses import replace
from typing import Optional, Sequence, Tuple

from .errors import (
    CrystalSGError,
    NoSymError,
    NumBandsError,
    UnsupportedCellError,
    WrongCalculationError,
    WrongKPointsBandsError,
    WrongKPointsNscfError,
)
from .model import (
    AtomCoordinate,
    Cell,
    Disentanglement,
    LatticeUnits,
    MLWFIterationMode,
    PositionCoordinateType,
    Positions,
    Projection,
    Wannier90Input,
)
from .pw_input import (
    Bands,
    BravaisIndex,
    CollinearPolarized,
    CrystalBands,
    CrystalUniform,
    FreeCell,
    KPoints,
    NonPolarized,
    Noncollinear,
    Nscf,
    PwInput,
    PwLatticeUnits,
    PwPositionCoordinateType,
    Scf,
    Smearing,
    SmearingOccupations,
    SpinType,
)
from .utils import scale_cell, scale_vector


# ==============================
# pw.x Stages
# ==============================

def nscf_input(
    scf: PwInput,
    diago_thr_init: float,
    num_bands: int,
    smearing: Smearing,
    degauss: float,
    nscf_nk: Tuple[int, int, int],
) -> PwInput:
    """
    Derive the nscf input from an scf input.

    The nscf step disables symmetry reduction so that the full uniform
    grid is visited, as required both by Wannier90 and by a subsequent
    band structure step.

    Parameters
    ----------
    scf : PwInput
        Input of the scf step; `calculation` must be Scf
    diago_thr_init : float
        Initial diagonalization threshold
    num_bands : int
        Number of bands to compute (`nbnd`)
    smearing : Smearing
        Smearing kind for the occupations
    degauss : float
        Smearing width (Ry)
    nscf_nk : tuple of 3 ints
        Uniform k-point grid shape

    Returns
    -------
    PwInput
        The nscf input

    Raises
    ------
    WrongCalculationError
        If `scf` is not an scf calculation.
    """
    if not isinstance(scf.calculation, Scf):
        raise WrongCalculationError(
            f"nscf input must be derived from an scf calculation, "
            f"got {type(scf.calculation).__name__}"
        )

    system = replace(scf.system, occupations=SmearingOccupations(smearing, degauss))

    return replace(
        scf,
        calculation=Nscf(diago_thr_init=diago_thr_init, nbnd=num_bands, nosym=True),
        system=system,
        k_points=CrystalUniform(nscf_nk),
    )


def bands_input(nscf: PwInput, bands_kpoints: KPoints) -> PwInput:
    """
    Derive a band structure input from an nscf input.

    Parameters
    ----------
    nscf : PwInput
        Input of the nscf step; must be Nscf with `nosym = True`
    bands_kpoints : KPoints
        Band path; must be CrystalBands

    Returns
    -------
    PwInput
        The bands input, with the nscf diagonalization threshold, `nbnd`
        and `nosym` carried over

    Raises
    ------
    WrongCalculationError
        If `nscf` is not an nscf calculation.
    NoSymError
        If `nosym` is unset or False.
    WrongKPointsBandsError
        If `bands_kpoints` is not a band path.
    """
    calc = nscf.calculation
    if not isinstance(calc, Nscf):
        raise WrongCalculationError(
            f"bands input must be derived from an nscf calculation, "
            f"got {type(calc).__name__}"
        )

    # The band path is only consistent with the nscf step if that step
    # visited the full, unreduced grid.
    if calc.nosym is not True:
        raise NoSymError()

    if not isinstance(bands_kpoints, CrystalBands):
        raise WrongKPointsBandsError(
            f"Must input `CrystalBands` k-points, got {type(bands_kpoints).__name__}"
        )

    return replace(
        nscf,
        calculation=Bands(
            diago_thr_init=calc.diago_thr_init,
            nbnd=calc.nbnd,
            nosym=calc.nosym,
        ),
        k_points=bands_kpoints,
    )


# ==============================
# Wannier90 Input
# ==============================

def w90_input(
    nscf: PwInput,
    num_wann: int,
    mlwf_iteration_mode: MLWFIterationMode,
    disentanglement: Optional[Disentanglement],
    projection_units: Optional[LatticeUnits],
    projections: Sequence[Projection],
) -> Wannier90Input:
    """
    Derive the Wannier90 input from an nscf input.

    Band count, spinor treatment, cell, atomic positions and k-point grid
    are taken from the nscf input, converting pw.x `alat` units to bohr.
    The real-space Hamiltonian is always requested (`write_hr = .true.`).

    Parameters
    ----------
    nscf : PwInput
        Input of the nscf step; must be Nscf with `nbnd` set and
        CrystalUniform k-points
    num_wann : int
        Number of Wannier functions
    mlwf_iteration_mode : ProjectionOnly or MLWF
        Localization iteration policy
    disentanglement : Disentanglement, optional
        Disentanglement window
    projection_units : LatticeUnits, optional
        Units of Cartesian projection centres
    projections : sequence of Projection
        Initial projections

    Returns
    -------
    Wannier90Input

    Raises
    ------
    WrongCalculationError
        If `nscf` is not an nscf calculation.
    NumBandsError
        If `nbnd` is not set.
    UnsupportedCellError
        If the cell is not given as explicit CELL_PARAMETERS.
    CrystalSGError
        If atomic positions are in `crystal_sg` form.
    WrongKPointsNscfError
        If the k-points are not CrystalUniform.
    """
    calc = nscf.calculation
    if not isinstance(calc, Nscf):
        raise WrongCalculationError(
            f"Wannier90 input must be derived from an nscf calculation, "
            f"got {type(calc).__name__}"
        )
    if calc.nbnd is None:
        raise NumBandsError()
    num_bands = calc.nbnd

    spinors = _spinors(nscf.system.spin_type)
    unit_cell_cart = _w90_cell(nscf)
    positions = _w90_positions(nscf)

    if not isinstance(nscf.k_points, CrystalUniform):
        raise WrongKPointsNscfError(
            f"Must have `CrystalUniform` k-points in nscf calculation, "
            f"got {type(nscf.k_points).__name__}"
        )
    kpoints = nscf.k_points.nk

    return Wannier90Input(
        num_bands=num_bands,
        num_wann=num_wann,
        write_hr=True,
        mlwf_iteration_mode=mlwf_iteration_mode,
        disentanglement=disentanglement,
        spinors=spinors,
        projection_units=projection_units,
        projections=projections,
        unit_cell_cart=unit_cell_cart,
        positions=positions,
        kpoints=kpoints,
    )


def _spinors(spin_type: Optional[SpinType]) -> bool:
    if spin_type is None:
        return False
    elif isinstance(spin_type, (NonPolarized, CollinearPolarized)):
        return False
    elif isinstance(spin_type, Noncollinear):
        return True
    raise TypeError(f"Unhandled spin type: {spin_type!r}")


def _w90_cell(nscf: PwInput) -> Cell:
    ibrav = nscf.system.ibrav

    if isinstance(ibrav, BravaisIndex):
        # Lattice vectors for ibrav != 0 are generated inside pw.x from
        # celldm; only explicit CELL_PARAMETERS are supported here.
        raise UnsupportedCellError(
            f"ibrav = {ibrav.ibrav} is unsupported; give CELL_PARAMETERS with ibrav = 0"
        )
    elif not isinstance(ibrav, FreeCell):
        raise TypeError(f"Unhandled ibrav: {ibrav!r}")

    cell = ibrav.cell
    if cell.units is PwLatticeUnits.ALAT:
        return Cell(LatticeUnits.BOHR, scale_cell(cell.cell, nscf.system.alat))
    elif cell.units is PwLatticeUnits.BOHR:
        return Cell(LatticeUnits.BOHR, cell.cell)
    elif cell.units is PwLatticeUnits.ANGSTROM:
        return Cell(LatticeUnits.ANGSTROM, cell.cell)
    raise TypeError(f"Unhandled cell units: {cell.units!r}")


def _w90_positions(nscf: PwInput) -> Positions:
    positions = nscf.atomic_positions
    coord_type = positions.coordinate_type
    alat = nscf.system.alat

    if coord_type is PwPositionCoordinateType.ALAT_CARTESIAN:
        coordinates = [
            AtomCoordinate(c.species, scale_vector(c.r, alat))
            for c in positions.coordinates
        ]
        return Positions(PositionCoordinateType.BOHR_CARTESIAN, coordinates)
    elif coord_type is PwPositionCoordinateType.BOHR_CARTESIAN:
        w90_type = PositionCoordinateType.BOHR_CARTESIAN
    elif coord_type is PwPositionCoordinateType.ANGSTROM_CARTESIAN:
        w90_type = PositionCoordinateType.ANGSTROM_CARTESIAN
    elif coord_type is PwPositionCoordinateType.CRYSTAL:
        w90_type = PositionCoordinateType.CRYSTAL
    elif coord_type is PwPositionCoordinateType.CRYSTAL_SG:
        raise CrystalSGError()
    else:
        raise TypeError(f"Unhandled coordinate type: {coord_type!r}")

    coordinates = [AtomCoordinate(c.species, c.r) for c in positions.coordinates]
    return Positions(w90_type, coordinates)
