"""
Quantum ESPRESSO pw.x Input Model

A minimal, read-only model of the parts of a pw.x input that the stage
derivations in `workflow` consume: the calculation kind, occupations,
spin treatment, cell, atomic positions and k-points.

Lengths follow pw.x conventions: `alat` is in bohr, and cells or positions
tagged ALAT are in units of `alat`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .utils import Matrix3, Vector3, as_grid3, as_matrix3, as_vector3


# ==============================
# Calculation Kind
# ==============================

@dataclass(frozen=True)
class Scf:
    """`calculation = 'scf'`."""
    conv_thr: Optional[float] = None


@dataclass(frozen=True)
class Nscf:
    """`calculation = 'nscf'`."""
    diago_thr_init: float
    nbnd: Optional[int] = None
    nosym: Optional[bool] = None


@dataclass(frozen=True)
class Bands:
    """`calculation = 'bands'`."""
    diago_thr_init: float
    nbnd: Optional[int] = None
    nosym: Optional[bool] = None


@dataclass(frozen=True)
class Relax:
    """`calculation = 'relax'`."""
    conv_thr: Optional[float] = None


Calculation = Union[Scf, Nscf, Bands, Relax]


# ==============================
# Occupations and Spin
# ==============================

class Smearing(Enum):
    GAUSSIAN = "gaussian"
    METHFESSEL_PAXTON = "methfessel-paxton"
    MARZARI_VANDERBILT = "marzari-vanderbilt"
    FERMI_DIRAC = "fermi-dirac"


@dataclass(frozen=True)
class Fixed:
    """`occupations = 'fixed'`."""


@dataclass(frozen=True)
class Tetrahedra:
    """`occupations = 'tetrahedra'`."""


@dataclass(frozen=True)
class SmearingOccupations:
    """`occupations = 'smearing'` with the given smearing kind and `degauss` (Ry)."""
    smearing: Smearing
    degauss: float


Occupations = Union[Fixed, Tetrahedra, SmearingOccupations]


@dataclass(frozen=True)
class NonPolarized:
    """`nspin = 1`."""


@dataclass(frozen=True)
class CollinearPolarized:
    """`nspin = 2`."""
    starting_magnetization: Tuple[float, ...] = ()


@dataclass(frozen=True)
class Noncollinear:
    """`noncolin = .true.`, optionally with spin-orbit coupling."""
    spinorbit: bool = False


SpinType = Union[NonPolarized, CollinearPolarized, Noncollinear]


# ==============================
# Cell
# ==============================

class PwLatticeUnits(Enum):
    """Units of CELL_PARAMETERS."""
    ALAT = "alat"
    BOHR = "bohr"
    ANGSTROM = "angstrom"


@dataclass(frozen=True)
class PwCell:
    units: PwLatticeUnits
    cell: Matrix3

    def __post_init__(self):
        object.__setattr__(self, "cell", as_matrix3(self.cell, "cell"))


@dataclass(frozen=True)
class FreeCell:
    """`ibrav = 0` with explicit CELL_PARAMETERS."""
    cell: PwCell


@dataclass(frozen=True)
class BravaisIndex:
    """`ibrav != 0`: lattice generated by pw.x from `celldm`."""
    ibrav: int
    celldm: Tuple[float, ...] = ()


Ibrav = Union[FreeCell, BravaisIndex]


# ==============================
# Atomic Positions
# ==============================

class PwPositionCoordinateType(Enum):
    """Units of ATOMIC_POSITIONS."""
    ALAT_CARTESIAN = "alat"
    BOHR_CARTESIAN = "bohr"
    ANGSTROM_CARTESIAN = "angstrom"
    CRYSTAL = "crystal"
    CRYSTAL_SG = "crystal_sg"


@dataclass(frozen=True)
class PwAtomCoordinate:
    species: str
    r: Vector3

    def __post_init__(self):
        object.__setattr__(self, "r", as_vector3(self.r, "r"))


@dataclass(frozen=True)
class AtomicPositions:
    coordinate_type: PwPositionCoordinateType
    coordinates: Tuple[PwAtomCoordinate, ...]

    def __post_init__(self):
        object.__setattr__(self, "coordinates", tuple(self.coordinates))


# ==============================
# K-Points
# ==============================

@dataclass(frozen=True)
class GammaOnly:
    """`K_POINTS gamma`."""


@dataclass(frozen=True)
class Automatic:
    """`K_POINTS automatic`: Monkhorst-Pack grid generated by pw.x."""
    nk: Tuple[int, int, int]
    shift: Tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self):
        object.__setattr__(self, "nk", as_grid3(self.nk, "nk"))
        object.__setattr__(self, "shift", tuple(int(s) for s in self.shift))


@dataclass(frozen=True)
class CrystalUniform:
    """`K_POINTS crystal` listing every point of a uniform, unreduced grid."""
    nk: Tuple[int, int, int]

    def __post_init__(self):
        object.__setattr__(self, "nk", as_grid3(self.nk, "nk"))


@dataclass(frozen=True)
class BandPathPoint:
    """High-symmetry point `k` (crystal) followed by `num_points` points to the next one."""
    k: Vector3
    num_points: int

    def __post_init__(self):
        object.__setattr__(self, "k", as_vector3(self.k, "k"))


@dataclass(frozen=True)
class CrystalBands:
    """`K_POINTS crystal_b`: band structure path."""
    path: Tuple[BandPathPoint, ...]

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))


KPoints = Union[GammaOnly, Automatic, CrystalUniform, CrystalBands]


# ==============================
# Input
# ==============================

@dataclass(frozen=True)
class System:
    """
    The `&system` namelist.

    Attributes
    ----------
    ibrav : FreeCell or BravaisIndex
        Lattice definition
    alat : float
        Lattice parameter in bohr
    occupations : Occupations
        Occupation scheme
    ecutwfc : float
        Wavefunction cutoff (Ry)
    ecutrho : float, optional
        Charge density cutoff (Ry)
    spin_type : SpinType, optional
        Spin treatment; None is equivalent to unpolarized
    """
    ibrav: Ibrav
    alat: float
    occupations: Occupations
    ecutwfc: float = 30.0
    ecutrho: Optional[float] = None
    spin_type: Optional[SpinType] = None


@dataclass(frozen=True)
class PwInput:
    """A pw.x input, as seen by the stage derivations."""
    calculation: Calculation
    system: System
    atomic_positions: AtomicPositions
    k_points: KPoints
    prefix: str = "pwscf"
    pseudo_dir: Optional[str] = None
    atomic_species: Tuple[Tuple[str, float, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "atomic_species", tuple(tuple(s) for s in self.atomic_species))
