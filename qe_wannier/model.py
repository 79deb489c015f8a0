"""
Wannier90 Input Model

This module defines the structured representation of a Wannier90 `.win`
input: band counts, the localization iteration policy, the optional
disentanglement window, spinor treatment, projections, the unit cell,
atomic positions and the k-point grid.

All types are immutable value objects. Sum types (iteration policy,
projection, projection site) are modelled as a small set of frozen
dataclasses; unit and frame tags are enums. Every geometry value is
paired with an explicit unit or coordinate frame.

The model can be converted to and from plain dictionaries (and JSON
files) using an externally tagged encoding for the sum types, e.g.
``"ProjectionOnly"`` or ``{"MLWF": {"num_iter": 100}}``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import InputError, ValidationError
from .utils import Matrix3, Vector3, as_grid3, as_matrix3, as_vector3


# ==============================
# Tags
# ==============================

class LatticeUnits(Enum):
    """Length unit of a Cartesian lattice or projection centre."""
    BOHR = "Bohr"
    ANGSTROM = "Angstrom"


class PositionCoordinateType(Enum):
    """Coordinate frame of the atomic positions."""
    BOHR_CARTESIAN = "BohrCartesian"
    ANGSTROM_CARTESIAN = "AngstromCartesian"
    CRYSTAL = "Crystal"


class AngularMomentum(Enum):
    """Angular momentum channel of a projection; the value is `l`."""
    S = 0
    P = 1
    D = 2
    F = 3
    # TODO: hybrid orbitals (sp3, sp2, ...) and individual l=l,mr=mr orbitals.


# ==============================
# Iteration Policy
# ==============================

@dataclass(frozen=True)
class ProjectionOnly:
    """
    Use projected wavefunctions only: do not mix to achieve maximal
    localization. Written as `num_iter = 0`.
    """


@dataclass(frozen=True)
class MLWF:
    """
    Mix projected wavefunctions to achieve maximal localization, using at
    most `num_iter` iterations.
    """
    num_iter: int

    def __post_init__(self):
        if self.num_iter < 0:
            raise ValueError(f"num_iter must be non-negative, got {self.num_iter}")


MLWFIterationMode = Union[ProjectionOnly, MLWF]


@dataclass(frozen=True)
class Disentanglement:
    """Energy window (eV) and mixing parameters for disentanglement."""
    dis_win_min: float
    dis_win_max: float
    dis_froz_min: float
    dis_froz_max: float
    dis_num_iter: int
    dis_mix_ratio: float


# ==============================
# Projections
# ==============================

@dataclass(frozen=True)
class SpeciesSite:
    """Projection centred on all atoms of the given species."""
    species: str


@dataclass(frozen=True)
class CartesianSite:
    """`c = x, y, z` projection centred at a Cartesian position."""
    center: Vector3

    def __post_init__(self):
        object.__setattr__(self, "center", as_vector3(self.center, "center"))


@dataclass(frozen=True)
class CrystalSite:
    """`f = r1, r2, r3` projection centred at a fractional position."""
    center: Vector3

    def __post_init__(self):
        object.__setattr__(self, "center", as_vector3(self.center, "center"))


ProjectionSite = Union[SpeciesSite, CartesianSite, CrystalSite]


@dataclass(frozen=True)
class RandomProjection:
    """Random initial projections for any Wannier functions not otherwise seeded."""


@dataclass(frozen=True)
class SiteProjection:
    """
    Projection onto atomic-like orbitals centred on a site.

    Attributes
    ----------
    site : ProjectionSite
        Where the orbitals are centred
    ang_mtm : tuple of AngularMomentum
        Angular momentum channels, in order (at least one)
    zaxis, xaxis : 3-vector, optional
        Orientation of the local axes
    radial : int, optional
        Radial quantum number of the radial function
    zona : float, optional
        Diffuseness of the radial function (Z/a)
    """
    site: ProjectionSite
    ang_mtm: Tuple[AngularMomentum, ...]
    zaxis: Optional[Vector3] = None
    xaxis: Optional[Vector3] = None
    radial: Optional[int] = None
    zona: Optional[float] = None

    def __post_init__(self):
        ang_mtm = tuple(self.ang_mtm)
        if not ang_mtm:
            raise ValueError("A site projection needs at least one angular momentum channel")
        object.__setattr__(self, "ang_mtm", ang_mtm)
        if self.zaxis is not None:
            object.__setattr__(self, "zaxis", as_vector3(self.zaxis, "zaxis"))
        if self.xaxis is not None:
            object.__setattr__(self, "xaxis", as_vector3(self.xaxis, "xaxis"))


Projection = Union[RandomProjection, SiteProjection]


# ==============================
# Geometry
# ==============================

@dataclass(frozen=True)
class Cell:
    """Lattice vectors (rows) with their length unit."""
    units: LatticeUnits
    cell: Matrix3

    def __post_init__(self):
        object.__setattr__(self, "cell", as_matrix3(self.cell, "cell"))


@dataclass(frozen=True)
class AtomCoordinate:
    species: str
    r: Vector3

    def __post_init__(self):
        object.__setattr__(self, "r", as_vector3(self.r, "r"))


@dataclass(frozen=True)
class Positions:
    coordinate_type: PositionCoordinateType
    coordinates: Tuple[AtomCoordinate, ...]

    def __post_init__(self):
        object.__setattr__(self, "coordinates", tuple(self.coordinates))

    @property
    def species(self) -> List[str]:
        """Distinct species labels in order of first appearance."""
        seen = []
        for coord in self.coordinates:
            if coord.species not in seen:
                seen.append(coord.species)
        return seen


# ==============================
# Root Entity
# ==============================

@dataclass(frozen=True)
class Wannier90Input:
    """
    Complete contents of one Wannier90 `.win` input file.

    Attributes
    ----------
    num_bands : int
        Number of Bloch bands passed to Wannier90
    num_wann : int
        Number of Wannier functions to construct
    mlwf_iteration_mode : ProjectionOnly or MLWF
        Localization iteration policy (`num_iter`)
    unit_cell_cart : Cell
        Lattice vectors
    positions : Positions
        Atomic positions
    kpoints : tuple of 3 ints
        Uniform k-point grid shape (`mp_grid`)
    projections : tuple of Projection
        Initial projections, in output order
    write_hr : bool, optional
        Write the real-space Hamiltonian; omitted from the file if None
    disentanglement : Disentanglement, optional
        Disentanglement window; the block is omitted if None
    spinors : bool
        Whether the Bloch states are spinors
    projection_units : LatticeUnits, optional
        Units of Cartesian projection centres
    """
    num_bands: int
    num_wann: int
    mlwf_iteration_mode: MLWFIterationMode
    unit_cell_cart: Cell
    positions: Positions
    kpoints: Tuple[int, int, int]
    projections: Tuple[Projection, ...] = field(default_factory=tuple)
    write_hr: Optional[bool] = None
    disentanglement: Optional[Disentanglement] = None
    spinors: bool = False
    projection_units: Optional[LatticeUnits] = None

    def __post_init__(self):
        object.__setattr__(self, "projections", tuple(self.projections))
        object.__setattr__(self, "kpoints", as_grid3(self.kpoints, "kpoints"))

    def to_dict(self) -> Dict[str, Any]:
        return input_to_dict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Wannier90Input":
        return input_from_dict(d)

    def to_json(self, path: str) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @staticmethod
    def from_json(path: str) -> "Wannier90Input":
        with open(path, "r") as f:
            d = json.load(f)
        return Wannier90Input.from_dict(d)


# ==============================
# Validation
# ==============================

def find_input_errors(input: Wannier90Input) -> List[InputError]:
    """
    Collect every invariant violation in `input` without raising.

    Checks performed
    ----------------
    - `RandomProjection` appears at most once in `projections`.

    Not checked (yet)
    -----------------
    - Species of atom-centred projections exist in `positions`.
    - The number of projections is compatible with `num_wann` when no
      random projection is present. Whether this should be enforced is
      still open, so it is deliberately left unvalidated.
    """
    errs = []

    random_count = sum(1 for p in input.projections if isinstance(p, RandomProjection))
    if random_count > 1:
        errs.append(InputError.RANDOM_COUNT)

    return errs


def validate(input: Wannier90Input) -> None:
    """
    Check cross-field invariants of a Wannier90 input.

    Raises
    ------
    ValidationError
        Listing all violations, if any were found.
    """
    errs = find_input_errors(input)
    if errs:
        raise ValidationError(errs)


# ==============================
# Dictionary Encoding
# ==============================

def _tagged(d: Any, what: str) -> Tuple[str, Any]:
    """Split an externally tagged variant into (tag, payload)."""
    if isinstance(d, str):
        return d, None
    if isinstance(d, dict) and len(d) == 1:
        return next(iter(d.items()))
    raise ValueError(f"Malformed {what}: {d!r}")


def _enum_from_name(enum_cls, name: str, what: str):
    for member in enum_cls:
        if member.value == name:
            return member
    raise ValueError(f"Unknown {what}: {name!r}")


def _ang_mtm_from_name(name: str) -> AngularMomentum:
    try:
        return AngularMomentum[name]
    except KeyError:
        raise ValueError(f"Unknown angular momentum: {name!r}") from None


def _iteration_mode_to_dict(mode: MLWFIterationMode) -> Any:
    if isinstance(mode, ProjectionOnly):
        return "ProjectionOnly"
    elif isinstance(mode, MLWF):
        return {"MLWF": {"num_iter": mode.num_iter}}
    raise TypeError(f"Not an iteration mode: {mode!r}")


def _iteration_mode_from_dict(d: Any) -> MLWFIterationMode:
    tag, payload = _tagged(d, "mlwf_iteration_mode")
    if tag == "ProjectionOnly":
        return ProjectionOnly()
    elif tag == "MLWF":
        return MLWF(num_iter=int(payload["num_iter"]))
    raise ValueError(f"Unknown mlwf_iteration_mode: {tag!r}")


def _site_to_dict(site: ProjectionSite) -> Dict[str, Any]:
    if isinstance(site, SpeciesSite):
        return {"Species": site.species}
    elif isinstance(site, CartesianSite):
        return {"CenterCartesian": list(site.center)}
    elif isinstance(site, CrystalSite):
        return {"CenterCrystal": list(site.center)}
    raise TypeError(f"Not a projection site: {site!r}")


def _site_from_dict(d: Any) -> ProjectionSite:
    tag, payload = _tagged(d, "projection site")
    if tag == "Species":
        return SpeciesSite(str(payload))
    elif tag == "CenterCartesian":
        return CartesianSite(payload)
    elif tag == "CenterCrystal":
        return CrystalSite(payload)
    raise ValueError(f"Unknown projection site: {tag!r}")


def _projection_to_dict(proj: Projection) -> Any:
    if isinstance(proj, RandomProjection):
        return "Random"
    elif isinstance(proj, SiteProjection):
        return {
            "Site": {
                "site": _site_to_dict(proj.site),
                "ang_mtm": [l.name for l in proj.ang_mtm],
                "zaxis": list(proj.zaxis) if proj.zaxis is not None else None,
                "xaxis": list(proj.xaxis) if proj.xaxis is not None else None,
                "radial": proj.radial,
                "zona": proj.zona,
            }
        }
    raise TypeError(f"Not a projection: {proj!r}")


def _projection_from_dict(d: Any) -> Projection:
    tag, payload = _tagged(d, "projection")
    if tag == "Random":
        return RandomProjection()
    elif tag == "Site":
        return SiteProjection(
            site=_site_from_dict(payload["site"]),
            ang_mtm=[_ang_mtm_from_name(name) for name in payload["ang_mtm"]],
            zaxis=payload.get("zaxis"),
            xaxis=payload.get("xaxis"),
            radial=payload.get("radial"),
            zona=payload.get("zona"),
        )
    raise ValueError(f"Unknown projection: {tag!r}")


def input_to_dict(input: Wannier90Input) -> Dict[str, Any]:
    """Encode a Wannier90 input as JSON-compatible plain data."""
    dis = input.disentanglement
    return {
        "num_bands": input.num_bands,
        "num_wann": input.num_wann,
        "write_hr": input.write_hr,
        "mlwf_iteration_mode": _iteration_mode_to_dict(input.mlwf_iteration_mode),
        "disentanglement": None if dis is None else {
            "dis_win_min": dis.dis_win_min,
            "dis_win_max": dis.dis_win_max,
            "dis_froz_min": dis.dis_froz_min,
            "dis_froz_max": dis.dis_froz_max,
            "dis_num_iter": dis.dis_num_iter,
            "dis_mix_ratio": dis.dis_mix_ratio,
        },
        "spinors": input.spinors,
        "projection_units": (
            None if input.projection_units is None else input.projection_units.value
        ),
        "projections": [_projection_to_dict(p) for p in input.projections],
        "unit_cell_cart": {
            "units": input.unit_cell_cart.units.value,
            "cell": [list(row) for row in input.unit_cell_cart.cell],
        },
        "positions": {
            "coordinate_type": input.positions.coordinate_type.value,
            "coordinates": [
                {"species": c.species, "r": list(c.r)}
                for c in input.positions.coordinates
            ],
        },
        "kpoints": list(input.kpoints),
    }


def _optional_bool(d: Dict[str, Any], key: str, default: Optional[bool]) -> Optional[bool]:
    value = d.get(key, default)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"{key} must be true, false or null, got {value!r}")
    return value


def input_from_dict(d: Dict[str, Any]) -> Wannier90Input:
    """Decode a Wannier90 input from the form produced by `input_to_dict`."""
    if not isinstance(d, dict):
        raise ValueError(f"Malformed Wannier90 input: expected an object, got {type(d).__name__}")

    dis = d.get("disentanglement")
    units = d.get("projection_units")
    cell = d["unit_cell_cart"]
    positions = d["positions"]

    spinors = _optional_bool(d, "spinors", False)
    if spinors is None:
        raise ValueError("spinors must be true or false, got None")

    return Wannier90Input(
        num_bands=int(d["num_bands"]),
        num_wann=int(d["num_wann"]),
        write_hr=_optional_bool(d, "write_hr", None),
        mlwf_iteration_mode=_iteration_mode_from_dict(d["mlwf_iteration_mode"]),
        disentanglement=None if dis is None else Disentanglement(
            dis_win_min=float(dis["dis_win_min"]),
            dis_win_max=float(dis["dis_win_max"]),
            dis_froz_min=float(dis["dis_froz_min"]),
            dis_froz_max=float(dis["dis_froz_max"]),
            dis_num_iter=int(dis["dis_num_iter"]),
            dis_mix_ratio=float(dis["dis_mix_ratio"]),
        ),
        spinors=spinors,
        projection_units=(
            None if units is None else _enum_from_name(LatticeUnits, units, "lattice units")
        ),
        projections=[_projection_from_dict(p) for p in d.get("projections", [])],
        unit_cell_cart=Cell(
            units=_enum_from_name(LatticeUnits, cell["units"], "lattice units"),
            cell=cell["cell"],
        ),
        positions=Positions(
            coordinate_type=_enum_from_name(
                PositionCoordinateType, positions["coordinate_type"], "coordinate type"
            ),
            coordinates=[
                AtomCoordinate(species=c["species"], r=c["r"])
                for c in positions["coordinates"]
            ],
        ),
        kpoints=d["kpoints"],
    )
