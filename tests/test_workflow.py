"""
Unit tests for workflow module

Tests the scf -> nscf -> bands derivations and the derivation of the
Wannier90 input from the nscf input, including every failure mode.
"""

import sys
import os
from dataclasses import replace

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qe_wannier.errors import (
    CrystalSGError,
    NoSymError,
    NumBandsError,
    UnsupportedCellError,
    WorkflowError,
    WrongCalculationError,
    WrongKPointsBandsError,
    WrongKPointsNscfError,
)
from qe_wannier.model import (
    AngularMomentum,
    Disentanglement,
    LatticeUnits,
    MLWF,
    PositionCoordinateType,
    ProjectionOnly,
    RandomProjection,
    SiteProjection,
    SpeciesSite,
)
from qe_wannier.pw_input import (
    Automatic,
    AtomicPositions,
    BandPathPoint,
    Bands,
    BravaisIndex,
    CollinearPolarized,
    CrystalBands,
    CrystalUniform,
    Fixed,
    FreeCell,
    GammaOnly,
    NonPolarized,
    Noncollinear,
    Nscf,
    PwAtomCoordinate,
    PwCell,
    PwInput,
    PwLatticeUnits,
    PwPositionCoordinateType,
    Relax,
    Scf,
    Smearing,
    SmearingOccupations,
    System,
)
from qe_wannier.workflow import bands_input, nscf_input, w90_input


# ==============================================================================
# Helper Functions
# ==============================================================================

ALAT = 6.27207951898

WSE2_CELL_ALAT = [
    [0.5, -0.866025403784, 0.0],
    [0.5, 0.866025403784, 0.0],
    [0.0, 0.0, 10.9474508],
]


def create_scf_input(
    cell_units: PwLatticeUnits = PwLatticeUnits.ALAT,
    coordinate_type: PwPositionCoordinateType = PwPositionCoordinateType.CRYSTAL,
    spin_type=None,
) -> PwInput:
    """Create a monolayer WSe2-like scf input."""
    system = System(
        ibrav=FreeCell(PwCell(cell_units, WSE2_CELL_ALAT)),
        alat=ALAT,
        occupations=Fixed(),
        ecutwfc=60.0,
        spin_type=spin_type,
    )
    positions = AtomicPositions(
        coordinate_type,
        [
            PwAtomCoordinate("Se", [0.0, 0.0, 0.275217856494]),
            PwAtomCoordinate("W", [0.333333333333, 0.666666666667, 0.321438654707]),
            PwAtomCoordinate("Se", [0.0, 0.0, 0.36765945292]),
        ],
    )
    return PwInput(
        calculation=Scf(conv_thr=1e-8),
        system=system,
        atomic_positions=positions,
        k_points=Automatic((12, 12, 1)),
        prefix="wse2",
    )


def create_nscf_input(**kwargs) -> PwInput:
    return nscf_input(
        create_scf_input(**kwargs),
        diago_thr_init=1e-6,
        num_bands=44,
        smearing=Smearing.MARZARI_VANDERBILT,
        degauss=0.01,
        nscf_nk=(9, 9, 1),
    )


def create_band_path() -> CrystalBands:
    return CrystalBands([
        BandPathPoint([0.0, 0.0, 0.0], 40),
        BandPathPoint([0.5, 0.0, 0.0], 20),
        BandPathPoint([1 / 3, 1 / 3, 0.0], 40),
        BandPathPoint([0.0, 0.0, 0.0], 1),
    ])


def derive_w90(nscf: PwInput):
    projections = [
        SiteProjection(SpeciesSite("Se"), [AngularMomentum.P]),
        SiteProjection(SpeciesSite("W"), [AngularMomentum.D]),
    ]
    disentanglement = Disentanglement(-6.5582, 8.4418, -4.5582, 6.4418, 1000, 0.5)
    return w90_input(nscf, 22, ProjectionOnly(), disentanglement, None, projections)


# ==============================================================================
# Tests for nscf_input
# ==============================================================================

class TestNscfInput:
    """Tests for deriving the nscf input from the scf input."""

    def test_from_scf(self):
        scf = create_scf_input()
        nscf = create_nscf_input()

        assert nscf.calculation == Nscf(diago_thr_init=1e-6, nbnd=44, nosym=True)
        assert nscf.system.occupations == SmearingOccupations(Smearing.MARZARI_VANDERBILT, 0.01)
        assert nscf.k_points == CrystalUniform((9, 9, 1))

        # Everything else is carried over
        assert nscf.prefix == scf.prefix
        assert nscf.atomic_positions == scf.atomic_positions
        assert nscf.system.ibrav == scf.system.ibrav
        assert nscf.system.alat == scf.system.alat
        assert nscf.system.ecutwfc == scf.system.ecutwfc

    def test_scf_is_unchanged(self):
        scf = create_scf_input()
        before = replace(scf)

        nscf_input(scf, 1e-6, 44, Smearing.GAUSSIAN, 0.02, (6, 6, 1))

        assert scf == before
        assert isinstance(scf.calculation, Scf)
        assert scf.k_points == Automatic((12, 12, 1))

    def test_from_nscf_fails(self):
        with pytest.raises(WrongCalculationError):
            nscf_input(create_nscf_input(), 1e-6, 44, Smearing.GAUSSIAN, 0.02, (6, 6, 1))

    def test_from_bands_fails(self):
        bands = bands_input(create_nscf_input(), create_band_path())
        with pytest.raises(WrongCalculationError):
            nscf_input(bands, 1e-6, 44, Smearing.GAUSSIAN, 0.02, (6, 6, 1))

    def test_from_relax_fails(self):
        relax = replace(create_scf_input(), calculation=Relax())
        with pytest.raises(WorkflowError, match="scf"):
            nscf_input(relax, 1e-6, 44, Smearing.GAUSSIAN, 0.02, (6, 6, 1))


# ==============================================================================
# Tests for bands_input
# ==============================================================================

class TestBandsInput:
    """Tests for deriving the bands input from the nscf input."""

    def test_from_nscf(self):
        nscf = create_nscf_input()
        path = create_band_path()

        bands = bands_input(nscf, path)

        assert bands.calculation == Bands(diago_thr_init=1e-6, nbnd=44, nosym=True)
        assert bands.k_points == path
        assert bands.system == nscf.system
        assert bands.atomic_positions == nscf.atomic_positions

    @pytest.mark.parametrize("nosym", [False, None])
    def test_nosym_required(self, nosym):
        nscf = create_nscf_input()
        nscf = replace(nscf, calculation=replace(nscf.calculation, nosym=nosym))

        with pytest.raises(NoSymError, match="nosym"):
            bands_input(nscf, create_band_path())

    @pytest.mark.parametrize("k_points", [
        CrystalUniform((9, 9, 1)),
        Automatic((9, 9, 1)),
        GammaOnly(),
    ])
    def test_band_path_required(self, k_points):
        with pytest.raises(WrongKPointsBandsError):
            bands_input(create_nscf_input(), k_points)

    def test_from_scf_fails(self):
        with pytest.raises(WrongCalculationError):
            bands_input(create_scf_input(), create_band_path())

    def test_calculation_checked_before_kpoints(self):
        with pytest.raises(WrongCalculationError):
            bands_input(create_scf_input(), GammaOnly())


# ==============================================================================
# Tests for w90_input
# ==============================================================================

class TestW90Input:
    """Tests for deriving the Wannier90 input from the nscf input."""

    def test_basic_fields(self):
        w90 = derive_w90(create_nscf_input())

        assert w90.num_bands == 44
        assert w90.num_wann == 22
        assert w90.write_hr is True
        assert w90.mlwf_iteration_mode == ProjectionOnly()
        assert w90.disentanglement.dis_num_iter == 1000
        assert w90.kpoints == (9, 9, 1)
        assert [p.site.species for p in w90.projections] == ["Se", "W"]
        assert w90.projection_units is None

    def test_caller_choices_passed_through(self):
        w90 = w90_input(
            create_nscf_input(),
            num_wann=8,
            mlwf_iteration_mode=MLWF(num_iter=500),
            disentanglement=None,
            projection_units=LatticeUnits.ANGSTROM,
            projections=[RandomProjection()],
        )

        assert w90.mlwf_iteration_mode == MLWF(num_iter=500)
        assert w90.disentanglement is None
        assert w90.projection_units is LatticeUnits.ANGSTROM
        assert w90.projections == (RandomProjection(),)

    def test_alat_cell_scaled_to_bohr(self):
        w90 = derive_w90(create_nscf_input(cell_units=PwLatticeUnits.ALAT))

        cell = w90.unit_cell_cart
        assert cell.units is LatticeUnits.BOHR
        for row_w90, row_alat in zip(cell.cell, WSE2_CELL_ALAT):
            assert row_w90 == tuple(ALAT * x for x in row_alat)

    def test_alat_unit_vector(self):
        """A cell vector [1, 0, 0] in alat units becomes [alat, 0, 0] bohr."""
        nscf = create_nscf_input()
        system = replace(
            nscf.system,
            alat=7.5,
            ibrav=FreeCell(PwCell(PwLatticeUnits.ALAT, [[1, 0, 0], [0, 1, 0], [0, 0, 1]])),
        )
        w90 = derive_w90(replace(nscf, system=system))

        assert w90.unit_cell_cart.units is LatticeUnits.BOHR
        assert w90.unit_cell_cart.cell[0] == (7.5, 0.0, 0.0)

    @pytest.mark.parametrize("pw_units, w90_units", [
        (PwLatticeUnits.BOHR, LatticeUnits.BOHR),
        (PwLatticeUnits.ANGSTROM, LatticeUnits.ANGSTROM),
    ])
    def test_explicit_cell_passes_through(self, pw_units, w90_units):
        w90 = derive_w90(create_nscf_input(cell_units=pw_units))

        assert w90.unit_cell_cart.units is w90_units
        assert w90.unit_cell_cart.cell == tuple(tuple(row) for row in WSE2_CELL_ALAT)

    def test_bravais_index_unsupported(self):
        nscf = create_nscf_input()
        nscf = replace(nscf, system=replace(nscf.system, ibrav=BravaisIndex(4, (ALAT, 0.0, 10.9))))

        with pytest.raises(UnsupportedCellError, match="ibrav = 4"):
            derive_w90(nscf)

    def test_alat_positions_scaled_to_bohr(self):
        nscf = create_nscf_input(coordinate_type=PwPositionCoordinateType.ALAT_CARTESIAN)
        w90 = derive_w90(nscf)

        assert w90.positions.coordinate_type is PositionCoordinateType.BOHR_CARTESIAN
        for w90_coord, pw_coord in zip(w90.positions.coordinates, nscf.atomic_positions.coordinates):
            assert w90_coord.species == pw_coord.species
            assert w90_coord.r == tuple(ALAT * x for x in pw_coord.r)

    @pytest.mark.parametrize("pw_type, w90_type", [
        (PwPositionCoordinateType.BOHR_CARTESIAN, PositionCoordinateType.BOHR_CARTESIAN),
        (PwPositionCoordinateType.ANGSTROM_CARTESIAN, PositionCoordinateType.ANGSTROM_CARTESIAN),
        (PwPositionCoordinateType.CRYSTAL, PositionCoordinateType.CRYSTAL),
    ])
    def test_positions_relabelled(self, pw_type, w90_type):
        nscf = create_nscf_input(coordinate_type=pw_type)
        w90 = derive_w90(nscf)

        assert w90.positions.coordinate_type is w90_type
        assert [c.species for c in w90.positions.coordinates] == ["Se", "W", "Se"]
        assert [c.r for c in w90.positions.coordinates] == \
            [c.r for c in nscf.atomic_positions.coordinates]

    def test_crystal_sg_unsupported(self):
        with pytest.raises(CrystalSGError):
            derive_w90(create_nscf_input(coordinate_type=PwPositionCoordinateType.CRYSTAL_SG))

    @pytest.mark.parametrize("spin_type, spinors", [
        (None, False),
        (NonPolarized(), False),
        (CollinearPolarized((0.5, 0.0)), False),
        (Noncollinear(), True),
        (Noncollinear(spinorbit=True), True),
    ])
    def test_spinors(self, spin_type, spinors):
        w90 = derive_w90(create_nscf_input(spin_type=spin_type))
        assert w90.spinors is spinors

    def test_from_scf_fails(self):
        with pytest.raises(WrongCalculationError):
            derive_w90(create_scf_input())

    def test_from_bands_fails(self):
        bands = bands_input(create_nscf_input(), create_band_path())
        with pytest.raises(WrongCalculationError):
            derive_w90(bands)

    def test_nbnd_required(self):
        nscf = create_nscf_input()
        nscf = replace(nscf, calculation=replace(nscf.calculation, nbnd=None))

        with pytest.raises(NumBandsError, match="nbnd"):
            derive_w90(nscf)

    @pytest.mark.parametrize("k_points", [
        Automatic((9, 9, 1)),
        GammaOnly(),
    ])
    def test_uniform_kpoints_required(self, k_points):
        nscf = replace(create_nscf_input(), k_points=k_points)
        with pytest.raises(WrongKPointsNscfError):
            derive_w90(nscf)

    def test_full_chain_is_consistent(self):
        """scf -> nscf -> w90 keeps the nscf grid and the scf geometry."""
        scf = create_scf_input(
            cell_units=PwLatticeUnits.ANGSTROM,
            coordinate_type=PwPositionCoordinateType.CRYSTAL,
            spin_type=Noncollinear(spinorbit=True),
        )
        nscf = nscf_input(scf, 1e-6, 52, Smearing.FERMI_DIRAC, 0.005, (6, 6, 1))
        w90 = derive_w90(nscf)

        assert w90.num_bands == 52
        assert w90.kpoints == (6, 6, 1)
        assert w90.spinors is True
        assert w90.unit_cell_cart.units is LatticeUnits.ANGSTROM
        assert len(w90.positions.coordinates) == len(scf.atomic_positions.coordinates)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
