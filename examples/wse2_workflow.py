"""
WSe2 Workflow Example

Derives the nscf and bands pw.x inputs from an scf input for monolayer
WSe2, then the Wannier90 input with Se:p and W:d projections, and writes
wse2.win.
"""

import sys
import os

# Add parent directory to path for development
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from qe_wannier import (
    AngularMomentum,
    Disentanglement,
    ProjectionOnly,
    SiteProjection,
    SpeciesSite,
    bands_input,
    nscf_input,
    w90_input,
    write_input_file,
)
from qe_wannier.pw_input import (
    Automatic,
    AtomicPositions,
    BandPathPoint,
    CrystalBands,
    FreeCell,
    Noncollinear,
    PwAtomCoordinate,
    PwCell,
    PwInput,
    PwLatticeUnits,
    PwPositionCoordinateType,
    Scf,
    Smearing,
    SmearingOccupations,
    System,
)


def create_scf_input() -> PwInput:
    """Monolayer WSe2 with spin-orbit coupling, cell in alat units."""
    system = System(
        ibrav=FreeCell(PwCell(
            PwLatticeUnits.ALAT,
            [
                [0.5, -0.866025403784, 0.0],
                [0.5, 0.866025403784, 0.0],
                [0.0, 0.0, 10.9474508],
            ],
        )),
        alat=6.27207951898,
        occupations=SmearingOccupations(Smearing.MARZARI_VANDERBILT, 0.01),
        ecutwfc=60.0,
        spin_type=Noncollinear(spinorbit=True),
    )
    positions = AtomicPositions(
        PwPositionCoordinateType.CRYSTAL,
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


def main():
    print("=" * 70)
    print("QE -> Wannier90 Input Workflow: WSe2")
    print("=" * 70)

    scf = create_scf_input()

    # Step 1: nscf on the full 9x9x1 grid
    nscf = nscf_input(
        scf,
        diago_thr_init=1e-6,
        num_bands=44,
        smearing=Smearing.MARZARI_VANDERBILT,
        degauss=0.01,
        nscf_nk=(9, 9, 1),
    )
    print(f"\nnscf: nbnd = {nscf.calculation.nbnd}, k-points = {nscf.k_points.nk}")

    # Step 2: band structure along G-M-K-G
    path = CrystalBands([
        BandPathPoint([0.0, 0.0, 0.0], 40),
        BandPathPoint([0.5, 0.0, 0.0], 20),
        BandPathPoint([1 / 3, 1 / 3, 0.0], 40),
        BandPathPoint([0.0, 0.0, 0.0], 1),
    ])
    bands = bands_input(nscf, path)
    print(f"bands: {len(bands.k_points.path)} path points")

    # Step 3: Wannier90 input
    w90 = w90_input(
        nscf,
        num_wann=22,
        mlwf_iteration_mode=ProjectionOnly(),
        disentanglement=Disentanglement(
            dis_win_min=-6.5582,
            dis_win_max=8.4418,
            dis_froz_min=-4.5582,
            dis_froz_max=6.4418,
            dis_num_iter=1000,
            dis_mix_ratio=0.5,
        ),
        projection_units=None,
        projections=[
            SiteProjection(SpeciesSite("Se"), [AngularMomentum.P]),
            SiteProjection(SpeciesSite("W"), [AngularMomentum.D]),
        ],
    )

    write_input_file(w90, "wse2.win", verbose=True)
    w90.to_json("wse2.json")
    print("\nSaved input description to wse2.json")


if __name__ == "__main__":
    main()
