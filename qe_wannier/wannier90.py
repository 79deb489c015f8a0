"""
Wannier90 Input File Writer Module

This module assembles the Wannier90 `.win` input file from a validated
Wannier90Input. The file is a sequence of `key = value` lines and
`begin <block>` / `end <block>` sections, written in a fixed order:

    header -> disentanglement -> projections -> unit_cell_cart
           -> atoms_cart / atoms_frac -> kpoints
"""

from typing import List, Optional

from .errors import InputFileWriteError
from .fields import field_value, format_bool, format_real
from .kpoints import generate_kpoint_grid, num_kpoints
from .model import (
    Disentanglement,
    PositionCoordinateType,
    Wannier90Input,
    validate,
)


def make_input_file(input: Wannier90Input) -> str:
    """
    Build the text of a Wannier90 `.win` input file.

    Parameters
    ----------
    input : Wannier90Input
        Input to serialize

    Returns
    -------
    str
        File contents, sections joined by newlines (no trailing newline)

    Raises
    ------
    ValidationError
        If `input` violates an invariant; nothing is produced.
    """
    validate(input)

    input_sections = [make_header(input)]

    if input.disentanglement is not None:
        input_sections.append(make_disentanglement(input.disentanglement))

    input_sections.extend([
        make_projections(input),
        make_unit_cell(input),
        make_positions(input),
        make_kpoints(input),
    ])

    return "\n".join(input_sections)


def _push_bool_field(lines: List[str], name: str, b: Optional[bool]) -> None:
    if b is not None:
        lines.append(f"{name} = {format_bool(b)}")


def make_header(input: Wannier90Input) -> str:
    lines = [
        f"num_bands = {input.num_bands}",
        f"num_wann = {input.num_wann}",
        f"num_iter = {field_value(input.mlwf_iteration_mode)}",
    ]

    _push_bool_field(lines, "write_hr", input.write_hr)

    return "\n".join(lines)


def make_disentanglement(dis: Disentanglement) -> str:
    lines = [
        f"dis_win_min = {format_real(dis.dis_win_min)}",
        f"dis_win_max = {format_real(dis.dis_win_max)}",
        f"dis_froz_min = {format_real(dis.dis_froz_min)}",
        f"dis_froz_max = {format_real(dis.dis_froz_max)}",
        f"dis_num_iter = {dis.dis_num_iter}",
        f"dis_mix_ratio = {format_real(dis.dis_mix_ratio)}",
    ]
    return "\n".join(lines)


def make_projections(input: Wannier90Input) -> str:
    lines = []

    _push_bool_field(lines, "spinors", input.spinors)

    lines.append("begin projections")

    if input.projection_units is not None:
        lines.append(field_value(input.projection_units))
    for proj in input.projections:
        lines.append(field_value(proj))

    lines.append("end projections")

    return "\n".join(lines)


def make_unit_cell(input: Wannier90Input) -> str:
    cell = input.unit_cell_cart
    lines = ["begin unit_cell_cart", field_value(cell.units)]

    for a in cell.cell:
        lines.append(f"  {format_real(a[0])}  {format_real(a[1])}  {format_real(a[2])}")

    lines.append("end unit_cell_cart")

    return "\n".join(lines)


def make_positions(input: Wannier90Input) -> str:
    pos = input.positions

    if pos.coordinate_type is PositionCoordinateType.BOHR_CARTESIAN:
        block, unit_line = "atoms_cart", "bohr"
    elif pos.coordinate_type is PositionCoordinateType.ANGSTROM_CARTESIAN:
        block, unit_line = "atoms_cart", "ang"
    elif pos.coordinate_type is PositionCoordinateType.CRYSTAL:
        block, unit_line = "atoms_frac", None
    else:
        raise TypeError(f"Unhandled coordinate type: {pos.coordinate_type!r}")

    lines = [f"begin {block}"]
    if unit_line is not None:
        lines.append(unit_line)

    for coord in pos.coordinates:
        r = coord.r
        lines.append(
            f" {coord.species} {format_real(r[0])} {format_real(r[1])} {format_real(r[2])}"
        )

    lines.append(f"end {block}")

    return "\n".join(lines)


def make_kpoints(input: Wannier90Input) -> str:
    nk = input.kpoints

    lines = [
        f"mp_grid = {nk[0]} {nk[1]} {nk[2]}",
        "begin kpoints",
    ]

    for k in generate_kpoint_grid(nk):
        lines.append(f"{format_real(k[0])} {format_real(k[1])} {format_real(k[2])}")

    lines.append("end kpoints")

    return "\n".join(lines)


def write_input_file(input: Wannier90Input, file_path: str, verbose: bool = False) -> None:
    """
    Serialize `input` and write it to `file_path` in one operation.

    Parameters
    ----------
    input : Wannier90Input
        Input to serialize
    file_path : str or path-like
        Destination, e.g. 'wannier90.win'
    verbose : bool
        Whether to print a summary after writing

    Raises
    ------
    ValidationError
        If `input` is invalid; no file is touched.
    InputFileWriteError
        If the file cannot be written.
    """
    input_text = make_input_file(input)

    try:
        with open(file_path, "w", encoding="utf-8", newline="") as f:
            f.write(input_text)
    except OSError as e:
        raise InputFileWriteError(f"Could not write {file_path}: {e}") from e

    if verbose:
        nk = input.kpoints
        print(f"\nWrote Wannier90 input '{file_path}'")
        print(f"  num_bands = {input.num_bands}, num_wann = {input.num_wann}")
        print(f"  Projections: {len(input.projections)}")
        print(f"  Atoms: {len(input.positions.coordinates)} ({', '.join(input.positions.species)})")
        print(f"  K-points: {nk[0]} × {nk[1]} × {nk[2]} = {num_kpoints(nk)}")
