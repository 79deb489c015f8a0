"""
Error Types Module

This module defines the exceptions raised while deriving, validating and
writing Wannier90 input files.

Validation errors are collected and reported together in a single
ValidationError; every other failure is single-cause and raised at the
first violated precondition.
"""

from enum import Enum
from typing import Iterable, List


class QEWannierError(Exception):
    """Base class for all errors raised by qe_wannier."""


# ==============================
# Validation
# ==============================

class InputError(Enum):
    """Invariant violations found by ``validate`` on a Wannier90 input."""

    RANDOM_COUNT = "`random` may appear at most once in the list of projections."

    @property
    def message(self) -> str:
        return self.value


class ValidationError(QEWannierError, ValueError):
    """
    Raised when a Wannier90 input violates one or more invariants.

    Attributes
    ----------
    errors : list of InputError
        Every violation that was found, in the order the checks ran.
    """

    def __init__(self, errors: Iterable[InputError]):
        self.errors: List[InputError] = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))


# ==============================
# Stage derivation
# ==============================

class WorkflowError(QEWannierError, ValueError):
    """Base class for precondition failures when deriving a calculation stage."""

    default_message = "Invalid upstream calculation input."

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class WrongCalculationError(WorkflowError):
    default_message = "Unexpected type of calculation input."


class NoSymError(WorkflowError):
    default_message = "Must have `nosym = .true.` in nscf calculation."


class NumBandsError(WorkflowError):
    default_message = "Must specify `nbnd` in nscf calculation."


class WrongKPointsNscfError(WorkflowError):
    default_message = "Must have `CrystalUniform` k-points in nscf calculation."


class WrongKPointsBandsError(WorkflowError):
    default_message = "Must input `CrystalBands` k-points."


class CrystalSGError(WorkflowError):
    default_message = "`crystal_sg` atomic positions are unsupported."


class UnsupportedCellError(WorkflowError):
    default_message = (
        "Only explicit CELL_PARAMETERS (ibrav = 0) cells are supported."
    )


# ==============================
# File output
# ==============================

class InputFileWriteError(QEWannierError, OSError):
    """Raised when the serialized input file cannot be written."""
