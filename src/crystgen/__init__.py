from .core import Element, ElementTable
from .crystal import (
    Cell,
    Lattice,
    SpaceGroupEntry,
    SymmetryOperation,
    SymmetryTable,
    build_supercell,
    build_unit_cell,
)
from .exceptions import (
    CrystalBuildError,
    InvalidBasis,
    InvalidGeometry,
    InvalidReplication,
    StructuralInconsistency,
    UnknownElement,
    UnknownSpaceGroup,
)

__all__ = [
    "Cell",
    "CrystalBuildError",
    "Element",
    "ElementTable",
    "InvalidBasis",
    "InvalidGeometry",
    "InvalidReplication",
    "Lattice",
    "SpaceGroupEntry",
    "StructuralInconsistency",
    "SymmetryOperation",
    "SymmetryTable",
    "UnknownElement",
    "UnknownSpaceGroup",
    "build_supercell",
    "build_unit_cell",
]
