"""
This module implements generation of periodic crystal structures from
their symmetry description: space group tables (`SymmetryTable`,
`SpaceGroupEntry`), symmetry operations in fractional coordinates
(`SymmetryOperation`), lattices from cell parameters (`Lattice`) and
fully populated unit cells and supercells (`Cell`).
"""

from .cell import Atom, Cell, build_supercell, build_unit_cell
from .equivalent_sites import equivalent_sites
from .space_group import SpaceGroupEntry, SymmetryTable
from .symmetry_operation import SymmetryOperation, expanded_symmetry_list
from .unit_cell import Lattice

__all__ = [
    "Atom",
    "Cell",
    "Lattice",
    "SpaceGroupEntry",
    "SymmetryOperation",
    "SymmetryTable",
    "build_supercell",
    "build_unit_cell",
    "equivalent_sites",
    "expanded_symmetry_list",
]
