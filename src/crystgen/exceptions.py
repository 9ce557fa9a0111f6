"""
Errors raised while building crystal structures.

All of these are raised at the point where the problem is detected
and are never caught inside `crystgen`, a failed construction produces
no partial result.
"""


class CrystalBuildError(ValueError):
    "Base class for all errors raised when constructing a crystal structure"


class InvalidGeometry(CrystalBuildError):
    """
    Raised for inconsistent cell geometry: non-orthogonal orientation
    vectors, non-positive lengths, out of range angles or a set of
    cell parameters which cannot describe a parallelepiped.
    """


class InvalidBasis(InvalidGeometry):
    """
    Raised for a basis which is not an (N, 3) array of fractional
    positions, or which does not have exactly one symbol per site.
    """


class InvalidReplication(CrystalBuildError):
    "Raised for supercell multipliers which are not positive integers"


class StructuralInconsistency(CrystalBuildError):
    """
    Raised when a space group table entry is corrupt, i.e. the
    numbers of rotations and translations differ.
    """


class UnknownSpaceGroup(CrystalBuildError, KeyError):
    "Raised when there is no table entry for a (number, setting) pair"

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class UnknownElement(CrystalBuildError, KeyError):
    "Raised when there is no element data for a chemical symbol"

    def __str__(self):
        return str(self.args[0]) if self.args else ""
