from fractions import Fraction
import logging
import re
import numpy as np
from crystgen.exceptions import StructuralInconsistency

LOG = logging.getLogger(__name__)


SYMM_STR_SYMBOL_REGEX = re.compile(r".*?([+-]*[xyz0-9\/\.]+)")


def encode_symm_str(rotation, translation):
    """
    Encode a rotation matrix (of -1, 0, 1s) and (rational) translation vector
    into string form e.g. 1/2-x,z-1/3,-y-1/6

    >>> encode_symm_str(((-1, 0, 0), (0, 0, 1), (0, 1, 0)), (0, 0.5, 1/3))
    '-x,1/2+z,1/3+y'
    >>> encode_symm_str(((0, -1, 0), (1, -1, 0), (0, 0, 1)), (0, 0, 0.5))
    '-y,+x-y,1/2+z'

    Args:
        rotation (array_like): (3,3) matrix of -1, 0, or 1s encoding the rotation component
            of the symmetry operation
        translation (array_like): (3) vector of rational numbers encoding the translation component
            of the symmetry operation

    Returns:
        str: the encoded symmetry operation
    """
    symbols = "xyz"
    res = []
    for i in (0, 1, 2):
        t = Fraction(float(translation[i])).limit_denominator(12)
        v = ""
        if t != 0:
            v += str(t)
        for j in range(0, 3):
            c = rotation[i][j]
            if c != 0:
                s = "-" if c < 0 else "+"
                v += s + symbols[j]
        res.append(v)
    return ",".join(res)


def decode_symm_str(s):
    """
    Decode a symmetry operation represented in the string
    form e.g. '1/2 + x, y, -z -0.25' into a rotation matrix
    and translation vector.

    >>> encode_symm_str(*decode_symm_str("x,y,z"))
    '+x,+y,+z'
    >>> encode_symm_str(*decode_symm_str("-x+y, y, -z+1/2"))
    '-x+y,+y,1/2-z'

    Args:
        s (str): the encoded symmetry operation string

    Returns:
        Tuple[np.ndarray, np.ndarray]: a (3,3) rotation matrix and a (3) translation vector
    """
    rotation = np.zeros((3, 3), dtype=np.float64)
    translation = np.zeros((3,), dtype=np.float64)
    tokens = s.lower().replace(" ", "").split(",")
    if len(tokens) != 3:
        raise ValueError("Symmetry operation '{}' must have 3 components".format(s))
    for i, row in enumerate(tokens):
        symbols = re.findall(SYMM_STR_SYMBOL_REGEX, row.strip())
        for symbol in symbols:
            for idx, axis in enumerate("xyz"):
                if axis in symbol:
                    rotation[i, idx] = -1 if "-" + axis in symbol else 1
                    break
            else:
                translation[i] += float(Fraction(symbol))
    translation = translation % 1
    return rotation, translation


def encode_symm_int(rotation, translation):
    """
    Encode an integer encoded symmetry from a rotation matrix and translation
    vector.

    A space group operation is compressed using ternary numerical system for
    rotation and duodecimal system for translation. This is achieved because
    each element of rotation matrix can have only one of {-1,0,1}, and the
    translation can have one of {0,2,3,4,6,8,9,10} divided by 12.  Therefore
    3^9 * 12^3 = 34012224 different values can map space group operations.

    >>> encode_symm_int(((1, 0, 0), (0, 1, 0), (0, 0, 1)), (0, 0, 0))
    16484
    >>> encode_symm_int(((1, 0, 0), (0, 1, 0), (0, 1, 1)), (0, 0.5, 0))
    1433663

    Args:
        rotation (array_like): (3,3) matrix of -1, 0, or 1s encoding the rotation component
            of the symmetry operation
        translation (array_like): (3) vector of rational numbers encoding the translation component
            of the symmetry operation

    Returns:
        int: the encoded symmetry operation
    """
    r = 0
    shift = 1
    rotation = np.round(np.array(rotation)).astype(int) + 1
    for i in (2, 1, 0):
        for j in (2, 1, 0):
            r += rotation[i, j] * shift
            shift *= 3
    t = 0
    shift = 1
    translation = np.round(np.array(translation) * 12).astype(int) % 12
    for i in (2, 1, 0):
        t += translation[i] * shift
        shift *= 12
    return int(r + t * 19683)


class SymmetryOperation:
    """
    Class to represent a crystallographic symmetry operation,
    composed of a rotation and a translation, both in fractional
    coordinates. Instances are immutable: the underlying arrays
    are copies flagged read-only.

    Attributes:
        rotation (np.ndarray): (3, 3) rotation matrix in fractional coordinates
        translation (np.ndarray): (3) translation vector in fractional coordinates,
            reduced into [0, 1)
    """

    rotation: np.ndarray
    translation: np.ndarray

    def __init__(self, rotation, translation):
        """
        Construct a new symmetry operation from a rotation matrix and
        a translation vector

        Arguments:
            rotation (array_like): (3, 3) rotation matrix
            translation (array_like): (3) translation vector
        """
        rotation = np.array(rotation, dtype=np.float64)
        translation = np.array(translation, dtype=np.float64) % 1
        if rotation.shape != (3, 3) or translation.shape != (3,):
            raise ValueError(
                "Expected (3, 3) rotation and (3) translation, got {} and {}".format(
                    rotation.shape, translation.shape
                )
            )
        rotation.setflags(write=False)
        translation.setflags(write=False)
        self.rotation = rotation
        self.translation = translation

    @property
    def integer_code(self) -> int:
        "Represent this SymmetryOperation as a packed integer"
        if not hasattr(self, "_integer_code"):
            setattr(
                self, "_integer_code", encode_symm_int(self.rotation, self.translation)
            )
        return getattr(self, "_integer_code")

    def __add__(self, value):
        """
        Add a vector to this symmetry operation's translation vector.

        Returns:
            SymmetryOperation: a copy of this symmetry operation under additional translation
        """
        return SymmetryOperation(self.rotation, self.translation + np.asarray(value))

    def apply(self, coordinates: np.ndarray) -> np.ndarray:
        """
        Apply this symmetry operation to a set of fractional coordinates,
        i.e. R . p + t for each position p. The result is not wrapped
        into the unit cell.

        Args:
            coordinates (np.ndarray): (3) or (N,3) array of fractional coordinates

        Returns:
            np.ndarray: transformed coordinates with the same shape
        """
        coordinates = np.asarray(coordinates, dtype=np.float64)
        if coordinates.ndim == 1:
            return np.dot(self.rotation, coordinates) + self.translation
        return np.dot(coordinates, self.rotation.T) + self.translation

    def __str__(self):
        if not hasattr(self, "_string_code"):
            setattr(
                self, "_string_code", encode_symm_str(self.rotation, self.translation)
            )
        return getattr(self, "_string_code")

    def __eq__(self, other):
        if not isinstance(other, SymmetryOperation):
            return NotImplemented
        return self.integer_code == other.integer_code

    def __hash__(self):
        return int(self.integer_code)

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self)

    @classmethod
    def from_string_code(cls, code: str):
        """
        Alternative constructor from a string encoded
        symmetry operation e.g. '+x,+y,+z'.

        See also the `encode_symm_str`, `decode_symm_str` methods.

        Args:
            code (str): string-encoded symmetry operation

        Returns:
            SymmetryOperation: a new symmetry operation from the provided string code
        """
        rot, trans = decode_symm_str(code)
        return cls(rot, trans)


def expanded_symmetry_list(space_group_entry):
    """
    Create the full list of symmetry operations for a space group
    table entry from its base rotations/translations, centering
    sub-translations and centrosymmetry.

    The ordering is significant, as it determines the order in which
    equivalent sites are discovered: parity (+1 then -1 if centrosymmetric)
    is the outermost loop, then sub-translations in stored order,
    then the (rotation, translation) pairs in stored order.

    Args:
        space_group_entry (SpaceGroupEntry): the table entry to expand

    Returns:
        List[SymmetryOperation]: the expanded list of symmetry operations, of length
            n_parities * n_subtranslations * n_rotations
    """
    rotations = space_group_entry.rotations
    translations = space_group_entry.translations
    if len(rotations) != len(translations):
        raise StructuralInconsistency(
            "Space group {} setting {} has {} rotations but {} translations".format(
                space_group_entry.number,
                space_group_entry.setting,
                len(rotations),
                len(translations),
            )
        )
    parities = (1, -1) if space_group_entry.centrosymmetric else (1,)

    full_symops = []
    for parity in parities:
        for subtranslation in space_group_entry.subtranslations:
            for rotation, translation in zip(rotations, translations):
                symop = SymmetryOperation(parity * rotation, translation)
                full_symops.append(symop + subtranslation)

    LOG.debug(
        "Expanded space group %d:%d to %d symops",
        space_group_entry.number,
        space_group_entry.setting,
        len(full_symops),
    )
    return full_symops
