import logging
import numpy as np
from crystgen.exceptions import InvalidGeometry

LOG = logging.getLogger(__name__)

# angles (in degrees) within this of +/-90 are treated as exactly 90
ANGLE_TOLERANCE = 1e-6
# maximum |cos| of the angle between a_direction and ab_normal
ORTHOGONALITY_TOLERANCE = 1e-6


def orientation_matrix(
    a_direction=(1, 0, 0), ab_normal=(0, 0, 1), tolerance=ORTHOGONALITY_TOLERANCE
):
    """
    Orthonormal frame in which the lattice is placed: x along
    `a_direction`, z along `ab_normal` and y completing a right
    handed set.

    The x axis is made orthogonal to z by subtracting the component
    along `ab_normal`, but is not renormalised afterwards. For
    inputs satisfying the orthogonality check this is exact to within
    the tolerance.

    Args:
        a_direction (array_like): (3) direction of the first lattice vector
        ab_normal (array_like): (3) normal to the plane of the first two lattice vectors
        tolerance (float, optional): maximum allowed |cos| of the angle between the two vectors

    Returns:
        np.ndarray: (3, 3) matrix with rows x, y, z

    Raises:
        InvalidGeometry: if the vectors are not finite, zero length or not orthogonal
    """
    a_direction = np.asarray(a_direction, dtype=np.float64)
    ab_normal = np.asarray(ab_normal, dtype=np.float64)
    if a_direction.shape != (3,) or ab_normal.shape != (3,):
        raise InvalidGeometry("a_direction and ab_normal must be 3-vectors")
    if not (np.all(np.isfinite(a_direction)) and np.all(np.isfinite(ab_normal))):
        raise InvalidGeometry(
            "a_direction {} and ab_normal {} must be finite".format(
                a_direction, ab_normal
            )
        )
    norm_a = np.linalg.norm(a_direction)
    norm_n = np.linalg.norm(ab_normal)
    if not (norm_a > 0 and norm_n > 0):
        raise InvalidGeometry("a_direction and ab_normal must be non-zero")
    _x = a_direction / norm_a
    z = ab_normal / norm_n
    if abs(np.dot(_x, z)) > tolerance:
        raise InvalidGeometry(
            "a_direction {} is not orthogonal to ab_normal {}".format(
                a_direction, ab_normal
            )
        )
    x = _x - np.dot(_x, ab_normal) * z
    y = np.cross(z, x)
    return np.array((x, y, z))


def _cos_sin(angle, tolerance):
    if abs(abs(angle) - 90) < tolerance:
        return 0.0, float(np.sign(angle))
    radians = np.radians(angle)
    return np.cos(radians), np.sin(radians)


def cell_matrix(a, b, c, alpha, beta, gamma, tolerance=ANGLE_TOLERANCE):
    """
    Triclinic cell matrix from lattice side lengths and angles, with
    lattice vector A along x and B in the xy plane.

    Angles within `tolerance` degrees of 90 are treated as exactly 90
    (cosine of exactly zero), the sign of gamma determines the sign of
    sin(gamma) so negative gamma conventions are preserved.

    >>> cell_matrix(2.0, 3.0, 4.0, 90, 90, 90)
    array([[2., 0., 0.],
           [0., 3., 0.],
           [0., 0., 4.]])

    Args:
        a, b, c (float): lattice side lengths in Angstroms
        alpha, beta, gamma (float): lattice angles in degrees
        tolerance (float, optional): tolerance in degrees for right angles

    Returns:
        np.ndarray: (3, 3) row major matrix of lattice vectors

    Raises:
        InvalidGeometry: if the parameters cannot describe a unit cell
    """
    params = np.array((a, b, c, alpha, beta, gamma), dtype=np.float64)
    if not np.all(np.isfinite(params)):
        raise InvalidGeometry("Cell parameters must be finite: {}".format(params))
    if min(a, b, c) <= 0:
        raise InvalidGeometry(
            "Cell lengths must be positive, got ({}, {}, {})".format(a, b, c)
        )
    for name, angle in (("alpha", alpha), ("beta", beta)):
        if not 0 < angle < 180:
            raise InvalidGeometry(
                "Cell angle {} must be in (0, 180) degrees, got {}".format(name, angle)
            )
    if not 0 < abs(gamma) <= 180:
        raise InvalidGeometry(
            "Cell angle gamma must be non-zero in [-180, 180] degrees, got {}".format(
                gamma
            )
        )

    cos_alpha, _ = _cos_sin(alpha, tolerance)
    cos_beta, _ = _cos_sin(beta, tolerance)
    cos_gamma, sin_gamma = _cos_sin(gamma, tolerance)
    if abs(sin_gamma) < np.finfo(np.float64).eps:
        raise InvalidGeometry("Lattice vectors a and b are collinear (gamma={})".format(gamma))

    cy = (cos_alpha - cos_beta * cos_gamma) / sin_gamma
    cz_sqr = 1.0 - cos_beta * cos_beta - cy * cy
    if cz_sqr < 0:
        raise InvalidGeometry(
            "Inconsistent cell parameters ({}, {}, {}, {}, {}, {})".format(
                a, b, c, alpha, beta, gamma
            )
        )
    return np.array(
        (
            (a, 0.0, 0.0),
            (b * cos_gamma, b * sin_gamma, 0.0),
            (c * cos_beta, c * cy, c * np.sqrt(cz_sqr)),
        )
    )


def lattice_vectors(cellpar, a_direction=(1, 0, 0), ab_normal=(0, 0, 1), **kwargs):
    """
    Cartesian lattice vectors from cell parameters and orientation.

    Args:
        cellpar (array_like): (a, b, c, alpha, beta, gamma), lengths in Angstroms
            and angles in degrees
        a_direction (array_like, optional): direction of lattice vector A
        ab_normal (array_like, optional): normal to the plane of lattice vectors A and B
        **kwargs: `angle_tolerance` and `orthogonality_tolerance` overrides

    Returns:
        np.ndarray: (3, 3) row major matrix, row i being lattice vector i
    """
    if len(cellpar) != 6:
        raise InvalidGeometry(
            "Require three lengths and three angles, got {}".format(cellpar)
        )
    xyz = orientation_matrix(
        a_direction,
        ab_normal,
        tolerance=kwargs.get("orthogonality_tolerance", ORTHOGONALITY_TOLERANCE),
    )
    abc = cell_matrix(*cellpar, tolerance=kwargs.get("angle_tolerance", ANGLE_TOLERANCE))
    return np.dot(abc, xyz)


class Lattice:
    """
    Storage class for the lattice vectors of a crystal i.e. its unit cell.

    Attributes:
        direct (np.ndarray): the direct matrix of this lattice
            i.e. the lattice vectors, row major
        inverse (np.ndarray): the inverse of the direct matrix
        lengths (np.ndarray): the lengths of the three lattice vectors
    """

    def __init__(self, vectors):
        """
        Create a Lattice object from a list of lattice vectors or
        a row major direct matrix. Unless otherwise specified, length
        units are Angstroms.

        Args:
            vectors (array_like): (3, 3) array of lattice vectors, row major i.e. vectors[0, :] is
                lattice vector A etc.
        """
        direct = np.array(vectors, dtype=np.float64)
        if direct.shape != (3, 3):
            raise InvalidGeometry(
                "Lattice requires a (3, 3) matrix, got shape {}".format(direct.shape)
            )
        direct.setflags(write=False)
        self.direct = direct
        self.lengths = np.linalg.norm(direct, axis=1)
        self.lengths.setflags(write=False)

    @property
    def inverse(self) -> np.ndarray:
        "The inverse of the direct matrix"
        if not hasattr(self, "_inverse"):
            setattr(self, "_inverse", np.linalg.inv(self.direct))
        return getattr(self, "_inverse")

    def to_cartesian(self, coords) -> np.ndarray:
        """
        Transform coordinates from fractional space (a, b, c)
        to Cartesian space (x, y, z).

        Args:
            coords (array_like): (N, 3) array of fractional coordinates

        Returns:
            np.ndarray: (N, 3) array of Cartesian coordinates
        """
        return np.dot(coords, self.direct)

    def to_fractional(self, coords) -> np.ndarray:
        """
        Transform coordinates from Cartesian space (x, y, z)
        to fractional space (a, b, c).

        Args:
            coords (array_like): an (N, 3) array of Cartesian coordinates

        Returns:
            np.ndarray: (N, 3) array of fractional coordinates
        """
        return np.dot(coords, self.inverse)

    @property
    def angles(self) -> np.ndarray:
        "The lattice angles (alpha, beta, gamma) in radians"
        u_a, u_b, u_c = self.direct / self.lengths[:, np.newaxis]
        return np.arccos(
            np.clip((np.vdot(u_b, u_c), np.vdot(u_c, u_a), np.vdot(u_a, u_b)), -1, 1)
        )

    def volume(self) -> float:
        """The volume of the unit cell, in cubic Angstroms"""
        return abs(np.linalg.det(self.direct))

    @property
    def a(self) -> float:
        "Length of lattice vector a"
        return self.lengths[0]

    @property
    def b(self) -> float:
        "Length of lattice vector b"
        return self.lengths[1]

    @property
    def c(self) -> float:
        "Length of lattice vector c"
        return self.lengths[2]

    @property
    def v_a(self) -> np.ndarray:
        "lattice vector a"
        return self.direct[0]

    @property
    def v_b(self) -> np.ndarray:
        "lattice vector b"
        return self.direct[1]

    @property
    def v_c(self) -> np.ndarray:
        "lattice vector c"
        return self.direct[2]

    @property
    def parameters(self) -> np.ndarray:
        "single vector of lattice side lengths and angles in degrees"
        return np.hstack((self.lengths, np.degrees(self.angles)))

    def scaled(self, nx=1, ny=1, nz=1) -> "Lattice":
        "A new lattice with vectors A, B, C scaled by nx, ny, nz respectively"
        return Lattice(self.direct * np.array((nx, ny, nz))[:, np.newaxis])

    def __eq__(self, other):
        if not isinstance(other, Lattice):
            return NotImplemented
        return np.array_equal(self.direct, other.direct)

    __hash__ = None

    @classmethod
    def from_cell_parameters(
        cls, cellpar, a_direction=(1, 0, 0), ab_normal=(0, 0, 1), **kwargs
    ):
        """
        Construct a new Lattice from lengths, angles (in degrees)
        and orientation.

        Args:
            cellpar (array_like): (a, b, c, alpha, beta, gamma)
            a_direction (array_like, optional): direction of lattice vector A
            ab_normal (array_like, optional): normal to the plane of A and B

        Returns:
            Lattice: A new lattice object representing the provided cell.
        """
        lattice = cls(lattice_vectors(cellpar, a_direction, ab_normal, **kwargs))
        LOG.debug("Constructed %s from %s", lattice, list(cellpar))
        return lattice

    @classmethod
    def cubic(cls, length):
        """
        Construct a new cubic Lattice from the provided side length.

        Args:
            length (float): Lattice side length a in Angstroms.

        Returns:
            Lattice: A new lattice object representing the provided cell.
        """
        return cls(np.eye(3) * length)

    def __repr__(self):
        s = "<{{}}: ({})>".format(",".join("{:.3f}" for p in range(6)))
        return s.format(self.__class__.__name__, *self.parameters)
