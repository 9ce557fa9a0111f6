import itertools
import logging
import numbers
from collections import namedtuple
import numpy as np
from scipy.spatial import cKDTree as KDTree
from crystgen.core.element import Element, ElementTable, chemical_formula
from crystgen.exceptions import (
    CrystalBuildError,
    InvalidBasis,
    InvalidReplication,
    UnknownElement,
)
from .equivalent_sites import SITE_TOLERANCE, equivalent_sites, site_multiplicities
from .space_group import SymmetryTable
from .unit_cell import ANGLE_TOLERANCE, ORTHOGONALITY_TOLERANCE, Lattice

LOG = logging.getLogger(__name__)

# generated atoms closer than this (in Angstroms) are reported as overlapping
OVERLAP_DISTANCE = 0.5

Atom = namedtuple("Atom", "symbol mass")


def _frozen_array(values, dtype=np.float64, shape=None):
    array = np.array(values, dtype=dtype)
    if shape is not None:
        array = array.reshape(shape)
    array.setflags(write=False)
    return array


class Cell:
    """
    Storage class for a fully populated crystal structure: every atom
    in the (super)cell with its Cartesian position, together with the
    lattice and the information it was generated from.

    Atoms are kept in the order in which their sites were generated,
    the i-th atom corresponds to the i-th row of `positions`,
    `scaled_positions` and the i-th entry of `kinds`.

    Attributes:
        atoms (Tuple[Atom]): symbol and mass for each atom
        positions (np.ndarray): (N, 3) Cartesian positions in Angstroms
        lattice (Lattice): the lattice vectors of this cell
        scaled_positions (np.ndarray): (N, 3) fractional positions w.r.t. `lattice`
        kinds (np.ndarray): (N) index into `basis_symbols` for each atom
        basis_symbols (Tuple[str]): chemical symbol for each kind
        number (int): space group number the structure was generated with
        setting (int): space group setting the structure was generated with
        supercell (Tuple[int]): multipliers of the unit cell, (1, 1, 1) for a unit cell
    """

    def __init__(
        self,
        atoms,
        positions,
        lattice,
        scaled_positions,
        kinds,
        basis_symbols,
        number,
        setting,
        supercell=(1, 1, 1),
    ):
        self.atoms = tuple(Atom(*x) for x in atoms)
        self.positions = _frozen_array(positions, shape=(-1, 3))
        self.lattice = lattice
        self.scaled_positions = _frozen_array(scaled_positions, shape=(-1, 3))
        self.kinds = _frozen_array(kinds, dtype=np.int64)
        self.basis_symbols = tuple(basis_symbols)
        self.number = int(number)
        self.setting = int(setting)
        self.supercell = tuple(int(x) for x in supercell)
        n = len(self.atoms)
        if not (len(self.positions) == len(self.scaled_positions) == len(self.kinds) == n):
            raise CrystalBuildError(
                "Inconsistent cell: {} atoms, {} positions, {} scaled positions, {} kinds".format(
                    n, len(self.positions), len(self.scaled_positions), len(self.kinds)
                )
            )

    def __len__(self):
        return len(self.atoms)

    @property
    def symbols(self):
        "Chemical symbol of each atom"
        return [x.symbol for x in self.atoms]

    @property
    def masses(self) -> np.ndarray:
        "Mass of each atom in amu"
        return np.array([x.mass for x in self.atoms])

    @property
    def total_mass(self) -> float:
        "Mass of the cell contents in amu"
        return float(np.sum(self.masses))

    @property
    def lengths(self) -> np.ndarray:
        "Lengths of the lattice vectors"
        return self.lattice.lengths

    def volume(self) -> float:
        "The volume of the cell, in cubic Angstroms"
        return self.lattice.volume()

    @property
    def density(self) -> float:
        "Calculated density of this structure in g/cm^3"
        return self.total_mass / self.volume() / 0.6022

    @property
    def chemical_formula(self) -> str:
        "Chemical formula of the cell contents, carbon first then by atomic number"
        try:
            elements = [Element[s] for s in self.basis_symbols]
        except UnknownElement:
            # symbols only known to a custom element table
            return chemical_formula(self.symbols)
        return chemical_formula([elements[k] for k in self.kinds])

    def close_contacts(self, max_distance=OVERLAP_DISTANCE):
        """
        Periodic interatomic contacts shorter than `max_distance`.

        Images in the 26 neighbouring cells are included, so the
        result is complete as long as `max_distance` is smaller than
        the perpendicular widths of the cell.

        Arguments:
            max_distance (float, optional): contacts at or below this distance
                (in Angstroms) are returned

        Returns:
            List[Tuple[int, int, float]]: (i, j, d) with i < j, d the shortest
                distance between atom i and any periodic image of atom j
        """
        n = len(self)
        if n < 2:
            return []
        offsets = np.array(list(itertools.product((-1, 0, 1), repeat=3)))
        images = (
            self.positions[np.newaxis, :, :]
            + np.dot(offsets, self.lattice.direct)[:, np.newaxis, :]
        ).reshape(-1, 3)
        tree = KDTree(self.positions)
        image_tree = KDTree(images)
        shortest = {}
        for i, neighbours in enumerate(tree.query_ball_tree(image_tree, max_distance)):
            for image_idx in neighbours:
                j = image_idx % n
                if not (i < j):
                    continue
                d = float(np.linalg.norm(images[image_idx] - self.positions[i]))
                if d < shortest.get((i, j), np.inf):
                    shortest[(i, j)] = d
        return [(i, j, d) for (i, j), d in sorted(shortest.items())]

    def to_dict(self) -> dict:
        """
        Represent this cell as a dictionary of plain python types,
        suitable for serialization e.g. with json.

        Returns:
            dict: with keys symbols, masses, positions, cell, spacegroup,
                kinds, scaled_positions, basis_symbols and supercell
        """
        return {
            "symbols": self.symbols,
            "masses": [x.mass for x in self.atoms],
            "positions": self.positions.tolist(),
            "cell": self.lattice.direct.tolist(),
            "spacegroup": {"number": self.number, "setting": self.setting},
            "kinds": self.kinds.tolist(),
            "scaled_positions": self.scaled_positions.tolist(),
            "basis_symbols": list(self.basis_symbols),
            "supercell": list(self.supercell),
        }

    @classmethod
    def from_dict(cls, data) -> "Cell":
        """
        Construct a cell from the dictionary representation
        produced by `Cell.to_dict`.

        Arguments:
            data (dict): dictionary representation of a cell

        Returns:
            Cell: the reconstructed cell
        """
        spacegroup = data.get("spacegroup", {})
        return cls(
            zip(data["symbols"], data["masses"]),
            data["positions"],
            Lattice(data["cell"]),
            data["scaled_positions"],
            data["kinds"],
            data["basis_symbols"],
            spacegroup.get("number", 1),
            spacegroup.get("setting", 1),
            supercell=data.get("supercell", (1, 1, 1)),
        )

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self.atoms == other.atoms
            and np.array_equal(self.positions, other.positions)
            and self.lattice == other.lattice
            and np.array_equal(self.scaled_positions, other.scaled_positions)
            and np.array_equal(self.kinds, other.kinds)
            and self.basis_symbols == other.basis_symbols
            and (self.number, self.setting) == (other.number, other.setting)
            and self.supercell == other.supercell
        )

    __hash__ = None

    def __repr__(self):
        return "<{} {} {}:{} {}>".format(
            self.__class__.__name__,
            self.chemical_formula,
            self.number,
            self.setting,
            "x".join(str(x) for x in self.supercell),
        )


def build_unit_cell(
    basis,
    symbols,
    number,
    setting,
    cellpar,
    a_direction=(1, 0, 0),
    ab_normal=(0, 0, 1),
    symmetry_table=None,
    element_table=None,
    tolerance=SITE_TOLERANCE,
    angle_tolerance=ANGLE_TOLERANCE,
    orthogonality_tolerance=ORTHOGONALITY_TOLERANCE,
) -> Cell:
    """
    Generate all atoms in the unit cell of a crystal from the
    symmetry unique basis, the space group and the cell geometry.

    Arguments:
        basis (array_like): (N, 3) fractional positions of the basis sites
        symbols (List[str]): N chemical symbols, one per basis site
        number (int): space group number
        setting (int): space group setting
        cellpar (array_like): (a, b, c, alpha, beta, gamma), Angstroms and degrees
        a_direction (array_like, optional): direction of lattice vector A (default x)
        ab_normal (array_like, optional): normal to the AB plane (default z)
        symmetry_table (SymmetryTable, optional): space group data, the bundled
            table is used if not provided
        element_table (ElementTable, optional): element masses, the bundled periodic
            table is used if not provided
        tolerance (float, optional): per axis tolerance for merging equivalent sites
        angle_tolerance (float, optional): tolerance in degrees for right angles
        orthogonality_tolerance (float, optional): tolerance for the orthogonality
            of `a_direction` and `ab_normal`

    Returns:
        Cell: the unit cell with all symmetry equivalent atoms

    Raises:
        InvalidBasis: if the basis is malformed or does not have one symbol per site
        InvalidGeometry: for invalid cell parameters or orientation
        UnknownSpaceGroup: if (number, setting) is not in the symmetry table
        UnknownElement: if a symbol has no element data
    """
    if symmetry_table is None:
        symmetry_table = SymmetryTable.default()
    if element_table is None:
        element_table = ElementTable.default()

    basis = np.asarray(basis, dtype=np.float64)
    if basis.ndim == 1 and basis.size in (0, 3):
        basis = basis.reshape(-1, 3)
    symbols = list(symbols)
    if len(symbols) != len(basis):
        raise InvalidBasis(
            "Require one symbol per basis site: {} symbols for {} sites".format(
                len(symbols), len(basis)
            )
        )

    space_group = symmetry_table.lookup(number, setting)
    lattice = Lattice.from_cell_parameters(
        cellpar,
        a_direction,
        ab_normal,
        angle_tolerance=angle_tolerance,
        orthogonality_tolerance=orthogonality_tolerance,
    )
    kind_atoms = [Atom(s, element_table.mass_of(s)) for s in symbols]

    sites, kinds = equivalent_sites(
        basis, space_group.symmetry_operations, tolerance=tolerance
    )
    LOG.debug(
        "%s generated %d sites from %d basis sites, multiplicities %s",
        space_group,
        len(sites),
        len(basis),
        site_multiplicities(kinds, len(basis)).tolist(),
    )

    cell = Cell(
        [kind_atoms[k] for k in kinds],
        lattice.to_cartesian(sites),
        lattice,
        sites,
        kinds,
        symbols,
        space_group.number,
        space_group.setting,
    )
    contacts = cell.close_contacts(OVERLAP_DISTANCE)
    if contacts:
        i, j, d = min(contacts, key=lambda x: x[2])
        LOG.warning(
            "%d pairs of atoms in %s are closer than %.2f Angstroms, shortest %.4f (%d, %d)",
            len(contacts),
            cell,
            OVERLAP_DISTANCE,
            d,
            i,
            j,
        )
    return cell


def build_supercell(cell, nx=1, ny=1, nz=1) -> Cell:
    """
    Replicate a cell by integer translations along its lattice vectors.

    Translations are enumerated with i (along A) outermost and
    k (along C) innermost, and for each translation all atoms of
    `cell` are emitted in their original order.

    Arguments:
        cell (Cell): the cell to replicate
        nx, ny, nz (int, optional): number of repeats along A, B and C (default 1)

    Returns:
        Cell: the supercell, with lattice vectors (nx A, ny B, nz C)

    Raises:
        InvalidReplication: if any multiplier is not a positive integer
    """
    size = (nx, ny, nz)
    for n in size:
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 1:
            raise InvalidReplication(
                "Supercell multipliers must be positive integers, got {}".format(size)
            )
    size = np.array(size, dtype=np.int64)
    offsets = np.array(list(itertools.product(range(nx), range(ny), range(nz))))

    positions = []
    scaled_positions = []
    for offset in offsets:
        positions.append(cell.positions + np.dot(offset, cell.lattice.direct))
        scaled_positions.append((cell.scaled_positions + offset) / size)

    supercell = cell.__class__(
        cell.atoms * len(offsets),
        np.vstack(positions),
        cell.lattice.scaled(nx, ny, nz),
        np.vstack(scaled_positions),
        np.tile(cell.kinds, len(offsets)),
        cell.basis_symbols,
        cell.number,
        cell.setting,
        supercell=tuple(int(x) for x in np.array(cell.supercell) * size),
    )
    LOG.debug("Built %d atom supercell %s from %s", len(supercell), supercell, cell)
    return supercell
