import logging
import numpy as np
from crystgen.exceptions import InvalidBasis

LOG = logging.getLogger(__name__)

# per-axis tolerance (fractional units) below which two sites are the same
SITE_TOLERANCE = 1e-3


def wrap_to_unit_cell(coords) -> np.ndarray:
    """
    Reduce fractional coordinates into [0, 1).

    The modulo of a tiny negative number can round to exactly 1.0,
    such components are folded back to 0.

    >>> wrap_to_unit_cell([-0.25, 1.5, 0.0])
    array([0.75, 0.5 , 0.  ])
    >>> wrap_to_unit_cell([-1e-17, 0.0, 2.0])
    array([0., 0., 0.])
    """
    wrapped = np.mod(coords, 1.0)
    wrapped = np.where(wrapped < 0, wrapped + 1.0, wrapped)
    return np.where(wrapped >= 1.0, wrapped - 1.0, wrapped)


def equivalent_sites(basis, symmetry_operations, tolerance=SITE_TOLERANCE):
    """
    Apply all symmetry operations to each site in the basis, keeping
    only sites which are not already present.

    A candidate site is a duplicate of an already accepted site if
    every component matches within `tolerance` (i.e. the comparison
    is per axis, not by distance). Sites are kept in the order they
    are discovered: basis sites in input order, and for each of them
    the symmetry operations in the order given.

    Args:
        basis (array_like): (N, 3) fractional positions, row i being kind i
        symmetry_operations (List[SymmetryOperation]): operations to apply
        tolerance (float, optional): per axis tolerance for duplicate sites

    Returns:
        Tuple[np.ndarray, np.ndarray]: (M, 3) array of fractional sites in [0, 1)
            and the (M) array of kind indices for each site
    """
    basis = np.asarray(basis, dtype=np.float64)
    if basis.ndim == 1 and basis.size in (0, 3):
        basis = basis.reshape(-1, 3)
    if basis.ndim != 2 or basis.shape[1] != 3:
        raise InvalidBasis(
            "Basis must be an (N, 3) array of fractional positions, got shape {}".format(
                basis.shape
            )
        )

    sites = []
    kinds = []
    for kind, position in enumerate(basis):
        nsites = len(sites)
        for symop in symmetry_operations:
            candidate = wrap_to_unit_cell(symop.apply(position))
            if sites:
                differences = np.abs(np.asarray(sites) - candidate)
                if np.any(np.all(differences <= tolerance, axis=1)):
                    continue
            sites.append(candidate)
            kinds.append(kind)
        LOG.debug(
            "Basis site %d %s generated %d equivalent sites",
            kind,
            position,
            len(sites) - nsites,
        )

    return np.array(sites).reshape(-1, 3), np.array(kinds, dtype=np.int64)


def site_multiplicities(kinds, nkinds=None) -> np.ndarray:
    """
    Number of generated sites for each kind.

    >>> site_multiplicities([0, 0, 0, 0, 1, 1, 1, 1])
    array([4, 4])
    >>> site_multiplicities([0, 0], nkinds=3)
    array([2, 0, 0])
    """
    kinds = np.asarray(kinds, dtype=np.int64)
    if nkinds is None:
        nkinds = kinds.max() + 1 if kinds.size else 0
    return np.bincount(kinds, minlength=nkinds)
