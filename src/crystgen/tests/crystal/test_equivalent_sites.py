import logging
import unittest
import numpy as np
from crystgen.crystal import SymmetryOperation, SymmetryTable
from crystgen.crystal.equivalent_sites import (
    equivalent_sites,
    site_multiplicities,
    wrap_to_unit_cell,
)
from crystgen.exceptions import InvalidGeometry

LOG = logging.getLogger(__name__)


IDENTITY = SymmetryOperation(np.eye(3), np.zeros(3))


def _translation(*t):
    return SymmetryOperation(np.eye(3), t)


class WrapTestCase(unittest.TestCase):
    def test_wrap(self):
        wrapped = wrap_to_unit_cell(np.array([[-0.25, 1.5, 0.0], [-1e-17, 2.0, 0.999]]))
        np.testing.assert_array_equal(wrapped, [[0.75, 0.5, 0.0], [0.0, 0.0, 0.999]])
        self.assertTrue(np.all((wrapped >= 0) & (wrapped < 1)))


class EquivalentSitesTestCase(unittest.TestCase):
    table = SymmetryTable.default()

    def test_identity(self):
        basis = np.array([[0.1, 0.2, 0.3], [0.5, 0.5, 0.5]])
        sites, kinds = equivalent_sites(basis, [IDENTITY])
        np.testing.assert_array_equal(sites, basis)
        np.testing.assert_array_equal(kinds, [0, 1])

    def test_inversion(self):
        ops = self.table.lookup(2).symmetry_operations
        sites, kinds = equivalent_sites([[0.1, 0.2, 0.3]], ops)
        np.testing.assert_allclose(sites, [[0.1, 0.2, 0.3], [0.9, 0.8, 0.7]])
        np.testing.assert_array_equal(kinds, [0, 0])
        sites, kinds = equivalent_sites([0.0, 0.0, 0.0], ops)
        self.assertEqual(len(sites), 1)

    def test_per_axis_tolerance(self):
        origin = [[0.0, 0.0, 0.0]]
        sites, _ = equivalent_sites(origin, [IDENTITY, _translation(0.0009, 0, 0)])
        self.assertEqual(len(sites), 1)
        sites, _ = equivalent_sites(origin, [IDENTITY, _translation(0.002, 0, 0)])
        self.assertEqual(len(sites), 2)
        # within tolerance on every axis, although further apart than the tolerance
        sites, _ = equivalent_sites(
            origin, [IDENTITY, _translation(0.0009, 0.0009, 0.0009)]
        )
        self.assertEqual(len(sites), 1)
        # comparison is not periodic: 0.9995 and 0.0 are different sites
        sites, _ = equivalent_sites(origin, [IDENTITY, _translation(-0.0005, 0, 0)])
        self.assertEqual(len(sites), 2)
        sites, _ = equivalent_sites(
            origin, [IDENTITY, _translation(0.002, 0, 0)], tolerance=0.01
        )
        self.assertEqual(len(sites), 1)

    def test_general_positions(self):
        general = [[0.11, 0.23, 0.37]]
        for entry in self.table:
            sites, kinds = equivalent_sites(general, entry.symmetry_operations)
            self.assertEqual(len(sites), len(entry), msg=repr(entry))
            self.assertTrue(np.all((sites >= 0) & (sites < 1)))
            np.testing.assert_array_equal(kinds, np.zeros(len(entry)))

    def test_special_positions(self):
        cases = (
            ((225, 1), (0, 0, 0), 4),
            ((225, 1), (0.25, 0.25, 0.25), 8),
            ((229, 1), (0, 0, 0), 2),
            ((221, 1), (0.5, 0.5, 0.5), 1),
            ((216, 1), (0.25, 0.25, 0.25), 4),
            ((194, 1), (1 / 3, 2 / 3, 0.25), 2),
            ((166, 1), (0, 0, 0), 3),
            ((166, 2), (0, 0, 0), 1),
        )
        for key, position, multiplicity in cases:
            ops = self.table.lookup(*key).symmetry_operations
            sites, _ = equivalent_sites([position], ops)
            self.assertEqual(len(sites), multiplicity, msg=str(key))

    def test_discovery_order(self):
        ops = self.table.lookup(225).symmetry_operations
        sites, kinds = equivalent_sites([[0, 0, 0], [0.5, 0.5, 0.5]], ops)
        np.testing.assert_array_equal(kinds, [0, 0, 0, 0, 1, 1, 1, 1])
        np.testing.assert_allclose(
            sites,
            [
                [0.0, 0.0, 0.0],
                [0.0, 0.5, 0.5],
                [0.5, 0.0, 0.5],
                [0.5, 0.5, 0.0],
                [0.5, 0.5, 0.5],
                [0.5, 0.0, 0.0],
                [0.0, 0.5, 0.0],
                [0.0, 0.0, 0.5],
            ],
        )

    def test_idempotent(self):
        general = [[0.11, 0.23, 0.37]]
        special = [[0, 0, 0], [0.25, 0.25, 0.25], [0.5, 0.5, 0.5]]
        for entry in self.table:
            basis = general
            # thirds in the rhombohedral centering are not exact in floating point
            if entry.key != (166, 1):
                basis = general + special
            ops = entry.symmetry_operations
            sites1, kinds1 = equivalent_sites(basis, ops)
            sites2, kinds2 = equivalent_sites(basis, ops)
            np.testing.assert_array_equal(sites1, sites2)
            np.testing.assert_array_equal(kinds1, kinds2)
            sites3, _ = equivalent_sites(sites1, ops)
            self.assertEqual(len(sites3), len(sites1), msg=repr(entry))

    def test_bad_basis(self):
        with self.assertRaises(InvalidGeometry):
            equivalent_sites([[0, 0], [1, 1]], [IDENTITY])

    def test_empty_basis(self):
        sites, kinds = equivalent_sites(np.empty((0, 3)), [IDENTITY])
        self.assertEqual(sites.shape, (0, 3))
        self.assertEqual(kinds.shape, (0,))

    def test_multiplicities(self):
        np.testing.assert_array_equal(site_multiplicities([0, 0, 1, 2, 2, 2]), [2, 1, 3])
        np.testing.assert_array_equal(site_multiplicities([], nkinds=2), [0, 0])
