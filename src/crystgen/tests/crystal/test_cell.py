import json
import unittest
import numpy as np
from crystgen.core.element import ElementTable
from crystgen.crystal import (
    Cell,
    SpaceGroupEntry,
    SymmetryTable,
    build_supercell,
    build_unit_cell,
)
from crystgen.exceptions import (
    CrystalBuildError,
    InvalidBasis,
    InvalidGeometry,
    InvalidReplication,
    UnknownElement,
    UnknownSpaceGroup,
)


def nacl(**kwargs):
    return build_unit_cell(
        [[0, 0, 0], [0.5, 0.5, 0.5]],
        ["Na", "Cl"],
        225,
        1,
        [5.64, 5.64, 5.64, 90, 90, 90],
        **kwargs,
    )


class BuildUnitCellTestCase(unittest.TestCase):
    def test_nacl(self):
        cell = nacl()
        self.assertEqual(len(cell), 8)
        self.assertEqual(cell.symbols, ["Na"] * 4 + ["Cl"] * 4)
        np.testing.assert_array_equal(cell.kinds, [0, 0, 0, 0, 1, 1, 1, 1])
        np.testing.assert_allclose(cell.lattice.direct, 5.64 * np.eye(3), atol=1e-12)
        np.testing.assert_allclose(cell.lengths, [5.64] * 3)
        grid = np.array((0.0, 2.82, 5.64))
        distance_to_grid = np.min(
            np.abs(cell.positions[:, :, np.newaxis] - grid), axis=2
        )
        self.assertTrue(np.all(distance_to_grid < 1e-3))
        np.testing.assert_allclose(cell.positions[1], (0.0, 2.82, 2.82))
        np.testing.assert_allclose(cell.positions[4], (2.82, 2.82, 2.82))
        np.testing.assert_allclose(cell.masses[:4], 22.98977)
        np.testing.assert_allclose(cell.masses[4:], 35.453)
        self.assertEqual(cell.chemical_formula, "Na4Cl4")
        self.assertAlmostEqual(cell.density, 2.16, places=2)
        self.assertEqual((cell.number, cell.setting), (225, 1))
        self.assertEqual(cell.basis_symbols, ("Na", "Cl"))
        self.assertEqual(repr(cell), "<Cell Na4Cl4 225:1 1x1x1>")

    def test_fcc_al(self):
        cell = build_unit_cell([[0, 0, 0]], ["Al"], 225, 1, [4.05] * 3 + [90] * 3)
        self.assertEqual(len(cell), 4)

    def test_bcc_fe(self):
        cell = build_unit_cell([(0, 0, 0)], ["Fe"], 229, 1, [2.87] * 3 + [90] * 3)
        self.assertEqual(len(cell), 2)
        np.testing.assert_allclose(cell.scaled_positions, [[0, 0, 0], [0.5, 0.5, 0.5]])
        np.testing.assert_allclose(cell.positions[1], [1.435] * 3)

    def test_single_site_basis(self):
        cell = build_unit_cell((0, 0, 0), ["Po"], 221, 1, [3.35] * 3 + [90] * 3)
        self.assertEqual(len(cell), 1)

    def test_hcp_mg(self):
        cell = build_unit_cell(
            [[1 / 3, 2 / 3, 0.25]], ["Mg"], 194, 1, [3.21, 3.21, 5.21, 90, 90, 120]
        )
        self.assertEqual(len(cell), 2)
        np.testing.assert_allclose(
            cell.scaled_positions, [[1 / 3, 2 / 3, 0.25], [2 / 3, 1 / 3, 0.75]]
        )
        np.testing.assert_allclose(
            cell.positions, cell.lattice.to_cartesian(cell.scaled_positions)
        )

    def test_zincblende(self):
        cell = build_unit_cell(
            [[0, 0, 0], [0.25, 0.25, 0.25]], ["Zn", "S"], 216, 1, [5.41] * 3 + [90] * 3
        )
        self.assertEqual(cell.symbols, ["Zn"] * 4 + ["S"] * 4)
        self.assertEqual(cell.chemical_formula, "S4Zn4")

    def test_rhombohedral_settings(self):
        hexagonal = build_unit_cell(
            [[0, 0, 0]], ["Bi"], 166, 1, [4.55, 4.55, 11.86, 90, 90, 120]
        )
        rhombohedral = build_unit_cell(
            [[0, 0, 0]], ["Bi"], 166, 2, [4.75] * 3 + [57.2] * 3
        )
        self.assertEqual(len(hexagonal), 3)
        self.assertEqual(len(rhombohedral), 1)

    def test_right_angle_tolerance(self):
        exact = nacl()
        near = build_unit_cell(
            [[0, 0, 0], [0.5, 0.5, 0.5]],
            ["Na", "Cl"],
            225,
            1,
            [5.64, 5.64, 5.64, 90.0000001, 90, 90],
        )
        self.assertEqual(exact, near)

    def test_oriented(self):
        cell = nacl(a_direction=(0, 1, 0), ab_normal=(0, 0, 1))
        np.testing.assert_allclose(cell.lattice.v_a, (0, 5.64, 0), atol=1e-12)
        np.testing.assert_allclose(cell.lengths, [5.64] * 3)
        np.testing.assert_allclose(cell.scaled_positions, nacl().scaled_positions)

    def test_invalid_geometry(self):
        with self.assertRaises(InvalidGeometry):
            nacl(a_direction=(1, 0, 0), ab_normal=(1, 0, 1))
        with self.assertRaises(InvalidGeometry):
            build_unit_cell([[0, 0, 0]], ["Al"], 225, 1, [-4.05] * 3 + [90] * 3)
        with self.assertRaises(InvalidGeometry):
            build_unit_cell(
                [[0, 0, 0]],
                ["Al"],
                225,
                1,
                [4.05] * 3 + [90] * 3,
                a_direction=(np.inf, 0, 0),
            )

    def test_unknown_space_group(self):
        with self.assertRaises(UnknownSpaceGroup):
            build_unit_cell([[0, 0, 0]], ["Al"], 225, 2, [4.05] * 3 + [90] * 3)
        with self.assertRaises(UnknownSpaceGroup):
            build_unit_cell([[0, 0, 0]], ["Al"], 231, 1, [4.05] * 3 + [90] * 3)

    def test_unknown_element(self):
        with self.assertRaises(UnknownElement):
            build_unit_cell([[0, 0, 0]], ["Xx"], 225, 1, [4.05] * 3 + [90] * 3)

    def test_symbol_count(self):
        with self.assertRaises(InvalidBasis):
            build_unit_cell([[0, 0, 0]], ["Na", "Cl"], 225, 1, [5.64] * 3 + [90] * 3)
        with self.assertRaises(InvalidBasis):
            build_unit_cell([], ["Na"], 225, 1, [5.64] * 3 + [90] * 3)
        with self.assertRaises(InvalidBasis):
            build_unit_cell(
                [[0, 0], [0.5, 0.5]], ["Na", "Cl"], 225, 1, [5.64] * 3 + [90] * 3
            )

    def test_empty_basis(self):
        cell = build_unit_cell([], [], 225, 1, [5.64] * 3 + [90] * 3)
        self.assertEqual(len(cell), 0)
        self.assertEqual(cell.positions.shape, (0, 3))
        self.assertEqual(cell.chemical_formula, "")

    def test_custom_tables(self):
        table = SymmetryTable([SpaceGroupEntry(1, 1, [np.eye(3)], [np.zeros(3)])])
        masses = ElementTable.from_masses({"Na": 23.0, "Cl": 35.5})
        cell = build_unit_cell(
            [[0, 0, 0], [0.5, 0.5, 0.5]],
            ["Na", "Cl"],
            1,
            1,
            [5.64] * 3 + [90] * 3,
            symmetry_table=table,
            element_table=masses,
        )
        self.assertEqual(len(cell), 2)
        np.testing.assert_array_equal(cell.masses, [23.0, 35.5])
        self.assertEqual(cell.chemical_formula, "NaCl")
        custom = build_unit_cell(
            [[0, 0, 0], [0.5, 0.5, 0.5]],
            ["Xq", "Na"],
            1,
            1,
            [5.64] * 3 + [90] * 3,
            element_table=ElementTable.from_masses({"Na": 23.0, "Xq": 10.0}),
        )
        self.assertEqual(custom.chemical_formula, "NaXq")
        with self.assertRaises(UnknownSpaceGroup):
            nacl(symmetry_table=table)
        with self.assertRaises(UnknownElement):
            nacl(element_table=ElementTable.from_masses({"Na": 23.0}))

    def test_overlap_warning(self):
        with self.assertLogs("crystgen.crystal.cell", level="WARNING"):
            build_unit_cell(
                [[0, 0, 0], [0.01, 0, 0]], ["Na", "Cl"], 1, 1, [5.64] * 3 + [90] * 3
            )

    def test_immutable(self):
        cell = nacl()
        with self.assertRaises(ValueError):
            cell.positions[0, 0] = 1.0
        with self.assertRaises(ValueError):
            cell.lattice.direct[0, 0] = 1.0


class CellTestCase(unittest.TestCase):
    def test_dict_round_trip(self):
        cell = nacl()
        self.assertEqual(Cell.from_dict(cell.to_dict()), cell)
        data = json.loads(json.dumps(cell.to_dict()))
        copy = Cell.from_dict(data)
        np.testing.assert_allclose(copy.positions, cell.positions, atol=1e-6)
        np.testing.assert_allclose(copy.lattice.direct, cell.lattice.direct, atol=1e-6)
        self.assertEqual(copy.symbols, cell.symbols)
        self.assertEqual(data["spacegroup"], {"number": 225, "setting": 1})

    def test_supercell_dict_round_trip(self):
        sc = build_supercell(nacl(), 2, 1, 3)
        copy = Cell.from_dict(json.loads(json.dumps(sc.to_dict())))
        self.assertEqual(copy.supercell, (2, 1, 3))
        np.testing.assert_allclose(copy.positions, sc.positions, atol=1e-6)

    def test_inconsistent(self):
        cell = nacl()
        with self.assertRaises(CrystalBuildError):
            Cell(
                cell.atoms,
                cell.positions[:4],
                cell.lattice,
                cell.scaled_positions,
                cell.kinds,
                cell.basis_symbols,
                225,
                1,
            )

    def test_close_contacts(self):
        cell = build_unit_cell([(0, 0, 0)], ["Fe"], 229, 1, [2.87] * 3 + [90] * 3)
        contacts = cell.close_contacts(2.6)
        self.assertEqual(len(contacts), 1)
        i, j, d = contacts[0]
        self.assertEqual((i, j), (0, 1))
        self.assertAlmostEqual(d, 2.87 * np.sqrt(3) / 2)
        self.assertEqual(cell.close_contacts(2.0), [])
        self.assertEqual(nacl().close_contacts(), [])

    def test_close_contacts_across_boundary(self):
        cell = build_unit_cell(
            [[0.0, 0, 0], [0.99, 0, 0]], ["Na", "Na"], 1, 1, [5.0] * 3 + [90] * 3
        )
        contacts = cell.close_contacts(0.5)
        self.assertEqual(len(contacts), 1)
        self.assertAlmostEqual(contacts[0][2], 0.05)


class BuildSupercellTestCase(unittest.TestCase):
    def test_identity(self):
        cell = nacl()
        self.assertEqual(build_supercell(cell), cell)
        self.assertEqual(build_supercell(cell, 1, 1, 1), cell)

    def test_size_and_lattice(self):
        cell = build_unit_cell(
            [[1 / 3, 2 / 3, 0.25]], ["Mg"], 194, 1, [3.21, 3.21, 5.21, 90, 90, 120]
        )
        for nx, ny, nz in ((2, 1, 1), (2, 3, 1), (3, 3, 2)):
            sc = build_supercell(cell, nx, ny, nz)
            self.assertEqual(len(sc), nx * ny * nz * len(cell))
            np.testing.assert_allclose(sc.lattice.v_a, nx * cell.lattice.v_a)
            np.testing.assert_allclose(sc.lattice.v_b, ny * cell.lattice.v_b)
            np.testing.assert_allclose(sc.lattice.v_c, nz * cell.lattice.v_c)
            self.assertEqual(sc.supercell, (nx, ny, nz))
            self.assertTrue(np.all((sc.scaled_positions >= 0) & (sc.scaled_positions < 1)))
            np.testing.assert_allclose(
                sc.positions, sc.lattice.to_cartesian(sc.scaled_positions), atol=1e-10
            )

    def test_ordering(self):
        cell = nacl()
        n = len(cell)
        sc = build_supercell(cell, 2, 3, 1)
        np.testing.assert_array_equal(sc.positions[:n], cell.positions)
        # k innermost, then j, then i
        np.testing.assert_allclose(
            sc.positions[n : 2 * n], cell.positions + cell.lattice.v_b
        )
        np.testing.assert_allclose(
            sc.positions[3 * n : 4 * n], cell.positions + cell.lattice.v_a
        )
        self.assertEqual(sc.symbols, cell.symbols * 6)
        np.testing.assert_array_equal(sc.kinds, np.tile(cell.kinds, 6))

    def test_nested(self):
        sc = build_supercell(build_supercell(nacl(), 2, 1, 1), 1, 2, 2)
        self.assertEqual(sc.supercell, (2, 2, 2))
        self.assertEqual(len(sc), 64)
        self.assertEqual(sc.chemical_formula, "Na32Cl32")

    def test_invalid(self):
        cell = nacl()
        for size in ((0, 1, 1), (1, -1, 1), (1, 1, 1.5), (True, 1, 1), (2, 2, "2")):
            with self.assertRaises(InvalidReplication, msg=str(size)):
                build_supercell(cell, *size)
