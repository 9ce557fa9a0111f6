import unittest
from os.path import join
from tempfile import TemporaryDirectory
import numpy as np
from crystgen.cmd.build import main, parse_args
from crystgen.fmt.xyz_file import parse_extended_xyz_file

NACL_ARGS = [
    "-sg", "225",
    "-b", "0", "0", "0",
    "-b", "0.5", "0.5", "0.5",
    "-s", "Na", "Cl",
    "-c", "5.64", "5.64", "5.64", "90", "90", "90",
]


class BuildCommandTestCase(unittest.TestCase):
    def test_parse_args(self):
        args = parse_args(NACL_ARGS + ["--supercell", "2", "1", "1"])
        self.assertEqual(args.spacegroup, 225)
        self.assertEqual(args.setting, 1)
        self.assertEqual(args.basis, [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5]])
        self.assertEqual(args.symbols, ["Na", "Cl"])
        self.assertEqual(args.supercell, [2, 1, 1])
        self.assertEqual(tuple(args.a_direction), (1.0, 0.0, 0.0))

    def test_negative_vectors(self):
        args = parse_args(
            NACL_ARGS
            + ["-b", "-0.25", "0", "0", "--a-direction", "-1", "0", "0"]
            + ["--ab-normal", "0", "0", "-1"]
        )
        self.assertEqual(args.basis[-1], [-0.25, 0.0, 0.0])
        self.assertEqual(args.a_direction, [-1.0, 0.0, 0.0])
        self.assertEqual(args.ab_normal, [0.0, 0.0, -1.0])

    def test_write_supercell(self):
        with TemporaryDirectory() as tmpdirname:
            filename = join(tmpdirname, "nacl.xyz")
            status = main(NACL_ARGS + ["--supercell", "2", "2", "1", "-o", filename])
            self.assertEqual(status, 0)
            data = parse_extended_xyz_file(filename)
        self.assertEqual(len(data["symbols"]), 32)
        self.assertEqual(data["spacegroup"], (225, 1))

    def test_reversed_orientation(self):
        with TemporaryDirectory() as tmpdirname:
            filename = join(tmpdirname, "nacl.xyz")
            status = main(NACL_ARGS + ["--a-direction", "-1", "0", "0", "-o", filename])
            self.assertEqual(status, 0)
            data = parse_extended_xyz_file(filename)
        np.testing.assert_allclose(data["lattice"][0], (-5.64, 0.0, 0.0), atol=1e-9)

    def test_invalid_orientation(self):
        with self.assertLogs("crystgen-build", level="ERROR"):
            status = main(NACL_ARGS + ["--ab-normal", "1", "0", "1"])
        self.assertEqual(status, 1)

    def test_invalid_supercell(self):
        with self.assertLogs("crystgen-build", level="ERROR"):
            status = main(NACL_ARGS + ["--supercell", "0", "1", "1"])
        self.assertEqual(status, 1)
