import logging
import sys
from crystgen.crystal import build_supercell, build_unit_cell
from crystgen.crystal.equivalent_sites import site_multiplicities
from crystgen.exceptions import CrystalBuildError
from crystgen.fmt.xyz_file import cell_to_xyz_string, write_xyz_file

LOG = logging.getLogger("crystgen-build")


def parse_args(argv=None):
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate all atoms in a crystal (super)cell from a space group and basis"
    )
    parser.add_argument("-sg", "--spacegroup", type=int, required=True)
    parser.add_argument("--setting", type=int, default=1)
    parser.add_argument(
        "-b",
        "--basis",
        type=float,
        nargs=3,
        action="append",
        required=True,
        metavar=("X", "Y", "Z"),
        help="fractional position of a basis site, repeat for each site",
    )
    parser.add_argument(
        "-s", "--symbols", nargs="+", required=True, help="one symbol per basis site"
    )
    parser.add_argument(
        "-c",
        "--cellpar",
        type=float,
        nargs=6,
        required=True,
        metavar=("A", "B", "C", "ALPHA", "BETA", "GAMMA"),
    )
    parser.add_argument(
        "--a-direction",
        type=float,
        nargs=3,
        default=(1.0, 0.0, 0.0),
        metavar=("X", "Y", "Z"),
    )
    parser.add_argument(
        "--ab-normal",
        type=float,
        nargs=3,
        default=(0.0, 0.0, 1.0),
        metavar=("X", "Y", "Z"),
    )
    parser.add_argument(
        "--supercell", type=int, nargs=3, default=(1, 1, 1), metavar=("NX", "NY", "NZ")
    )
    parser.add_argument("-o", "--output", default=None)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level)

    try:
        cell = build_unit_cell(
            args.basis,
            args.symbols,
            args.spacegroup,
            args.setting,
            args.cellpar,
            a_direction=args.a_direction,
            ab_normal=args.ab_normal,
        )
        LOG.info(
            "Generated %s, multiplicities %s",
            cell,
            dict(zip(args.symbols, site_multiplicities(cell.kinds, len(args.symbols)).tolist())),
        )
        cell = build_supercell(cell, *args.supercell)
    except CrystalBuildError as e:
        LOG.error("Could not build structure: %s", e)
        return 1

    if args.output is None:
        sys.stdout.write(cell_to_xyz_string(cell))
    else:
        write_xyz_file(cell, args.output)
    LOG.info("Wrote %d atoms to %s", len(cell), args.output or "stdout")
    return 0


if __name__ == "__main__":
    sys.exit(main())
