import logging
import re
from pathlib import Path
import numpy as np

LOG = logging.getLogger(__name__)

_LATTICE_REGEX = re.compile(r'Lattice="([^"]*)"')
_SPACEGROUP_REGEX = re.compile(r'spacegroup="(\d+):(\d+)"')


def cell_to_xyz_string(cell, precision=10):
    """Represent a cell as extended xyz file contents, with the
    lattice vectors stored in the comment line

    Parameters
    ----------
    cell: :obj:`Cell`
        the cell to write
    precision: int, optional
        number of decimal places for coordinates

    Returns
    -------
    str
        extended xyz formatted contents
    """
    fmt = "{{:.{}f}}".format(precision)
    lattice = " ".join(fmt.format(x) for x in cell.lattice.direct.flatten())
    lines = [
        str(len(cell)),
        'Lattice="{}" Properties=species:S:1:pos:R:3 spacegroup="{}:{}" pbc="T T T"'.format(
            lattice, cell.number, cell.setting
        ),
    ]
    row = "{:<3s} " + " ".join([fmt] * 3)
    for symbol, pos in zip(cell.symbols, cell.positions):
        lines.append(row.format(symbol, *pos))
    return "\n".join(lines) + "\n"


def parse_extended_xyz_string(contents, filename=None):
    """Convert provided extended xyz file contents into chemical
    symbols, cartesian positions and lattice vectors

    Parameters
    ----------
    contents: str
        text contents of the .xyz file to read

    Returns
    -------
    dict
        with `symbols` (N), `positions` (N, 3), `lattice` (3, 3) or None
        if not present and `spacegroup` (number, setting) or None
    """
    lines = contents.splitlines()
    natom = int(lines[0].strip())
    LOG.debug("Expecting %d atoms %s", natom, "in " + filename if filename else "")
    comment = lines[1] if len(lines) > 1 else ""

    lattice = None
    m = _LATTICE_REGEX.search(comment)
    if m is not None:
        lattice = np.array([float(x) for x in m.group(1).split()]).reshape(3, 3)
    spacegroup = None
    m = _SPACEGROUP_REGEX.search(comment)
    if m is not None:
        spacegroup = (int(m.group(1)), int(m.group(2)))

    symbols = []
    positions = []
    for line in lines[2 : 2 + natom]:
        if not line.strip():
            break
        tokens = line.strip().split()
        positions.append(tuple(float(x) for x in tokens[1:4]))
        symbols.append(tokens[0])
    if len(symbols) != natom:
        raise ValueError(
            "Expected {} atoms, found {} {}".format(
                natom, len(symbols), "in " + filename if filename else ""
            )
        )
    return {
        "symbols": symbols,
        "positions": np.asarray(positions).reshape(-1, 3),
        "lattice": lattice,
        "spacegroup": spacegroup,
    }


def parse_extended_xyz_file(filename):
    """Convert a provided extended xyz file into chemical symbols,
    cartesian positions and lattice vectors

    Parameters
    ----------
    filename: str
        path to the .xyz file to read

    Returns
    -------
    dict
        see :obj:`parse_extended_xyz_string`
    """
    path = Path(filename)
    return parse_extended_xyz_string(path.read_text(), filename=str(path.absolute()))


def write_xyz_file(cell, filename, **kwargs):
    "Write a cell to an extended xyz file"
    path = Path(filename)
    path.write_text(cell_to_xyz_string(cell, **kwargs))
    LOG.debug("Saved %s to %s", cell, path)
