"""Module for static information about chemical elements."""

import functools
import numbers
import re
from collections import Counter
from collections.abc import Mapping
from crystgen.exceptions import UnknownElement

_SYMBOL_REGEX = re.compile("([A-Z]+).*", re.IGNORECASE)


_ELEMENT_DATA = (
    # name symbol mass
    ("hydrogen", "H", 1.00794),
    ("helium", "He", 4.002602),
    ("lithium", "Li", 6.941),
    ("beryllium", "Be", 9.012182),
    ("boron", "B", 10.811),
    ("carbon", "C", 12.0107),
    ("nitrogen", "N", 14.0067),
    ("oxygen", "O", 15.9994),
    ("fluorine", "F", 18.998403),
    ("neon", "Ne", 20.1797),
    ("sodium", "Na", 22.98977),
    ("magnesium", "Mg", 24.305),
    ("aluminium", "Al", 26.981538),
    ("silicon", "Si", 28.0855),
    ("phosphorus", "P", 30.973761),
    ("sulfur", "S", 32.065),
    ("chlorine", "Cl", 35.453),
    ("argon", "Ar", 39.948),
    ("potassium", "K", 39.0983),
    ("calcium", "Ca", 40.078),
    ("scandium", "Sc", 44.95591),
    ("titanium", "Ti", 47.867),
    ("vanadium", "V", 50.9415),
    ("chromium", "Cr", 51.9961),
    ("manganese", "Mn", 54.938049),
    ("iron", "Fe", 55.845),
    ("cobalt", "Co", 58.9332),
    ("nickel", "Ni", 58.6934),
    ("copper", "Cu", 63.546),
    ("zinc", "Zn", 65.409),
    ("gallium", "Ga", 69.723),
    ("germanium", "Ge", 72.64),
    ("arsenic", "As", 74.9216),
    ("selenium", "Se", 78.96),
    ("bromine", "Br", 79.904),
    ("krypton", "Kr", 83.798),
    ("rubidium", "Rb", 85.4678),
    ("strontium", "Sr", 87.62),
    ("yttrium", "Y", 88.90585),
    ("zirconium", "Zr", 91.224),
    ("niobium", "Nb", 92.90638),
    ("molybdenum", "Mo", 95.94),
    ("technetium", "Tc", 98.0),
    ("ruthenium", "Ru", 101.07),
    ("rhodium", "Rh", 102.9055),
    ("palladium", "Pd", 106.42),
    ("silver", "Ag", 107.8682),
    ("cadmium", "Cd", 112.411),
    ("indium", "In", 114.818),
    ("tin", "Sn", 118.71),
    ("antimony", "Sb", 121.76),
    ("tellurium", "Te", 127.6),
    ("iodine", "I", 126.90447),
    ("xenon", "Xe", 131.293),
    ("caesium", "Cs", 132.90545),
    ("barium", "Ba", 137.327),
    ("lanthanum", "La", 138.9055),
    ("cerium", "Ce", 140.116),
    ("praseodymium", "Pr", 140.90765),
    ("neodymium", "Nd", 144.24),
    ("promethium", "Pm", 145.0),
    ("samarium", "Sm", 150.36),
    ("europium", "Eu", 151.964),
    ("gadolinium", "Gd", 157.25),
    ("terbium", "Tb", 158.92534),
    ("dysprosium", "Dy", 162.5),
    ("holmium", "Ho", 164.93032),
    ("erbium", "Er", 167.259),
    ("thulium", "Tm", 168.93421),
    ("ytterbium", "Yb", 173.04),
    ("lutetium", "Lu", 174.967),
    ("hafnium", "Hf", 178.49),
    ("tantalum", "Ta", 180.9479),
    ("tungsten", "W", 183.84),
    ("rhenium", "Re", 186.207),
    ("osmium", "Os", 190.23),
    ("iridium", "Ir", 192.217),
    ("platinum", "Pt", 195.078),
    ("gold", "Au", 196.96655),
    ("mercury", "Hg", 200.59),
    ("thallium", "Tl", 204.3833),
    ("lead", "Pb", 207.2),
    ("bismuth", "Bi", 208.98038),
    ("polonium", "Po", 209.0),
    ("astatine", "At", 210.0),
    ("radon", "Rn", 222.0),
    ("francium", "Fr", 223.0),
    ("radium", "Ra", 226.0),
    ("actinium", "Ac", 227.0),
    ("thorium", "Th", 232.0381),
    ("protactinium", "Pa", 231.03588),
    ("uranium", "U", 238.02891),
    ("neptunium", "Np", 237.0),
    ("plutonium", "Pu", 244.0),
    ("americium", "Am", 243.0),
    ("curium", "Cm", 247.0),
    ("berkelium", "Bk", 247.0),
    ("californium", "Cf", 251.0),
    ("einsteinium", "Es", 252.0),
    ("fermium", "Fm", 257.0),
    ("mendelevium", "Md", 258.0),
    ("nobelium", "No", 259.0),
    ("lawrencium", "Lr", 262.0),
)

_EL_FROM_SYM = {
    s: (i, n, s, m) for i, (n, s, m) in enumerate(_ELEMENT_DATA, start=1)
}

_EL_FROM_NAME = {
    n: (i, n, s, m) for i, (n, s, m) in enumerate(_ELEMENT_DATA, start=1)
}


class _ElementMeta(type):
    def __getitem__(cls, val):
        if isinstance(val, numbers.Integral):
            return cls.from_atomic_number(val)
        elif isinstance(val, str):
            return cls.from_string(val)
        else:
            raise ValueError("cannot construct element from provided type")


@functools.total_ordering
class Element(metaclass=_ElementMeta):
    """Storage class for information about a chemical element.

    Examples:
        >>> h = Element.from_string("H")
        >>> c = Element.from_string("C")
        >>> n = Element.from_atomic_number(7)
        >>> f = Element.from_string("F")

        Element implements an ordering for sorting in e.g.
        molecular formulae where carbon and hydrogen come first,
        otherwise elements are sorted in order of atomic number.

        >>> sorted([h, f, f, c, n])
        [C, H, N, F, F]
    """

    def __init__(self, atomic_number, name, symbol, mass):
        """Initialize an Element from its chemical data."""
        self.atomic_number = atomic_number
        self.name = name
        self.symbol = symbol
        self.mass = mass

    @staticmethod
    def from_string(s: str) -> "Element":
        """Create an element from a given element symbol or name.

        Args:
            s (str): a string representation of an element in the periodic table

        Returns:
            Element: an Element object if the conversion was successful, otherwise an exception is raised

        Examples:
            >>> Element.from_string("h")
            H
            >>> Element["rn"].name
            'radon'
            >>> Element["Na"].mass
            22.98977
        """
        symbol = s.strip().capitalize()
        if symbol == "D":
            symbol = "H"
        if symbol.isdigit():
            return Element.from_atomic_number(int(symbol))
        if symbol not in _EL_FROM_SYM:
            name = symbol.lower()
            if name not in _EL_FROM_NAME:
                return Element.from_label(s)
            return Element(*_EL_FROM_NAME[name])
        return Element(*_EL_FROM_SYM[symbol])

    @staticmethod
    def from_label(label: str) -> "Element":
        """Create an element from a site label e.g. 'C1', 'Fe2' etc.

        Args:
            label (str): a site label starting with an element symbol

        Returns:
            Element: an Element object if the conversion was successful, otherwise an exception is raised

        Examples:
            >>> Element.from_label("C1")
            C
            >>> Element["Cl2"]
            Cl
        """
        m = re.match(_SYMBOL_REGEX, label)
        if m is None:
            raise UnknownElement("Could not determine symbol from {}".format(label))
        sym = m.group(1).strip().capitalize()
        if sym not in _EL_FROM_SYM:
            raise UnknownElement("Could not determine symbol from {}".format(label))
        return Element(*_EL_FROM_SYM[sym])

    @staticmethod
    def from_atomic_number(n: int) -> "Element":
        """Create an element from a given atomic number.

        Args:
            n (int): the atomic number of the element

        Returns:
            Element: an Element object if atomic number was valid, otherwise an exception is raised

        Examples:
            >>> Element.from_atomic_number(2)
            He
            >>> Element[79].name
            'gold'
        """
        if n < 1 or n > len(_ELEMENT_DATA):
            raise UnknownElement("No element with atomic number {}".format(n))
        return Element(n, *_ELEMENT_DATA[n - 1])

    def __repr__(self):
        """Represent this element as a string for REPL."""
        return self.symbol

    def __hash__(self):
        """Hash of this element (its atomic number)."""
        return int(self.atomic_number)

    def _is_valid_operand(self, other):
        return hasattr(other, "atomic_number")

    def __eq__(self, other):
        """Check if two Elements have the same atomic number."""
        if not self._is_valid_operand(other):
            return NotImplemented
        return self.atomic_number == other.atomic_number

    def __lt__(self, other):
        """Check which element comes before the other in chemical formulae (C first, then order of atomic number)."""
        if not self._is_valid_operand(other):
            return NotImplemented
        n1, n2 = self.atomic_number, other.atomic_number
        if n1 == n2:
            return False
        if n1 == 6:
            return True
        elif n2 == 6:
            return False
        else:
            return n1 < n2


def chemical_formula(elements, subscript=False):
    """Calculate the chemical formula for the given list of elements.

    Examples:
        >>> chemical_formula(['O', 'C', 'O'])
        'CO2'
        >>> chemical_formula([Element['Na'], Element['Cl'], Element['Na']])
        'Na2Cl'

    Args:
        elements (List[Element or str]): a list of elements or element symbols.
            Note that if a list of strings are provided the order of chemical
            symbols may not match convention.
        subscript (bool, optional): toggle to use unicode subscripts for the chemical formula string

    Returns:
        str: the chemical formula
    """
    count = Counter(sorted(elements))
    blocks = []
    for el, c in count.items():
        if subscript:
            c = "".join(chr(0x2080 + int(i)) for i in str(c)) if c > 1 else ""
        else:
            c = c if c > 1 else ""
        blocks.append(f"{el}{c}")
    return "".join(blocks)


class ElementTable(Mapping):
    """
    Read-only lookup of chemical symbol to `Element`, used to
    attach masses to the atoms of a crystal structure.

    Examples:
        >>> table = ElementTable.default()
        >>> table.mass_of("Fe")
        55.845
        >>> custom = ElementTable.from_masses({"Na": 23.0, "Cl": 35.5})
        >>> custom.mass_of("Cl")
        35.5
    """

    def __init__(self, elements):
        self._elements = {el.symbol: el for el in elements}

    def __getitem__(self, symbol) -> Element:
        el = self._elements.get(symbol, None)
        if el is None and isinstance(symbol, str):
            el = self._elements.get(symbol.strip().capitalize(), None)
        if el is None:
            raise UnknownElement("No element data for symbol '{}'".format(symbol))
        return el

    def __iter__(self):
        return iter(self._elements)

    def __len__(self):
        return len(self._elements)

    def mass_of(self, symbol) -> float:
        """
        The atomic mass (in amu) for a chemical symbol.

        Raises:
            UnknownElement: if the symbol is not present in this table
        """
        return self[symbol].mass

    def __repr__(self):
        return "<{}: {} elements>".format(self.__class__.__name__, len(self))

    @classmethod
    def from_masses(cls, masses):
        """
        Construct a table from a mapping of chemical symbol to mass.
        Symbols found in the periodic table keep their atomic number
        and name, others are given atomic number 0.

        Args:
            masses (Mapping[str, float]): chemical symbol to mass

        Returns:
            ElementTable: a table containing only the provided symbols
        """
        elements = []
        for symbol, mass in masses.items():
            if symbol in _EL_FROM_SYM:
                number, name = _EL_FROM_SYM[symbol][:2]
            else:
                number, name = 0, symbol
            elements.append(Element(number, name, symbol, float(mass)))
        return cls(elements)

    @classmethod
    def default(cls):
        "Table of all elements in the periodic table from H to Lr"
        return cls(Element(*x) for x in _EL_FROM_SYM.values())
