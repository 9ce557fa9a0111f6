import json
import logging
import os
import numpy as np
from crystgen.exceptions import StructuralInconsistency, UnknownSpaceGroup
from .symmetry_operation import SymmetryOperation, expanded_symmetry_list

LOG = logging.getLogger(__name__)

SGDATA_FILE = os.path.join(os.path.dirname(__file__), "sgdata.json")

CENTERING_TRANSLATIONS = {
    "P": ((0, 0, 0),),
    "I": ((0, 0, 0), (1 / 2, 1 / 2, 1 / 2)),
    "R": ((0, 0, 0), (2 / 3, 1 / 3, 1 / 3), (1 / 3, 2 / 3, 2 / 3)),
    "F": ((0, 0, 0), (0, 1 / 2, 1 / 2), (1 / 2, 0, 1 / 2), (1 / 2, 1 / 2, 0)),
    "A": ((0, 0, 0), (0, 1 / 2, 1 / 2)),
    "B": ((0, 0, 0), (1 / 2, 0, 1 / 2)),
    "C": ((0, 0, 0), (1 / 2, 1 / 2, 0)),
}

_DEFAULT_TABLE = None


def _frozen(array, shape, what):
    array = np.array(array, dtype=np.float64)
    if array.shape != shape:
        raise StructuralInconsistency(
            "Expected {} of shape {}, got {}".format(what, shape, array.shape)
        )
    array.setflags(write=False)
    return array


class SpaceGroupEntry:
    """
    The stored symmetry data for one setting of a space group: the
    base rotations and translations (paired by index), the centering
    sub-translations and whether the group is centrosymmetric.

    Entries are read-only once constructed and can be shared between
    any number of crystal constructions.

    Attributes:
        number (int): the international tables number
        setting (int): the setting of this space group (usually 1 or 2)
        symbol (str): the Hermann-Mauguin symbol
        rotations (Tuple[np.ndarray]): base (3, 3) rotation matrices
        translations (Tuple[np.ndarray]): base (3) translation vectors
        subtranslations (Tuple[np.ndarray]): (3) centering vectors
        centrosymmetric (bool): whether inversion is applied to all operations
    """

    def __init__(
        self,
        number,
        setting,
        rotations,
        translations,
        subtranslations=((0, 0, 0),),
        centrosymmetric=False,
        symbol="",
    ):
        if number < 1 or setting < 1:
            raise StructuralInconsistency(
                "Invalid space group number/setting {}:{}".format(number, setting)
            )
        if len(rotations) != len(translations):
            raise StructuralInconsistency(
                "Space group {} setting {} has {} rotations but {} translations".format(
                    number, setting, len(rotations), len(translations)
                )
            )
        if len(subtranslations) == 0:
            raise StructuralInconsistency(
                "Space group {} setting {} has no sub-translations".format(
                    number, setting
                )
            )
        self.number = int(number)
        self.setting = int(setting)
        self.symbol = symbol
        self.rotations = tuple(_frozen(r, (3, 3), "rotation") for r in rotations)
        self.translations = tuple(
            _frozen(t, (3,), "translation") for t in translations
        )
        self.subtranslations = tuple(
            _frozen(t, (3,), "sub-translation") for t in subtranslations
        )
        self.centrosymmetric = bool(centrosymmetric)

    @property
    def key(self):
        "The (number, setting) pair identifying this entry"
        return (self.number, self.setting)

    @property
    def symmetry_operations(self):
        "The full, ordered list of symmetry operations for this entry"
        if not hasattr(self, "_symmetry_operations"):
            setattr(self, "_symmetry_operations", tuple(expanded_symmetry_list(self)))
        return getattr(self, "_symmetry_operations")

    @property
    def symops(self):
        "alias for `self.symmetry_operations`"
        return self.symmetry_operations

    @property
    def crystal_system(self) -> str:
        "The crystal system of the space group e.g. triclinic, monoclinic etc."
        sg = self.number
        if sg <= 0 or sg >= 231:
            raise ValueError("International spacegroup number must be between 1-230")
        if sg <= 2:
            return "triclinic"
        if sg <= 16:
            return "monoclinic"
        if sg <= 74:
            return "orthorhombic"
        if sg <= 142:
            return "tetragonal"
        if sg <= 167:
            return "trigonal"
        if sg <= 194:
            return "hexagonal"
        return "cubic"

    def __len__(self):
        parities = 2 if self.centrosymmetric else 1
        return parities * len(self.subtranslations) * len(self.rotations)

    def __repr__(self):
        return "<{} {}:{}: {}>".format(
            self.__class__.__name__, self.number, self.setting, self.symbol
        )

    def __eq__(self, other):
        if not isinstance(other, SpaceGroupEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    @classmethod
    def from_dict(cls, data):
        """
        Construct an entry from its stored (json) representation, e.g.

        ```
        {"number": 229, "setting": 1, "symbol": "I m -3 m",
         "centrosymmetric": true, "centering": "I",
         "symops": ["x,y,z", "-x,-y,z", ...]}
        ```

        Sub-translations may be given explicitly as `subtranslations`
        instead of a `centering` letter.

        Args:
            data (dict): the stored representation of a space group entry

        Returns:
            SpaceGroupEntry: the corresponding entry
        """
        if "subtranslations" in data:
            subtranslations = data["subtranslations"]
        else:
            centering = data.get("centering", "P")
            if centering not in CENTERING_TRANSLATIONS:
                raise StructuralInconsistency(
                    "Unknown centering '{}' for space group {}".format(
                        centering, data.get("number")
                    )
                )
            subtranslations = CENTERING_TRANSLATIONS[centering]
        rotations = []
        translations = []
        for code in data["symops"]:
            symop = SymmetryOperation.from_string_code(code)
            rotations.append(symop.rotation)
            translations.append(symop.translation)
        return cls(
            data["number"],
            data.get("setting", 1),
            rotations,
            translations,
            subtranslations=subtranslations,
            centrosymmetric=data.get("centrosymmetric", False),
            symbol=data.get("symbol", ""),
        )

    def to_dict(self):
        "The stored (json) representation of this entry"
        return {
            "number": self.number,
            "setting": self.setting,
            "symbol": self.symbol,
            "centrosymmetric": self.centrosymmetric,
            "subtranslations": [t.tolist() for t in self.subtranslations],
            "symops": [
                str(SymmetryOperation(r, t))
                for r, t in zip(self.rotations, self.translations)
            ],
        }


class SymmetryTable:
    """
    Read-only lookup of space group entries keyed by the
    (number, setting) pair.

    Examples:
        >>> table = SymmetryTable.default()
        >>> table.lookup(225, 1)
        <SpaceGroupEntry 225:1: F m -3 m>
        >>> (166, 2) in table
        True
    """

    def __init__(self, entries):
        self._entries = {}
        for entry in entries:
            if entry.key in self._entries:
                raise StructuralInconsistency(
                    "Duplicate space group entry {}:{}".format(*entry.key)
                )
            self._entries[entry.key] = entry

    def lookup(self, number, setting=1) -> SpaceGroupEntry:
        """
        Find the entry for a given space group number and setting.

        Args:
            number (int): the international tables number
            setting (int, optional): the setting (default 1)

        Returns:
            SpaceGroupEntry: the matching table entry

        Raises:
            UnknownSpaceGroup: if there is no entry for (number, setting)
        """
        key = (int(number), int(setting))
        entry = self._entries.get(key, None)
        if entry is None:
            raise UnknownSpaceGroup(
                "No space group data for number {} setting {}".format(*key)
            )
        return entry

    def settings(self, number):
        "All settings available for a given space group number"
        return sorted(s for n, s in self._entries if n == number)

    def __contains__(self, key):
        return tuple(key) in self._entries

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries[k] for k in sorted(self._entries))

    def __repr__(self):
        return "<{}: {} entries>".format(self.__class__.__name__, len(self))

    @classmethod
    def from_dict(cls, data):
        "Construct a table from a list of stored space group entries"
        return cls(SpaceGroupEntry.from_dict(x) for x in data)

    @classmethod
    def from_json(cls, filename):
        """
        Load a table of space group entries from a json file
        containing a list of entries (see `SpaceGroupEntry.from_dict`)
        """
        with open(filename) as f:
            data = json.load(f)
        table = cls.from_dict(data)
        LOG.debug("Loaded %d space group entries from %s", len(table), filename)
        return table

    @classmethod
    def default(cls):
        "The bundled space group table, loaded once on first use"
        global _DEFAULT_TABLE
        if _DEFAULT_TABLE is None:
            _DEFAULT_TABLE = cls.from_json(SGDATA_FILE)
        return _DEFAULT_TABLE
