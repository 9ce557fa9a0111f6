from .element import Element, ElementTable, chemical_formula

__all__ = ["Element", "ElementTable", "chemical_formula"]
