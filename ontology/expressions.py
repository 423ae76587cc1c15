"""Class expressions built from template cells.

Every expression is an immutable value so that axioms holding them can be
compared and deduplicated.
"""
from dataclasses import dataclass
from typing import Optional, Union

from rdflib import Literal, URIRef

SOME = "some"
ONLY = "only"
VALUE = "value"
MIN = "min"
MAX = "max"
EXACTLY = "exactly"

QUANTIFIERS = (SOME, ONLY, VALUE, MIN, MAX, EXACTLY)
CARDINALITIES = (MIN, MAX, EXACTLY)


@dataclass(frozen=True)
class NamedClass:
    iri: URIRef

    def __str__(self) -> str:
        return f"<{self.iri}>"


@dataclass(frozen=True)
class NamedDatatype:
    iri: URIRef

    def __str__(self) -> str:
        return f"<{self.iri}>"


@dataclass(frozen=True)
class ObjectIntersectionOf:
    operands: tuple

    def __str__(self) -> str:
        return "(" + " and ".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class ObjectUnionOf:
    operands: tuple

    def __str__(self) -> str:
        return "(" + " or ".join(str(o) for o in self.operands) + ")"


@dataclass(frozen=True)
class ObjectComplementOf:
    operand: "ClassExpression"

    def __str__(self) -> str:
        return f"not {self.operand}"


@dataclass(frozen=True)
class ObjectOneOf:
    individuals: tuple

    def __str__(self) -> str:
        return "{" + ", ".join(f"<{i}>" for i in self.individuals) + "}"


@dataclass(frozen=True)
class Restriction:
    """Property restriction.

    ``quantifier`` is one of :data:`QUANTIFIERS`. ``filler`` is a class
    expression, a datatype, an individual IRI or a literal (for ``value``),
    or ``None`` for an unqualified cardinality. ``data`` marks restrictions
    on data properties.
    """

    quantifier: str
    property: URIRef
    filler: Optional[Union["ClassExpression", NamedDatatype, URIRef, Literal]] = None
    cardinality: Optional[int] = None
    data: bool = False

    def __post_init__(self):
        if self.quantifier not in QUANTIFIERS:
            raise ValueError(f"Unknown quantifier: {self.quantifier}")
        if (self.quantifier in CARDINALITIES) != (self.cardinality is not None):
            raise ValueError(f"Cardinality mismatch for '{self.quantifier}' restriction")

    def __str__(self) -> str:
        parts = [f"<{self.property}>", self.quantifier]
        if self.cardinality is not None:
            parts.append(str(self.cardinality))
        if isinstance(self.filler, URIRef):
            parts.append(f"<{self.filler}>")
        elif isinstance(self.filler, Literal):
            parts.append(self.filler.n3())
        elif self.filler is not None:
            parts.append(str(self.filler))
        return " ".join(parts)


ClassExpression = Union[
    NamedClass,
    ObjectIntersectionOf,
    ObjectUnionOf,
    ObjectComplementOf,
    ObjectOneOf,
    Restriction,
]


def conjunction(expressions) -> Optional[ClassExpression]:
    """Combine ``expressions`` into one conjunction.

    Duplicates are dropped keeping the first occurrence; a single operand is
    returned as is and an empty input gives ``None``.
    """
    operands = tuple(dict.fromkeys(expressions))
    if not operands:
        return None
    if len(operands) == 1:
        return operands[0]
    return ObjectIntersectionOf(operands)


__all__ = [
    "SOME",
    "ONLY",
    "VALUE",
    "MIN",
    "MAX",
    "EXACTLY",
    "QUANTIFIERS",
    "NamedClass",
    "NamedDatatype",
    "ObjectIntersectionOf",
    "ObjectUnionOf",
    "ObjectComplementOf",
    "ObjectOneOf",
    "Restriction",
    "ClassExpression",
    "conjunction",
]
