"""Domain entities: OWL entities, annotations and the axioms a template emits."""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from rdflib import OWL, RDFS, Literal, URIRef

from .expressions import ClassExpression

# Entity kinds, identified by their OWL type IRI
CLASS = OWL.Class
ANNOTATION_PROPERTY = OWL.AnnotationProperty
OBJECT_PROPERTY = OWL.ObjectProperty
DATA_PROPERTY = OWL.DatatypeProperty
DATATYPE = RDFS.Datatype
INDIVIDUAL = OWL.NamedIndividual

ENTITY_KINDS = (
    CLASS,
    ANNOTATION_PROPERTY,
    OBJECT_PROPERTY,
    DATA_PROPERTY,
    DATATYPE,
    INDIVIDUAL,
)

PROPERTY_KINDS = (OBJECT_PROPERTY, DATA_PROPERTY)

# owl:Datatype is not OWL 2 vocabulary but older templates use it for datatypes
KIND_ALIASES = {URIRef("http://www.w3.org/2002/07/owl#Datatype"): DATATYPE}


def kind_for_type(type_iri: URIRef) -> URIRef:
    """Return the entity kind selected by a TYPE value.

    Kind IRIs and their aliases select that kind; any other IRI names the
    class of an individual.
    """
    type_iri = KIND_ALIASES.get(type_iri, type_iri)
    return type_iri if type_iri in ENTITY_KINDS else INDIVIDUAL


@dataclass(frozen=True)
class Entity:
    """A named node of the ontology together with its kind."""

    iri: URIRef
    kind: URIRef = CLASS


@dataclass(frozen=True)
class Annotation:
    """Property/value pair attached to an entity."""

    property: URIRef
    value: Union[Literal, URIRef]


@dataclass(frozen=True)
class Declaration:
    entity: Entity


@dataclass(frozen=True)
class AnnotationAssertion:
    subject: URIRef
    annotation: Annotation


@dataclass(frozen=True)
class SubClassOf:
    subclass: URIRef
    superclass: ClassExpression


@dataclass(frozen=True)
class EquivalentClasses:
    cls: URIRef
    expression: ClassExpression


Axiom = Union[Declaration, AnnotationAssertion, SubClassOf, EquivalentClasses]


@dataclass
class OntologyDocument:
    """Ordered, append-only set of axioms produced by one compilation.

    Adding an axiom that is already present is a no-op, so every entity
    is declared at most once.
    """

    iri: Optional[URIRef] = None
    prefixes: dict[str, str] = field(default_factory=dict)
    _axioms: dict = field(default_factory=dict, init=False, repr=False)

    def add(self, axiom: Axiom) -> bool:
        """Append ``axiom``; return ``False`` if it was already present."""
        if axiom in self._axioms:
            return False
        self._axioms[axiom] = None
        return True

    @property
    def axioms(self) -> list[Axiom]:
        return list(self._axioms)

    def of_type(self, axiom_type) -> list:
        """Return the axioms that are instances of ``axiom_type``."""
        return [a for a in self._axioms if isinstance(a, axiom_type)]

    def entities(self) -> list[Entity]:
        return [a.entity for a in self.of_type(Declaration)]

    def __contains__(self, axiom) -> bool:
        return axiom in self._axioms

    def __iter__(self) -> Iterator[Axiom]:
        return iter(self._axioms)

    def __len__(self) -> int:
        return len(self._axioms)

    def to_graph(self):
        """Render the document as an ``rdflib.Graph``."""
        from .rdf_builder import build_graph

        return build_graph(self)


__all__ = [
    "CLASS",
    "ANNOTATION_PROPERTY",
    "OBJECT_PROPERTY",
    "DATA_PROPERTY",
    "DATATYPE",
    "INDIVIDUAL",
    "ENTITY_KINDS",
    "PROPERTY_KINDS",
    "KIND_ALIASES",
    "kind_for_type",
    "Entity",
    "Annotation",
    "Declaration",
    "AnnotationAssertion",
    "SubClassOf",
    "EquivalentClasses",
    "Axiom",
    "OntologyDocument",
]
