"""
Dominio: traducción de los axiomas compilados a un grafo RDF (OWL 2 RDF mapping).
"""
from rdflib import BNode, Graph, Literal, OWL, RDF, RDFS, XSD
from rdflib.collection import Collection

from .expressions import (
    EXACTLY,
    MAX,
    MIN,
    ONLY,
    SOME,
    VALUE,
    NamedClass,
    NamedDatatype,
    ObjectComplementOf,
    ObjectIntersectionOf,
    ObjectOneOf,
    ObjectUnionOf,
    Restriction,
)
from .model import (
    AnnotationAssertion,
    Declaration,
    EquivalentClasses,
    OntologyDocument,
    SubClassOf,
)
from .utils import DEFAULT_PREFIXES

_QUALIFIED = {
    MIN: OWL.minQualifiedCardinality,
    MAX: OWL.maxQualifiedCardinality,
    EXACTLY: OWL.qualifiedCardinality,
}
_UNQUALIFIED = {
    MIN: OWL.minCardinality,
    MAX: OWL.maxCardinality,
    EXACTLY: OWL.cardinality,
}


def _rdf_list(g: Graph, items) -> BNode:
    head = BNode()
    Collection(g, head, list(items))
    return head


def expression_node(g: Graph, expression):
    """Add the triples describing ``expression`` to ``g`` and return its node."""
    if isinstance(expression, (NamedClass, NamedDatatype)):
        return expression.iri

    node = BNode()
    if isinstance(expression, ObjectIntersectionOf):
        g.add((node, RDF.type, OWL.Class))
        operands = [expression_node(g, o) for o in expression.operands]
        g.add((node, OWL.intersectionOf, _rdf_list(g, operands)))
    elif isinstance(expression, ObjectUnionOf):
        g.add((node, RDF.type, OWL.Class))
        operands = [expression_node(g, o) for o in expression.operands]
        g.add((node, OWL.unionOf, _rdf_list(g, operands)))
    elif isinstance(expression, ObjectComplementOf):
        g.add((node, RDF.type, OWL.Class))
        g.add((node, OWL.complementOf, expression_node(g, expression.operand)))
    elif isinstance(expression, ObjectOneOf):
        g.add((node, RDF.type, OWL.Class))
        g.add((node, OWL.oneOf, _rdf_list(g, expression.individuals)))
    elif isinstance(expression, Restriction):
        g.add((node, RDF.type, OWL.Restriction))
        g.add((node, OWL.onProperty, expression.property))
        if expression.quantifier == SOME:
            g.add((node, OWL.someValuesFrom, expression_node(g, expression.filler)))
        elif expression.quantifier == ONLY:
            g.add((node, OWL.allValuesFrom, expression_node(g, expression.filler)))
        elif expression.quantifier == VALUE:
            g.add((node, OWL.hasValue, expression.filler))
        else:
            count = Literal(expression.cardinality, datatype=XSD.nonNegativeInteger)
            if expression.filler is None:
                g.add((node, _UNQUALIFIED[expression.quantifier], count))
            else:
                g.add((node, _QUALIFIED[expression.quantifier], count))
                on_filler = OWL.onDataRange if expression.data else OWL.onClass
                g.add((node, on_filler, expression_node(g, expression.filler)))
    else:
        raise TypeError(f"Unsupported class expression: {expression!r}")
    return node


def build_graph(document: OntologyDocument) -> Graph:
    """
    Construye un grafo OWL con todas las declaraciones, anotaciones y axiomas lógicos.
    """
    g = Graph()
    for prefix, namespace in {**DEFAULT_PREFIXES, **document.prefixes}.items():
        g.bind(prefix, namespace)

    if document.iri is not None:
        g.add((document.iri, RDF.type, OWL.Ontology))

    for axiom in document:
        if isinstance(axiom, Declaration):
            g.add((axiom.entity.iri, RDF.type, axiom.entity.kind))
        elif isinstance(axiom, AnnotationAssertion):
            g.add((axiom.subject, axiom.annotation.property, axiom.annotation.value))
        elif isinstance(axiom, SubClassOf):
            g.add((axiom.subclass, RDFS.subClassOf, expression_node(g, axiom.superclass)))
        elif isinstance(axiom, EquivalentClasses):
            g.add((axiom.cls, OWL.equivalentClass, expression_node(g, axiom.expression)))
    return g


__all__ = ["build_graph", "expression_node"]
