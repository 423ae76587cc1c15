"""Name to entity resolution used while compiling templates.

The table maps human readable names (labels, short forms, CURIEs, full IRIs)
to entities, separately for every entity kind. It only grows: entities are
merged in with :meth:`SymbolTable.absorb`, either from a base ontology or
from the declarations produced by the first compilation pass.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from rdflib import OWL, RDF, RDFS, XSD, Graph, Literal, URIRef

from .errors import NameResolutionError
from .iri import IriResolver
from .model import (
    ANNOTATION_PROPERTY,
    CLASS,
    DATATYPE,
    ENTITY_KINDS,
    Entity,
)
from .utils import short_form, unquote_name

logger = logging.getLogger(__name__)

BUILTIN_ANNOTATION_PROPERTIES = (
    RDFS.label,
    RDFS.comment,
    RDFS.seeAlso,
    RDFS.isDefinedBy,
    OWL.deprecated,
    RDF.type,
)

BUILTIN_DATATYPES = (
    XSD.string,
    XSD.integer,
    XSD.int,
    XSD.decimal,
    XSD.float,
    XSD.double,
    XSD.boolean,
    XSD.date,
    XSD.dateTime,
    XSD.anyURI,
    XSD.nonNegativeInteger,
    RDF.PlainLiteral,
    RDFS.Literal,
)


class SymbolTable:
    """Grow-only index of named entities."""

    def __init__(
        self,
        resolver: Optional[IriResolver] = None,
        label_properties: Iterable[URIRef] = (RDFS.label,),
    ) -> None:
        self.resolver = resolver or IriResolver()
        self.label_properties = tuple(label_properties)
        self._names: dict[URIRef, dict[str, Entity]] = {kind: {} for kind in ENTITY_KINDS}
        self._iris: dict[URIRef, dict[URIRef, Entity]] = {kind: {} for kind in ENTITY_KINDS}
        for iri in BUILTIN_ANNOTATION_PROPERTIES:
            self.add_entity(Entity(iri, ANNOTATION_PROPERTY))
        for iri in BUILTIN_DATATYPES:
            self.add_entity(Entity(iri, DATATYPE))

    def __contains__(self, entity: Entity) -> bool:
        return entity.iri in self._iris.get(entity.kind, {})

    def __len__(self) -> int:
        return sum(len(iris) for iris in self._iris.values())

    def add_entity(self, entity: Entity) -> None:
        """Index ``entity`` by its IRI, CURIE and short form."""
        self._iris[entity.kind][entity.iri] = entity
        names = self._names[entity.kind]
        names[str(entity.iri)] = entity
        curie = self.resolver.compact(entity.iri)
        if curie:
            names[curie] = entity
        names.setdefault(short_form(entity.iri), entity)

    def add_label(self, entity: Entity, label: str) -> None:
        self._names[entity.kind][str(label)] = entity

    def absorb(self, graph: Graph) -> int:
        """Merge the declared entities and labels of ``graph``.

        Absorbing the same graph twice leaves the table unchanged. Returns
        the number of entities that were not known before.
        """
        added = 0
        for kind in ENTITY_KINDS:
            for subject in graph.subjects(RDF.type, kind):
                if not isinstance(subject, URIRef):
                    continue
                entity = Entity(subject, kind)
                if entity not in self:
                    added += 1
                self.add_entity(entity)
                for prop in self.label_properties:
                    for label in graph.objects(subject, prop):
                        if isinstance(label, Literal):
                            self.add_label(entity, str(label))
        logger.debug("Absorbed %d new entities (%d known)", added, len(self))
        return added

    def lookup(self, name: str, *kinds: URIRef) -> Optional[Entity]:
        """Find an entity of one of ``kinds`` named ``name``."""
        kinds = kinds or ENTITY_KINDS
        key = unquote_name(name)
        if key.startswith("<") and key.endswith(">"):
            key = key[1:-1].strip()
        for kind in kinds:
            entity = self._names[kind].get(key)
            if entity is not None:
                return entity
        iri = self.resolver.resolve(name if name.strip().startswith("<") else key)
        if iri is not None:
            for kind in kinds:
                entity = self._iris[kind].get(iri)
                if entity is not None:
                    return entity
        return None

    def _resolve_or_create(self, name: str, kind: URIRef) -> Entity:
        entity = self.lookup(name, kind)
        if entity is not None:
            return entity
        iri = self.resolver.resolve(unquote_name(name))
        if iri is None:
            raise NameResolutionError(name, f"no {short_form(kind)} with this name")
        return Entity(iri, kind)

    def resolve_property(self, name: str) -> Entity:
        """Return the annotation property named ``name``, creating it if missing."""
        return self._resolve_or_create(name, ANNOTATION_PROPERTY)

    def resolve_datatype(self, name: str) -> Entity:
        """Return the datatype named ``name``, creating it if missing."""
        return self._resolve_or_create(name, DATATYPE)

    def resolve_in_expression(self, name: str, *kinds: URIRef) -> Entity:
        """Resolve a name used inside a class expression.

        Only known entities are returned, except for full ``<IRI>`` forms in
        class position, which name a class directly.
        """
        kinds = kinds or (CLASS,)
        entity = self.lookup(name, *kinds)
        if entity is not None:
            return entity
        text = name.strip()
        if CLASS in kinds and text.startswith("<") and text.endswith(">"):
            iri = self.resolver.resolve(text)
            if iri is not None:
                return Entity(iri, CLASS)
        raise NameResolutionError(name, "unknown " + " or ".join(short_form(k) for k in kinds))


__all__ = ["SymbolTable"]
