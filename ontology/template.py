"""
Aplicación: compilador de plantillas tabulares a ontologías OWL.

Input is a mapping from table names to tables. The first row of each table
holds the column headers, the second row the template strings (see
:mod:`ontology.directives`) and every following row describes one entity.

The ontology is built in two passes over all tables: first every entity is
declared and annotated, then the symbol table absorbs those declarations and
the logical axioms are added. Labels declared in any table can therefore be
used in the class expressions of any other table.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from rdflib import Graph, Literal, RDFS, URIRef

from adapter.manchester_parser import ClassExpressionParser, ManchesterSyntaxError

from .directives import (
    ANNOTATION_DIRECTIVES,
    ClassExpressionDirective,
    ClassReferenceDirective,
    ClassTypeDirective,
    Directive,
    IdDirective,
    IriAnnotationDirective,
    LanguageAnnotationDirective,
    StringAnnotationDirective,
    TypeDirective,
    TypedAnnotationDirective,
    parse_directive,
    split_values,
)
from .errors import (
    ExpressionParseError,
    IdentifierError,
    MissingClassTypeError,
    MissingIdentifierColumnError,
    NameResolutionError,
    StructuralMismatchError,
    UnknownClassTypeError,
    UnknownTemplateError,
)
from .expressions import ClassExpression, NamedClass, conjunction
from .iri import IriResolver
from .model import (
    CLASS,
    Annotation,
    AnnotationAssertion,
    Declaration,
    Entity,
    EquivalentClasses,
    OntologyDocument,
    SubClassOf,
    kind_for_type,
)
from .symbol_table import SymbolTable
from .utils import quote_name

logger = logging.getLogger(__name__)

SUBCLASS = "subclass"
EQUIVALENT = "equivalent"
CLASS_TYPES = (SUBCLASS, EQUIVALENT)

# Annotation property recording an explicit TYPE value
TYPE_PROPERTY = "rdf:type"

Rows = Sequence[Sequence[Optional[str]]]


@dataclass
class TemplateTable:
    """A table whose headers and template row have been validated."""

    name: str
    headers: list[str]
    directives: list[Optional[Directive]]
    rows: Rows
    id_column: int

    def columns(self) -> Iterator[tuple[int, Directive]]:
        """Yield ``(index, directive)`` for every column in use."""
        for column, directive in enumerate(self.directives):
            if directive is not None:
                yield column, directive

    def data_rows(self) -> Iterator[tuple[int, Sequence[Optional[str]]]]:
        """Yield ``(row_number, row)`` with 1-based row numbers."""
        for index in range(2, len(self.rows)):
            yield index + 1, self.rows[index]

    @staticmethod
    def cell(row: Sequence[Optional[str]], column: int) -> Optional[str]:
        """Return the stripped cell, or ``None`` when it is missing or blank."""
        if column >= len(row):
            return None
        value = row[column]
        if value is None or value != value:  # NaN from spreadsheets
            return None
        text = str(value).strip()
        return text or None

    def identifier(self, row: Sequence[Optional[str]]) -> Optional[str]:
        return self.cell(row, self.id_column)

    def context(self, row_number: int, column: Optional[int] = None, row_id=None) -> dict:
        """Location keywords for :class:`ontology.errors.TemplateError`."""
        context = {"table": self.name, "row": row_number, "row_id": row_id}
        if column is not None:
            context["column"] = column + 1
            context["header"] = self.headers[column]
        return context


def load_table(name: str, rows: Rows) -> TemplateTable:
    """Validate the header and template rows of ``rows`` and find the ID column."""
    if len(rows) < 2:
        raise StructuralMismatchError(
            "expected a header row followed by a template row", table=name
        )
    headers = ["" if h is None else str(h) for h in rows[0]]
    templates = [None if t is None else str(t) for t in rows[1]]
    if len(headers) != len(templates):
        raise StructuralMismatchError(
            f"the number of header columns ({len(headers)}) must match "
            f"the number of template columns ({len(templates)})",
            table=name,
        )

    directives: list[Optional[Directive]] = []
    id_columns: list[int] = []
    for column, template in enumerate(templates):
        try:
            directive = parse_directive(template)
        except ValueError as exc:
            raise UnknownTemplateError(
                str(exc),
                table=name,
                column=column + 1,
                header=headers[column],
                value=template.strip(),
            ) from exc
        if isinstance(directive, IdDirective):
            id_columns.append(column)
        directives.append(directive)

    if len(id_columns) != 1:
        raise MissingIdentifierColumnError(f"found {len(id_columns)}", table=name)
    return TemplateTable(name, headers, directives, rows, id_columns[0])


class TemplateCompiler:
    """
    Orquesta la compilación de tablas de plantillas en un :class:`OntologyDocument`.

    ``resolver`` turns identifiers into IRIs and ``parser`` reads class
    expressions; both default to the standard implementations. Rows without a
    ``CLASS_TYPE`` value use ``default_class_type``; passing ``None`` makes
    that value mandatory.
    """

    def __init__(
        self,
        resolver: Optional[IriResolver] = None,
        parser: Optional[ClassExpressionParser] = None,
        *,
        label_properties: Iterable[URIRef] = (RDFS.label,),
        default_class_type: Optional[str] = SUBCLASS,
        ontology_iri: Optional[str] = None,
    ) -> None:
        if default_class_type is not None and default_class_type not in CLASS_TYPES:
            raise ValueError(f"Unknown default class type: {default_class_type}")
        self.resolver = resolver or IriResolver()
        self.parser = parser or ClassExpressionParser()
        self.label_properties = tuple(label_properties)
        self.default_class_type = default_class_type
        self.ontology_iri = URIRef(ontology_iri) if ontology_iri else None

    def new_symbol_table(self) -> SymbolTable:
        return SymbolTable(self.resolver, self.label_properties)

    def load_tables(self, tables: Mapping[str, Rows]) -> list[TemplateTable]:
        return [load_table(name, rows) for name, rows in tables.items()]

    def compile(
        self,
        tables: Mapping[str, Rows],
        base_graph: Optional[Graph] = None,
        symbols: Optional[SymbolTable] = None,
    ) -> OntologyDocument:
        """Compile ``tables`` into a new ontology document.

        ``base_graph`` seeds the symbol table with existing entities and
        labels. Any error aborts the whole compilation.
        """
        logger.debug("Templating %d tables...", len(tables))
        loaded = self.load_tables(tables)
        id_columns = {table.name: table.id_column for table in loaded}
        logger.debug("ID columns: %s", id_columns)

        if symbols is None:
            symbols = self.new_symbol_table()
        if base_graph is not None:
            symbols.absorb(base_graph)

        document = OntologyDocument(iri=self.ontology_iri, prefixes=dict(self.resolver.prefixes))

        # First pass: declarations and annotations.
        for table in loaded:
            for row_number, row in table.data_rows():
                self._declare(document, table, row_number, row, symbols)

        # The declared entities and their labels become visible to the parser.
        symbols.absorb(document.to_graph())

        # Second pass: logical axioms.
        for table in loaded:
            for row_number, row in table.data_rows():
                self._add_logic(document, table, row_number, row, symbols)

        logger.info(
            "Compiled %d tables into %d axioms (%d entities)",
            len(loaded),
            len(document),
            len(document.entities()),
        )
        return document

    def list_identifiers(self, tables: Mapping[str, Rows]) -> list[URIRef]:
        """Return the IRIs of every row, in table and row order, without compiling."""
        iris: list[URIRef] = []
        for table in self.load_tables(tables):
            for row_number, row in table.data_rows():
                row_id = table.identifier(row)
                if row_id is None:
                    continue
                iri = self.resolver.resolve(row_id)
                if iri is None:
                    logger.debug("Skipping unresolvable ID %r at row %d", row_id, row_number)
                    continue
                iris.append(iri)
        return iris

    # -- helpers -----------------------------------------------------------

    def _row_iri(self, table: TemplateTable, row_number: int, row_id: str) -> URIRef:
        iri = self.resolver.resolve(row_id)
        if iri is None:
            raise IdentifierError(
                "invalid identifier", value=row_id, **table.context(row_number)
            )
        return iri

    def _value_iri(self, value: str, context: dict) -> URIRef:
        iri = self.resolver.resolve(value)
        if iri is None:
            raise IdentifierError("invalid IRI value", value=value, **context)
        return iri

    def _annotation(self, directive, value: str, symbols: SymbolTable, context: dict) -> Annotation:
        prop = symbols.resolve_property(directive.property_name).iri
        if isinstance(directive, StringAnnotationDirective):
            return Annotation(prop, Literal(value))
        if isinstance(directive, TypedAnnotationDirective):
            datatype = symbols.resolve_datatype(directive.datatype_name).iri
            return Annotation(prop, Literal(value, datatype=datatype))
        if isinstance(directive, LanguageAnnotationDirective):
            return Annotation(prop, Literal(value, lang=directive.language))
        if isinstance(directive, IriAnnotationDirective):
            return Annotation(prop, self._value_iri(value, context))
        raise TypeError(f"Not an annotation directive: {directive!r}")

    def _parse(self, text: str, symbols: SymbolTable, context: dict) -> ClassExpression:
        try:
            return self.parser.parse(text, symbols)
        except ManchesterSyntaxError as exc:
            raise ExpressionParseError(text, str(exc), **context) from exc

    # -- passes --------------------------------------------------------------

    def _declare(self, document, table, row_number, row, symbols) -> None:
        """Declare the entity of one row and add its annotations."""
        row_id = table.identifier(row)
        if row_id is None:
            return
        iri = self._row_iri(table, row_number, row_id)

        kind = CLASS
        annotations: list[Annotation] = []
        for column, directive in table.columns():
            if not isinstance(directive, (TypeDirective, *ANNOTATION_DIRECTIVES)):
                continue
            cell = table.cell(row, column)
            if cell is None:
                continue
            context = table.context(row_number, column, row_id)
            for value in split_values(cell, directive.split):
                try:
                    if isinstance(directive, TypeDirective):
                        type_iri = self._value_iri(value, context)
                        kind = kind_for_type(type_iri)
                        rdf_type = symbols.resolve_property(TYPE_PROPERTY).iri
                        annotations.append(Annotation(rdf_type, type_iri))
                    else:
                        annotations.append(self._annotation(directive, value, symbols, context))
                except NameResolutionError as exc:
                    raise NameResolutionError(exc.name, exc.detail, **context) from exc

        document.add(Declaration(Entity(iri, kind)))
        for annotation in annotations:
            document.add(AnnotationAssertion(iri, annotation))

    def _add_logic(self, document, table, row_number, row, symbols) -> None:
        """Add the subclass or equivalence axioms of one row."""
        row_id = table.identifier(row)
        if row_id is None:
            return
        iri = self._row_iri(table, row_number, row_id)

        class_type = self.default_class_type
        expressions: list[ClassExpression] = []
        for column, directive in table.columns():
            cell = table.cell(row, column)
            if cell is None:
                continue
            context = table.context(row_number, column, row_id)
            if isinstance(directive, ClassTypeDirective):
                class_type = cell.lower()
                if class_type not in CLASS_TYPES:
                    raise UnknownClassTypeError(
                        "expected 'subclass' or 'equivalent'", value=cell, **context
                    )
            elif isinstance(directive, ClassExpressionDirective):
                for value in split_values(cell, directive.split):
                    text = directive.substitute(quote_name(value))
                    expressions.append(self._parse(text, symbols, context))
            elif isinstance(directive, ClassReferenceDirective):
                for value in split_values(cell, directive.split):
                    expressions.append(NamedClass(self._value_iri(value, context)))

        if class_type is None:
            raise MissingClassTypeError(**table.context(row_number, row_id=row_id))

        if class_type == SUBCLASS:
            for expression in expressions:
                document.add(SubClassOf(iri, expression))
            return

        expression = conjunction(expressions)
        if expression is None:
            logger.warning(
                "Row %d (%r) in table %r is 'equivalent' but has no class expressions; "
                "no axiom added",
                row_number,
                row_id,
                table.name,
            )
            return
        document.add(EquivalentClasses(iri, expression))


def compile_tables(
    tables: Mapping[str, Rows],
    base_graph: Optional[Graph] = None,
    symbols: Optional[SymbolTable] = None,
    *,
    resolver: Optional[IriResolver] = None,
) -> OntologyDocument:
    """Compile ``tables`` with a default :class:`TemplateCompiler`."""
    return TemplateCompiler(resolver).compile(tables, base_graph, symbols)


def list_identifiers(tables: Mapping[str, Rows], resolver: Optional[IriResolver] = None) -> list[URIRef]:
    return TemplateCompiler(resolver).list_identifiers(tables)


__all__ = [
    "SUBCLASS",
    "EQUIVALENT",
    "CLASS_TYPES",
    "TemplateTable",
    "TemplateCompiler",
    "load_table",
    "compile_tables",
    "list_identifiers",
]
