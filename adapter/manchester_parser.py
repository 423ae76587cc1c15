"""
Infraestructura: parser de expresiones de clase en sintaxis Manchester.

Lark-based parser for the subset of Manchester OWL syntax used in ``C``
template columns. Names are resolved through a callback object exposing
``resolve_in_expression(name, *kinds)`` (see :class:`ontology.symbol_table.SymbolTable`).
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from lark import Lark, Transformer
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)
from rdflib import Literal

from ontology.errors import NameResolutionError
from ontology.expressions import (
    EXACTLY,
    MAX,
    MIN,
    ONLY,
    SOME,
    VALUE,
    ClassExpression,
    NamedClass,
    NamedDatatype,
    ObjectComplementOf,
    ObjectIntersectionOf,
    ObjectOneOf,
    ObjectUnionOf,
    Restriction,
)
from ontology.model import CLASS, DATA_PROPERTY, DATATYPE, INDIVIDUAL, PROPERTY_KINDS, Entity
from ontology.utils import BARE_NAME_PATTERN, unquote_name

GRAMMAR = r"""
?start: description

?description: conjunction
    | conjunction ("or" conjunction)+       -> union

?conjunction: primary
    | primary ("and" primary)+              -> intersection

?primary: "not" primary                     -> complement
    | restriction
    | atomic

?restriction: name "some" primary           -> some
    | name "only" primary                   -> only
    | name "value" value_target             -> has_value
    | name "min" INT [primary]              -> min
    | name "max" INT [primary]              -> max
    | name "exactly" INT [primary]          -> exactly

?atomic: name                               -> named
    | "(" description ")"
    | "{" name ("," name)* "}"              -> one_of

?value_target: name | literal

literal: STRING "^^" name                   -> typed_literal
    | STRING                                -> string_literal
    | DECIMAL                               -> decimal_literal
    | INT                                   -> int_literal

name: NAME | QUOTED | FULL_IRI

NAME: /%s/
QUOTED: /'[^']+'/
FULL_IRI: /<[^<>\s]+>/
STRING: /"(?:[^"\\]|\\.)*"/
DECIMAL.2: /[+-]?\d+\.\d+/
INT: /\d+/

%%import common.WS
%%ignore WS
""" % BARE_NAME_PATTERN


class ManchesterSyntaxError(Exception):
    """Raised when an expression cannot be parsed or one of its names resolved."""

    def __init__(self, message: str, column: Optional[int] = None) -> None:
        self.column = column
        super().__init__(message)


class NameResolver(Protocol):
    """Interface used by the parser to look up entities."""

    def resolve_in_expression(self, name: str, *kinds: str) -> Entity:
        ...


class _Name(str):
    """A name whose meaning depends on where it appears."""


class _ExpressionBuilder(Transformer):
    """Turn a parse tree into class expressions, resolving names on the way."""

    def __init__(self, resolver: NameResolver) -> None:
        super().__init__()
        self.resolver = resolver

    # -- helpers ---------------------------------------------------------

    def as_class(self, node) -> ClassExpression:
        if isinstance(node, _Name):
            return NamedClass(self.resolver.resolve_in_expression(node, CLASS).iri)
        if isinstance(node, (Literal, NamedDatatype)):
            raise ManchesterSyntaxError(f"Expected a class expression, found {node}")
        return node

    def as_datatype(self, node) -> NamedDatatype:
        if isinstance(node, _Name):
            return NamedDatatype(self.resolver.resolve_in_expression(node, DATATYPE).iri)
        raise ManchesterSyntaxError(f"Expected a datatype, found {node}")

    def build_restriction(self, quantifier, prop, filler=None, cardinality=None) -> Restriction:
        entity = self.resolver.resolve_in_expression(prop, *PROPERTY_KINDS)
        data = entity.kind == DATA_PROPERTY
        if filler is not None:
            filler = self.as_datatype(filler) if data else self.as_class(filler)
        return Restriction(quantifier, entity.iri, filler, cardinality, data)

    # -- rules -----------------------------------------------------------

    def name(self, items):
        return _Name(items[0])

    def named(self, items):
        return items[0]

    def union(self, items):
        return ObjectUnionOf(tuple(self.as_class(i) for i in items))

    def intersection(self, items):
        return ObjectIntersectionOf(tuple(self.as_class(i) for i in items))

    def complement(self, items):
        return ObjectComplementOf(self.as_class(items[0]))

    def one_of(self, items):
        return ObjectOneOf(
            tuple(self.resolver.resolve_in_expression(i, INDIVIDUAL).iri for i in items)
        )

    def some(self, items):
        return self.build_restriction(SOME, items[0], items[1])

    def only(self, items):
        return self.build_restriction(ONLY, items[0], items[1])

    def has_value(self, items):
        prop, target = items
        entity = self.resolver.resolve_in_expression(prop, *PROPERTY_KINDS)
        if entity.kind == DATA_PROPERTY:
            if not isinstance(target, Literal):
                raise ManchesterSyntaxError(f"Expected a literal value for {prop}")
            return Restriction(VALUE, entity.iri, target, data=True)
        if not isinstance(target, _Name):
            raise ManchesterSyntaxError(f"Expected an individual value for {prop}")
        individual = self.resolver.resolve_in_expression(target, INDIVIDUAL)
        return Restriction(VALUE, entity.iri, individual.iri)

    def _cardinality(self, quantifier, items):
        prop, count, filler = items
        return self.build_restriction(quantifier, prop, filler, int(count))

    def min(self, items):
        return self._cardinality(MIN, items)

    def max(self, items):
        return self._cardinality(MAX, items)

    def exactly(self, items):
        return self._cardinality(EXACTLY, items)

    def string_literal(self, items):
        return Literal(_unescape(items[0]))

    def typed_literal(self, items):
        datatype = self.as_datatype(items[1])
        return Literal(_unescape(items[0]), datatype=datatype.iri)

    def int_literal(self, items):
        return Literal(int(items[0]))

    def decimal_literal(self, items):
        return Literal(Decimal(str(items[0])))


def _unescape(token: str) -> str:
    return token[1:-1].replace('\\"', '"').replace("\\\\", "\\")


class ClassExpressionParser:
    """
    Parser for class expressions written in Manchester syntax.

    Usage:
        parser = ClassExpressionParser()
        expression = parser.parse("part_of some 'Widget'", symbol_table)
    """

    _lark: Optional[Lark] = None

    def __init__(self) -> None:
        if ClassExpressionParser._lark is None:
            ClassExpressionParser._lark = Lark(
                GRAMMAR,
                start="start",
                parser="lalr",
                maybe_placeholders=True,
            )

    def parse(self, text: str, resolver: NameResolver) -> ClassExpression:
        """Parse ``text`` resolving every name through ``resolver``."""
        if not text or not text.strip():
            raise ManchesterSyntaxError("Empty class expression")
        try:
            tree = self._lark.parse(text)
        except UnexpectedCharacters as exc:
            raise ManchesterSyntaxError(
                f"Unexpected character {text[exc.pos_in_stream]!r} at column {exc.column}",
                exc.column,
            ) from exc
        except UnexpectedEOF as exc:
            raise ManchesterSyntaxError("Unexpected end of expression") from exc
        except UnexpectedToken as exc:
            if exc.token.type == "$END":
                raise ManchesterSyntaxError("Unexpected end of expression") from exc
            raise ManchesterSyntaxError(
                f"Unexpected {exc.token.value!r} at column {exc.column}", exc.column
            ) from exc
        except UnexpectedInput as exc:
            raise ManchesterSyntaxError(f"Invalid expression at column {exc.column}") from exc

        builder = _ExpressionBuilder(resolver)
        try:
            result = builder.transform(tree)
            return builder.as_class(result)
        except VisitError as exc:
            raise self._translate(exc.orig_exc) from exc
        except (NameResolutionError, ManchesterSyntaxError) as exc:
            raise self._translate(exc) from exc

    @staticmethod
    def _translate(exc: Exception) -> Exception:
        if isinstance(exc, NameResolutionError):
            return ManchesterSyntaxError(
                f"Could not resolve name '{unquote_name(exc.name)}' ({exc.detail})"
            )
        if isinstance(exc, ManchesterSyntaxError):
            return exc
        return ManchesterSyntaxError(str(exc))


__all__ = ["ClassExpressionParser", "ManchesterSyntaxError", "NameResolver", "GRAMMAR"]
